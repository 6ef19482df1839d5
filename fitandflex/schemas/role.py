from typing import Optional

from pydantic import BaseModel, ConfigDict


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_role: int
    name: str
    description: Optional[str] = None
