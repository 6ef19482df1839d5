from typing import Optional

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user_id: int
    email: str
    name: str
    role: Optional[str] = None
    branch_id: Optional[int] = None
    branch_name: Optional[str] = None
    active: bool
