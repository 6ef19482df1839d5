from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from fitandflex.schemas.branch import BranchSummary


class UserBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    gender: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=72)
    role: str = Field(..., description="Role name, e.g. USER or BRANCH_ADMIN")
    id_branch: Optional[int] = Field(None, gt=0)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    gender: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    role: Optional[str] = None
    id_branch: Optional[int] = Field(None, gt=0)


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_user: int
    name: str
    email: str
    phone: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    active: bool
    role_name: Optional[str] = None
    id_branch: Optional[int] = None
    branch: Optional[BranchSummary] = None
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_user: int
    name: str
    email: str
