from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    membership_type: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(..., gt=0)
    duration_days: int = Field(..., gt=0)
    max_users: Optional[int] = Field(None, gt=0)
    auto_renewal: bool = False
    trial_period_days: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    benefits: Optional[str] = None
    features: Optional[str] = None


class ProductCreate(ProductBase):
    sku: Optional[str] = Field(None, max_length=50)
    id_branch: int = Field(..., gt=0)
    active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=50)
    membership_type: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, gt=0)
    duration_days: Optional[int] = Field(None, gt=0)
    max_users: Optional[int] = Field(None, gt=0)
    active: Optional[bool] = None
    auto_renewal: Optional[bool] = None
    trial_period_days: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    benefits: Optional[str] = None
    features: Optional[str] = None


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id_product: int
    sku: str
    active: bool
    id_branch: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_product: int
    name: str
    sku: str
    price: Decimal
    duration_days: int
