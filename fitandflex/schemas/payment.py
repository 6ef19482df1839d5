from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fitandflex.models.payment import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    id_user: int = Field(..., gt=0)
    id_reservation: Optional[int] = Field(None, gt=0)
    amount: Decimal = Field(..., gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_method: PaymentMethod
    description: Optional[str] = Field(None, max_length=500)
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    description: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    gateway_reference: Optional[str] = Field(None, max_length=100)


class PaymentCompleteRequest(BaseModel):
    transaction_id: Optional[str] = Field(None, max_length=100)
    gateway_reference: Optional[str] = Field(None, max_length=100)


class PaymentFailRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RefundRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    reason: Optional[str] = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_payment: int
    id_user: int
    id_reservation: Optional[int] = None
    id_user_membership: Optional[int] = None
    amount: Decimal
    currency: str
    status: PaymentStatus
    payment_method: PaymentMethod
    description: Optional[str] = None
    transaction_id: Optional[str] = None
    gateway_reference: Optional[str] = None
    payment_date: Optional[datetime] = None
    processed_date: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    refund_date: Optional[datetime] = None
    refund_reason: Optional[str] = None
    net_amount: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentStats(BaseModel):
    total_payments: int = 0
    pending: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    refunded: int = 0
    partially_refunded: int = 0
    total_amount: Decimal = Decimal("0")
    refunded_amount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")
