from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fitandflex.models.payment import PaymentMethod
from fitandflex.models.user_membership import MembershipStatus
from fitandflex.schemas.product import ProductSummary
from fitandflex.schemas.user import UserSummary


class UserMembershipCreate(BaseModel):
    id_user: int = Field(..., gt=0)
    id_product: int = Field(..., gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    initial_payment: Decimal = Field(Decimal("0"), ge=0)
    payment_method: PaymentMethod = PaymentMethod.CASH


class UserMembershipUpdate(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)


class StatusChangeRequest(BaseModel):
    status: MembershipStatus
    reason: Optional[str] = Field(None, max_length=500)


class ExtendRequest(BaseModel):
    days: int = Field(..., gt=0, le=3650)
    reason: Optional[str] = Field(None, max_length=500)


class MembershipPaymentRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class UserMembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_user_membership: int
    id_user: int
    id_product: int
    start_date: datetime
    end_date: datetime
    status: MembershipStatus
    current_status: MembershipStatus
    active: bool
    currently_active: bool
    expired: bool
    remaining_days: int
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    fully_paid: bool
    notes: Optional[str] = None
    id_assigned_by: Optional[int] = None
    user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None
    created_at: Optional[datetime] = None


class PendingPaymentsSummary(BaseModel):
    id_user: int
    memberships_with_balance: int
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    memberships: List[UserMembershipResponse] = Field(default_factory=list)


class ActiveMembershipCheck(BaseModel):
    id_user: int
    has_active_membership: bool


class ReconciliationResult(BaseModel):
    expired_count: int
    membership_ids: List[int] = Field(default_factory=list)
