"""SQLAlchemy model for payments and their lifecycle rules."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from fitandflex.core import clock
from fitandflex.core.config import settings
from fitandflex.core.database import Base


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    DIGITAL_WALLET = "DIGITAL_WALLET"
    CHECK = "CHECK"
    CREDIT = "CREDIT"


# Statuses whose money actually reached the gym (net of refunds).
SETTLED_STATUSES = (
    PaymentStatus.COMPLETED.value,
    PaymentStatus.PARTIALLY_REFUNDED.value,
    PaymentStatus.REFUNDED.value,
)


class Payment(Base):
    __tablename__ = "payments"

    id_payment = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user"), nullable=False, index=True)
    id_reservation = Column(
        Integer, ForeignKey("reservations.id_reservation"), nullable=True, index=True
    )
    id_user_membership = Column(
        Integer, ForeignKey("user_memberships.id_user_membership"), nullable=True, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(30), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(30), nullable=False)
    description = Column(String(500), nullable=True)
    transaction_id = Column(String(100), nullable=True, unique=True)
    gateway_reference = Column(String(100), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    processed_date = Column(DateTime, nullable=True)
    failure_reason = Column(String(500), nullable=True)
    refund_amount = Column(Numeric(10, 2), nullable=True)
    refund_date = Column(DateTime, nullable=True)
    refund_reason = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    reservation = relationship("Reservation", back_populates="payments")
    user_membership = relationship("UserMembership", back_populates="payments")

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    @property
    def net_amount(self) -> Decimal:
        return Decimal(self.amount) - Decimal(self.refund_amount or 0)

    def can_be_refunded(self, at: Optional[datetime] = None) -> bool:
        if not self.is_completed or self.refund_amount is not None:
            return False
        if self.payment_date is None:
            return False
        at = at or clock.now()
        return self.payment_date >= at - timedelta(days=settings.REFUND_WINDOW_DAYS)

    def mark_as_completed(
        self,
        transaction_id: Optional[str] = None,
        gateway_reference: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> None:
        if self.status != PaymentStatus.PENDING.value:
            raise ValueError(f"Only pending payments can be completed (status {self.status})")
        at = at or clock.now()
        self.status = PaymentStatus.COMPLETED.value
        if transaction_id is not None:
            self.transaction_id = transaction_id
        if gateway_reference is not None:
            self.gateway_reference = gateway_reference
        self.processed_date = at
        if self.payment_date is None:
            self.payment_date = at

    def mark_as_failed(self, reason: Optional[str], at: Optional[datetime] = None) -> None:
        if self.status != PaymentStatus.PENDING.value:
            raise ValueError(f"Only pending payments can fail (status {self.status})")
        self.status = PaymentStatus.FAILED.value
        self.failure_reason = reason
        self.processed_date = at or clock.now()

    def process_refund(
        self, amount: Decimal, reason: Optional[str], at: Optional[datetime] = None
    ) -> None:
        at = at or clock.now()
        if not self.can_be_refunded(at):
            raise ValueError("Payment cannot be refunded")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValueError("Refund amount must be greater than zero")
        if amount > Decimal(self.amount):
            raise ValueError("Refund amount cannot exceed the original amount")

        self.refund_amount = amount
        self.refund_reason = reason
        self.refund_date = at
        if amount == Decimal(self.amount):
            self.status = PaymentStatus.REFUNDED.value
        else:
            self.status = PaymentStatus.PARTIALLY_REFUNDED.value
