"""SQLAlchemy model for products assigned to users over a date range."""

from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from fitandflex.core import clock
from fitandflex.core.database import Base


class MembershipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"


class UserMembership(Base):
    __tablename__ = "user_memberships"

    id_user_membership = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user"), nullable=False, index=True)
    id_product = Column(Integer, ForeignKey("products.id_product"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=MembershipStatus.ACTIVE.value)
    active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    paid_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    id_assigned_by = Column(Integer, ForeignKey("users.id_user"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[id_user], lazy="joined")
    product = relationship("Product", back_populates="memberships", lazy="joined")
    assigned_by = relationship("User", foreign_keys=[id_assigned_by])
    payments = relationship("Payment", back_populates="user_membership")

    # Stored status is what was last written; the helpers below derive the
    # state at read time from the end date.
    def is_expired(self, at: Optional[datetime] = None) -> bool:
        return (at or clock.now()) > self.end_date

    def is_currently_active(self, at: Optional[datetime] = None) -> bool:
        return (
            bool(self.active)
            and self.status == MembershipStatus.ACTIVE.value
            and not self.is_expired(at)
        )

    def effective_status(self, at: Optional[datetime] = None) -> str:
        if self.status == MembershipStatus.ACTIVE.value and self.is_expired(at):
            return MembershipStatus.EXPIRED.value
        return self.status

    def days_remaining(self, at: Optional[datetime] = None) -> int:
        remaining = self.end_date - (at or clock.now())
        seconds = remaining.total_seconds()
        if seconds <= 0:
            return 0
        return math.ceil(seconds / 86400)

    @property
    def pending_amount(self) -> Decimal:
        pending = Decimal(self.total_amount or 0) - Decimal(self.paid_amount or 0)
        return pending if pending > 0 else Decimal("0")

    @property
    def fully_paid(self) -> bool:
        return self.pending_amount <= 0

    def activate(self) -> None:
        self.status = MembershipStatus.ACTIVE.value
        self.active = True

    def cancel(self) -> None:
        self.status = MembershipStatus.CANCELLED.value
        self.active = False

    def suspend(self) -> None:
        self.status = MembershipStatus.SUSPENDED.value
        self.active = False

    def expire(self) -> None:
        self.status = MembershipStatus.EXPIRED.value
        self.active = False

    def append_note(self, note: str) -> None:
        self.notes = f"{self.notes}\n{note}" if self.notes else note

    # Read-time views used by the response schemas.
    @property
    def expired(self) -> bool:
        return self.is_expired()

    @property
    def currently_active(self) -> bool:
        return self.is_currently_active()

    @property
    def current_status(self) -> str:
        return self.effective_status()

    @property
    def remaining_days(self) -> int:
        return self.days_remaining()
