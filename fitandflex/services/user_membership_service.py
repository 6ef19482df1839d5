"""Assignment of membership products to users and their lifecycle."""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core import clock
from fitandflex.models.product import Product
from fitandflex.models.user_membership import MembershipStatus, UserMembership
from fitandflex.repository import (
    membership_repository,
    payment_repository,
    product_repository,
    user_repository,
)
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.user_membership import (
    ExtendRequest,
    MembershipPaymentRequest,
    PendingPaymentsSummary,
    ReconciliationResult,
    StatusChangeRequest,
    UserMembershipCreate,
    UserMembershipResponse,
    UserMembershipUpdate,
)
from fitandflex.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

_STATUS_ACTIONS = {
    MembershipStatus.ACTIVE: UserMembership.activate,
    MembershipStatus.CANCELLED: UserMembership.cancel,
    MembershipStatus.SUSPENDED: UserMembership.suspend,
    MembershipStatus.EXPIRED: UserMembership.expire,
}


class UserMembershipService:
    def __init__(self, db: Session):
        self.db = db

    def _bad_request(self, detail: str) -> HTTPException:
        logger.warning("Membership operation rejected: %s", detail)
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    def _ensure_user(self, user_id: int) -> None:
        if user_repository.get_user(self.db, user_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found",
            )

    def _get_product(self, product_id: int) -> Product:
        product = product_repository.get_product(self.db, product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {product_id} not found",
            )
        return product

    def _refresh_paid_amount(self, membership: UserMembership) -> None:
        self.db.flush()
        membership.paid_amount = payment_repository.settled_total_for_membership(
            self.db, membership.id_user_membership
        )

    def get_membership(self, membership_id: int) -> UserMembership:
        membership = membership_repository.get_membership(self.db, membership_id)
        if membership is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User membership {membership_id} not found",
            )
        return membership

    def list_memberships(
        self,
        params: PageParams,
        *,
        user_id: Optional[int] = None,
        product_id: Optional[int] = None,
        status_filter: Optional[MembershipStatus] = None,
        branch_id: Optional[int] = None,
    ) -> Tuple[List[UserMembership], int]:
        return membership_repository.list_memberships(
            self.db,
            params,
            user_id=user_id,
            product_id=product_id,
            status_filter=status_filter.value if status_filter else None,
            branch_id=branch_id,
        )

    def list_by_user(self, user_id: int) -> List[UserMembership]:
        self._ensure_user(user_id)
        return membership_repository.list_by_user(self.db, user_id)

    def list_active_by_user(self, user_id: int) -> List[UserMembership]:
        self._ensure_user(user_id)
        return membership_repository.list_active_by_user(self.db, user_id, clock.now())

    def has_active_membership(self, user_id: int) -> bool:
        return bool(self.list_active_by_user(user_id))

    def list_expiring(self, days: int) -> List[UserMembership]:
        if days < 0:
            raise self._bad_request("days must be zero or positive")
        now = clock.now()
        return membership_repository.list_expiring(self.db, now, now + timedelta(days=days))

    def list_expired(self) -> List[UserMembership]:
        return membership_repository.list_expired(self.db, clock.now())

    def assign_membership(
        self, payload: UserMembershipCreate, *, assigned_by: Optional[int] = None
    ) -> UserMembership:
        self._ensure_user(payload.id_user)
        product = self._get_product(payload.id_product)
        if not product.active:
            raise self._bad_request("Product is not active")

        start_date = clock.to_naive(payload.start_date) if payload.start_date else clock.now()
        if payload.end_date is not None:
            end_date = clock.to_naive(payload.end_date)
        else:
            end_date = start_date + timedelta(days=product.duration_days)
        if start_date > end_date:
            raise self._bad_request("start_date must not be after end_date")

        current = membership_repository.find_active_for_user_and_product(
            self.db, payload.id_user, payload.id_product
        )
        if current is not None:
            raise self._bad_request("User already has an active membership for this product")

        total_amount = Decimal(product.price)
        if payload.initial_payment > total_amount:
            raise self._bad_request("Initial payment cannot exceed the membership price")

        membership = UserMembership(
            id_user=payload.id_user,
            id_product=product.id_product,
            start_date=start_date,
            end_date=end_date,
            status=MembershipStatus.ACTIVE.value,
            active=True,
            notes=payload.notes,
            total_amount=total_amount,
            paid_amount=Decimal("0"),
            id_assigned_by=assigned_by,
        )
        membership_repository.create_membership(self.db, membership)

        if payload.initial_payment > 0:
            PaymentService(self.db).record_completed_payment(
                user_id=payload.id_user,
                amount=payload.initial_payment,
                method=payload.payment_method,
                membership_id=membership.id_user_membership,
                description=f"Initial payment for {product.name}",
            )
            self._refresh_paid_amount(membership)

        self.db.commit()
        self.db.refresh(membership)
        logger.info(
            "Product %s assigned to user %s until %s (paid %s of %s)",
            product.id_product,
            membership.id_user,
            membership.end_date,
            membership.paid_amount,
            membership.total_amount,
        )
        return membership

    def update_membership(
        self, membership_id: int, payload: UserMembershipUpdate
    ) -> UserMembership:
        membership = self.get_membership(membership_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return membership

        start_date = update_data.get("start_date") or membership.start_date
        end_date = update_data.get("end_date") or membership.end_date
        start_date, end_date = clock.to_naive(start_date), clock.to_naive(end_date)
        if start_date > end_date:
            raise self._bad_request("start_date must not be after end_date")

        membership.start_date = start_date
        membership.end_date = end_date
        if "notes" in update_data:
            membership.notes = update_data["notes"]
        if update_data.get("total_amount") is not None:
            membership.total_amount = update_data["total_amount"]

        self.db.commit()
        self.db.refresh(membership)
        return membership

    def change_status(self, membership_id: int, payload: StatusChangeRequest) -> UserMembership:
        membership = self.get_membership(membership_id)
        if payload.status == MembershipStatus.ACTIVE:
            other = membership_repository.find_active_for_user_and_product(
                self.db, membership.id_user, membership.id_product
            )
            if other is not None and other.id_user_membership != membership.id_user_membership:
                raise self._bad_request(
                    "User already has an active membership for this product"
                )

        previous = membership.status
        _STATUS_ACTIONS[payload.status](membership)
        if payload.reason:
            membership.append_note(
                f"Status changed from {previous} to {payload.status.value}: {payload.reason}"
            )
        self.db.commit()
        self.db.refresh(membership)
        logger.info(
            "Membership %s status %s -> %s", membership_id, previous, membership.status
        )
        return membership

    def extend_membership(self, membership_id: int, payload: ExtendRequest) -> UserMembership:
        membership = self.get_membership(membership_id)
        membership.end_date = membership.end_date + timedelta(days=payload.days)
        note = f"Extended by {payload.days} days"
        if payload.reason:
            note = f"{note}: {payload.reason}"
        membership.append_note(note)
        self.db.commit()
        self.db.refresh(membership)
        logger.info("Membership %s extended to %s", membership_id, membership.end_date)
        return membership

    def add_payment(
        self, membership_id: int, payload: MembershipPaymentRequest
    ) -> UserMembership:
        membership = self.get_membership(membership_id)
        if membership.fully_paid:
            raise self._bad_request("Membership is already fully paid")
        if payload.amount > membership.pending_amount:
            raise self._bad_request(
                f"Payment of {payload.amount} exceeds the pending amount {membership.pending_amount}"
            )

        PaymentService(self.db).record_completed_payment(
            user_id=membership.id_user,
            amount=payload.amount,
            method=payload.payment_method,
            membership_id=membership.id_user_membership,
            description=f"Payment for membership {membership.id_user_membership}",
            transaction_id=payload.transaction_id,
            notes=payload.notes,
        )
        self._refresh_paid_amount(membership)
        self.db.commit()
        self.db.refresh(membership)
        logger.info(
            "Payment of %s added to membership %s (pending %s)",
            payload.amount,
            membership_id,
            membership.pending_amount,
        )
        return membership

    def pending_payments_summary(self, user_id: int) -> PendingPaymentsSummary:
        memberships = [
            membership
            for membership in self.list_by_user(user_id)
            if not membership.fully_paid
        ]
        return PendingPaymentsSummary(
            id_user=user_id,
            memberships_with_balance=len(memberships),
            total_amount=sum((Decimal(m.total_amount) for m in memberships), Decimal("0")),
            paid_amount=sum((Decimal(m.paid_amount) for m in memberships), Decimal("0")),
            pending_amount=sum((m.pending_amount for m in memberships), Decimal("0")),
            memberships=[UserMembershipResponse.model_validate(m) for m in memberships],
        )

    def expire_overdue(self) -> ReconciliationResult:
        """Write EXPIRED on ACTIVE memberships whose end date has passed."""
        overdue = membership_repository.list_overdue_active(self.db, clock.now())
        for membership in overdue:
            membership.expire()
        self.db.commit()
        if overdue:
            logger.info("Expired %s overdue memberships", len(overdue))
        return ReconciliationResult(
            expired_count=len(overdue),
            membership_ids=[m.id_user_membership for m in overdue],
        )

    def delete_membership(self, membership_id: int) -> None:
        membership = self.get_membership(membership_id)
        membership_repository.delete_membership(self.db, membership)
        self.db.commit()
        logger.info("Membership %s deleted", membership_id)


__all__ = ["UserMembershipService"]
