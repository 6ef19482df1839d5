"""Business logic for managing payments."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core import clock
from fitandflex.core.config import settings
from fitandflex.models.payment import Payment, PaymentMethod, PaymentStatus
from fitandflex.repository import (
    membership_repository,
    payment_repository,
    reservation_repository,
    user_repository,
)
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.payment import (
    PaymentCompleteRequest,
    PaymentCreate,
    PaymentStats,
    PaymentUpdate,
    RefundRequest,
)

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_transaction_id_available(self, transaction_id: Optional[str]) -> None:
        if transaction_id and payment_repository.get_payment_by_transaction_id(
            self.db, transaction_id
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Transaction id {transaction_id} is already registered",
            )

    def _apply(self, payment: Payment, change: Callable[[], None]) -> Payment:
        # Entity methods raise ValueError on forbidden transitions
        try:
            change()
        except ValueError as exc:
            logger.warning("Payment %s: %s", payment.id_payment, exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        self._sync_membership(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def _sync_membership(self, payment: Payment) -> None:
        if payment.id_user_membership is None:
            return
        self.db.flush()
        membership = membership_repository.get_membership(self.db, payment.id_user_membership)
        if membership is not None:
            membership.paid_amount = payment_repository.settled_total_for_membership(
                self.db, membership.id_user_membership
            )

    def get_payment(self, payment_id: int) -> Payment:
        payment = payment_repository.get_payment(self.db, payment_id)
        if payment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Payment {payment_id} not found",
            )
        return payment

    def get_payment_by_transaction_id(self, transaction_id: str) -> Payment:
        payment = payment_repository.get_payment_by_transaction_id(self.db, transaction_id)
        if payment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Payment with transaction id {transaction_id} not found",
            )
        return payment

    def list_payments(
        self,
        params: PageParams,
        *,
        user_id: Optional[int] = None,
        reservation_id: Optional[int] = None,
        status_filter: Optional[PaymentStatus] = None,
        method: Optional[PaymentMethod] = None,
        branch_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
    ) -> Tuple[List[Payment], int]:
        if date_from and date_to and date_to < date_from:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="date_to must not be before date_from",
            )
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="min_amount cannot be greater than max_amount",
            )
        return payment_repository.list_payments(
            self.db,
            params,
            user_id=user_id,
            reservation_id=reservation_id,
            status_filter=status_filter.value if status_filter else None,
            method=method.value if method else None,
            branch_id=branch_id,
            date_from=clock.to_naive(date_from) if date_from else None,
            date_to=clock.to_naive(date_to) if date_to else None,
            min_amount=min_amount,
            max_amount=max_amount,
        )

    def create_payment(self, payload: PaymentCreate) -> Payment:
        if user_repository.get_user(self.db, payload.id_user) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {payload.id_user} not found",
            )
        if payload.id_reservation is not None:
            reservation = reservation_repository.get_reservation(self.db, payload.id_reservation)
            if reservation is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Reservation {payload.id_reservation} not found",
                )
            if reservation.id_user != payload.id_user:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Reservation belongs to another user",
                )
        self._ensure_transaction_id_available(payload.transaction_id)

        payment = Payment(
            id_user=payload.id_user,
            id_reservation=payload.id_reservation,
            amount=payload.amount,
            currency=(payload.currency or settings.DEFAULT_CURRENCY).upper(),
            status=PaymentStatus.PENDING.value,
            payment_method=payload.payment_method.value,
            description=payload.description,
            transaction_id=payload.transaction_id,
            notes=payload.notes,
            payment_date=clock.now(),
        )
        payment_repository.create_payment(self.db, payment)
        self.db.commit()
        self.db.refresh(payment)
        logger.info(
            "Payment %s of %s %s registered for user %s",
            payment.id_payment,
            payment.amount,
            payment.currency,
            payment.id_user,
        )
        return payment

    def record_completed_payment(
        self,
        *,
        user_id: int,
        amount: Decimal,
        method: PaymentMethod,
        membership_id: Optional[int] = None,
        description: Optional[str] = None,
        transaction_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """Add an already settled payment to the session without committing."""
        self._ensure_transaction_id_available(transaction_id)
        now = clock.now()
        payment = Payment(
            id_user=user_id,
            id_user_membership=membership_id,
            amount=amount,
            currency=settings.DEFAULT_CURRENCY,
            status=PaymentStatus.PENDING.value,
            payment_method=method.value,
            description=description,
            notes=notes,
            payment_date=now,
        )
        payment.mark_as_completed(transaction_id=transaction_id, at=now)
        return payment_repository.create_payment(self.db, payment)

    def update_payment(self, payment_id: int, payload: PaymentUpdate) -> Payment:
        payment = self.get_payment(payment_id)
        if payment.status in (
            PaymentStatus.REFUNDED.value,
            PaymentStatus.PARTIALLY_REFUNDED.value,
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Refunded payments cannot be modified",
            )
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return payment

        # Apply only the provided fields so callers can send partial updates
        for field, value in update_data.items():
            if isinstance(value, PaymentMethod):
                value = value.value
            setattr(payment, field, value)

        self.db.commit()
        self.db.refresh(payment)
        return payment

    def complete_payment(self, payment_id: int, payload: PaymentCompleteRequest) -> Payment:
        payment = self.get_payment(payment_id)
        if payload.transaction_id and payload.transaction_id != payment.transaction_id:
            self._ensure_transaction_id_available(payload.transaction_id)
        return self._apply(
            payment,
            lambda: payment.mark_as_completed(payload.transaction_id, payload.gateway_reference),
        )

    def fail_payment(self, payment_id: int, reason: str) -> Payment:
        payment = self.get_payment(payment_id)
        return self._apply(payment, lambda: payment.mark_as_failed(reason))

    def cancel_payment(self, payment_id: int) -> Payment:
        payment = self.get_payment(payment_id)

        def cancel() -> None:
            if payment.status != PaymentStatus.PENDING.value:
                raise ValueError(f"Only pending payments can be cancelled (status {payment.status})")
            payment.status = PaymentStatus.CANCELLED.value

        return self._apply(payment, cancel)

    def refund_payment(self, payment_id: int, payload: RefundRequest) -> Payment:
        payment = self.get_payment(payment_id)
        refunded = self._apply(
            payment, lambda: payment.process_refund(payload.amount, payload.reason)
        )
        logger.info(
            "Payment %s refunded %s (%s)", payment_id, payload.amount, refunded.status
        )
        return refunded

    def delete_payment(self, payment_id: int) -> None:
        payment = self.get_payment(payment_id)
        if payment.status == PaymentStatus.COMPLETED.value and payment.refund_amount is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Completed payments must be refunded before deletion",
            )
        membership_id = payment.id_user_membership
        payment_repository.delete_payment(self.db, payment)
        if membership_id is not None:
            self.db.flush()
            membership = membership_repository.get_membership(self.db, membership_id)
            if membership is not None:
                membership.paid_amount = payment_repository.settled_total_for_membership(
                    self.db, membership_id
                )
        self.db.commit()
        logger.info("Payment %s deleted", payment_id)

    def get_stats(
        self, *, user_id: Optional[int] = None, branch_id: Optional[int] = None
    ) -> PaymentStats:
        rows = payment_repository.aggregate_by_status(
            self.db, user_id=user_id, branch_id=branch_id
        )
        stats = PaymentStats()
        for payment_status, (count, amount, refunded) in rows.items():
            stats.total_payments += count
            field = payment_status.lower()
            if hasattr(stats, field):
                setattr(stats, field, count)
            if payment_status in (
                PaymentStatus.COMPLETED.value,
                PaymentStatus.REFUNDED.value,
                PaymentStatus.PARTIALLY_REFUNDED.value,
            ):
                stats.total_amount += amount
                stats.refunded_amount += refunded
        stats.net_amount = stats.total_amount - stats.refunded_amount
        return stats


__all__ = ["PaymentService"]
