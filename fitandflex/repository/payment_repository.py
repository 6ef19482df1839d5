from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from fitandflex.models.payment import SETTLED_STATUSES, Payment
from fitandflex.models.user import User
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": Payment.id_payment,
    "amount": Payment.amount,
    "status": Payment.status,
    "payment_date": Payment.payment_date,
    "created_at": Payment.created_at,
}


def get_payment(db: Session, payment_id: int) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.id_payment == payment_id).first()


def get_payment_by_transaction_id(db: Session, transaction_id: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.transaction_id == transaction_id).first()


def _filtered_query(
    db: Session,
    *,
    user_id: Optional[int] = None,
    reservation_id: Optional[int] = None,
    membership_id: Optional[int] = None,
    status_filter: Optional[str] = None,
    method: Optional[str] = None,
    branch_id: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
) -> Query:
    query = db.query(Payment)
    if user_id is not None:
        query = query.filter(Payment.id_user == user_id)
    if reservation_id is not None:
        query = query.filter(Payment.id_reservation == reservation_id)
    if membership_id is not None:
        query = query.filter(Payment.id_user_membership == membership_id)
    if status_filter is not None:
        query = query.filter(Payment.status == status_filter)
    if method is not None:
        query = query.filter(Payment.payment_method == method)
    if branch_id is not None:
        query = query.join(User, Payment.id_user == User.id_user).filter(
            User.id_branch == branch_id
        )
    if date_from is not None:
        query = query.filter(Payment.payment_date >= date_from)
    if date_to is not None:
        query = query.filter(Payment.payment_date <= date_to)
    if min_amount is not None:
        query = query.filter(Payment.amount >= min_amount)
    if max_amount is not None:
        query = query.filter(Payment.amount <= max_amount)
    return query


def list_payments(db: Session, params: PageParams, **filters) -> Tuple[List[Payment], int]:
    return paginate(_filtered_query(db, **filters), params, _SORTABLE, Payment.id_payment)


def list_all_payments(db: Session, **filters) -> List[Payment]:
    return _filtered_query(db, **filters).order_by(Payment.id_payment.asc()).all()


def aggregate_by_status(db: Session, **filters) -> Dict[str, Tuple[int, Decimal, Decimal]]:
    """Return ``{status: (count, amount_sum, refund_sum)}`` for the filtered payments."""
    query = _filtered_query(db, **filters).with_entities(
        Payment.status,
        func.count(Payment.id_payment),
        func.coalesce(func.sum(Payment.amount), 0),
        func.coalesce(func.sum(Payment.refund_amount), 0),
    )
    rows = query.group_by(Payment.status).all()
    return {
        status: (count, Decimal(str(amount)), Decimal(str(refunded)))
        for status, count, amount, refunded in rows
    }


def settled_total_for_membership(db: Session, membership_id: int) -> Decimal:
    """Sum of net amounts of the payments that settled against a membership."""
    amount, refunded = (
        db.query(
            func.coalesce(func.sum(Payment.amount), 0),
            func.coalesce(func.sum(Payment.refund_amount), 0),
        )
        .filter(
            Payment.id_user_membership == membership_id,
            Payment.status.in_(SETTLED_STATUSES),
        )
        .one()
    )
    return Decimal(str(amount)) - Decimal(str(refunded))


def create_payment(db: Session, payment: Payment) -> Payment:
    db.add(payment)
    db.flush()
    return payment


def delete_payment(db: Session, payment: Payment) -> None:
    db.delete(payment)
