"""Data access helpers for user memberships."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from fitandflex.models.product import Product
from fitandflex.models.user_membership import MembershipStatus, UserMembership
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": UserMembership.id_user_membership,
    "start_date": UserMembership.start_date,
    "end_date": UserMembership.end_date,
    "status": UserMembership.status,
}


def get_membership(db: Session, membership_id: int) -> Optional[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(UserMembership.id_user_membership == membership_id)
        .first()
    )


def find_active_for_user_and_product(
    db: Session, user_id: int, product_id: int
) -> Optional[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(
            UserMembership.id_user == user_id,
            UserMembership.id_product == product_id,
            UserMembership.status == MembershipStatus.ACTIVE.value,
            UserMembership.active.is_(True),
        )
        .first()
    )


def list_memberships(
    db: Session,
    params: PageParams,
    *,
    user_id: Optional[int] = None,
    product_id: Optional[int] = None,
    status_filter: Optional[str] = None,
    branch_id: Optional[int] = None,
) -> Tuple[List[UserMembership], int]:
    query = db.query(UserMembership)
    if user_id is not None:
        query = query.filter(UserMembership.id_user == user_id)
    if product_id is not None:
        query = query.filter(UserMembership.id_product == product_id)
    if status_filter is not None:
        query = query.filter(UserMembership.status == status_filter)
    if branch_id is not None:
        query = query.join(Product, UserMembership.id_product == Product.id_product).filter(
            Product.id_branch == branch_id
        )
    return paginate(query, params, _SORTABLE, UserMembership.id_user_membership)


def list_by_user(db: Session, user_id: int) -> List[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(UserMembership.id_user == user_id)
        .order_by(UserMembership.start_date.desc())
        .all()
    )


def list_active_by_user(db: Session, user_id: int, now: datetime) -> List[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(
            UserMembership.id_user == user_id,
            UserMembership.active.is_(True),
            UserMembership.status == MembershipStatus.ACTIVE.value,
            UserMembership.end_date >= now,
        )
        .order_by(UserMembership.end_date.asc())
        .all()
    )


def list_expiring(db: Session, now: datetime, until: datetime) -> List[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(
            UserMembership.active.is_(True),
            UserMembership.status == MembershipStatus.ACTIVE.value,
            UserMembership.end_date >= now,
            UserMembership.end_date <= until,
        )
        .order_by(UserMembership.end_date.asc())
        .all()
    )


def list_expired(db: Session, now: datetime) -> List[UserMembership]:
    """Memberships past their end date, whatever status was last stored."""
    return (
        db.query(UserMembership)
        .filter(UserMembership.end_date < now)
        .order_by(UserMembership.end_date.desc())
        .all()
    )


def list_overdue_active(db: Session, now: datetime) -> List[UserMembership]:
    return (
        db.query(UserMembership)
        .filter(
            UserMembership.status == MembershipStatus.ACTIVE.value,
            UserMembership.end_date < now,
        )
        .all()
    )


def create_membership(db: Session, membership: UserMembership) -> UserMembership:
    db.add(membership)
    db.flush()
    return membership


def delete_membership(db: Session, membership: UserMembership) -> None:
    db.delete(membership)
