from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from fitandflex.models.class_subscription import ClassSubscription
from fitandflex.models.user import User


def get_subscription(db: Session, subscription_id: int) -> Optional[ClassSubscription]:
    return (
        db.query(ClassSubscription)
        .filter(ClassSubscription.id_subscription == subscription_id)
        .first()
    )


def find_duplicate(
    db: Session,
    *,
    user_id: int,
    class_id: int,
    day_of_week: int,
    start_time: time,
    end_time: time,
    on_date: Optional[date],
) -> Optional[ClassSubscription]:
    """Recurrent slots match on date IS NULL, dated slots on the exact date."""
    query = db.query(ClassSubscription).filter(
        ClassSubscription.id_user == user_id,
        ClassSubscription.id_class == class_id,
        ClassSubscription.day_of_week == day_of_week,
        ClassSubscription.start_time == start_time,
        ClassSubscription.end_time == end_time,
    )
    if on_date is None:
        query = query.filter(ClassSubscription.date.is_(None))
    else:
        query = query.filter(ClassSubscription.date == on_date)
    return query.first()


def count_active_for_slot(
    db: Session, *, class_id: int, on_date: date, start_time: time, end_time: time
) -> int:
    return (
        db.query(func.count(ClassSubscription.id_subscription))
        .filter(
            ClassSubscription.id_class == class_id,
            ClassSubscription.date == on_date,
            ClassSubscription.start_time == start_time,
            ClassSubscription.end_time == end_time,
            ClassSubscription.active.is_(True),
        )
        .scalar()
        or 0
    )


def list_by_class(
    db: Session, class_id: int, *, active_only: bool = True
) -> List[ClassSubscription]:
    query = db.query(ClassSubscription).filter(ClassSubscription.id_class == class_id)
    if active_only:
        query = query.filter(ClassSubscription.active.is_(True))
    return query.order_by(
        ClassSubscription.day_of_week.asc(), ClassSubscription.start_time.asc()
    ).all()


def list_by_user(
    db: Session, user_id: int, *, active_only: bool = True
) -> List[ClassSubscription]:
    query = db.query(ClassSubscription).filter(ClassSubscription.id_user == user_id)
    if active_only:
        query = query.filter(ClassSubscription.active.is_(True))
    return query.order_by(
        ClassSubscription.day_of_week.asc(), ClassSubscription.start_time.asc()
    ).all()


def list_users_by_class(db: Session, class_id: int) -> List[User]:
    return (
        db.query(User)
        .join(ClassSubscription, ClassSubscription.id_user == User.id_user)
        .filter(
            ClassSubscription.id_class == class_id,
            ClassSubscription.active.is_(True),
        )
        .distinct()
        .order_by(User.name.asc())
        .all()
    )


def list_active_for_user_on_date(
    db: Session,
    *,
    user_id: int,
    class_id: int,
    on_date: date,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
) -> List[ClassSubscription]:
    query = db.query(ClassSubscription).filter(
        ClassSubscription.id_user == user_id,
        ClassSubscription.id_class == class_id,
        ClassSubscription.date == on_date,
        ClassSubscription.active.is_(True),
    )
    if start_time is not None:
        query = query.filter(ClassSubscription.start_time == start_time)
    if end_time is not None:
        query = query.filter(ClassSubscription.end_time == end_time)
    return query.all()


def create_subscription(db: Session, subscription: ClassSubscription) -> ClassSubscription:
    db.add(subscription)
    db.flush()
    return subscription


def delete_subscription(db: Session, subscription: ClassSubscription) -> None:
    db.delete(subscription)
