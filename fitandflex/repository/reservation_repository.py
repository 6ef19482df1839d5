from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from fitandflex.models.fitness_class import FitnessClass
from fitandflex.models.reservation import Reservation, ReservationStatus
from fitandflex.models.schedule import Schedule
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": Reservation.id_reservation,
    "reservation_date": Reservation.reservation_date,
    "status": Reservation.status,
    "start_time": Schedule.start_time,
}


def get_reservation(db: Session, reservation_id: int) -> Optional[Reservation]:
    return (
        db.query(Reservation)
        .filter(Reservation.id_reservation == reservation_id)
        .first()
    )


def find_by_user_and_schedule(
    db: Session, user_id: int, schedule_id: int
) -> Optional[Reservation]:
    return (
        db.query(Reservation)
        .filter(Reservation.id_user == user_id, Reservation.id_schedule == schedule_id)
        .first()
    )


def user_has_active_reservation_at(
    db: Session,
    *,
    user_id: int,
    start_time: datetime,
    exclude_schedule_id: Optional[int] = None,
) -> bool:
    query = (
        db.query(Reservation.id_reservation)
        .join(Schedule, Reservation.id_schedule == Schedule.id_schedule)
        .filter(
            Reservation.id_user == user_id,
            Reservation.status == ReservationStatus.ACTIVE.value,
            Schedule.start_time == start_time,
        )
    )
    if exclude_schedule_id is not None:
        query = query.filter(Reservation.id_schedule != exclude_schedule_id)
    return query.first() is not None


def count_active_for_schedule(db: Session, schedule_id: int) -> int:
    return (
        db.query(func.count(Reservation.id_reservation))
        .filter(
            Reservation.id_schedule == schedule_id,
            Reservation.status == ReservationStatus.ACTIVE.value,
        )
        .scalar()
        or 0
    )


def _filtered_query(
    db: Session,
    *,
    user_id: Optional[int] = None,
    schedule_id: Optional[int] = None,
    status_filter: Optional[str] = None,
    branch_id: Optional[int] = None,
    class_id: Optional[int] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
) -> Query:
    query = db.query(Reservation).join(
        Schedule, Reservation.id_schedule == Schedule.id_schedule
    )
    if user_id is not None:
        query = query.filter(Reservation.id_user == user_id)
    if schedule_id is not None:
        query = query.filter(Reservation.id_schedule == schedule_id)
    if status_filter is not None:
        query = query.filter(Reservation.status == status_filter)
    if class_id is not None:
        query = query.filter(Schedule.id_class == class_id)
    if branch_id is not None:
        query = query.join(FitnessClass, Schedule.id_class == FitnessClass.id_class).filter(
            FitnessClass.id_branch == branch_id
        )
    if start_from is not None:
        query = query.filter(Schedule.start_time > start_from)
    if start_to is not None:
        query = query.filter(Schedule.start_time < start_to)
    return query


def list_reservations(
    db: Session, params: PageParams, **filters
) -> Tuple[List[Reservation], int]:
    return paginate(
        _filtered_query(db, **filters), params, _SORTABLE, Reservation.id_reservation
    )


def list_all_reservations(db: Session, **filters) -> List[Reservation]:
    return (
        _filtered_query(db, **filters)
        .order_by(Schedule.start_time.asc(), Reservation.id_reservation.asc())
        .all()
    )


def count_by_status(db: Session, *, user_id: Optional[int] = None) -> Dict[str, int]:
    query = db.query(Reservation.status, func.count(Reservation.id_reservation))
    if user_id is not None:
        query = query.filter(Reservation.id_user == user_id)
    return {status: count for status, count in query.group_by(Reservation.status).all()}


def create_reservation(db: Session, reservation: Reservation) -> Reservation:
    db.add(reservation)
    db.flush()
    return reservation


def delete_reservation(db: Session, reservation: Reservation) -> None:
    db.delete(reservation)
