from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from fitandflex.models.fitness_class import FitnessClass
from fitandflex.models.schedule import Schedule
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": Schedule.id_schedule,
    "start_time": Schedule.start_time,
    "end_time": Schedule.end_time,
}


def get_schedule(db: Session, schedule_id: int) -> Optional[Schedule]:
    return db.query(Schedule).filter(Schedule.id_schedule == schedule_id).first()


def list_schedules(
    db: Session,
    params: PageParams,
    *,
    class_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    active: Optional[bool] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
) -> Tuple[List[Schedule], int]:
    query = db.query(Schedule)
    if class_id is not None:
        query = query.filter(Schedule.id_class == class_id)
    if branch_id is not None:
        query = query.join(FitnessClass, Schedule.id_class == FitnessClass.id_class).filter(
            FitnessClass.id_branch == branch_id
        )
    if active is not None:
        query = query.filter(Schedule.active.is_(active))
    if start_from is not None:
        query = query.filter(Schedule.start_time >= start_from)
    if start_to is not None:
        query = query.filter(Schedule.start_time <= start_to)
    return paginate(query, params, _SORTABLE, Schedule.start_time)


def find_overlapping_schedules(
    db: Session,
    *,
    class_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_schedule_id: Optional[int] = None,
) -> List[Schedule]:
    """Active schedules of the class intersecting the half-open [start, end)."""
    query = db.query(Schedule).filter(
        Schedule.id_class == class_id,
        Schedule.active.is_(True),
        Schedule.start_time < end_time,
        Schedule.end_time > start_time,
    )
    if exclude_schedule_id is not None:
        query = query.filter(Schedule.id_schedule != exclude_schedule_id)
    return query.order_by(Schedule.start_time.asc()).all()


def create_schedule(db: Session, schedule: Schedule) -> Schedule:
    db.add(schedule)
    db.flush()
    return schedule
