from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core import clock
from fitandflex.models.fitness_class import FitnessClass
from fitandflex.models.schedule import Schedule
from fitandflex.repository import class_repository, reservation_repository, schedule_repository
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.schedule import AvailabilityResponse, ScheduleCreate, ScheduleUpdate

logger = logging.getLogger(__name__)


class ScheduleService:

    def __init__(self, db: Session):
        self.db = db

    def _get_class(self, class_id: int) -> FitnessClass:
        fitness_class = class_repository.get_class(self.db, class_id)
        if fitness_class is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Class {class_id} not found",
            )
        return fitness_class

    @staticmethod
    def _validate_window(start_time: datetime, end_time: datetime) -> None:
        if end_time <= start_time:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_time must be after start_time",
            )

    def find_conflicts(
        self,
        *,
        class_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_schedule_id: Optional[int] = None,
    ) -> List[Schedule]:
        return schedule_repository.find_overlapping_schedules(
            self.db,
            class_id=class_id,
            start_time=start_time,
            end_time=end_time,
            exclude_schedule_id=exclude_schedule_id,
        )

    def _ensure_no_conflict(
        self,
        *,
        class_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_schedule_id: Optional[int] = None,
    ) -> None:
        conflicts = self.find_conflicts(
            class_id=class_id,
            start_time=start_time,
            end_time=end_time,
            exclude_schedule_id=exclude_schedule_id,
        )
        if conflicts:
            ids = ", ".join(str(schedule.id_schedule) for schedule in conflicts)
            logger.warning(
                "Schedule %s - %s for class %s overlaps schedules %s",
                start_time,
                end_time,
                class_id,
                ids,
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Class already has a schedule in this time range (schedules {ids})",
            )

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = schedule_repository.get_schedule(self.db, schedule_id)
        if schedule is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Schedule {schedule_id} not found",
            )
        return schedule

    def list_schedules(
        self,
        params: PageParams,
        *,
        class_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        active: Optional[bool] = None,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None,
    ) -> Tuple[List[Schedule], int]:
        if start_from is not None and start_to is not None and start_to < start_from:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_to must not be before start_from",
            )
        return schedule_repository.list_schedules(
            self.db,
            params,
            class_id=class_id,
            branch_id=branch_id,
            active=active,
            start_from=clock.to_naive(start_from) if start_from else None,
            start_to=clock.to_naive(start_to) if start_to else None,
        )

    def create_schedule(self, payload: ScheduleCreate) -> Schedule:
        start_time = clock.to_naive(payload.start_time)
        end_time = clock.to_naive(payload.end_time)
        self._validate_window(start_time, end_time)

        fitness_class = self._get_class(payload.id_class)
        if not fitness_class.active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot schedule an inactive class",
            )

        if payload.active:
            self._ensure_no_conflict(
                class_id=fitness_class.id_class, start_time=start_time, end_time=end_time
            )

        schedule = Schedule(
            start_time=start_time,
            end_time=end_time,
            active=payload.active,
            id_class=fitness_class.id_class,
        )
        schedule_repository.create_schedule(self.db, schedule)
        self.db.commit()
        self.db.refresh(schedule)
        logger.info(
            "Schedule %s created for class %s (%s - %s)",
            schedule.id_schedule,
            fitness_class.id_class,
            start_time,
            end_time,
        )
        return schedule

    def update_schedule(self, schedule_id: int, payload: ScheduleUpdate) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return schedule

        start_time = clock.to_naive(update_data.get("start_time") or schedule.start_time)
        end_time = clock.to_naive(update_data.get("end_time") or schedule.end_time)
        active = update_data.get("active", schedule.active)
        self._validate_window(start_time, end_time)

        if active:
            self._ensure_no_conflict(
                class_id=schedule.id_class,
                start_time=start_time,
                end_time=end_time,
                exclude_schedule_id=schedule.id_schedule,
            )

        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.active = active
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def set_active(self, schedule_id: int, active: bool) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        if active and not schedule.active:
            self._ensure_no_conflict(
                class_id=schedule.id_class,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                exclude_schedule_id=schedule.id_schedule,
            )
        schedule.active = active
        self.db.commit()
        self.db.refresh(schedule)
        logger.info("Schedule %s %s", schedule_id, "activated" if active else "deactivated")
        return schedule

    def delete_schedule(self, schedule_id: int) -> None:
        self.set_active(schedule_id, False)

    def get_availability(self, schedule_id: int) -> AvailabilityResponse:
        schedule = self.get_schedule(schedule_id)
        capacity = schedule.fitness_class.capacity
        active_reservations = reservation_repository.count_active_for_schedule(
            self.db, schedule_id
        )
        return AvailabilityResponse(
            id_schedule=schedule.id_schedule,
            capacity=capacity,
            active_reservations=active_reservations,
            available_spots=max(0, capacity - active_reservations),
        )


__all__ = ["ScheduleService"]
