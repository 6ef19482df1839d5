from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.models.class_schedule_pattern import ClassSchedulePattern
from fitandflex.models.fitness_class import FitnessClass
from fitandflex.repository import branch_repository, class_repository
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.fitness_class import (
    DaySchedule,
    DayOfWeekResponse,
    FitnessClassCreate,
    FitnessClassUpdate,
)

logger = logging.getLogger(__name__)


def day_of_week_for(target_date: date) -> DayOfWeekResponse:
    """ISO weekday of a date (1 = Monday ... 7 = Sunday) with its English name."""
    return DayOfWeekResponse(
        target_date=target_date,
        day_of_week=target_date.isoweekday(),
        day_name=calendar.day_name[target_date.weekday()].upper(),
    )


class ClassService:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _build_patterns(day_schedules: List[DaySchedule]) -> List[ClassSchedulePattern]:
        return [
            ClassSchedulePattern(
                day_of_week=day.day_of_week,
                start_time=day.start_time,
                end_time=day.end_time,
                active=day.active,
                recurrent=day.recurrent,
            )
            for day in day_schedules
        ]

    def get_class(self, class_id: int) -> FitnessClass:
        fitness_class = class_repository.get_class(self.db, class_id)
        if fitness_class is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Class {class_id} not found",
            )
        return fitness_class

    def list_classes(
        self,
        params: PageParams,
        *,
        branch_id: Optional[int] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[FitnessClass], int]:
        return class_repository.list_classes(
            self.db, params, branch_id=branch_id, active=active
        )

    def create_class(
        self, payload: FitnessClassCreate, *, created_by: Optional[int] = None
    ) -> FitnessClass:
        if branch_repository.get_branch(self.db, payload.id_branch) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Branch {payload.id_branch} not found",
            )

        fitness_class = FitnessClass(
            name=payload.name,
            description=payload.description,
            capacity=payload.capacity,
            active=payload.active,
            id_branch=payload.id_branch,
            id_created_by=created_by,
        )
        fitness_class.schedule_patterns = self._build_patterns(payload.day_schedules)
        class_repository.create_class(self.db, fitness_class)
        self.db.commit()
        self.db.refresh(fitness_class)
        logger.info(
            "Class %s created in branch %s with %s weekly slots",
            fitness_class.name,
            fitness_class.id_branch,
            len(fitness_class.schedule_patterns),
        )
        return fitness_class

    def update_class(self, class_id: int, payload: FitnessClassUpdate) -> FitnessClass:
        fitness_class = self.get_class(class_id)
        update_data = payload.model_dump(exclude_unset=True, exclude={"day_schedules"})

        for field, value in update_data.items():
            setattr(fitness_class, field, value)

        # A provided timetable replaces the previous one wholesale
        if payload.day_schedules is not None:
            fitness_class.schedule_patterns = self._build_patterns(payload.day_schedules)

        self.db.commit()
        self.db.refresh(fitness_class)
        return fitness_class

    def set_active(self, class_id: int, active: bool) -> FitnessClass:
        fitness_class = self.get_class(class_id)
        fitness_class.active = active
        self.db.commit()
        self.db.refresh(fitness_class)
        logger.info("Class %s %s", class_id, "activated" if active else "deactivated")
        return fitness_class

    def delete_class(self, class_id: int) -> None:
        self.set_active(class_id, False)


__all__ = ["ClassService", "day_of_week_for"]
