from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from fitandflex.schemas.fitness_class import FitnessClassSummary


class ScheduleBase(BaseModel):
    start_time: datetime
    end_time: datetime
    id_class: int = Field(..., gt=0)

    @field_validator("end_time")
    def validate_time_range(cls, end_time: datetime, info: ValidationInfo) -> datetime:
        start_time = info.data.get("start_time")
        if start_time and end_time <= start_time:
            raise ValueError("end_time must be after start_time")
        return end_time


class ScheduleCreate(ScheduleBase):
    active: bool = True


class ScheduleUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    active: Optional[bool] = None


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_schedule: int
    start_time: datetime
    end_time: datetime
    active: bool
    id_class: int
    fitness_class: Optional[FitnessClassSummary] = None


class AvailabilityResponse(BaseModel):
    id_schedule: int
    capacity: int
    active_reservations: int
    available_spots: int
