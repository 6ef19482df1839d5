from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class DaySchedule(BaseModel):
    day_of_week: int = Field(..., ge=1, le=7)
    start_time: time
    end_time: time
    active: bool = True
    recurrent: bool = True

    @field_validator("end_time")
    def validate_time_range(cls, end_time: time, info: ValidationInfo) -> time:
        start_time = info.data.get("start_time")
        if start_time and end_time <= start_time:
            raise ValueError("end_time must be after start_time")
        return end_time


class FitnessClassBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    capacity: int = Field(..., gt=0)


class FitnessClassCreate(FitnessClassBase):
    id_branch: int = Field(..., gt=0)
    active: bool = True
    day_schedules: List[DaySchedule] = Field(default_factory=list)


class FitnessClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    active: Optional[bool] = None
    day_schedules: Optional[List[DaySchedule]] = None


class SchedulePatternResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_pattern: int
    day_of_week: int
    start_time: time
    end_time: time
    active: bool
    recurrent: bool


class FitnessClassResponse(FitnessClassBase):
    model_config = ConfigDict(from_attributes=True)

    id_class: int
    active: bool
    id_branch: int
    id_created_by: Optional[int] = None
    schedule_patterns: List[SchedulePatternResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FitnessClassSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_class: int
    name: str
    capacity: int
    id_branch: int


class DayOfWeekResponse(BaseModel):
    target_date: date
    day_of_week: int
    day_name: str
