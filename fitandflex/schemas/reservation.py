from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fitandflex.models.reservation import ReservationStatus
from fitandflex.schemas.schedule import ScheduleResponse
from fitandflex.schemas.user import UserSummary


class ReservationCreate(BaseModel):
    id_user: int = Field(..., gt=0)
    id_schedule: int = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=500)


class ReservationUpdate(BaseModel):
    status: Optional[ReservationStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_reservation: int
    id_user: int
    id_schedule: int
    reservation_date: datetime
    status: ReservationStatus
    notes: Optional[str] = None
    user: Optional[UserSummary] = None
    schedule: Optional[ScheduleResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReservationStats(BaseModel):
    total: int = 0
    active: int = 0
    canceled: int = 0
    attended: int = 0
    no_show: int = 0


class ReservationExists(BaseModel):
    id_user: int
    id_schedule: int
    exists: bool
