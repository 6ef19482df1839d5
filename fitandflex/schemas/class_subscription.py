import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fitandflex.schemas.user import UserSummary


class ClassSubscriptionCreate(BaseModel):
    id_user: int = Field(..., gt=0)
    id_class: int = Field(..., gt=0)
    start_time: dt.time
    end_time: dt.time
    date: Optional[dt.date] = None
    day_of_week: Optional[int] = Field(None, ge=1, le=7)
    recurrent: Optional[bool] = None


class ClassSubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_subscription: int
    id_user: int
    id_class: int
    start_time: dt.time
    end_time: dt.time
    date: Optional[dt.date] = None
    day_of_week: int
    recurrent: bool
    active: bool
    user: Optional[UserSummary] = None
    created_at: Optional[dt.datetime] = None


class SubscriptionCancelRequest(BaseModel):
    id_user: int = Field(..., gt=0)
    id_class: int = Field(..., gt=0)
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
