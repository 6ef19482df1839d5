"""API routes for class schedules."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, ensure_branch_access, require_permission
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.schedule import (
    AvailabilityResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from fitandflex.services.class_service import ClassService
from fitandflex.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _ensure_schedule_branch(principal: Principal, service: ScheduleService, schedule_id: int) -> None:
    ensure_branch_access(principal, service.get_schedule(schedule_id).fitness_class.id_branch)


@router.get("", response_model=ApiResponse[Page[ScheduleResponse]])
def list_schedules(
    class_id: Optional[int] = Query(None, description="Filter schedules by class"),
    branch_id: Optional[int] = Query(None, description="Filter schedules by the branch of their class"),
    active: Optional[bool] = Query(None, description="Filter schedules by active flag"),
    start_from: Optional[datetime] = Query(None, description="Earliest start time"),
    start_to: Optional[datetime] = Query(None, description="Latest start time"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SCHEDULE, Action.READ)),
):
    items, total = ScheduleService(db).list_schedules(
        params,
        class_id=class_id,
        branch_id=branch_id,
        active=active,
        start_from=start_from,
        start_to=start_to,
    )
    return ok(page_of(ScheduleResponse, items, total, params), "Schedules retrieved")


@router.get("/class/{class_id}", response_model=ApiResponse[Page[ScheduleResponse]])
def list_schedules_by_class(
    class_id: int,
    active: Optional[bool] = Query(None, description="Filter schedules by active flag"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SCHEDULE, Action.READ)),
):
    items, total = ScheduleService(db).list_schedules(params, class_id=class_id, active=active)
    return ok(page_of(ScheduleResponse, items, total, params), "Schedules retrieved")


@router.get("/branch/{branch_id}", response_model=ApiResponse[Page[ScheduleResponse]])
def list_schedules_by_branch(
    branch_id: int,
    active: Optional[bool] = Query(None, description="Filter schedules by active flag"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SCHEDULE, Action.READ)),
):
    items, total = ScheduleService(db).list_schedules(params, branch_id=branch_id, active=active)
    return ok(page_of(ScheduleResponse, items, total, params), "Schedules retrieved")


@router.get("/{schedule_id}", response_model=ApiResponse[ScheduleResponse])
def get_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SCHEDULE, Action.READ)),
):
    schedule = ScheduleService(db).get_schedule(schedule_id)
    return ok(ScheduleResponse.model_validate(schedule), "Schedule retrieved")


@router.get("/{schedule_id}/availability", response_model=ApiResponse[AvailabilityResponse])
def get_schedule_availability(
    schedule_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SCHEDULE, Action.READ)),
):
    """Spots left = class capacity minus active reservations."""
    return ok(ScheduleService(db).get_availability(schedule_id), "Availability retrieved")


@router.post(
    "", response_model=ApiResponse[ScheduleResponse], status_code=status.HTTP_201_CREATED
)
def create_schedule(
    schedule_in: ScheduleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SCHEDULE, Action.CREATE)),
):
    ensure_branch_access(principal, ClassService(db).get_class(schedule_in.id_class).id_branch)
    schedule = ScheduleService(db).create_schedule(schedule_in)
    return ok(ScheduleResponse.model_validate(schedule), "Schedule created")


@router.put("/{schedule_id}", response_model=ApiResponse[ScheduleResponse])
def update_schedule(
    schedule_id: int,
    schedule_in: ScheduleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SCHEDULE, Action.UPDATE)),
):
    service = ScheduleService(db)
    _ensure_schedule_branch(principal, service, schedule_id)
    schedule = service.update_schedule(schedule_id, schedule_in)
    return ok(ScheduleResponse.model_validate(schedule), "Schedule updated")


@router.put("/{schedule_id}/activate", response_model=ApiResponse[ScheduleResponse])
def activate_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SCHEDULE, Action.UPDATE)),
):
    service = ScheduleService(db)
    _ensure_schedule_branch(principal, service, schedule_id)
    schedule = service.set_active(schedule_id, True)
    return ok(ScheduleResponse.model_validate(schedule), "Schedule activated")


@router.put("/{schedule_id}/deactivate", response_model=ApiResponse[ScheduleResponse])
def deactivate_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SCHEDULE, Action.UPDATE)),
):
    service = ScheduleService(db)
    _ensure_schedule_branch(principal, service, schedule_id)
    schedule = service.set_active(schedule_id, False)
    return ok(ScheduleResponse.model_validate(schedule), "Schedule deactivated")


@router.delete("/{schedule_id}", response_model=ApiResponse[None])
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SCHEDULE, Action.DELETE)),
):
    service = ScheduleService(db)
    _ensure_schedule_branch(principal, service, schedule_id)
    service.delete_schedule(schedule_id)
    return ok(None, "Schedule deleted")
