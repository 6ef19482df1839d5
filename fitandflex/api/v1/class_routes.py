"""API routes for classes and their weekly timetable."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, ensure_branch_access, require_permission
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.fitness_class import (
    DayOfWeekResponse,
    FitnessClassCreate,
    FitnessClassResponse,
    FitnessClassUpdate,
)
from fitandflex.services.class_service import ClassService, day_of_week_for

router = APIRouter(prefix="/classes", tags=["classes"])


@router.get("", response_model=ApiResponse[Page[FitnessClassResponse]])
def list_classes(
    branch_id: Optional[int] = Query(None, description="Filter classes by branch"),
    active: Optional[bool] = Query(None, description="Filter classes by active flag"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.CLASS, Action.READ)),
):
    items, total = ClassService(db).list_classes(params, branch_id=branch_id, active=active)
    return ok(page_of(FitnessClassResponse, items, total, params), "Classes retrieved")


@router.get("/day-of-week", response_model=ApiResponse[DayOfWeekResponse])
def get_day_of_week(
    target_date: date = Query(..., alias="date", description="Date to resolve"),
    _: Principal = Depends(require_permission(Resource.CLASS, Action.READ)),
):
    return ok(day_of_week_for(target_date), "Day of week resolved")


@router.get("/{class_id}", response_model=ApiResponse[FitnessClassResponse])
def get_class(
    class_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.CLASS, Action.READ)),
):
    fitness_class = ClassService(db).get_class(class_id)
    return ok(FitnessClassResponse.model_validate(fitness_class), "Class retrieved")


@router.post(
    "", response_model=ApiResponse[FitnessClassResponse], status_code=status.HTTP_201_CREATED
)
def create_class(
    class_in: FitnessClassCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.CLASS, Action.CREATE)),
):
    ensure_branch_access(principal, class_in.id_branch)
    fitness_class = ClassService(db).create_class(class_in, created_by=principal.user_id)
    return ok(FitnessClassResponse.model_validate(fitness_class), "Class created")


@router.put("/{class_id}", response_model=ApiResponse[FitnessClassResponse])
def update_class(
    class_id: int,
    class_in: FitnessClassUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.CLASS, Action.UPDATE)),
):
    service = ClassService(db)
    ensure_branch_access(principal, service.get_class(class_id).id_branch)
    fitness_class = service.update_class(class_id, class_in)
    return ok(FitnessClassResponse.model_validate(fitness_class), "Class updated")


@router.put("/{class_id}/activate", response_model=ApiResponse[FitnessClassResponse])
def activate_class(
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.CLASS, Action.UPDATE)),
):
    service = ClassService(db)
    ensure_branch_access(principal, service.get_class(class_id).id_branch)
    return ok(
        FitnessClassResponse.model_validate(service.set_active(class_id, True)), "Class activated"
    )


@router.put("/{class_id}/deactivate", response_model=ApiResponse[FitnessClassResponse])
def deactivate_class(
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.CLASS, Action.UPDATE)),
):
    service = ClassService(db)
    ensure_branch_access(principal, service.get_class(class_id).id_branch)
    return ok(
        FitnessClassResponse.model_validate(service.set_active(class_id, False)),
        "Class deactivated",
    )


@router.delete("/{class_id}", response_model=ApiResponse[None])
def delete_class(
    class_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.CLASS, Action.DELETE)),
):
    service = ClassService(db)
    ensure_branch_access(principal, service.get_class(class_id).id_branch)
    service.delete_class(class_id)
    return ok(None, "Class deleted")
