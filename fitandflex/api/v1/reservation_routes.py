"""API routes for managing reservations."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import (
    Principal,
    ensure_branch_access,
    ensure_self_or_admin,
    require_permission,
)
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.models.reservation import ReservationStatus
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.reservation import (
    ReservationCreate,
    ReservationExists,
    ReservationResponse,
    ReservationStats,
    ReservationUpdate,
)
from fitandflex.services.reservation_service import ReservationService

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _as_list(reservations) -> List[ReservationResponse]:
    return [ReservationResponse.model_validate(r) for r in reservations]


def _ensure_reservation_branch(
    principal: Principal, service: ReservationService, reservation_id: int
) -> None:
    reservation = service.get_reservation(reservation_id)
    ensure_branch_access(principal, reservation.schedule.fitness_class.id_branch)


@router.get("", response_model=ApiResponse[Page[ReservationResponse]])
def list_reservations(
    user_id: Optional[int] = Query(None, description="Filter reservations by user"),
    schedule_id: Optional[int] = Query(None, description="Filter reservations by schedule"),
    status_filter: Optional[ReservationStatus] = Query(
        None, alias="status", description="Filter reservations by status"
    ),
    branch_id: Optional[int] = Query(None, description="Filter reservations by branch"),
    class_id: Optional[int] = Query(None, description="Filter reservations by class"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.RESERVATION, Action.MANAGE)),
):
    """Retrieve reservations, optionally filtered."""

    items, total = ReservationService(db).list_reservations(
        params,
        user_id=user_id,
        schedule_id=schedule_id,
        status_filter=status_filter,
        branch_id=branch_id,
        class_id=class_id,
    )
    return ok(page_of(ReservationResponse, items, total, params), "Reservations retrieved")


@router.get("/stats", response_model=ApiResponse[ReservationStats])
def get_reservation_stats(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.RESERVATION, Action.MANAGE)),
):
    return ok(ReservationService(db).get_stats(), "Reservation statistics retrieved")


@router.get("/exists", response_model=ApiResponse[ReservationExists])
def reservation_exists(
    user_id: int = Query(..., gt=0),
    schedule_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    exists = ReservationService(db).reservation_exists(user_id, schedule_id)
    return ok(
        ReservationExists(id_user=user_id, id_schedule=schedule_id, exists=exists),
        "Reservation lookup completed",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[Page[ReservationResponse]])
def list_reservations_by_user(
    user_id: int,
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    items, total = ReservationService(db).list_reservations(
        params, user_id=user_id, status_filter=status_filter
    )
    return ok(page_of(ReservationResponse, items, total, params), "Reservations retrieved")


@router.get("/user/{user_id}/future", response_model=ApiResponse[List[ReservationResponse]])
def list_future_reservations(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    reservations = ReservationService(db).list_future_reservations(user_id)
    return ok(_as_list(reservations), "Future reservations retrieved")


@router.get("/user/{user_id}/past", response_model=ApiResponse[List[ReservationResponse]])
def list_past_reservations(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    reservations = ReservationService(db).list_past_reservations(user_id)
    return ok(_as_list(reservations), "Past reservations retrieved")


@router.get("/user/{user_id}/stats", response_model=ApiResponse[ReservationStats])
def get_user_reservation_stats(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    return ok(ReservationService(db).get_stats(user_id), "Reservation statistics retrieved")


@router.get("/schedule/{schedule_id}", response_model=ApiResponse[Page[ReservationResponse]])
def list_reservations_by_schedule(
    schedule_id: int,
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.RESERVATION, Action.MANAGE)),
):
    items, total = ReservationService(db).list_reservations(
        params, schedule_id=schedule_id, status_filter=status_filter
    )
    return ok(page_of(ReservationResponse, items, total, params), "Reservations retrieved")


@router.get("/{reservation_id}", response_model=ApiResponse[ReservationResponse])
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.READ)),
):
    reservation = ReservationService(db).get_reservation(reservation_id)
    ensure_self_or_admin(principal, reservation.id_user)
    return ok(ReservationResponse.model_validate(reservation), "Reservation retrieved")


@router.post(
    "", response_model=ApiResponse[ReservationResponse], status_code=status.HTTP_201_CREATED
)
def create_reservation(
    reservation_in: ReservationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.CREATE)),
):
    ensure_self_or_admin(principal, reservation_in.id_user)
    reservation = ReservationService(db).create_reservation(reservation_in)
    return ok(ReservationResponse.model_validate(reservation), "Reservation created")


@router.put("/{reservation_id}/cancel", response_model=ApiResponse[ReservationResponse])
def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.CANCEL)),
):
    service = ReservationService(db)
    ensure_self_or_admin(principal, service.get_reservation(reservation_id).id_user)
    reservation = service.cancel_reservation(reservation_id)
    return ok(ReservationResponse.model_validate(reservation), "Reservation canceled")


@router.put("/{reservation_id}/attended", response_model=ApiResponse[ReservationResponse])
def mark_attended(
    reservation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.MANAGE)),
):
    service = ReservationService(db)
    _ensure_reservation_branch(principal, service, reservation_id)
    reservation = service.mark_attended(reservation_id)
    return ok(ReservationResponse.model_validate(reservation), "Attendance recorded")


@router.put("/{reservation_id}/no-show", response_model=ApiResponse[ReservationResponse])
def mark_no_show(
    reservation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.MANAGE)),
):
    service = ReservationService(db)
    _ensure_reservation_branch(principal, service, reservation_id)
    reservation = service.mark_no_show(reservation_id)
    return ok(ReservationResponse.model_validate(reservation), "No-show recorded")


@router.put("/{reservation_id}", response_model=ApiResponse[ReservationResponse])
def update_reservation(
    reservation_id: int,
    reservation_in: ReservationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.UPDATE)),
):
    service = ReservationService(db)
    _ensure_reservation_branch(principal, service, reservation_id)
    reservation = service.update_reservation(reservation_id, reservation_in)
    return ok(ReservationResponse.model_validate(reservation), "Reservation updated")


@router.delete("/{reservation_id}", response_model=ApiResponse[None])
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.RESERVATION, Action.DELETE)),
):
    service = ReservationService(db)
    _ensure_reservation_branch(principal, service, reservation_id)
    service.delete_reservation(reservation_id)
    return ok(None, "Reservation deleted")
