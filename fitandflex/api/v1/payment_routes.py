"""API routes for payment operations."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

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
from fitandflex.models.payment import PaymentMethod, PaymentStatus
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.payment import (
    PaymentCompleteRequest,
    PaymentCreate,
    PaymentFailRequest,
    PaymentResponse,
    PaymentStats,
    PaymentUpdate,
    RefundRequest,
)
from fitandflex.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


def _ensure_payment_branch(principal: Principal, service: PaymentService, payment_id: int) -> None:
    ensure_branch_access(principal, service.get_payment(payment_id).user.id_branch)


@router.get("", response_model=ApiResponse[Page[PaymentResponse]])
def list_payments(
    user_id: Optional[int] = Query(None),
    reservation_id: Optional[int] = Query(None),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    method: Optional[PaymentMethod] = Query(None),
    branch_id: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    items, total = PaymentService(db).list_payments(
        params,
        user_id=user_id,
        reservation_id=reservation_id,
        status_filter=status_filter,
        method=method,
        branch_id=branch_id,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    return ok(page_of(PaymentResponse, items, total, params), "Payments retrieved")


@router.get("/stats", response_model=ApiResponse[PaymentStats])
def get_payment_stats(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    return ok(PaymentService(db).get_stats(), "Payment statistics retrieved")


@router.get("/stats/branch/{branch_id}", response_model=ApiResponse[PaymentStats])
def get_branch_payment_stats(
    branch_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    return ok(PaymentService(db).get_stats(branch_id=branch_id), "Payment statistics retrieved")


@router.get("/stats/user/{user_id}", response_model=ApiResponse[PaymentStats])
def get_user_payment_stats(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    return ok(PaymentService(db).get_stats(user_id=user_id), "Payment statistics retrieved")


@router.get("/user/{user_id}", response_model=ApiResponse[Page[PaymentResponse]])
def list_payments_by_user(
    user_id: int,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    items, total = PaymentService(db).list_payments(params, user_id=user_id)
    return ok(page_of(PaymentResponse, items, total, params), "Payments retrieved")


@router.get("/transaction/{transaction_id}", response_model=ApiResponse[PaymentResponse])
def get_payment_by_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    payment = PaymentService(db).get_payment_by_transaction_id(transaction_id)
    return ok(PaymentResponse.model_validate(payment), "Payment retrieved")


@router.get("/{payment_id}", response_model=ApiResponse[PaymentResponse])
def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.READ)),
):
    payment = PaymentService(db).get_payment(payment_id)
    ensure_self_or_admin(principal, payment.id_user)
    return ok(PaymentResponse.model_validate(payment), "Payment retrieved")


@router.post("", response_model=ApiResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
def create_payment(
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.CREATE)),
):
    ensure_self_or_admin(principal, payment_in.id_user)
    payment = PaymentService(db).create_payment(payment_in)
    return ok(PaymentResponse.model_validate(payment), "Payment created")


@router.put("/{payment_id}", response_model=ApiResponse[PaymentResponse])
def update_payment(
    payment_id: int,
    payment_in: PaymentUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.UPDATE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    payment = service.update_payment(payment_id, payment_in)
    return ok(PaymentResponse.model_validate(payment), "Payment updated")


@router.put("/{payment_id}/complete", response_model=ApiResponse[PaymentResponse])
def complete_payment(
    payment_id: int,
    payload: PaymentCompleteRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    payment = service.complete_payment(payment_id, payload)
    return ok(PaymentResponse.model_validate(payment), "Payment completed")


@router.put("/{payment_id}/fail", response_model=ApiResponse[PaymentResponse])
def fail_payment(
    payment_id: int,
    payload: PaymentFailRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    payment = service.fail_payment(payment_id, payload.reason)
    return ok(PaymentResponse.model_validate(payment), "Payment marked as failed")


@router.put("/{payment_id}/cancel", response_model=ApiResponse[PaymentResponse])
def cancel_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    payment = service.cancel_payment(payment_id)
    return ok(PaymentResponse.model_validate(payment), "Payment cancelled")


@router.put("/{payment_id}/refund", response_model=ApiResponse[PaymentResponse])
def refund_payment(
    payment_id: int,
    payload: RefundRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.MANAGE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    payment = service.refund_payment(payment_id, payload)
    return ok(PaymentResponse.model_validate(payment), "Refund processed")


@router.delete("/{payment_id}", response_model=ApiResponse[None])
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PAYMENT, Action.DELETE)),
):
    service = PaymentService(db)
    _ensure_payment_branch(principal, service, payment_id)
    service.delete_payment(payment_id)
    return ok(None, "Payment deleted")
