"""API routes for class subscriptions."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, ensure_self_or_admin, require_permission
from fitandflex.dependencies import get_db
from fitandflex.schemas.class_subscription import (
    ClassSubscriptionCreate,
    ClassSubscriptionResponse,
    SubscriptionCancelRequest,
)
from fitandflex.schemas.common import ApiResponse, ok
from fitandflex.schemas.user import UserSummary
from fitandflex.services.class_subscription_service import ClassSubscriptionService

router = APIRouter(prefix="/class-subscriptions", tags=["class-subscriptions"])


def _as_list(subscriptions) -> List[ClassSubscriptionResponse]:
    return [ClassSubscriptionResponse.model_validate(s) for s in subscriptions]


@router.post(
    "",
    response_model=ApiResponse[ClassSubscriptionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    subscription_in: ClassSubscriptionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.CREATE)),
):
    ensure_self_or_admin(principal, subscription_in.id_user)
    subscription = ClassSubscriptionService(db).create_subscription(subscription_in, principal)
    return ok(ClassSubscriptionResponse.model_validate(subscription), "Subscription created")


@router.get("/class/{class_id}", response_model=ApiResponse[List[ClassSubscriptionResponse]])
def list_subscriptions_by_class(
    class_id: int,
    active_only: bool = Query(True),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.MANAGE)),
):
    subscriptions = ClassSubscriptionService(db).list_by_class(class_id, active_only=active_only)
    return ok(_as_list(subscriptions), "Subscriptions retrieved")


@router.get("/class/{class_id}/users", response_model=ApiResponse[List[UserSummary]])
def list_users_by_class(
    class_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.MANAGE)),
):
    users = ClassSubscriptionService(db).list_users_by_class(class_id)
    return ok([UserSummary.model_validate(u) for u in users], "Subscribed users retrieved")


@router.get("/user/{user_id}", response_model=ApiResponse[List[ClassSubscriptionResponse]])
def list_subscriptions_by_user(
    user_id: int,
    active_only: bool = Query(True),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    subscriptions = ClassSubscriptionService(db).list_by_user(user_id, active_only=active_only)
    return ok(_as_list(subscriptions), "Subscriptions retrieved")


@router.put("/cancel-date", response_model=ApiResponse[int])
def cancel_subscriptions_for_date(
    payload: SubscriptionCancelRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.CANCEL)),
):
    ensure_self_or_admin(principal, payload.id_user)
    canceled = ClassSubscriptionService(db).cancel_for_date(payload)
    return ok(canceled, "Subscriptions canceled")


@router.put("/{subscription_id}/cancel", response_model=ApiResponse[ClassSubscriptionResponse])
def cancel_subscription(
    subscription_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.CANCEL)),
):
    service = ClassSubscriptionService(db)
    ensure_self_or_admin(principal, service.get_subscription(subscription_id).id_user)
    subscription = service.cancel_subscription(subscription_id)
    return ok(ClassSubscriptionResponse.model_validate(subscription), "Subscription canceled")


@router.delete("/{subscription_id}", response_model=ApiResponse[None])
def delete_subscription(
    subscription_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.SUBSCRIPTION, Action.DELETE)),
):
    ClassSubscriptionService(db).delete_subscription(subscription_id)
    return ok(None, "Subscription deleted")
