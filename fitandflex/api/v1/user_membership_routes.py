"""API routes for user memberships."""

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
from fitandflex.models.user_membership import MembershipStatus
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.user_membership import (
    ActiveMembershipCheck,
    ExtendRequest,
    MembershipPaymentRequest,
    PendingPaymentsSummary,
    ReconciliationResult,
    StatusChangeRequest,
    UserMembershipCreate,
    UserMembershipResponse,
    UserMembershipUpdate,
)
from fitandflex.services.product_service import ProductService
from fitandflex.services.user_membership_service import UserMembershipService

router = APIRouter(prefix="/user-memberships", tags=["user-memberships"])


def _ensure_membership_branch(
    principal: Principal, service: UserMembershipService, membership_id: int
) -> None:
    ensure_branch_access(principal, service.get_membership(membership_id).product.id_branch)


def _as_list(memberships) -> List[UserMembershipResponse]:
    return [UserMembershipResponse.model_validate(m) for m in memberships]


@router.get("", response_model=ApiResponse[Page[UserMembershipResponse]])
def list_memberships(
    user_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    status_filter: Optional[MembershipStatus] = Query(None, alias="status"),
    branch_id: Optional[int] = Query(None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    items, total = UserMembershipService(db).list_memberships(
        params,
        user_id=user_id,
        product_id=product_id,
        status_filter=status_filter,
        branch_id=branch_id,
    )
    return ok(page_of(UserMembershipResponse, items, total, params), "Memberships retrieved")


@router.get("/expiring", response_model=ApiResponse[List[UserMembershipResponse]])
def list_expiring_memberships(
    days: int = Query(7, ge=0, le=365, description="Look-ahead window in days"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    return ok(_as_list(UserMembershipService(db).list_expiring(days)), "Expiring memberships")


@router.get("/expired", response_model=ApiResponse[List[UserMembershipResponse]])
def list_expired_memberships(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    return ok(_as_list(UserMembershipService(db).list_expired()), "Expired memberships")


@router.post("/expire-overdue", response_model=ApiResponse[ReconciliationResult])
def expire_overdue_memberships(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    """Persist EXPIRED on memberships still stored as ACTIVE past their end date."""
    return ok(UserMembershipService(db).expire_overdue(), "Overdue memberships expired")


@router.get("/branch/{branch_id}", response_model=ApiResponse[Page[UserMembershipResponse]])
def list_memberships_by_branch(
    branch_id: int,
    status_filter: Optional[MembershipStatus] = Query(None, alias="status"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    items, total = UserMembershipService(db).list_memberships(
        params, branch_id=branch_id, status_filter=status_filter
    )
    return ok(page_of(UserMembershipResponse, items, total, params), "Memberships retrieved")


@router.get("/user/{user_id}", response_model=ApiResponse[List[UserMembershipResponse]])
def list_memberships_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    return ok(_as_list(UserMembershipService(db).list_by_user(user_id)), "Memberships retrieved")


@router.get("/user/{user_id}/active", response_model=ApiResponse[List[UserMembershipResponse]])
def list_active_memberships_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    memberships = UserMembershipService(db).list_active_by_user(user_id)
    return ok(_as_list(memberships), "Active memberships retrieved")


@router.get("/user/{user_id}/has-active", response_model=ApiResponse[ActiveMembershipCheck])
def has_active_membership(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    has_active = UserMembershipService(db).has_active_membership(user_id)
    return ok(
        ActiveMembershipCheck(id_user=user_id, has_active_membership=has_active),
        "Membership check completed",
    )


@router.get("/user/{user_id}/summary", response_model=ApiResponse[PendingPaymentsSummary])
def get_pending_payments_summary(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    summary = UserMembershipService(db).pending_payments_summary(user_id)
    return ok(summary, "Pending payments summary retrieved")


@router.get("/{membership_id}", response_model=ApiResponse[UserMembershipResponse])
def get_membership(
    membership_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
):
    membership = UserMembershipService(db).get_membership(membership_id)
    ensure_self_or_admin(principal, membership.id_user)
    return ok(UserMembershipResponse.model_validate(membership), "Membership retrieved")


@router.post(
    "", response_model=ApiResponse[UserMembershipResponse], status_code=status.HTTP_201_CREATED
)
def assign_membership(
    membership_in: UserMembershipCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.CREATE)),
):
    product = ProductService(db).get_product(membership_in.id_product)
    ensure_branch_access(principal, product.id_branch)
    membership = UserMembershipService(db).assign_membership(
        membership_in, assigned_by=principal.user_id
    )
    return ok(UserMembershipResponse.model_validate(membership), "Membership assigned")


@router.put("/{membership_id}", response_model=ApiResponse[UserMembershipResponse])
def update_membership(
    membership_id: int,
    membership_in: UserMembershipUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.UPDATE)),
):
    service = UserMembershipService(db)
    _ensure_membership_branch(principal, service, membership_id)
    membership = service.update_membership(membership_id, membership_in)
    return ok(UserMembershipResponse.model_validate(membership), "Membership updated")


@router.put("/{membership_id}/status", response_model=ApiResponse[UserMembershipResponse])
def change_membership_status(
    membership_id: int,
    payload: StatusChangeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    service = UserMembershipService(db)
    _ensure_membership_branch(principal, service, membership_id)
    membership = service.change_status(membership_id, payload)
    return ok(UserMembershipResponse.model_validate(membership), "Membership status updated")


@router.put("/{membership_id}/extend", response_model=ApiResponse[UserMembershipResponse])
def extend_membership(
    membership_id: int,
    payload: ExtendRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    service = UserMembershipService(db)
    _ensure_membership_branch(principal, service, membership_id)
    membership = service.extend_membership(membership_id, payload)
    return ok(UserMembershipResponse.model_validate(membership), "Membership extended")


@router.post("/{membership_id}/payment", response_model=ApiResponse[UserMembershipResponse])
def add_membership_payment(
    membership_id: int,
    payload: MembershipPaymentRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.MANAGE)),
):
    service = UserMembershipService(db)
    _ensure_membership_branch(principal, service, membership_id)
    membership = service.add_payment(membership_id, payload)
    return ok(UserMembershipResponse.model_validate(membership), "Payment added to membership")


@router.delete("/{membership_id}", response_model=ApiResponse[None])
def delete_membership(
    membership_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.MEMBERSHIP, Action.DELETE)),
):
    service = UserMembershipService(db)
    _ensure_membership_branch(principal, service, membership_id)
    service.delete_membership(membership_id)
    return ok(None, "Membership deleted")
