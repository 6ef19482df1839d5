"""API routes for users."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import (
    Principal,
    ensure_branch_access,
    ensure_self_or_admin,
    get_current_user,
    require_permission,
)
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.user import PasswordChangeRequest, UserCreate, UserResponse, UserUpdate
from fitandflex.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=ApiResponse[Page[UserResponse]])
def list_users(
    branch_id: Optional[int] = Query(None, description="Filter users by branch"),
    role: Optional[str] = Query(None, description="Filter users by role name"),
    active: Optional[bool] = Query(None, description="Filter users by active flag"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.MANAGE)),
):
    if not principal.is_super_admin and principal.branch_id is not None:
        branch_id = principal.branch_id
    items, total = UserService(db).list_users(
        params, branch_id=branch_id, role_name=role, active=active
    )
    return ok(page_of(UserResponse, items, total, params), "Users retrieved")


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(db: Session = Depends(get_db), principal: Principal = Depends(get_current_user)):
    user = UserService(db).get_user(principal.user_id)
    return ok(UserResponse.model_validate(user), "User retrieved")


@router.get("/email/{email}", response_model=ApiResponse[UserResponse])
def get_user_by_email(
    email: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.MANAGE)),
):
    user = UserService(db).get_user_by_email(email)
    ensure_branch_access(principal, user.id_branch)
    return ok(UserResponse.model_validate(user), "User retrieved")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.READ)),
):
    ensure_self_or_admin(principal, user_id)
    user = UserService(db).get_user(user_id)
    ensure_branch_access(principal, user.id_branch)
    return ok(UserResponse.model_validate(user), "User retrieved")


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.CREATE)),
):
    ensure_branch_access(principal, user_in.id_branch)
    user = UserService(db).create_user(user_in)
    return ok(UserResponse.model_validate(user), "User created")


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.UPDATE)),
):
    ensure_self_or_admin(principal, user_id)
    if not principal.is_admin:
        # Members may edit their profile but not their role or branch
        user_in = UserUpdate(
            **user_in.model_dump(exclude_unset=True, exclude={"role", "id_branch"})
        )
    service = UserService(db)
    ensure_branch_access(principal, service.get_user(user_id).id_branch)
    user = service.update_user(user_id, user_in)
    return ok(UserResponse.model_validate(user), "User updated")


@router.put("/{user_id}/password", response_model=ApiResponse[None])
def change_password(
    user_id: int,
    payload: PasswordChangeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.UPDATE)),
):
    ensure_self_or_admin(principal, user_id)
    UserService(db).change_password(user_id, payload)
    return ok(None, "Password updated")


@router.put("/{user_id}/activate", response_model=ApiResponse[UserResponse])
def activate_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.MANAGE)),
):
    service = UserService(db)
    ensure_branch_access(principal, service.get_user(user_id).id_branch)
    return ok(UserResponse.model_validate(service.set_active(user_id, True)), "User activated")


@router.put("/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.MANAGE)),
):
    service = UserService(db)
    ensure_branch_access(principal, service.get_user(user_id).id_branch)
    return ok(UserResponse.model_validate(service.set_active(user_id, False)), "User deactivated")


@router.delete("/{user_id}", response_model=ApiResponse[UserResponse])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.USER, Action.DELETE)),
):
    """Soft delete: the account is deactivated, history is kept."""
    service = UserService(db)
    ensure_branch_access(principal, service.get_user(user_id).id_branch)
    return ok(UserResponse.model_validate(service.set_active(user_id, False)), "User deleted")
