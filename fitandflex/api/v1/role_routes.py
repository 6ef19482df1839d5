from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, require_permission
from fitandflex.dependencies import get_db
from fitandflex.schemas.common import ApiResponse, ok
from fitandflex.schemas.role import RoleResponse
from fitandflex.services.role_service import RoleService

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=ApiResponse[List[RoleResponse]])
def list_roles(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.ROLE, Action.READ)),
):
    roles = RoleService(db).list_roles()
    return ok([RoleResponse.model_validate(role) for role in roles], "Roles retrieved")


@router.get("/{role_id}", response_model=ApiResponse[RoleResponse])
def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.ROLE, Action.READ)),
):
    return ok(RoleResponse.model_validate(RoleService(db).get_role(role_id)), "Role retrieved")
