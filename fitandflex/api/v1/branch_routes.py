"""API routes for branches."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, require_permission
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.schemas.branch import BranchCreate, BranchResponse, BranchUpdate
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.services.branch_service import BranchService

router = APIRouter(prefix="/branches", tags=["branches"])


@router.get("", response_model=ApiResponse[Page[BranchResponse]])
def list_branches(
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.READ)),
):
    items, total = BranchService(db).list_branches(params)
    return ok(page_of(BranchResponse, items, total, params), "Branches retrieved")


@router.get("/count", response_model=ApiResponse[int])
def count_branches(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.READ)),
):
    return ok(BranchService(db).count_branches(), "Branch count retrieved")


@router.get("/name/{name}", response_model=ApiResponse[BranchResponse])
def get_branch_by_name(
    name: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.READ)),
):
    branch = BranchService(db).get_branch_by_name(name)
    return ok(BranchResponse.model_validate(branch), "Branch retrieved")


@router.get("/city/{city}", response_model=ApiResponse[List[BranchResponse]])
def list_branches_by_city(
    city: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.READ)),
):
    branches = BranchService(db).list_branches_by_city(city)
    return ok([BranchResponse.model_validate(b) for b in branches], "Branches retrieved")


@router.get("/{branch_id}", response_model=ApiResponse[BranchResponse])
def get_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.READ)),
):
    branch = BranchService(db).get_branch(branch_id)
    return ok(BranchResponse.model_validate(branch), "Branch retrieved")


@router.post("", response_model=ApiResponse[BranchResponse], status_code=status.HTTP_201_CREATED)
def create_branch(
    branch_in: BranchCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.CREATE)),
):
    branch = BranchService(db).create_branch(branch_in)
    return ok(BranchResponse.model_validate(branch), "Branch created")


@router.put("/{branch_id}", response_model=ApiResponse[BranchResponse])
def update_branch(
    branch_id: int,
    branch_in: BranchUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.UPDATE)),
):
    branch = BranchService(db).update_branch(branch_id, branch_in)
    return ok(BranchResponse.model_validate(branch), "Branch updated")


@router.delete("/{branch_id}", response_model=ApiResponse[None])
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.BRANCH, Action.DELETE)),
):
    BranchService(db).delete_branch(branch_id)
    return ok(None, "Branch deleted")
