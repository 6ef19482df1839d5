from __future__ import annotations

import logging
from typing import List, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.models.branch import Branch
from fitandflex.repository import branch_repository
from fitandflex.schemas.branch import BranchCreate, BranchUpdate
from fitandflex.schemas.common import PageParams

logger = logging.getLogger(__name__)


class BranchService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_name_available(self, name: str, *, exclude_id: int | None = None) -> None:
        existing = branch_repository.get_branch_by_name(self.db, name)
        if existing is not None and existing.id_branch != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A branch named '{name}' already exists",
            )

    def get_branch(self, branch_id: int) -> Branch:
        branch = branch_repository.get_branch(self.db, branch_id)
        if branch is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Branch {branch_id} not found",
            )
        return branch

    def get_branch_by_name(self, name: str) -> Branch:
        branch = branch_repository.get_branch_by_name(self.db, name)
        if branch is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Branch '{name}' not found",
            )
        return branch

    def list_branches(self, params: PageParams) -> Tuple[List[Branch], int]:
        return branch_repository.list_branches(self.db, params)

    def list_branches_by_city(self, city: str) -> List[Branch]:
        return branch_repository.list_branches_by_city(self.db, city)

    def count_branches(self) -> int:
        return branch_repository.count_branches(self.db)

    def create_branch(self, payload: BranchCreate) -> Branch:
        self._ensure_name_available(payload.name)
        branch = Branch(**payload.model_dump(), active=True)
        branch_repository.create_branch(self.db, branch)
        self.db.commit()
        self.db.refresh(branch)
        logger.info("Branch %s created (id=%s)", branch.name, branch.id_branch)
        return branch

    def update_branch(self, branch_id: int, payload: BranchUpdate) -> Branch:
        branch = self.get_branch(branch_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return branch

        new_name = update_data.get("name")
        if new_name and new_name.lower() != branch.name.lower():
            self._ensure_name_available(new_name, exclude_id=branch.id_branch)

        for field, value in update_data.items():
            setattr(branch, field, value)

        self.db.commit()
        self.db.refresh(branch)
        return branch

    def delete_branch(self, branch_id: int) -> None:
        branch = self.get_branch(branch_id)
        if branch_repository.branch_has_users(self.db, branch_id):
            logger.warning("Refusing to delete branch %s: users still assigned", branch_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete a branch that still has users assigned",
            )
        branch_repository.delete_branch(self.db, branch)
        self.db.commit()
        logger.info("Branch %s deleted", branch_id)


__all__ = ["BranchService"]
