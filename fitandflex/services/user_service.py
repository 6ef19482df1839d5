from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import RoleName
from fitandflex.core.security import hash_password, verify_password
from fitandflex.models.user import User
from fitandflex.repository import branch_repository, user_repository
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.user import PasswordChangeRequest, UserCreate, UserUpdate
from fitandflex.services.role_service import RoleService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_branch_exists(self, branch_id: Optional[int]) -> None:
        if branch_id is not None and branch_repository.get_branch(self.db, branch_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Branch {branch_id} not found",
            )

    def _ensure_email_available(self, email: str, *, exclude_id: Optional[int] = None) -> None:
        existing = user_repository.get_user_by_email(self.db, email)
        if existing is not None and existing.id_user != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Email {email} is already registered",
            )

    def get_user(self, user_id: int) -> User:
        user = user_repository.get_user(self.db, user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found",
            )
        return user

    def get_user_by_email(self, email: str) -> User:
        user = user_repository.get_user_by_email(self.db, email)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User with email {email} not found",
            )
        return user

    def list_users(
        self,
        params: PageParams,
        *,
        branch_id: Optional[int] = None,
        role_name: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[User], int]:
        return user_repository.list_users(
            self.db,
            params,
            branch_id=branch_id,
            role_name=role_name.upper() if role_name else None,
            active=active,
        )

    def create_user(self, payload: UserCreate) -> User:
        self._ensure_email_available(payload.email)
        role = RoleService(self.db).get_role_by_name(payload.role)
        self._ensure_branch_exists(payload.id_branch)

        user = User(
            name=payload.name,
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            phone=payload.phone,
            gender=payload.gender,
            birth_date=payload.birth_date,
            active=True,
            id_role=role.id_role,
            id_branch=payload.id_branch,
        )
        user_repository.create_user(self.db, user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s created with role %s", user.email, role.name)
        return user

    def ensure_super_admin(self, *, email: str, password: str, name: str) -> User:
        """Create the bootstrap SUPER_ADMIN account unless the email is taken."""
        existing = user_repository.get_user_by_email(self.db, email)
        if existing is not None:
            return existing
        return self.create_user(
            UserCreate(
                name=name,
                email=email,
                password=password,
                role=RoleName.SUPER_ADMIN.value,
            )
        )

    def update_user(self, user_id: int, payload: UserUpdate) -> User:
        user = self.get_user(user_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return user

        if "email" in update_data and update_data["email"]:
            update_data["email"] = update_data["email"].lower()
            self._ensure_email_available(update_data["email"], exclude_id=user.id_user)

        role_name = update_data.pop("role", None)
        if role_name:
            user.id_role = RoleService(self.db).get_role_by_name(role_name).id_role

        if "id_branch" in update_data:
            self._ensure_branch_exists(update_data["id_branch"])

        for field, value in update_data.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user_id: int, payload: PasswordChangeRequest) -> None:
        user = self.get_user(user_id)
        if not verify_password(payload.current_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect",
            )
        user.password_hash = hash_password(payload.new_password)
        self.db.commit()
        logger.info("Password changed for user %s", user_id)

    def set_active(self, user_id: int, active: bool) -> User:
        user = self.get_user(user_id)
        user.active = active
        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s %s", user_id, "activated" if active else "deactivated")
        return user


__all__ = ["UserService"]
