import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import ROLE_DESCRIPTIONS, RoleName
from fitandflex.models.role import Role
from fitandflex.repository import role_repository

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, db: Session):
        self.db = db

    def list_roles(self) -> List[Role]:
        return role_repository.list_roles(self.db)

    def get_role(self, role_id: int) -> Role:
        role = role_repository.get_role(self.db, role_id)
        if role is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Role {role_id} not found",
            )
        return role

    def get_role_by_name(self, name: str) -> Role:
        role = role_repository.get_role_by_name(self.db, name.upper())
        if role is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Role '{name}' not found",
            )
        return role

    def seed_roles(self) -> List[Role]:
        """Create the built-in roles that are missing and return all of them."""
        created = 0
        for role_name in RoleName:
            if role_repository.get_role_by_name(self.db, role_name.value) is None:
                role_repository.create_role(
                    self.db,
                    Role(name=role_name.value, description=ROLE_DESCRIPTIONS[role_name]),
                )
                created += 1
        self.db.commit()
        if created:
            logger.info("Seeded %s roles", created)
        return self.list_roles()


__all__ = ["RoleService"]
