from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from fitandflex.models.branch import Branch
from fitandflex.models.user import User
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": Branch.id_branch,
    "name": Branch.name,
    "city": Branch.city,
    "created_at": Branch.created_at,
}


def get_branch(db: Session, branch_id: int) -> Optional[Branch]:
    return db.query(Branch).filter(Branch.id_branch == branch_id).first()


def get_branch_by_name(db: Session, name: str) -> Optional[Branch]:
    return db.query(Branch).filter(func.lower(Branch.name) == name.lower()).first()


def list_branches(db: Session, params: PageParams) -> Tuple[List[Branch], int]:
    return paginate(db.query(Branch), params, _SORTABLE, Branch.id_branch)


def list_branches_by_city(db: Session, city: str) -> List[Branch]:
    return (
        db.query(Branch)
        .filter(func.lower(Branch.city) == city.lower())
        .order_by(Branch.name.asc())
        .all()
    )


def count_branches(db: Session) -> int:
    return db.query(func.count(Branch.id_branch)).scalar() or 0


def branch_has_users(db: Session, branch_id: int) -> bool:
    return db.query(User.id_user).filter(User.id_branch == branch_id).first() is not None


def create_branch(db: Session, branch: Branch) -> Branch:
    db.add(branch)
    db.flush()
    return branch


def delete_branch(db: Session, branch: Branch) -> None:
    db.delete(branch)
