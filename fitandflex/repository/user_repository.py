from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from fitandflex.models.role import Role
from fitandflex.models.user import User
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": User.id_user,
    "name": User.name,
    "email": User.email,
    "created_at": User.created_at,
}


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id_user == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def list_users(
    db: Session,
    params: PageParams,
    *,
    branch_id: Optional[int] = None,
    role_name: Optional[str] = None,
    active: Optional[bool] = None,
) -> Tuple[List[User], int]:
    query = db.query(User)
    if branch_id is not None:
        query = query.filter(User.id_branch == branch_id)
    if role_name is not None:
        query = query.join(Role, User.id_role == Role.id_role).filter(Role.name == role_name)
    if active is not None:
        query = query.filter(User.active.is_(active))
    return paginate(query, params, _SORTABLE, User.id_user)


def create_user(db: Session, user: User) -> User:
    db.add(user)
    db.flush()
    return user
