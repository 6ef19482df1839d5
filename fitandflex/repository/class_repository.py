from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from fitandflex.models.fitness_class import FitnessClass
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": FitnessClass.id_class,
    "name": FitnessClass.name,
    "capacity": FitnessClass.capacity,
    "created_at": FitnessClass.created_at,
}


def get_class(db: Session, class_id: int) -> Optional[FitnessClass]:
    return (
        db.query(FitnessClass)
        .options(selectinload(FitnessClass.schedule_patterns))
        .filter(FitnessClass.id_class == class_id)
        .first()
    )


def lock_class(db: Session, class_id: int) -> Optional[FitnessClass]:
    """Load the class row with ``SELECT ... FOR UPDATE`` (ignored by SQLite)."""
    return (
        db.query(FitnessClass)
        .filter(FitnessClass.id_class == class_id)
        .with_for_update()
        .first()
    )


def list_classes(
    db: Session,
    params: PageParams,
    *,
    branch_id: Optional[int] = None,
    active: Optional[bool] = None,
) -> Tuple[List[FitnessClass], int]:
    query = db.query(FitnessClass).options(selectinload(FitnessClass.schedule_patterns))
    if branch_id is not None:
        query = query.filter(FitnessClass.id_branch == branch_id)
    if active is not None:
        query = query.filter(FitnessClass.active.is_(active))
    return paginate(query, params, _SORTABLE, FitnessClass.id_class)


def create_class(db: Session, fitness_class: FitnessClass) -> FitnessClass:
    db.add(fitness_class)
    db.flush()
    return fitness_class
