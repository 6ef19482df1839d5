from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from fitandflex.models.product import Product
from fitandflex.repository.pagination import paginate
from fitandflex.schemas.common import PageParams

_SORTABLE = {
    "id": Product.id_product,
    "name": Product.name,
    "price": Product.price,
    "duration_days": Product.duration_days,
    "created_at": Product.created_at,
}


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id_product == product_id).first()


def get_product_by_sku(db: Session, sku: str) -> Optional[Product]:
    return db.query(Product).filter(Product.sku == sku).first()


def sku_exists(
    db: Session, *, branch_id: int, sku: str, exclude_product_id: Optional[int] = None
) -> bool:
    query = db.query(Product.id_product).filter(
        Product.id_branch == branch_id, func.upper(Product.sku) == sku.upper()
    )
    if exclude_product_id is not None:
        query = query.filter(Product.id_product != exclude_product_id)
    return query.first() is not None


def count_products_in_branch(db: Session, branch_id: int) -> int:
    return (
        db.query(func.count(Product.id_product))
        .filter(Product.id_branch == branch_id)
        .scalar()
        or 0
    )


def list_products(
    db: Session,
    params: PageParams,
    *,
    branch_id: Optional[int] = None,
    active: Optional[bool] = None,
    name: Optional[str] = None,
    category: Optional[str] = None,
    membership_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
) -> Tuple[List[Product], int]:
    query = db.query(Product)
    if branch_id is not None:
        query = query.filter(Product.id_branch == branch_id)
    if active is not None:
        query = query.filter(Product.active.is_(active))
    if name:
        query = query.filter(func.lower(Product.name).contains(name.lower()))
    if category:
        query = query.filter(func.lower(Product.category) == category.lower())
    if membership_type:
        query = query.filter(func.lower(Product.membership_type) == membership_type.lower())
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    return paginate(query, params, _SORTABLE, Product.id_product)


def create_product(db: Session, product: Product) -> Product:
    db.add(product)
    db.flush()
    return product


def delete_product(db: Session, product: Product) -> None:
    db.delete(product)
