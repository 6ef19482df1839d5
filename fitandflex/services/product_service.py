from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.models.product import Product
from fitandflex.repository import branch_repository, product_repository
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def sku_prefix(name: str) -> str:
    prefix = _NON_ALPHANUMERIC.sub("", name)[:3].upper()
    return prefix or "PRD"


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def _generate_sku(self, name: str, branch_id: int) -> str:
        prefix = sku_prefix(name)
        sequence = product_repository.count_products_in_branch(self.db, branch_id) + 1
        candidate = f"{prefix}{sequence:04d}"
        while product_repository.sku_exists(self.db, branch_id=branch_id, sku=candidate):
            sequence += 1
            candidate = f"{prefix}{sequence:04d}"
        return candidate

    def _ensure_sku_available(
        self, sku: str, branch_id: int, *, exclude_product_id: Optional[int] = None
    ) -> None:
        if product_repository.sku_exists(
            self.db, branch_id=branch_id, sku=sku, exclude_product_id=exclude_product_id
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A product with SKU '{sku}' already exists in this branch",
            )

    def get_product(self, product_id: int) -> Product:
        product = product_repository.get_product(self.db, product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {product_id} not found",
            )
        return product

    def get_product_by_sku(self, sku: str) -> Product:
        product = product_repository.get_product_by_sku(self.db, sku)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product with SKU '{sku}' not found",
            )
        return product

    def list_products(
        self,
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
        if min_price is not None and max_price is not None and min_price > max_price:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="min_price cannot be greater than max_price",
            )
        return product_repository.list_products(
            self.db,
            params,
            branch_id=branch_id,
            active=active,
            name=name,
            category=category,
            membership_type=membership_type,
            min_price=min_price,
            max_price=max_price,
        )

    def create_product(self, payload: ProductCreate) -> Product:
        if branch_repository.get_branch(self.db, payload.id_branch) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Branch {payload.id_branch} not found",
            )

        data = payload.model_dump()
        if data.get("sku"):
            data["sku"] = data["sku"].strip().upper()
            self._ensure_sku_available(data["sku"], payload.id_branch)
        else:
            data["sku"] = self._generate_sku(payload.name, payload.id_branch)

        product = Product(**data)
        product_repository.create_product(self.db, product)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Product %s (%s) created in branch %s", product.name, product.sku, product.id_branch)
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        product = self.get_product(product_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return product

        if update_data.get("sku"):
            update_data["sku"] = update_data["sku"].strip().upper()
            self._ensure_sku_available(
                update_data["sku"], product.id_branch, exclude_product_id=product.id_product
            )
        elif "sku" in update_data:
            update_data.pop("sku")

        for field, value in update_data.items():
            setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def set_active(self, product_id: int, active: bool) -> Product:
        product = self.get_product(product_id)
        product.active = active
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        if product.active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Active products cannot be deleted; deactivate it first",
            )
        if product.memberships:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product has memberships assigned; deactivate it instead",
            )
        product_repository.delete_product(self.db, product)
        self.db.commit()
        logger.info("Product %s deleted", product_id)


__all__ = ["ProductService", "sku_prefix"]
