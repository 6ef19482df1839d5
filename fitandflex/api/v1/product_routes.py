"""API routes for membership products."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fitandflex.core.permissions import Action, Resource
from fitandflex.core.security import Principal, ensure_branch_access, require_permission
from fitandflex.dependencies import get_db, get_page_params
from fitandflex.schemas.common import ApiResponse, Page, PageParams, ok, page_of
from fitandflex.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from fitandflex.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ApiResponse[Page[ProductResponse]])
def list_products(
    branch_id: Optional[int] = Query(None),
    active: Optional[bool] = Query(None),
    name: Optional[str] = Query(None, description="Case-insensitive name fragment"),
    category: Optional[str] = Query(None),
    membership_type: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PRODUCT, Action.READ)),
):
    items, total = ProductService(db).list_products(
        params,
        branch_id=branch_id,
        active=active,
        name=name,
        category=category,
        membership_type=membership_type,
        min_price=min_price,
        max_price=max_price,
    )
    return ok(page_of(ProductResponse, items, total, params), "Products retrieved")


@router.get("/sku/{sku}", response_model=ApiResponse[ProductResponse])
def get_product_by_sku(
    sku: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PRODUCT, Action.READ)),
):
    product = ProductService(db).get_product_by_sku(sku.upper())
    return ok(ProductResponse.model_validate(product), "Product retrieved")


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_permission(Resource.PRODUCT, Action.READ)),
):
    product = ProductService(db).get_product(product_id)
    return ok(ProductResponse.model_validate(product), "Product retrieved")


@router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
def create_product(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PRODUCT, Action.CREATE)),
):
    ensure_branch_access(principal, product_in.id_branch)
    product = ProductService(db).create_product(product_in)
    return ok(ProductResponse.model_validate(product), "Product created")


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PRODUCT, Action.UPDATE)),
):
    service = ProductService(db)
    ensure_branch_access(principal, service.get_product(product_id).id_branch)
    product = service.update_product(product_id, product_in)
    return ok(ProductResponse.model_validate(product), "Product updated")


@router.put("/{product_id}/activate", response_model=ApiResponse[ProductResponse])
def activate_product(
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PRODUCT, Action.UPDATE)),
):
    service = ProductService(db)
    ensure_branch_access(principal, service.get_product(product_id).id_branch)
    return ok(ProductResponse.model_validate(service.set_active(product_id, True)), "Product activated")


@router.put("/{product_id}/deactivate", response_model=ApiResponse[ProductResponse])
def deactivate_product(
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PRODUCT, Action.UPDATE)),
):
    service = ProductService(db)
    ensure_branch_access(principal, service.get_product(product_id).id_branch)
    return ok(
        ProductResponse.model_validate(service.set_active(product_id, False)), "Product deactivated"
    )


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission(Resource.PRODUCT, Action.DELETE)),
):
    service = ProductService(db)
    ensure_branch_access(principal, service.get_product(product_id).id_branch)
    service.delete_product(product_id)
    return ok(None, "Product deleted")
