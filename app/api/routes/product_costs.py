from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.database import atomic, get_db
from app.models.catalog import ProductCost
from app.models.user import User
from app.schemas.catalog import (
    CostLineInput,
    ProductCostCreate,
    ProductCostListResponse,
    ProductCostResponse,
    ProductOut,
)
from app.schemas.common import ApiResponse
from app.services.costing import add_cost_lines, delete_cost_line, update_cost_line
from app.services.ownership import get_owned_cost_line, get_owned_product, resolve_listing_product
from app.services.pricing import reanchor_chain

router = APIRouter(prefix="/hpp", tags=["HPP"])


@router.get("", response_model=ProductCostListResponse)
def list_product_costs(
    product_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = resolve_listing_product(db, current_user, product_id)
    if product is None:
        return {"success": False, "message": "No products linked yet", "data": []}

    lines = list(
        db.scalars(
            select(ProductCost).where(ProductCost.product_id == product.id).order_by(ProductCost.id.asc())
        ).all()
    )
    if not lines:
        return {
            "success": False,
            "message": "Cost components for this product are empty",
            "data": [],
            "product": product,
        }
    return {"success": True, "message": "Product costs retrieved", "data": lines, "product": product}


@router.post("", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
def create_product_costs(
    payload: ProductCostCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, payload.product_id, current_user)
    with atomic(db):
        add_cost_lines(db, current_user, product, payload.costs)
        reanchor_chain(db, product)
    db.refresh(product)
    return {"success": True, "message": "HPP saved", "data": product}


@router.get("/{line_id}", response_model=ProductCostResponse)
def get_product_cost(
    line_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if db.get(ProductCost, line_id) is None:
        return {"success": False, "message": "Product cost not found", "data": None}
    line, product = get_owned_cost_line(db, line_id, current_user)
    return {"success": True, "message": "Product cost detail", "data": line, "product": product}


@router.put("/{line_id}", response_model=ProductCostResponse)
def update_product_cost(
    line_id: int,
    payload: CostLineInput,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    line, product = get_owned_cost_line(db, line_id, current_user)
    with atomic(db):
        update_cost_line(db, current_user, product, line, payload)
        reanchor_chain(db, product)
    db.refresh(line)
    db.refresh(product)
    return {"success": True, "message": "Product cost updated", "data": line, "product": product}


@router.delete("/{line_id}", response_model=ApiResponse[ProductOut])
def delete_product_cost(
    line_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    line, product = get_owned_cost_line(db, line_id, current_user)
    with atomic(db):
        delete_cost_line(db, product, line)
        reanchor_chain(db, product)
    db.refresh(product)
    return {"success": True, "message": "Product cost deleted", "data": product}
