from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.exceptions import BusinessRuleError, FieldValidationError, ForbiddenError
from app.db.database import atomic, get_db
from app.models.catalog import PriceScheme, Product, ProductCost
from app.models.finance import SalesRecord
from app.models.user import User
from app.schemas.catalog import ProductCreate, ProductListResponse, ProductOut, ProductUpdate
from app.schemas.common import ApiResponse, MessageResponse
from app.services.ownership import get_owned_product

router = APIRouter(prefix="/products", tags=["Products"])

SKU_TAKEN = "The sku has already been taken."


def _ensure_sku_available(db: Session, sku: str, exclude_id: int | None = None) -> None:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    if db.scalar(query) is not None:
        raise FieldValidationError("sku", SKU_TAKEN)


@router.get("", response_model=ProductListResponse)
def list_products(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    products = list(
        db.scalars(
            select(Product)
            .where(Product.user_id == current_user.id)
            .order_by(Product.created_at.desc(), Product.id.desc())
        ).all()
    )
    if not products:
        return {"success": False, "message": "Products not found.", "data": [], "stats": {"total_products": 0}}
    return {
        "success": True,
        "message": "Products retrieved",
        "data": products,
        "stats": {"total_products": len(products)},
    }


@router.post("", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.user_id is not None and payload.user_id != current_user.id:
        raise ForbiddenError("Products can only be created for your own account")

    sku = payload.sku.strip()
    _ensure_sku_available(db, sku)
    product = Product(
        user_id=current_user.id,
        name=payload.name.strip(),
        sku=sku,
        description=payload.description,
    )
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise FieldValidationError("sku", SKU_TAKEN) from exc
    db.refresh(product)
    return {"success": True, "message": "Product created", "data": product}


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, product_id, current_user)
    return {"success": True, "message": "Product detail", "data": product}


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, product_id, current_user)

    if payload.sku is not None:
        sku = payload.sku.strip()
        _ensure_sku_available(db, sku, exclude_id=product.id)
        product.sku = sku
    if payload.name is not None:
        product.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        product.description = payload.description

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise FieldValidationError("sku", SKU_TAKEN) from exc
    db.refresh(product)
    return {"success": True, "message": "Product updated", "data": product}


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, product_id, current_user)
    has_sales = db.scalar(select(SalesRecord.id).where(SalesRecord.product_id == product.id).limit(1))
    if has_sales is not None:
        raise BusinessRuleError("Product has sales records and cannot be deleted")

    with atomic(db):
        db.execute(delete(PriceScheme).where(PriceScheme.product_id == product.id))
        db.execute(delete(ProductCost).where(ProductCost.product_id == product.id))
        db.delete(product)
    return MessageResponse(message="Product deleted")
