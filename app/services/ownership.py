from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.catalog import Product, ProductCost
from app.models.user import User

ModelT = TypeVar("ModelT")

PRODUCT_NOT_FOUND = "Product not found or not yours"


def get_owned(db: Session, model: type[ModelT], object_id: int, user: User, *, detail: str) -> ModelT:
    """Load a row owned by ``user``; a row owned by anyone else is reported exactly like a missing one."""
    instance = db.get(model, object_id)
    if instance is None or instance.user_id != user.id:
        raise NotFoundError(detail)
    return instance


def get_owned_product(db: Session, product_id: int, user: User) -> Product:
    return get_owned(db, Product, product_id, user, detail=PRODUCT_NOT_FOUND)


def resolve_listing_product(db: Session, user: User, product_id: int | None) -> Product | None:
    """Pick the product a listing is scoped to: the requested one, else the caller's earliest product."""
    if product_id is not None:
        return get_owned_product(db, product_id, user)
    return db.scalar(
        select(Product)
        .where(Product.user_id == user.id)
        .order_by(Product.created_at.asc(), Product.id.asc())
        .limit(1)
    )


def get_owned_cost_line(db: Session, line_id: int, user: User) -> tuple[ProductCost, Product]:
    # Cost lines carry no owner column; a line under someone else's product is a 403, not a 404.
    line = db.get(ProductCost, line_id)
    if line is None:
        raise NotFoundError("Product cost not found")
    product = db.get(Product, line.product_id)
    if product is None or product.user_id != user.id:
        raise ForbiddenError(PRODUCT_NOT_FOUND)
    return line, product
