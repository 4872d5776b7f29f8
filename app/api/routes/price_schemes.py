from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.database import atomic, get_db
from app.models.catalog import PriceScheme
from app.models.user import User
from app.schemas.catalog import (
    PriceSchemeCreate,
    PriceSchemeListResponse,
    PriceSchemeResponse,
    PriceSchemeUpdate,
)
from app.services.ownership import get_owned, get_owned_product, resolve_listing_product
from app.services.pricing import create_price_level, delete_price_level, load_chain, update_price_level

router = APIRouter(prefix="/price-schemes", tags=["Price Schemes"])

SCHEME_NOT_FOUND = "Price scheme not found"


def _get_scheme(db: Session, scheme_id: int, current_user: User) -> PriceScheme:
    return get_owned(db, PriceScheme, scheme_id, current_user, detail=SCHEME_NOT_FOUND)


@router.get("", response_model=PriceSchemeListResponse)
def list_price_schemes(
    product_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = resolve_listing_product(db, current_user, product_id)
    if product is None:
        return {"success": False, "message": "No products linked yet", "data": []}
    return {
        "success": True,
        "message": "Price schemes retrieved",
        "data": load_chain(db, product),
        "product": product,
    }


@router.post("", response_model=PriceSchemeResponse, status_code=status.HTTP_201_CREATED)
def create_price_scheme(
    payload: PriceSchemeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, payload.product_id, current_user)
    with atomic(db):
        scheme = create_price_level(db, current_user, product, payload)
    db.refresh(scheme)
    db.refresh(product)
    return {"success": True, "message": "Price scheme saved", "data": scheme, "product": product}


@router.get("/{scheme_id}", response_model=PriceSchemeResponse)
def get_price_scheme(
    scheme_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scheme = _get_scheme(db, scheme_id, current_user)
    product = get_owned_product(db, scheme.product_id, current_user)
    return {"success": True, "message": "Price scheme detail", "data": scheme, "product": product}


@router.put("/{scheme_id}", response_model=PriceSchemeResponse)
def update_price_scheme(
    scheme_id: int,
    payload: PriceSchemeUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scheme = _get_scheme(db, scheme_id, current_user)
    product = get_owned_product(db, scheme.product_id, current_user)
    with atomic(db):
        update_price_level(db, product, scheme, payload)
    db.refresh(scheme)
    db.refresh(product)
    return {"success": True, "message": "Price scheme updated", "data": scheme, "product": product}


@router.delete("/{scheme_id}", response_model=PriceSchemeListResponse)
def delete_price_scheme(
    scheme_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scheme = _get_scheme(db, scheme_id, current_user)
    product = get_owned_product(db, scheme.product_id, current_user)
    with atomic(db):
        delete_price_level(db, product, scheme)
    db.refresh(product)
    return {
        "success": True,
        "message": "Price scheme deleted",
        "data": load_chain(db, product),
        "product": product,
    }
