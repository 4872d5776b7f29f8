from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.exceptions import BusinessRuleError
from app.db.database import get_db
from app.models.catalog import ComponentType, CostComponent
from app.models.user import User
from app.schemas.catalog import (
    CostComponentCreate,
    CostComponentListResponse,
    CostComponentOut,
    CostComponentUpdate,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.services.costing import component_in_use
from app.services.ownership import get_owned

router = APIRouter(prefix="/cost-components", tags=["Cost Components"])

COMPONENT_NOT_FOUND = "Cost component not found"


def _get_component(db: Session, component_id: int, current_user: User) -> CostComponent:
    return get_owned(db, CostComponent, component_id, current_user, detail=COMPONENT_NOT_FOUND)


@router.get("", response_model=CostComponentListResponse)
def list_cost_components(
    component_type: str | None = Query(default=None, alias="type"),
    keyword: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = select(CostComponent).where(CostComponent.user_id == current_user.id)
    meta: dict = {}

    if component_type is not None:
        try:
            parsed_type = ComponentType(component_type.strip().lower())
        except ValueError:
            raise BusinessRuleError("Invalid cost component type", status_code=status.HTTP_400_BAD_REQUEST)
        query = query.where(CostComponent.component_type == parsed_type)
        meta["type"] = parsed_type

    if keyword is not None:
        term = keyword.strip()
        if not term:
            raise BusinessRuleError("Search keyword must not be empty", status_code=status.HTTP_400_BAD_REQUEST)
        pattern = f"%{term}%"
        query = query.where(or_(CostComponent.name.ilike(pattern), CostComponent.description.ilike(pattern)))
        meta["keyword"] = term

    components = list(db.scalars(query.order_by(CostComponent.name.asc(), CostComponent.id.asc())).all())
    return {
        "success": True,
        "message": "Cost components retrieved",
        "data": components,
        "meta": {"total_count": len(components), **meta},
    }


@router.post("", response_model=ApiResponse[CostComponentOut], status_code=status.HTTP_201_CREATED)
def create_cost_component(
    payload: CostComponentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    component = CostComponent(
        user_id=current_user.id,
        name=payload.name.strip(),
        description=payload.description,
        component_type=payload.component_type,
    )
    db.add(component)
    db.commit()
    db.refresh(component)
    return {"success": True, "message": "Cost component created", "data": component}


@router.get("/{component_id}", response_model=ApiResponse[CostComponentOut])
def get_cost_component(
    component_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": _get_component(db, component_id, current_user)}


@router.put("/{component_id}", response_model=ApiResponse[CostComponentOut])
def update_cost_component(
    component_id: int,
    payload: CostComponentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    component = _get_component(db, component_id, current_user)

    if payload.name is not None:
        component.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        component.description = payload.description
    if payload.component_type is not None:
        component.component_type = payload.component_type

    db.commit()
    db.refresh(component)
    return {"success": True, "message": "Cost component updated", "data": component}


@router.delete("/{component_id}", response_model=MessageResponse)
def delete_cost_component(
    component_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    component = _get_component(db, component_id, current_user)
    if component_in_use(db, component):
        raise BusinessRuleError(
            "Cost component cannot be deleted because it is in use",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    db.delete(component)
    db.commit()
    return MessageResponse(message="Cost component deleted")
