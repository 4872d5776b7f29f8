from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.exceptions import BusinessRuleError, FieldValidationError
from app.db.database import get_db
from app.models.catalog import Product
from app.models.finance import SalesRecord
from app.models.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.finance import (
    MAX_YEAR,
    MIN_YEAR,
    SalesLineOut,
    SalesListResponse,
    SalesRecordCreate,
    SalesRecordOut,
    SalesRecordUpdate,
    StatsOut,
)
from app.services.costing import quantize_money
from app.services.ownership import get_owned, get_owned_product
from app.services.reporting import SalesLine, profit_stats, resolve_period, sales_lines, sales_periods, sales_summary

router = APIRouter(tags=["Sales"])

RECORD_NOT_FOUND = "Sales record not found"


def _line_out(line: SalesLine) -> SalesLineOut:
    return SalesLineOut(
        **SalesRecordOut.model_validate(line.record).model_dump(),
        product_name=line.product_name,
        sub_total=line.sub_total,
        profit_unit=line.profit_unit,
        profit_percentage=line.profit_percentage,
        total_profit=line.total_profit,
        profit_contribution_percentage=line.profit_contribution_percentage,
    )


def _period_records(db: Session, current_user: User, year: int, month: int) -> list[SalesRecord]:
    return list(
        db.scalars(
            select(SalesRecord)
            .where(
                SalesRecord.user_id == current_user.id,
                SalesRecord.year == year,
                SalesRecord.month == month,
            )
            .order_by(SalesRecord.id.asc())
        ).all()
    )


def _ensure_period_free(
    db: Session,
    current_user: User,
    *,
    product_id: int,
    year: int,
    month: int,
    exclude_id: int | None = None,
) -> None:
    query = select(SalesRecord.id).where(
        SalesRecord.user_id == current_user.id,
        SalesRecord.product_id == product_id,
        SalesRecord.year == year,
        SalesRecord.month == month,
    )
    if exclude_id is not None:
        query = query.where(SalesRecord.id != exclude_id)
    if db.scalar(query) is not None:
        raise BusinessRuleError(
            "Sales for this product already exist in the selected period",
            errors={"product_id": ["This product already has sales recorded for the selected month."]},
        )


def _snapshot_price(value, product: Product, field: str):
    if value is not None:
        return quantize_money(value)
    current = getattr(product, field)
    if current is None:
        raise FieldValidationError(field, f"The {field} field is required when the product has none.")
    return current


@router.get("/sales", response_model=SalesListResponse)
def list_sales(
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    month: int | None = Query(default=None, ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    lines = sales_lines(db, _period_records(db, current_user, year, month))
    available_years, available_months = sales_periods(db, current_user, year)
    return {
        "success": True,
        "message": "Sales retrieved",
        "data": [_line_out(line) for line in lines],
        "summary": sales_summary(lines),
        "filters": {
            "available_years": available_years,
            "available_months": available_months,
            "current_year": year,
            "current_month": month,
        },
    }


@router.post("/sales", response_model=ApiResponse[SalesRecordOut], status_code=status.HTTP_201_CREATED)
def create_sales_record(
    payload: SalesRecordCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = get_owned_product(db, payload.product_id, current_user)
    _ensure_period_free(db, current_user, product_id=product.id, year=payload.year, month=payload.month)

    record = SalesRecord(
        user_id=current_user.id,
        product_id=product.id,
        year=payload.year,
        month=payload.month,
        number_of_sales=payload.number_of_sales,
        hpp=_snapshot_price(payload.hpp, product, "hpp"),
        selling_price=_snapshot_price(payload.selling_price, product, "selling_price"),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return {"success": True, "message": "Sales saved", "data": record}


@router.get("/sales/{record_id}", response_model=ApiResponse[SalesLineOut])
def get_sales_record(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = get_owned(db, SalesRecord, record_id, current_user, detail=RECORD_NOT_FOUND)
    lines = sales_lines(db, _period_records(db, current_user, record.year, record.month))
    line = next(line for line in lines if line.record.id == record.id)
    return {"success": True, "data": _line_out(line)}


@router.put("/sales/{record_id}", response_model=ApiResponse[SalesRecordOut])
def update_sales_record(
    record_id: int,
    payload: SalesRecordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = get_owned(db, SalesRecord, record_id, current_user, detail=RECORD_NOT_FOUND)

    product_id = record.product_id
    if payload.product_id is not None:
        product_id = get_owned_product(db, payload.product_id, current_user).id
    year = payload.year if payload.year is not None else record.year
    month = payload.month if payload.month is not None else record.month
    _ensure_period_free(db, current_user, product_id=product_id, year=year, month=month, exclude_id=record.id)

    record.product_id = product_id
    record.year = year
    record.month = month
    if payload.number_of_sales is not None:
        record.number_of_sales = payload.number_of_sales
    if payload.hpp is not None:
        record.hpp = quantize_money(payload.hpp)
    if payload.selling_price is not None:
        record.selling_price = quantize_money(payload.selling_price)

    db.commit()
    db.refresh(record)
    return {"success": True, "message": "Sales updated", "data": record}


@router.delete("/sales/{record_id}", response_model=MessageResponse)
def delete_sales_record(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = get_owned(db, SalesRecord, record_id, current_user, detail=RECORD_NOT_FOUND)
    db.delete(record)
    db.commit()
    return MessageResponse(message="Sales deleted")


@router.get("/stats", response_model=ApiResponse[StatsOut], tags=["Stats"])
def get_stats(
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    month: int | None = Query(default=None, ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    stats = profit_stats(db, current_user, year=year, month=month)
    available_years, available_months = sales_periods(db, current_user, year)
    return {
        "success": True,
        "data": {
            "total_sales": float(stats.total_sales),
            "total_cost": float(stats.total_cost),
            "total_variable_cost": float(stats.total_variable_cost),
            "total_operational_cost": float(stats.total_operational_cost),
            "total_salary_expenses": float(stats.total_salary_expenses),
            "gross_profit": float(stats.gross_profit),
            "net_profit": float(stats.net_profit),
            "year": year,
            "month": month,
            "availableYears": available_years,
            "availableMonths": available_months,
        },
    }
