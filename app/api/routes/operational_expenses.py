from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.exceptions import BusinessRuleError
from app.db.database import get_db
from app.models.finance import ExpenseCategory, OperationalExpense
from app.models.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.finance import (
    OperationalExpenseCreate,
    OperationalExpenseListResponse,
    OperationalExpenseOut,
    OperationalExpenseUpdate,
)
from app.services.costing import quantize_money
from app.services.ownership import get_owned
from app.services.reporting import expense_breakdown, expense_periods, expense_totals, resolve_period

router = APIRouter(prefix="/operational-expenses", tags=["Operational Expenses"])

EXPENSE_NOT_FOUND = "Operational expense not found"
CATEGORY_NOT_FOUND = "Expense category not found"


def _ensure_period_free(
    db: Session,
    current_user: User,
    *,
    category_id: int,
    year: int,
    month: int,
    exclude_id: int | None = None,
) -> None:
    query = select(OperationalExpense.id).where(
        OperationalExpense.user_id == current_user.id,
        OperationalExpense.expense_category_id == category_id,
        OperationalExpense.year == year,
        OperationalExpense.month == month,
    )
    if exclude_id is not None:
        query = query.where(OperationalExpense.id != exclude_id)
    if db.scalar(query) is not None:
        raise BusinessRuleError(
            "An expense for this category already exists in the selected period",
            errors={"expense_category_id": ["This category already has an expense for the selected month."]},
        )


@router.get("", response_model=OperationalExpenseListResponse)
def list_operational_expenses(
    year: int | None = None,
    month: int | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year, month = resolve_period(year, month)
    expenses = list(
        db.scalars(
            select(OperationalExpense)
            .where(
                OperationalExpense.user_id == current_user.id,
                OperationalExpense.year == year,
                OperationalExpense.month == month,
            )
            .order_by(OperationalExpense.id.asc())
        ).all()
    )
    totals = expense_totals(db, current_user, year=year, month=month)
    available_years, available_months = expense_periods(db, current_user, year)
    return {
        "success": True,
        "message": "Operational expenses retrieved",
        "data": expenses,
        "summary": {
            "details": expense_breakdown(db, current_user, year=year, month=month),
            "total_salary": float(totals.total_salary),
            "total_operational": float(totals.total_operational),
            "grand_total": float(totals.grand_total),
            "total_employees": totals.total_employees,
            "year": year,
            "month": month,
        },
        "filters": {
            "available_years": available_years,
            "available_months": available_months,
            "current_year": year,
            "current_month": month,
        },
    }


@router.post("", response_model=ApiResponse[OperationalExpenseOut], status_code=status.HTTP_201_CREATED)
def create_operational_expense(
    payload: OperationalExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = get_owned(db, ExpenseCategory, payload.expense_category_id, current_user, detail=CATEGORY_NOT_FOUND)
    year, month = resolve_period(payload.year, payload.month)
    _ensure_period_free(db, current_user, category_id=category.id, year=year, month=month)

    expense = OperationalExpense(
        user_id=current_user.id,
        expense_category_id=category.id,
        quantity=payload.quantity,
        unit=payload.unit.strip(),
        amount=quantize_money(payload.amount),
        total_amount=quantize_money(payload.amount * payload.quantity),
        year=year,
        month=month,
        notes=payload.notes,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return {"success": True, "message": "Operational expense created", "data": expense}


@router.get("/{expense_id}", response_model=ApiResponse[OperationalExpenseOut])
def get_operational_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = get_owned(db, OperationalExpense, expense_id, current_user, detail=EXPENSE_NOT_FOUND)
    return {"success": True, "data": expense}


@router.put("/{expense_id}", response_model=ApiResponse[OperationalExpenseOut])
def update_operational_expense(
    expense_id: int,
    payload: OperationalExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = get_owned(db, OperationalExpense, expense_id, current_user, detail=EXPENSE_NOT_FOUND)

    category_id = expense.expense_category_id
    if payload.expense_category_id is not None:
        category_id = get_owned(
            db,
            ExpenseCategory,
            payload.expense_category_id,
            current_user,
            detail=CATEGORY_NOT_FOUND,
        ).id
    year = payload.year if payload.year is not None else expense.year
    month = payload.month if payload.month is not None else expense.month
    _ensure_period_free(db, current_user, category_id=category_id, year=year, month=month, exclude_id=expense.id)

    expense.expense_category_id = category_id
    expense.year = year
    expense.month = month
    if payload.quantity is not None:
        expense.quantity = payload.quantity
    if payload.unit is not None:
        expense.unit = payload.unit.strip()
    if payload.amount is not None:
        expense.amount = quantize_money(payload.amount)
    if "notes" in payload.model_fields_set:
        expense.notes = payload.notes
    expense.total_amount = quantize_money(expense.amount * expense.quantity)

    db.commit()
    db.refresh(expense)
    return {"success": True, "message": "Operational expense updated", "data": expense}


@router.delete("/{expense_id}", response_model=MessageResponse)
def delete_operational_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expense = get_owned(db, OperationalExpense, expense_id, current_user, detail=EXPENSE_NOT_FOUND)
    db.delete(expense)
    db.commit()
    return MessageResponse(message="Operational expense deleted")
