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
    ExpenseCategoryCreate,
    ExpenseCategoryListResponse,
    ExpenseCategoryOut,
    ExpenseCategoryTotalsOut,
    ExpenseCategoryUpdate,
)
from app.services.ownership import get_owned
from app.services.reporting import category_totals, expense_totals, money_string

router = APIRouter(prefix="/expense-categories", tags=["Expense Categories"])

CATEGORY_NOT_FOUND = "Expense category not found"


def _get_category(db: Session, category_id: int, current_user: User) -> ExpenseCategory:
    return get_owned(db, ExpenseCategory, category_id, current_user, detail=CATEGORY_NOT_FOUND)


def _with_totals(category: ExpenseCategory, total, count: int) -> ExpenseCategoryTotalsOut:
    return ExpenseCategoryTotalsOut(
        **ExpenseCategoryOut.model_validate(category).model_dump(),
        total_amount=money_string(total),
        total_employees=count if category.is_salary else None,
    )


@router.get("", response_model=ExpenseCategoryListResponse)
def list_expense_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    categories = list(
        db.scalars(
            select(ExpenseCategory)
            .where(ExpenseCategory.user_id == current_user.id)
            .order_by(ExpenseCategory.id.asc())
        ).all()
    )
    totals = category_totals(db, current_user, [category.id for category in categories])
    summary = expense_totals(db, current_user)
    return {
        "success": True,
        "message": "Expense categories retrieved",
        "data": [_with_totals(category, *totals[category.id]) for category in categories],
        "summary": {
            "total_salary": money_string(summary.total_salary),
            "total_operational": money_string(summary.total_operational),
            "grand_total": money_string(summary.grand_total),
        },
    }


@router.post("", response_model=ApiResponse[ExpenseCategoryOut], status_code=status.HTTP_201_CREATED)
def create_expense_category(
    payload: ExpenseCategoryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = ExpenseCategory(
        user_id=current_user.id,
        name=payload.name.strip(),
        description=payload.description,
        is_salary=payload.is_salary,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return {"success": True, "message": "Expense category created", "data": category}


@router.get("/{category_id}", response_model=ApiResponse[ExpenseCategoryTotalsOut])
def get_expense_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = _get_category(db, category_id, current_user)
    total, count = category_totals(db, current_user, [category.id])[category.id]
    return {"success": True, "data": _with_totals(category, total, count)}


@router.put("/{category_id}", response_model=ApiResponse[ExpenseCategoryOut])
def update_expense_category(
    category_id: int,
    payload: ExpenseCategoryUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = _get_category(db, category_id, current_user)

    if payload.name is not None:
        category.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        category.description = payload.description
    if payload.is_salary is not None:
        category.is_salary = payload.is_salary

    db.commit()
    db.refresh(category)
    return {"success": True, "message": "Expense category updated", "data": category}


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_expense_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = _get_category(db, category_id, current_user)
    in_use = db.scalar(
        select(OperationalExpense.id).where(OperationalExpense.expense_category_id == category.id).limit(1)
    )
    if in_use is not None:
        raise BusinessRuleError("Expense category still has operational expenses and cannot be deleted")

    db.delete(category)
    db.commit()
    return MessageResponse(message="Expense category deleted")
