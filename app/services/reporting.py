from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from app.models.catalog import Product
from app.models.finance import ExpenseCategory, OperationalExpense, SalesRecord
from app.models.user import User
from app.services.costing import quantize_money

ZERO = Decimal("0.00")


def money_string(value) -> str:
    return format(quantize_money(value or 0), ".2f")


def resolve_period(year: int | None, month: int | None) -> tuple[int, int]:
    """Fill a missing year or month from today's date."""
    today = datetime.utcnow()
    return (year if year is not None else today.year, month if month is not None else today.month)


@dataclass(frozen=True)
class ExpenseTotals:
    total_salary: Decimal
    total_operational: Decimal
    total_employees: int

    @property
    def grand_total(self) -> Decimal:
        return self.total_salary + self.total_operational


@dataclass(frozen=True)
class SalesLine:
    record: SalesRecord
    product_name: str | None
    sub_total: Decimal
    profit_unit: Decimal
    profit_percentage: int
    total_profit: Decimal
    profit_contribution_percentage: float


@dataclass(frozen=True)
class ProfitStats:
    total_sales: Decimal
    total_variable_cost: Decimal
    total_operational_cost: Decimal
    total_salary_expenses: Decimal

    @property
    def total_cost(self) -> Decimal:
        return self.total_variable_cost + self.total_operational_cost + self.total_salary_expenses

    @property
    def gross_profit(self) -> Decimal:
        return self.total_sales - self.total_variable_cost

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.total_operational_cost - self.total_salary_expenses


def _expense_scope(query, user: User, year: int | None, month: int | None):
    query = query.where(OperationalExpense.user_id == user.id)
    if year is not None:
        query = query.where(OperationalExpense.year == year)
    if month is not None:
        query = query.where(OperationalExpense.month == month)
    return query


def expense_totals(db: Session, user: User, *, year: int | None = None, month: int | None = None) -> ExpenseTotals:
    """Salary vs operational totals, split on the category's ``is_salary`` flag."""
    query = _expense_scope(
        select(
            func.coalesce(
                func.sum(case((ExpenseCategory.is_salary.is_(True), OperationalExpense.total_amount), else_=0)),
                0,
            ),
            func.coalesce(
                func.sum(case((ExpenseCategory.is_salary.is_(False), OperationalExpense.total_amount), else_=0)),
                0,
            ),
            func.count(case((ExpenseCategory.is_salary.is_(True), OperationalExpense.id))),
        ).join(ExpenseCategory, ExpenseCategory.id == OperationalExpense.expense_category_id),
        user,
        year,
        month,
    )
    salary, operational, employees = db.execute(query).one()
    return ExpenseTotals(
        total_salary=quantize_money(salary),
        total_operational=quantize_money(operational),
        total_employees=int(employees or 0),
    )


def category_totals(db: Session, user: User, category_ids: list[int]) -> dict[int, tuple[Decimal, int]]:
    """Map category id to (sum of expense totals, number of expense rows), across all periods."""
    rows = db.execute(
        select(
            OperationalExpense.expense_category_id,
            func.coalesce(func.sum(OperationalExpense.total_amount), 0),
            func.count(OperationalExpense.id),
        )
        .where(
            OperationalExpense.user_id == user.id,
            OperationalExpense.expense_category_id.in_(category_ids),
        )
        .group_by(OperationalExpense.expense_category_id)
    ).all()
    totals = {category_id: (ZERO, 0) for category_id in category_ids}
    for category_id, total, count in rows:
        totals[category_id] = (quantize_money(total), int(count))
    return totals


def expense_breakdown(db: Session, user: User, *, year: int, month: int) -> list[dict]:
    rows = db.execute(
        _expense_scope(
            select(
                ExpenseCategory.id,
                ExpenseCategory.name,
                ExpenseCategory.is_salary,
                func.coalesce(func.sum(OperationalExpense.total_amount), 0),
                func.count(OperationalExpense.id),
            )
            .join(ExpenseCategory, ExpenseCategory.id == OperationalExpense.expense_category_id)
            .group_by(ExpenseCategory.id, ExpenseCategory.name, ExpenseCategory.is_salary)
            .order_by(ExpenseCategory.name.asc()),
            user,
            year,
            month,
        )
    ).all()
    return [
        {
            "category_id": category_id,
            "category_name": name,
            "is_salary": bool(is_salary),
            "total_amount": float(quantize_money(total)),
            "count": int(count),
        }
        for category_id, name, is_salary, total, count in rows
    ]


def expense_periods(db: Session, user: User, year: int) -> tuple[list[int], list[int]]:
    years = db.scalars(
        select(OperationalExpense.year)
        .where(OperationalExpense.user_id == user.id)
        .distinct()
        .order_by(OperationalExpense.year.desc())
    ).all()
    months = db.scalars(
        select(OperationalExpense.month)
        .where(OperationalExpense.user_id == user.id, OperationalExpense.year == year)
        .distinct()
        .order_by(OperationalExpense.month.asc())
    ).all()
    return list(years), list(months)


def sales_periods(db: Session, user: User, year: int) -> tuple[list[int], list[int]]:
    years = db.scalars(
        select(SalesRecord.year)
        .where(SalesRecord.user_id == user.id)
        .distinct()
        .order_by(SalesRecord.year.desc())
    ).all()
    months = db.scalars(
        select(SalesRecord.month)
        .where(SalesRecord.user_id == user.id, SalesRecord.year == year)
        .distinct()
        .order_by(SalesRecord.month.asc())
    ).all()
    return list(years), list(months)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return quantize_money(part / whole * 100)


def _whole_percentage(part: Decimal, whole: Decimal) -> int:
    if not whole:
        return 0
    return int((part / whole * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def sales_lines(db: Session, records: list[SalesRecord]) -> list[SalesLine]:
    """Per-record profit figures; contribution is measured against the profit of the given records."""
    product_ids = {record.product_id for record in records}
    names = dict(db.execute(select(Product.id, Product.name).where(Product.id.in_(product_ids))).all())

    computed = []
    for record in records:
        profit_unit = record.selling_price - record.hpp
        computed.append(
            (
                record,
                record.selling_price * record.number_of_sales,
                profit_unit,
                profit_unit * record.number_of_sales,
            )
        )
    period_profit = sum((total_profit for *_, total_profit in computed), ZERO)

    return [
        SalesLine(
            record=record,
            product_name=names.get(record.product_id),
            sub_total=quantize_money(sub_total),
            profit_unit=quantize_money(profit_unit),
            profit_percentage=_whole_percentage(profit_unit, record.selling_price),
            total_profit=quantize_money(total_profit),
            profit_contribution_percentage=float(_percentage(total_profit, period_profit)),
        )
        for record, sub_total, profit_unit, total_profit in computed
    ]


def sales_summary(lines: list[SalesLine]) -> dict:
    total_sales = sum((line.sub_total for line in lines), ZERO)
    total_profit = sum((line.total_profit for line in lines), ZERO)
    return {
        "total_sales": float(total_sales),
        "total_profit": float(total_profit),
        "total_profit_percentage": float(_percentage(total_profit, total_sales)),
    }


def profit_stats(db: Session, user: User, *, year: int, month: int) -> ProfitStats:
    total_sales, variable_cost = db.execute(
        select(
            func.coalesce(func.sum(SalesRecord.number_of_sales * SalesRecord.selling_price), 0),
            func.coalesce(func.sum(SalesRecord.number_of_sales * SalesRecord.hpp), 0),
        ).where(
            SalesRecord.user_id == user.id,
            SalesRecord.year == year,
            SalesRecord.month == month,
        )
    ).one()
    expenses = expense_totals(db, user, year=year, month=month)
    return ProfitStats(
        total_sales=quantize_money(total_sales),
        total_variable_cost=quantize_money(variable_cost),
        total_operational_cost=expenses.total_operational,
        total_salary_expenses=expenses.total_salary,
    )
