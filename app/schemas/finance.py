from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.common import ApiResponse, Money

MIN_YEAR = 2000
MAX_YEAR = 2900


class ExpenseCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    is_salary: bool


class ExpenseCategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_salary: bool | None = None


class ExpenseCategoryOut(BaseModel):
    id: int
    user_id: int
    name: str
    description: str | None
    is_salary: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExpenseCategoryTotalsOut(ExpenseCategoryOut):
    total_amount: str
    total_employees: int | None = None


class ExpenseCategorySummary(BaseModel):
    total_salary: str
    total_operational: str
    grand_total: str


class ExpenseCategoryListResponse(ApiResponse[list[ExpenseCategoryTotalsOut]]):
    summary: ExpenseCategorySummary


class OperationalExpenseCreate(BaseModel):
    expense_category_id: int
    quantity: int = Field(ge=1)
    unit: str = Field(min_length=1, max_length=50)
    amount: Decimal = Field(ge=0, max_digits=14, decimal_places=2)
    year: int | None = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    month: int | None = Field(default=None, ge=1, le=12)
    notes: str | None = None


class OperationalExpenseUpdate(BaseModel):
    expense_category_id: int | None = None
    quantity: int | None = Field(default=None, ge=1)
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    amount: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    year: int | None = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    month: int | None = Field(default=None, ge=1, le=12)
    notes: str | None = None


class OperationalExpenseOut(BaseModel):
    id: int
    user_id: int
    expense_category_id: int
    quantity: int
    unit: str
    amount: Money
    total_amount: Money
    year: int
    month: int
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExpenseBreakdownItem(BaseModel):
    category_id: int
    category_name: str
    is_salary: bool
    total_amount: float
    count: int


class OperationalExpenseSummary(BaseModel):
    details: list[ExpenseBreakdownItem]
    total_salary: float
    total_operational: float
    grand_total: float
    total_employees: int
    year: int
    month: int


class PeriodFilters(BaseModel):
    available_years: list[int]
    available_months: list[int]
    current_year: int
    current_month: int


class OperationalExpenseListResponse(ApiResponse[list[OperationalExpenseOut]]):
    summary: OperationalExpenseSummary
    filters: PeriodFilters


class SalesRecordCreate(BaseModel):
    product_id: int
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    month: int = Field(ge=1, le=12)
    number_of_sales: int = Field(ge=0)
    hpp: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    selling_price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)


class SalesRecordUpdate(BaseModel):
    product_id: int | None = None
    year: int | None = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    month: int | None = Field(default=None, ge=1, le=12)
    number_of_sales: int | None = Field(default=None, ge=0)
    hpp: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    selling_price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)


class SalesRecordOut(BaseModel):
    id: int
    user_id: int
    product_id: int
    year: int
    month: int
    number_of_sales: int
    hpp: Money
    selling_price: Money
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SalesLineOut(SalesRecordOut):
    product_name: str | None
    sub_total: Money
    profit_unit: Money
    profit_percentage: int
    total_profit: Money
    profit_contribution_percentage: float


class SalesSummary(BaseModel):
    total_sales: float
    total_profit: float
    total_profit_percentage: float


class SalesListResponse(ApiResponse[list[SalesLineOut]]):
    summary: SalesSummary
    filters: PeriodFilters


class StatsOut(BaseModel):
    total_sales: float
    total_cost: float
    total_variable_cost: float
    total_operational_cost: float
    total_salary_expenses: float
    gross_profit: float
    net_profit: float
    year: int
    month: int
    availableYears: list[int]
    availableMonths: list[int]
