from app.models.catalog import ComponentType, CostComponent, PriceScheme, Product, ProductCost
from app.models.finance import ExpenseCategory, OperationalExpense, SalesRecord
from app.models.security import RevokedToken
from app.models.user import User, UserRole

__all__ = [
    "ComponentType",
    "CostComponent",
    "ExpenseCategory",
    "OperationalExpense",
    "PriceScheme",
    "Product",
    "ProductCost",
    "RevokedToken",
    "SalesRecord",
    "User",
    "UserRole",
]
