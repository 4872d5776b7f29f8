from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.models.catalog import ComponentType
from app.schemas.common import ApiResponse, Money, Quantity


class ProductCreate(BaseModel):
    user_id: int | None = None
    name: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=64)
    description: str | None = None


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    sku: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = None


class ProductOut(BaseModel):
    id: int
    user_id: int
    name: str
    sku: str
    description: str | None
    hpp: Money | None
    selling_price: Money | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductStats(BaseModel):
    total_products: int


class ProductListResponse(ApiResponse[list[ProductOut]]):
    stats: ProductStats | None = None


class CostComponentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    component_type: ComponentType


class CostComponentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    component_type: ComponentType | None = None


class CostComponentOut(BaseModel):
    id: int
    user_id: int
    name: str
    description: str | None
    component_type: ComponentType
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CostComponentMeta(BaseModel):
    total_count: int
    type: ComponentType | None = None
    keyword: str | None = None


class CostComponentListResponse(ApiResponse[list[CostComponentOut]]):
    meta: CostComponentMeta


class CostLineInput(BaseModel):
    cost_component_id: int
    unit: str = Field(min_length=1, max_length=50)
    unit_price: Decimal = Field(ge=0, max_digits=14, decimal_places=2)
    quantity: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    conversion_qty: Decimal = Field(gt=0, max_digits=14, decimal_places=2)


class ProductCostCreate(BaseModel):
    product_id: int
    costs: list[CostLineInput] = Field(min_length=1)


class ProductCostOut(BaseModel):
    id: int
    product_id: int
    cost_component_id: int
    unit: str
    unit_price: Money
    quantity: Quantity
    conversion_qty: Quantity
    amount: Money
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductCostListResponse(ApiResponse[list[ProductCostOut]]):
    product: ProductOut | None = None


class ProductCostResponse(ApiResponse[ProductCostOut]):
    product: ProductOut | None = None


class PriceSchemeCreate(BaseModel):
    product_id: int
    level_name: str = Field(min_length=1, max_length=100)
    purchase_price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    discount_percentage: Decimal | None = Field(default=None, ge=0, lt=100)
    selling_price: Decimal | None = Field(default=None, gt=0, max_digits=14, decimal_places=2)
    notes: str | None = None

    @field_validator("level_name")
    @classmethod
    def level_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("level_name must not be empty")
        return value


class PriceSchemeUpdate(BaseModel):
    level_name: str | None = Field(default=None, min_length=1, max_length=100)
    purchase_price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    discount_percentage: Decimal | None = Field(default=None, ge=0, lt=100)
    selling_price: Decimal | None = Field(default=None, gt=0, max_digits=14, decimal_places=2)
    notes: str | None = None


class PriceSchemeOut(BaseModel):
    id: int
    user_id: int
    product_id: int
    level_name: str
    level_order: int
    discount_percentage: Money
    purchase_price: Money
    selling_price: Money
    profit_amount: Money
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PriceSchemeResponse(ApiResponse[PriceSchemeOut]):
    product: ProductOut | None = None


class PriceSchemeListResponse(ApiResponse[list[PriceSchemeOut]]):
    product: ProductOut | None = None
