"""Cost aggregation: cost line amounts and the product HPP they add up to."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import BusinessRuleError, ComputationPreconditionError, FieldValidationError
from app.core.logging import get_logger
from app.models.catalog import CostComponent, Product, ProductCost
from app.models.user import User

logger = get_logger("costing")

MONEY_STEP = Decimal("0.01")


class CostLineFields(Protocol):
    cost_component_id: int
    unit: str
    unit_price: Decimal
    quantity: Decimal
    conversion_qty: Decimal


def quantize_money(value) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def line_amount(unit_price: Decimal, quantity: Decimal, conversion_qty: Decimal) -> Decimal:
    """``unit_price × quantity ÷ conversion_qty`` rounded to cents."""
    conversion = Decimal(str(conversion_qty))
    if conversion <= 0:
        raise ComputationPreconditionError("Conversion quantity must be greater than zero")
    return quantize_money(Decimal(str(unit_price)) * Decimal(str(quantity)) / conversion)


def recalculate_product_hpp(db: Session, product: Product) -> Decimal:
    db.flush()
    total = db.scalar(
        select(func.coalesce(func.sum(ProductCost.amount), 0)).where(ProductCost.product_id == product.id)
    )
    product.hpp = quantize_money(total or 0)
    logger.info("Recalculated HPP for product %s: %s", product.id, product.hpp)
    return product.hpp


def _owned_component_ids(db: Session, user: User, component_ids: Iterable[int]) -> set[int]:
    return set(
        db.scalars(
            select(CostComponent.id).where(
                CostComponent.user_id == user.id,
                CostComponent.id.in_(list(component_ids)),
            )
        ).all()
    )


def add_cost_lines(
    db: Session,
    user: User,
    product: Product,
    entries: list[CostLineFields],
) -> list[ProductCost]:
    """Attach a batch of cost lines to ``product``; any rejected entry rejects the whole batch."""
    seen: set[int] = set()
    for index, entry in enumerate(entries):
        if entry.cost_component_id in seen:
            raise BusinessRuleError(
                "Duplicate cost component in payload",
                errors={f"costs.{index}.cost_component_id": ["This cost component appears more than once."]},
            )
        seen.add(entry.cost_component_id)

    existing = set(
        db.scalars(
            select(ProductCost.cost_component_id).where(
                ProductCost.product_id == product.id,
                ProductCost.cost_component_id.in_(list(seen)),
            )
        ).all()
    )
    if existing:
        raise BusinessRuleError(
            "Cost component already exists for this product",
            errors={
                f"costs.{index}.cost_component_id": ["This cost component is already attached to the product."]
                for index, entry in enumerate(entries)
                if entry.cost_component_id in existing
            },
        )

    owned = _owned_component_ids(db, user, seen)
    for index, entry in enumerate(entries):
        if entry.cost_component_id not in owned:
            raise FieldValidationError(f"costs.{index}.cost_component_id", "The selected cost component is invalid.")

    lines = [
        ProductCost(
            product_id=product.id,
            cost_component_id=entry.cost_component_id,
            unit=entry.unit.strip(),
            unit_price=quantize_money(entry.unit_price),
            quantity=entry.quantity,
            conversion_qty=entry.conversion_qty,
            amount=line_amount(entry.unit_price, entry.quantity, entry.conversion_qty),
        )
        for entry in entries
    ]
    db.add_all(lines)
    recalculate_product_hpp(db, product)
    return lines


def update_cost_line(
    db: Session,
    user: User,
    product: Product,
    line: ProductCost,
    fields: CostLineFields,
) -> ProductCost:
    if fields.cost_component_id != line.cost_component_id:
        clash = db.scalar(
            select(ProductCost.id).where(
                ProductCost.product_id == product.id,
                ProductCost.cost_component_id == fields.cost_component_id,
                ProductCost.id != line.id,
            )
        )
        if clash is not None:
            raise BusinessRuleError(
                "Cost component already used by another line of this product",
                errors={"cost_component_id": ["This cost component is already attached to the product."]},
            )
        if not _owned_component_ids(db, user, [fields.cost_component_id]):
            raise FieldValidationError("cost_component_id", "The selected cost component is invalid.")

    line.cost_component_id = fields.cost_component_id
    line.unit = fields.unit.strip()
    line.unit_price = quantize_money(fields.unit_price)
    line.quantity = fields.quantity
    line.conversion_qty = fields.conversion_qty
    line.amount = line_amount(fields.unit_price, fields.quantity, fields.conversion_qty)
    recalculate_product_hpp(db, product)
    return line


def delete_cost_line(db: Session, product: Product, line: ProductCost) -> Decimal:
    db.delete(line)
    return recalculate_product_hpp(db, product)


def component_in_use(db: Session, component: CostComponent) -> bool:
    return db.scalar(select(ProductCost.id).where(ProductCost.cost_component_id == component.id).limit(1)) is not None
