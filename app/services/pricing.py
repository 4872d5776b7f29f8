"""
Price tier chains.

A product's price levels form a chain ordered by ``level_order`` (1..N). Level 1
buys at the product's HPP, every later level buys at its predecessor's selling
price. ``discount_percentage`` is the margin taken off the selling price, so

    selling = purchase × 100 / (100 − discount)
    discount = (1 − purchase / selling) × 100

The arithmetic lives in pure functions (``price_tier``, ``recalculate_chain``);
the ``*_price_level`` functions load a chain, run it through them and write the
result back together with ``Product.selling_price``.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ComputationPreconditionError
from app.core.logging import get_logger
from app.models.catalog import PriceScheme, Product
from app.models.user import User
from app.services.costing import quantize_money

logger = get_logger("pricing")

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TierPrices:
    discount_percentage: Decimal
    purchase_price: Decimal
    selling_price: Decimal
    profit_amount: Decimal


class PriceLevelFields(Protocol):
    level_name: str | None
    purchase_price: Decimal | None
    discount_percentage: Decimal | None
    selling_price: Decimal | None
    notes: str | None


def selling_price_from_discount(purchase_price: Decimal, discount_percentage: Decimal) -> Decimal:
    discount = Decimal(str(discount_percentage))
    if discount >= HUNDRED:
        raise ComputationPreconditionError("Discount percentage must be below 100")
    return quantize_money(Decimal(str(purchase_price)) * HUNDRED / (HUNDRED - discount))


def discount_from_selling_price(purchase_price: Decimal, selling_price: Decimal) -> Decimal:
    purchase = Decimal(str(purchase_price))
    selling = Decimal(str(selling_price))
    if selling <= 0:
        raise ComputationPreconditionError("Selling price must be greater than zero")
    if purchase <= 0:
        raise ComputationPreconditionError("A discount cannot be derived from a zero purchase price")
    return quantize_money((1 - purchase / selling) * HUNDRED)


def price_tier(
    purchase_price: Decimal,
    *,
    discount_percentage: Decimal | None = None,
    selling_price: Decimal | None = None,
) -> TierPrices:
    """Price one level. An explicit selling price wins over a discount; neither means no markup."""
    purchase = quantize_money(purchase_price)
    if selling_price is not None:
        selling = quantize_money(selling_price)
        discount = discount_from_selling_price(purchase, selling)
    else:
        discount = quantize_money(discount_percentage if discount_percentage is not None else 0)
        selling = selling_price_from_discount(purchase, discount)
    return TierPrices(
        discount_percentage=discount,
        purchase_price=purchase,
        selling_price=selling,
        profit_amount=selling - purchase,
    )


def recalculate_chain(levels: Sequence[TierPrices], anchor: Decimal, start: int = 0) -> list[TierPrices]:
    """
    Re-derive every level from ``start`` onwards.

    ``anchor`` is the purchase price of the level at ``start``; each level keeps
    its discount and buys at the previous level's new selling price. Levels
    before ``start`` are returned unchanged.
    """
    result = list(levels[:start])
    purchase = anchor
    for level in levels[start:]:
        tier = price_tier(purchase, discount_percentage=level.discount_percentage)
        result.append(tier)
        purchase = tier.selling_price
    return result


def _tier_of(scheme: PriceScheme) -> TierPrices:
    return TierPrices(
        discount_percentage=scheme.discount_percentage,
        purchase_price=scheme.purchase_price,
        selling_price=scheme.selling_price,
        profit_amount=scheme.profit_amount,
    )


def _apply_tier(scheme: PriceScheme, tier: TierPrices) -> None:
    for field, value in asdict(tier).items():
        setattr(scheme, field, value)


def _first_level_purchase_price(
    product: Product,
    explicit: Decimal | None,
    fallback: Decimal | None = None,
) -> Decimal:
    if product.hpp is not None:
        return product.hpp
    if explicit is not None:
        return explicit
    if fallback is not None:
        return fallback
    raise ComputationPreconditionError(
        "Purchase price is required for the first level when the product has no HPP",
        errors={"purchase_price": ["Purchase price is required for the first level."]},
    )


def load_chain(db: Session, product: Product) -> list[PriceScheme]:
    return list(
        db.scalars(
            select(PriceScheme)
            .where(PriceScheme.product_id == product.id)
            .order_by(PriceScheme.level_order.asc())
        ).all()
    )


def _persist_cascade(chain: list[PriceScheme], tiers: list[TierPrices], start: int) -> None:
    for scheme, tier in zip(chain[start:], tiers[start:]):
        _apply_tier(scheme, tier)


def sync_product_selling_price(product: Product, chain: Sequence[PriceScheme]) -> None:
    """The top of the chain is the product's sale price; without levels it falls back to HPP."""
    product.selling_price = chain[-1].selling_price if chain else product.hpp


def create_price_level(db: Session, user: User, product: Product, fields: PriceLevelFields) -> PriceScheme:
    chain = load_chain(db, product)
    if chain:
        purchase = chain[-1].selling_price
    else:
        purchase = _first_level_purchase_price(product, fields.purchase_price)

    tier = price_tier(
        purchase,
        discount_percentage=fields.discount_percentage,
        selling_price=fields.selling_price,
    )
    scheme = PriceScheme(
        user_id=user.id,
        product_id=product.id,
        level_name=fields.level_name.strip(),
        level_order=chain[-1].level_order + 1 if chain else 1,
        notes=fields.notes,
        **asdict(tier),
    )
    db.add(scheme)
    sync_product_selling_price(product, [*chain, scheme])
    db.flush()
    logger.info(
        "Created price level %s for product %s at %s",
        scheme.level_order,
        product.id,
        scheme.selling_price,
    )
    return scheme


def update_price_level(
    db: Session,
    product: Product,
    scheme: PriceScheme,
    fields: PriceLevelFields,
) -> PriceScheme:
    chain = load_chain(db, product)
    index = next(position for position, level in enumerate(chain) if level.id == scheme.id)

    if fields.level_name is not None:
        scheme.level_name = fields.level_name.strip()
    if "notes" in fields.model_fields_set:
        scheme.notes = fields.notes

    if index == 0:
        purchase = _first_level_purchase_price(product, fields.purchase_price, scheme.purchase_price)
    else:
        purchase = chain[index - 1].selling_price

    previous_selling = scheme.selling_price
    if fields.selling_price is not None:
        edited = price_tier(purchase, selling_price=fields.selling_price)
    elif fields.discount_percentage is not None:
        edited = price_tier(purchase, discount_percentage=fields.discount_percentage)
    elif purchase == scheme.purchase_price:
        edited = _tier_of(scheme)
    else:
        # No price sent: the level keeps its selling price against the new purchase price.
        edited = price_tier(purchase, selling_price=scheme.selling_price)

    tiers = [_tier_of(level) for level in chain]
    tiers[index] = edited
    cascaded = 0
    if edited.selling_price != previous_selling:
        tiers = recalculate_chain(tiers, edited.selling_price, start=index + 1)
        cascaded = len(chain) - index - 1
    _persist_cascade(chain, tiers, index)
    sync_product_selling_price(product, chain)
    db.flush()
    logger.info(
        "Updated price level %s for product %s, cascaded %s level(s)",
        scheme.level_order,
        product.id,
        cascaded,
    )
    return scheme


def reanchor_chain(db: Session, product: Product) -> None:
    """Follow an HPP change: level 1 buys at the new HPP and the rest of the chain cascades."""
    chain = load_chain(db, product)
    if chain and product.hpp is not None and chain[0].purchase_price != product.hpp:
        tiers = recalculate_chain([_tier_of(level) for level in chain], product.hpp)
        _persist_cascade(chain, tiers, 0)
        logger.info("Re-anchored %s price level(s) of product %s at HPP %s", len(chain), product.id, product.hpp)
    sync_product_selling_price(product, chain)
    db.flush()


def delete_price_level(db: Session, product: Product, scheme: PriceScheme) -> list[PriceScheme]:
    """Remove a level, close the gap in ``level_order`` and re-price everything after it."""
    chain = load_chain(db, product)
    index = next(position for position, level in enumerate(chain) if level.id == scheme.id)
    remaining = chain[:index] + chain[index + 1:]

    db.delete(scheme)
    db.flush()
    # Renumber one row per flush so (product_id, level_order) stays unique throughout.
    for position, level in enumerate(remaining[index:], start=index + 1):
        level.level_order = position
        db.flush()

    if index < len(remaining):
        if index == 0:
            anchor = _first_level_purchase_price(product, None, remaining[0].purchase_price)
        else:
            anchor = remaining[index - 1].selling_price
        tiers = recalculate_chain([_tier_of(level) for level in remaining], anchor, start=index)
        _persist_cascade(remaining, tiers, index)

    sync_product_selling_price(product, remaining)
    db.flush()
    logger.info("Deleted price level from product %s, %s level(s) remain", product.id, len(remaining))
    return remaining
