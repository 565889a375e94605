"""Discount taxonomy: display, form normalization and checkout evaluation.

All six discount types share one row. ``value_type`` is always one of
percentage / fixed / free whatever the type; the type decides which other
fields matter and how eligibility is judged. Evaluation goes through a table
keyed by ``DiscountType``; the table is checked against the enum on import
so a new type cannot ship without an evaluator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from libs.common.currency import format_price, percent_of
from libs.common.datetime_utils import ensure_aware, utc_now
from services.storefront_service.models.enums import (
    DiscountAppliesTo,
    DiscountType,
    DiscountValueType,
    MinRequirement,
)

FREE_LABEL = "Бесплатно"

DISCOUNT_TYPE_LABELS: dict[DiscountType, str] = {
    DiscountType.CODE: "Промокод",
    DiscountType.ORDER_AMOUNT: "Скидка на сумму заказа",
    DiscountType.AUTOMATIC: "Автоматическая скидка",
    DiscountType.BUNDLE: "Комплект",
    DiscountType.BUY_X_GET_Y: "Купи X, получи Y",
    DiscountType.FREE_DELIVERY: "Бесплатная доставка",
}


def format_value(value_type: DiscountValueType | str, value: Optional[int] = None) -> str:
    """``"15%"``, ``"5 000 ₸"`` or ``"Бесплатно"``."""
    value_type = DiscountValueType(value_type)
    if value_type is DiscountValueType.FREE:
        return FREE_LABEL
    if value_type is DiscountValueType.PERCENTAGE:
        return f"{value or 0}%"
    return format_price(value or 0)


def normalize_discount_fields(data: dict, discount_type: DiscountType) -> dict:
    """Apply the per-type rules the admin form applies on save.

    Only ``code`` discounts keep a code (upper-cased); free delivery is
    always ``free``/0. Nothing else is enforced here.
    """
    normalized = dict(data)
    if "code" in normalized or discount_type is not DiscountType.CODE:
        code = normalized.get("code")
        if discount_type is DiscountType.CODE and code:
            normalized["code"] = code.strip().upper()
        else:
            normalized["code"] = None
    if discount_type is DiscountType.FREE_DELIVERY:
        normalized["value_type"] = DiscountValueType.FREE
        normalized["value"] = 0
    return normalized


# ============================================================================
# EVALUATION
# ============================================================================


@dataclass
class CartLine:
    product_id: int
    quantity: int
    price: int  # unit price, whole tenge
    category_id: Optional[int] = None

    @property
    def amount(self) -> int:
        return self.price * self.quantity


@dataclass
class DiscountContext:
    lines: list[CartLine]
    delivery_fee: int = 0
    code: Optional[str] = None
    customer_uses: int = 0
    now: Optional[datetime] = None

    @property
    def subtotal(self) -> int:
        return sum(line.amount for line in self.lines)

    @property
    def quantity(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass
class DiscountResult:
    discount_id: int
    amount: int = 0
    free_delivery: bool = False

    def savings(self, delivery_fee: int) -> int:
        return self.amount + (delivery_fee if self.free_delivery else 0)


def _value_amount(discount, base: int) -> int:
    if base <= 0:
        return 0
    if discount.value_type == DiscountValueType.PERCENTAGE:
        return min(percent_of(base, discount.value), base)
    if discount.value_type == DiscountValueType.FIXED:
        return min(discount.value, base)
    return base


def _target_lines(discount, lines: Iterable[CartLine]) -> list[CartLine]:
    applies_to = DiscountAppliesTo(discount.applies_to)
    if applies_to is DiscountAppliesTo.PRODUCTS:
        targets = set(discount.target_product_ids or [])
        return [line for line in lines if line.product_id in targets]
    if applies_to is DiscountAppliesTo.CATEGORIES:
        targets = set(discount.target_category_ids or [])
        return [line for line in lines if line.category_id in targets]
    return list(lines)


def _targeted_amount(discount, ctx: DiscountContext) -> Optional[int]:
    """None when nothing in the cart is targeted, so the discount does not apply."""
    base = sum(line.amount for line in _target_lines(discount, ctx.lines))
    return _value_amount(discount, base) or None


def _evaluate_code(discount, ctx: DiscountContext) -> Optional[int]:
    if not ctx.code or not discount.code:
        return None
    if ctx.code.strip().upper() != discount.code.upper():
        return None
    return _targeted_amount(discount, ctx)


def _evaluate_targeted(discount, ctx: DiscountContext) -> Optional[int]:
    return _targeted_amount(discount, ctx)


def _evaluate_bundle(discount, ctx: DiscountContext) -> Optional[int]:
    bundle = set(discount.target_product_ids or [])
    in_cart = {line.product_id for line in ctx.lines}
    if not bundle or not bundle <= in_cart:
        return None
    base = sum(line.amount for line in ctx.lines if line.product_id in bundle)
    return _value_amount(discount, base)


def _evaluate_buy_x_get_y(discount, ctx: DiscountContext) -> Optional[int]:
    buy = set(discount.buy_product_ids or [])
    get = set(discount.get_product_ids or [])
    if not buy or not get:
        return None

    quantities: dict[int, int] = {}
    for line in ctx.lines:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
    if not any(quantities.get(product_id, 0) > 0 for product_id in buy):
        return None

    # One rewarded unit per "get" product; a product that is both the
    # qualifying and the rewarded item needs a second unit in the cart.
    amount = 0
    for line in ctx.lines:
        if line.product_id not in get:
            continue
        needed = 2 if line.product_id in buy else 1
        if quantities[line.product_id] >= needed:
            amount += _value_amount(discount, line.price)
            quantities[line.product_id] = 0
    return amount or None


def _evaluate_free_delivery(discount, ctx: DiscountContext) -> Optional[int]:
    return 0


DiscountEvaluator = Callable[..., Optional[int]]

_EVALUATORS: dict[DiscountType, DiscountEvaluator] = {
    DiscountType.CODE: _evaluate_code,
    DiscountType.ORDER_AMOUNT: _evaluate_targeted,
    DiscountType.AUTOMATIC: _evaluate_targeted,
    DiscountType.BUNDLE: _evaluate_bundle,
    DiscountType.BUY_X_GET_Y: _evaluate_buy_x_get_y,
    DiscountType.FREE_DELIVERY: _evaluate_free_delivery,
}


def _check_exhaustive(table: dict, name: str) -> None:
    missing = set(DiscountType) - set(table)
    if missing:
        raise RuntimeError(
            f"{name} is missing discount types: "
            + ", ".join(sorted(t.value for t in missing))
        )


_check_exhaustive(_EVALUATORS, "_EVALUATORS")
_check_exhaustive(DISCOUNT_TYPE_LABELS, "DISCOUNT_TYPE_LABELS")


def is_within_limits(discount, ctx: DiscountContext) -> bool:
    """Activity, date window, usage caps and minimum requirement."""
    if not discount.is_active:
        return False

    now = ctx.now or utc_now()
    start = ensure_aware(discount.start_date)
    end = ensure_aware(discount.end_date)
    if start and now < start:
        return False
    if end and now > end:
        return False

    if discount.max_total_uses is not None and (
        (discount.usage_count or 0) >= discount.max_total_uses
    ):
        return False
    if discount.max_per_customer is not None and (
        ctx.customer_uses >= discount.max_per_customer
    ):
        return False
    if discount.max_total_amount is not None and (
        (discount.total_discounted or 0) >= discount.max_total_amount
    ):
        return False

    requirement = MinRequirement(discount.min_requirement or MinRequirement.NONE)
    if requirement is MinRequirement.AMOUNT:
        return ctx.subtotal >= (discount.min_value or 0)
    if requirement is MinRequirement.QUANTITY:
        return ctx.quantity >= (discount.min_value or 0)
    return True


def evaluate_discount(discount, ctx: DiscountContext) -> Optional[DiscountResult]:
    """What a discount is worth for this cart, or None if it does not apply."""
    if not is_within_limits(discount, ctx):
        return None

    discount_type = DiscountType(discount.type)
    amount = _EVALUATORS[discount_type](discount, ctx)
    if amount is None:
        return None

    if discount.max_total_amount is not None:
        remaining = discount.max_total_amount - (discount.total_discounted or 0)
        amount = min(amount, max(remaining, 0))

    return DiscountResult(
        discount_id=discount.id,
        amount=amount,
        free_delivery=discount_type is DiscountType.FREE_DELIVERY,
    )


def best_automatic_discount(discounts, ctx: DiscountContext) -> Optional[DiscountResult]:
    """Highest-saving discount among those that need no code."""
    best: Optional[DiscountResult] = None
    for discount in discounts:
        if DiscountType(discount.type) is DiscountType.CODE:
            continue
        result = evaluate_discount(discount, ctx)
        if result is None:
            continue
        if result.savings(ctx.delivery_fee) <= 0:
            continue
        if best is None or result.savings(ctx.delivery_fee) > best.savings(
            ctx.delivery_fee
        ):
            best = result
    return best
