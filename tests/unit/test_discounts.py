"""Unit tests for discount display, normalization and evaluation.

Discounts are built as transient model instances; no database involved.
"""

from datetime import datetime, timedelta, timezone

import pytest
from services.storefront_service.models import (
    DiscountAppliesTo,
    DiscountType,
    DiscountValueType,
    MinRequirement,
)
from services.storefront_service.services.discounts import (
    CartLine,
    DiscountContext,
    best_automatic_discount,
    evaluate_discount,
    format_value,
    normalize_discount_fields,
)
from tests.factories import DiscountFactory

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _discount(discount_id=1, **overrides):
    return DiscountFactory.create(store_id=1, id=discount_id, **overrides)


def _ctx(lines=None, **overrides):
    defaults = {
        "lines": lines
        if lines is not None
        else [
            CartLine(product_id=1, quantity=1, price=1000, category_id=7),
            CartLine(product_id=2, quantity=1, price=3000, category_id=8),
        ],
        "now": NOW,
    }
    defaults.update(overrides)
    return DiscountContext(**defaults)


# ---------------------------------------------------------------------------
# Display and normalization
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_format_value():
    assert format_value("percentage", 15) == "15%"
    assert format_value(DiscountValueType.FIXED, 5000) == "5 000 ₸"
    assert format_value("free") == "Бесплатно"


@pytest.mark.unit
def test_code_is_upper_cased_for_code_discounts():
    data = normalize_discount_fields({"code": " summer10 "}, DiscountType.CODE)

    assert data["code"] == "SUMMER10"


@pytest.mark.unit
def test_code_is_dropped_for_other_types():
    data = normalize_discount_fields({"code": "X"}, DiscountType.AUTOMATIC)

    assert data["code"] is None


@pytest.mark.unit
def test_partial_update_of_code_discount_keeps_code_untouched():
    data = normalize_discount_fields({"title": "Весна"}, DiscountType.CODE)

    assert "code" not in data


@pytest.mark.unit
def test_free_delivery_is_always_free():
    data = normalize_discount_fields(
        {"value_type": DiscountValueType.PERCENTAGE, "value": 30},
        DiscountType.FREE_DELIVERY,
    )

    assert data["value_type"] is DiscountValueType.FREE
    assert data["value"] == 0


# ---------------------------------------------------------------------------
# Evaluation by type
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_code_discount_matches_case_insensitively():
    discount = _discount(type=DiscountType.CODE, code="SUMMER10", value=10)

    result = evaluate_discount(discount, _ctx(code="summer10"))

    assert result is not None
    assert result.amount == 400


@pytest.mark.unit
def test_code_discount_needs_the_code():
    discount = _discount(type=DiscountType.CODE, code="SUMMER10", value=10)

    assert evaluate_discount(discount, _ctx()) is None
    assert evaluate_discount(discount, _ctx(code="WINTER")) is None


@pytest.mark.unit
def test_fixed_amount_is_capped_at_base():
    discount = _discount(
        value_type=DiscountValueType.FIXED,
        value=5000,
        applies_to=DiscountAppliesTo.PRODUCTS,
        target_product_ids=[1],
    )

    assert evaluate_discount(discount, _ctx()).amount == 1000


@pytest.mark.unit
def test_targeted_by_product_and_category():
    by_product = _discount(
        applies_to=DiscountAppliesTo.PRODUCTS, target_product_ids=[2], value=10
    )
    by_category = _discount(
        applies_to=DiscountAppliesTo.CATEGORIES, target_category_ids=[7], value=50
    )

    assert evaluate_discount(by_product, _ctx()).amount == 300
    assert evaluate_discount(by_category, _ctx()).amount == 500


@pytest.mark.unit
def test_targeted_discount_without_targets_in_cart_does_not_apply():
    code = _discount(
        type=DiscountType.CODE,
        code="CAKE",
        applies_to=DiscountAppliesTo.PRODUCTS,
        target_product_ids=[99],
    )
    automatic = _discount(
        applies_to=DiscountAppliesTo.CATEGORIES, target_category_ids=[42]
    )

    assert evaluate_discount(code, _ctx(code="CAKE")) is None
    assert evaluate_discount(automatic, _ctx()) is None


@pytest.mark.unit
def test_order_amount_minimum():
    discount = _discount(
        type=DiscountType.ORDER_AMOUNT,
        min_requirement=MinRequirement.AMOUNT,
        min_value=5000,
        value=10,
    )

    assert evaluate_discount(discount, _ctx()) is None
    richer = _ctx(lines=[CartLine(product_id=2, quantity=2, price=3000)])
    assert evaluate_discount(discount, richer).amount == 600


@pytest.mark.unit
def test_minimum_quantity():
    discount = _discount(min_requirement=MinRequirement.QUANTITY, min_value=3)

    assert evaluate_discount(discount, _ctx()) is None
    assert (
        evaluate_discount(
            discount, _ctx(lines=[CartLine(product_id=1, quantity=3, price=1000)])
        ).amount
        == 300
    )


@pytest.mark.unit
def test_bundle_needs_every_product():
    discount = _discount(
        type=DiscountType.BUNDLE, target_product_ids=[1, 2], value=20
    )

    assert evaluate_discount(discount, _ctx()).amount == 800
    only_one = _ctx(lines=[CartLine(product_id=1, quantity=1, price=1000)])
    assert evaluate_discount(discount, only_one) is None


@pytest.mark.unit
def test_buy_x_get_y_rewards_one_unit():
    discount = _discount(
        type=DiscountType.BUY_X_GET_Y,
        buy_product_ids=[2],
        get_product_ids=[1],
        value_type=DiscountValueType.FREE,
        value=0,
    )
    lines = [
        CartLine(product_id=1, quantity=3, price=1000),
        CartLine(product_id=2, quantity=1, price=3000),
    ]

    assert evaluate_discount(discount, _ctx(lines=lines)).amount == 1000


@pytest.mark.unit
def test_buy_x_get_y_same_product_needs_two_units():
    discount = _discount(
        type=DiscountType.BUY_X_GET_Y,
        buy_product_ids=[1],
        get_product_ids=[1],
        value_type=DiscountValueType.PERCENTAGE,
        value=50,
    )
    one = [CartLine(product_id=1, quantity=1, price=1000)]
    two = [CartLine(product_id=1, quantity=2, price=1000)]

    assert evaluate_discount(discount, _ctx(lines=one)) is None
    assert evaluate_discount(discount, _ctx(lines=two)).amount == 500


@pytest.mark.unit
def test_free_delivery_saves_the_fee():
    discount = _discount(
        type=DiscountType.FREE_DELIVERY, value_type=DiscountValueType.FREE, value=0
    )

    result = evaluate_discount(discount, _ctx(delivery_fee=700))

    assert result.free_delivery is True
    assert result.amount == 0
    assert result.savings(700) == 700


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_inactive_discount_does_not_apply():
    assert evaluate_discount(_discount(is_active=False), _ctx()) is None


@pytest.mark.unit
def test_date_window():
    not_started = _discount(start_date=NOW + timedelta(days=1))
    expired = _discount(end_date=NOW - timedelta(days=1))
    running = _discount(
        start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=1)
    )

    assert evaluate_discount(not_started, _ctx()) is None
    assert evaluate_discount(expired, _ctx()) is None
    assert evaluate_discount(running, _ctx()) is not None


@pytest.mark.unit
def test_naive_dates_are_read_as_utc():
    discount = _discount(start_date=datetime(2026, 3, 1), end_date=datetime(2026, 4, 1))

    assert evaluate_discount(discount, _ctx()) is not None


@pytest.mark.unit
def test_usage_caps():
    total_cap = _discount(max_total_uses=5, usage_count=5)
    per_customer = _discount(max_per_customer=1)

    assert evaluate_discount(total_cap, _ctx()) is None
    assert evaluate_discount(per_customer, _ctx(customer_uses=1)) is None
    assert evaluate_discount(per_customer, _ctx(customer_uses=0)) is not None


@pytest.mark.unit
def test_budget_caps_the_amount():
    discount = _discount(value=10, max_total_amount=500, total_discounted=400)

    assert evaluate_discount(discount, _ctx()).amount == 100


@pytest.mark.unit
def test_exhausted_budget_does_not_apply():
    discount = _discount(max_total_amount=500, total_discounted=500)

    assert evaluate_discount(discount, _ctx()) is None


# ---------------------------------------------------------------------------
# Best automatic discount
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_best_automatic_discount_picks_highest_saving():
    small = _discount(discount_id=1, value=5)
    large = _discount(discount_id=2, value=20)
    free_delivery = _discount(
        discount_id=3,
        type=DiscountType.FREE_DELIVERY,
        value_type=DiscountValueType.FREE,
        value=0,
    )

    best = best_automatic_discount([small, large, free_delivery], _ctx(delivery_fee=500))

    assert best.discount_id == 2
    assert best.amount == 800


@pytest.mark.unit
def test_best_automatic_discount_skips_codes_and_zero_savings():
    code = _discount(discount_id=1, type=DiscountType.CODE, code="VIP", value=50)
    free_delivery = _discount(
        discount_id=2,
        type=DiscountType.FREE_DELIVERY,
        value_type=DiscountValueType.FREE,
        value=0,
    )

    assert best_automatic_discount([code, free_delivery], _ctx(code="VIP")) is None
