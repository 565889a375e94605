"""Plan limits and usage gating.

A usage snapshot compares what a store has (products, orders this month,
images) against its plan. A limit of ``-1`` means unlimited and never gates.
The banner is only ever shown on the free plan.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from services.storefront_service.models.enums import Plan

UNLIMITED = -1

WARNING_PCT = 50
CRITICAL_PCT = 100

PLAN_NAMES: dict[Plan, str] = {
    Plan.FREE: "Бесплатный",
    Plan.PRO: "Профессиональный",
    Plan.BUSINESS: "Бизнес",
}

PLAN_PRICES: dict[Plan, int] = {
    Plan.FREE: 0,
    Plan.PRO: 4990,
    Plan.BUSINESS: 14990,
}

PLAN_FEATURES: dict[Plan, list[str]] = {
    Plan.FREE: [
        "До 30 товаров",
        "1 магазин",
        "WhatsApp заказы",
        "Базовая аналитика",
    ],
    Plan.PRO: [
        "До 300 товаров",
        "1 магазин",
        "WhatsApp заказы",
        "Подробная аналитика",
        "Кастомный домен",
        "Приоритетная поддержка",
    ],
    Plan.BUSINESS: [
        "До 2000 товаров",
        "1 магазин",
        "WhatsApp заказы",
        "Расширенная аналитика",
        "Кастомный домен",
        "API доступ",
        "Персональный менеджер",
    ],
}


@dataclass
class PlanLimits:
    products: int
    monthly_orders: int
    images: int


DEFAULT_PLAN_LIMITS: dict[Plan, PlanLimits] = {
    Plan.FREE: PlanLimits(products=30, monthly_orders=100, images=150),
    Plan.PRO: PlanLimits(products=300, monthly_orders=UNLIMITED, images=UNLIMITED),
    Plan.BUSINESS: PlanLimits(
        products=2000, monthly_orders=UNLIMITED, images=UNLIMITED
    ),
}


class BannerLevel(str, enum.Enum):
    PROMO = "promo"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class UsageSnapshot:
    plan: Plan
    products: int
    product_limit: int
    monthly_orders: int
    order_limit: int
    total_images: int
    image_limit: int

    def metrics(self) -> list[tuple[int, int]]:
        return [
            (self.products, self.product_limit),
            (self.monthly_orders, self.order_limit),
            (self.total_images, self.image_limit),
        ]


def usage_percent(used: int, limit: int) -> Optional[float]:
    """``used/limit*100``; None when the limit does not gate (unlimited or 0)."""
    if limit == UNLIMITED or limit <= 0:
        return None
    return used / limit * 100


def is_at_limit(used: int, limit: int) -> bool:
    pct = usage_percent(used, limit)
    return pct is not None and pct >= CRITICAL_PCT


def banner_level(snapshot: UsageSnapshot) -> Optional[BannerLevel]:
    """Which upgrade banner to show, if any.

    Promotional while every metric is under 50%, critical once any metric
    reaches its limit, warning in between. Paid plans get no banner.
    """
    if snapshot.plan != Plan.FREE:
        return None

    percents = [
        pct
        for pct in (usage_percent(used, limit) for used, limit in snapshot.metrics())
        if pct is not None
    ]
    if any(pct >= CRITICAL_PCT for pct in percents):
        return BannerLevel.CRITICAL
    if all(pct < WARNING_PCT for pct in percents):
        return BannerLevel.PROMO
    return BannerLevel.WARNING


def limits_from_tariffs(
    plan: Plan, overrides: Optional[dict] = None
) -> PlanLimits:
    """Default limits for a plan, with superadmin tariff overrides applied."""
    base = DEFAULT_PLAN_LIMITS[plan]
    override = (overrides or {}).get(plan.value) or {}
    return PlanLimits(
        products=int(
            override.get("productLimit", override.get("limit", base.products))
        ),
        monthly_orders=int(override.get("orderLimit", base.monthly_orders)),
        images=int(override.get("imageLimit", base.images)),
    )


def tariff_card(plan: Plan, overrides: Optional[dict] = None) -> dict:
    """Public description of a plan as shown on the pricing page."""
    override = (overrides or {}).get(plan.value) or {}
    limits = limits_from_tariffs(plan, overrides)
    return {
        "plan": plan.value,
        "name": override.get("name", PLAN_NAMES[plan]),
        "price": int(override.get("price", PLAN_PRICES[plan])),
        "features": list(override.get("features", PLAN_FEATURES[plan])),
        "productLimit": limits.products,
        "orderLimit": limits.monthly_orders,
        "imageLimit": limits.images,
    }
