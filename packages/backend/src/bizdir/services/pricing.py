"""Pricing plans and the commission policy.

commission_for() is the only place an agent commission is computed.
Shop registration, payment confirmation, the dashboard and the earnings
recalculation all call it, so the rate and the default amount cannot
drift apart.

Rounding is half-up (2.5 → 3), not Python's banker's rounding.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from bizdir.config import settings


@dataclass(frozen=True)
class Plan:
    name: str
    amount: int  # rupees per year
    priority_rank: int
    max_photos: int
    has_offers: bool = False
    has_whatsapp: bool = False
    has_logo: bool = False
    home_page_banner: bool = False
    top_slider: bool = False
    left_bar: bool = False
    right_bar: bool = False
    hero: bool = False

    def placements(self) -> dict[str, bool]:
        return {
            "home_page_banner": self.home_page_banner,
            "top_slider": self.top_slider,
            "left_bar": self.left_bar,
            "right_bar": self.right_bar,
            "hero": self.hero,
        }


PLANS: dict[str, Plan] = {
    "BASIC": Plan("Basic Plan", 100, priority_rank=0, max_photos=1),
    "PREMIUM": Plan(
        "Premium Plan", 2999, priority_rank=10, max_photos=10,
        has_offers=True, has_whatsapp=True, has_logo=True,
    ),
    "FEATURED": Plan(
        "Featured Plan", 2388, priority_rank=100, max_photos=10,
        has_offers=True, has_whatsapp=True, has_logo=True,
        home_page_banner=True, top_slider=True,
    ),
    "LEFT_BAR": Plan("Left Bar Plan", 3588, priority_rank=30, max_photos=10, left_bar=True),
    "RIGHT_BAR": Plan("Right Bar Plan", 3588, priority_rank=30, max_photos=10, right_bar=True),
    "BANNER": Plan(
        "Banner Plan", 4788, priority_rank=50, max_photos=10, home_page_banner=True
    ),
    "HERO": Plan("Hero Plan", 5988, priority_rank=200, max_photos=10, hero=True),
}

PLAN_ORDER = list(PLANS)


def get_plan(plan_type: Optional[str]) -> Plan:
    """Plan by type; unknown or empty types fall back to BASIC."""
    return PLANS.get((plan_type or "BASIC").upper(), PLANS["BASIC"])


def effective_amount(amount: Optional[int]) -> int:
    """Amount used for commission: a missing or zero amount means the default."""
    return amount if amount else settings.default_shop_amount


def commission_for(amount: Optional[int]) -> int:
    """Agent commission on a paid amount: round(amount * rate), half-up."""
    value = Decimal(effective_amount(amount)) * Decimal(str(settings.commission_rate))
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def total_commission(amounts: Iterable[Optional[int]]) -> int:
    return sum(commission_for(a) for a in amounts)


def can_upgrade(current: str, target: str) -> bool:
    """True when `target` ranks above `current` in the plan order."""
    try:
        return PLAN_ORDER.index(target) > PLAN_ORDER.index(current)
    except ValueError:
        return False
