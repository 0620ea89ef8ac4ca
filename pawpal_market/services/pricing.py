"""
Money arithmetic shared by cart totals and order settlement
"""
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from math import ceil

from pawpal_market.config import settings

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round to cents, half up"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def shipping_for(subtotal: Decimal) -> Decimal:
    if subtotal >= to_money(settings.FREE_SHIPPING_THRESHOLD):
        return to_money(0)
    return to_money(settings.FLAT_SHIPPING_FEE)


def tax_for(subtotal: Decimal) -> Decimal:
    return to_money(subtotal * Decimal(str(settings.TAX_RATE)))


def reward_points_for(total: Decimal) -> int:
    """Points credited for an order total; zero below the reward threshold"""
    if total < to_money(settings.REWARD_THRESHOLD):
        return 0
    return int((total * Decimal(str(settings.REWARD_RATE))).to_integral_value(rounding=ROUND_FLOOR))


def last_page(total: int, per_page: int) -> int:
    return max(1, ceil(total / per_page))
