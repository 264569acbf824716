"""
Money helpers - fixed-point arithmetic for cost/price conversion.

All results are rounded to 2 decimals with ROUND_HALF_UP, once, at the end of
each computation. Exchange rates are "cost currency per sell currency"
(e.g. 35.5 TRY per EUR), so converting cost to sell currency divides.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    """Convert without binary float artifacts (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _check_rate(rate: Decimal) -> None:
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")


def price_from_cost(cost: Number, markup_pct: Number, rate: Number) -> Decimal:
    """
    Sell price from cost: cost * (1 + markup%) / rate.

    Example: 9000 TRY, 25% markup, 35.5 TRY/EUR -> 316.90 EUR
    """
    cost = to_decimal(cost)
    markup = to_decimal(markup_pct)
    rate = to_decimal(rate)

    if cost < 0:
        raise ValueError("Cost cannot be negative")
    if markup < 0:
        raise ValueError("Markup percentage cannot be negative")
    _check_rate(rate)

    return quantize_money(cost * (Decimal("1") + markup / HUNDRED) / rate)


def cost_from_price(sell_price: Number, markup_pct: Number, rate: Number) -> Decimal:
    """Inverse of price_from_cost: sell_price * rate / (1 + markup%)."""
    sell_price = to_decimal(sell_price)
    markup = to_decimal(markup_pct)
    rate = to_decimal(rate)

    if sell_price < 0:
        raise ValueError("Sell price cannot be negative")
    if markup < 0:
        raise ValueError("Markup percentage cannot be negative")
    _check_rate(rate)

    return quantize_money(sell_price * rate / (Decimal("1") + markup / HUNDRED))


def calculate_margin(sell_price: Number, cost: Number, rate: Number) -> Decimal:
    """
    Gross margin percentage of the sell price:
    (sell - cost / rate) / sell * 100. Zero when nothing is sold.
    """
    sell_price = to_decimal(sell_price)
    cost = to_decimal(cost)
    rate = to_decimal(rate)

    if sell_price <= 0:
        return ZERO
    _check_rate(rate)

    cost_in_sell_currency = cost / rate
    return quantize_money((sell_price - cost_in_sell_currency) / sell_price * HUNDRED)


def calculate_profit(sell_price: Number, cost: Number, rate: Number) -> Decimal:
    """Profit in sell currency: sell - cost / rate."""
    rate = to_decimal(rate)
    _check_rate(rate)
    return quantize_money(to_decimal(sell_price) - to_decimal(cost) / rate)


def apply_surcharge(amount: Decimal, pct: Number) -> Decimal:
    """amount * (1 + pct/100), unrounded."""
    return amount * (Decimal("1") + to_decimal(pct) / HUNDRED)
