"""Currency formatting helpers shared by the product and cart projections."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Tuple, Union

from .config import Settings

CURRENCY_SYMBOLS: Dict[str, str] = {
    "AUD": "$",
    "BRL": "R$",
    "CAD": "$",
    "CHF": "CHF",
    "CNY": "¥",
    "DKK": "kr.",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "KES": "KSh",
    "MXN": "$",
    "NOK": "kr",
    "NZD": "$",
    "PLN": "zł",
    "SEK": "kr",
    "USD": "$",
    "ZAR": "R",
}


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code.upper(), code.upper())


def price_prefix_suffix(settings: Settings) -> Tuple[str, str]:
    """Return ``(prefix, suffix)`` for the configured currency position."""
    symbol = currency_symbol(settings.currency)
    position = settings.currency_pos
    if position == "left_space":
        return symbol + " ", ""
    if position == "right":
        return "", symbol
    if position == "right_space":
        return "", " " + symbol
    return symbol, ""


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def format_amount(value: Union[str, Decimal, None], decimals: int) -> str:
    """Render an amount with a fixed number of decimals; ``""`` stays ``""``."""
    if value is None or value == "":
        return ""
    quantum = Decimal(1).scaleb(-decimals)
    return str(to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def to_minor_units(value: Union[str, Decimal, None], decimals: int) -> str:
    """``"10.5"`` with two decimals becomes ``"1050"``."""
    amount = to_decimal(value).scaleb(decimals)
    return str(int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP)))


def format_display_price(value: Union[str, Decimal], settings: Settings) -> str:
    """Human readable price, e.g. ``$1,234.50``."""
    amount = to_decimal(value).quantize(
        Decimal(1).scaleb(-settings.price_num_decimals), rounding=ROUND_HALF_UP
    )
    sign = "-" if amount < 0 else ""
    text = "{:,.{prec}f}".format(abs(amount), prec=settings.price_num_decimals)
    integer, _, fraction = text.partition(".")
    integer = integer.replace(",", settings.price_thousand_sep)
    number = integer + (settings.price_decimal_sep + fraction if fraction else "")
    prefix, suffix = price_prefix_suffix(settings)
    return f"{sign}{prefix}{number}{suffix}"
