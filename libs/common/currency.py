"""Tenge amount helpers.

Storage unit: whole tenge (int). Kazakhstan retail prices carry no tiyn, so
every price, subtotal and total in the system is an integer number of tenge.

Display format groups thousands with a plain space: 11000 -> "11 000".
"""

from __future__ import annotations

# ─── constants ───────────────────────────────────────────────────────────────

CURRENCY_CODE: str = "KZT"
CURRENCY_SIGN: str = "₸"
THOUSANDS_SEPARATOR: str = " "


# ─── formatting helpers ──────────────────────────────────────────────────────


def format_amount(amount: int | float) -> str:
    """Group thousands with spaces. 5000 -> "5 000"."""
    rounded = int(round(amount))
    grouped = f"{abs(rounded):,}".replace(",", THOUSANDS_SEPARATOR)
    return f"-{grouped}" if rounded < 0 else grouped


def format_price(amount: int | float) -> str:
    """Amount with the tenge sign. 5000 -> "5 000 ₸"."""
    return f"{format_amount(amount)} {CURRENCY_SIGN}"


def percent_of(amount: int, percent: int | float) -> int:
    """Percentage of an amount, rounded half-up to whole tenge."""
    return int(amount * percent / 100 + 0.5)
