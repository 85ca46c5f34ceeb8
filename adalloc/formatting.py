"""Display formatting for money and ratios."""
from typing import Union

from adalloc.models import Currency, parse_enum


def get_currency_symbol(currency: Union[Currency, str]) -> str:
    return parse_enum(Currency, currency, Currency.USD).symbol


def format_currency(amount: float, currency: Union[Currency, str] = Currency.USD) -> str:
    """Symbol plus thousands-separated whole amount, e.g. ``$67,500``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{get_currency_symbol(currency)}{abs(amount):,.0f}"


def format_roas(value: float) -> str:
    return f"{value:.2f}x"


def format_percent(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}%"
