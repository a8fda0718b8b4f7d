"""Display formatting for amounts, dates and assistant replies.

Hides the en-IN presentation conventions used across the app.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from rich.markdown import Markdown

CURRENCY_SYMBOL = "₹"


def group_indian(digits: str) -> str:
    """Insert separators the Indian way: last three digits, then pairs.

    >>> group_indian("12345678")
    '1,23,45,678'
    """
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join([*pairs, tail])


def format_currency(amount: Decimal | float | int) -> str:
    """Format an amount as whole rupees, e.g. ``₹1,23,457``."""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{group_indian(str(abs(value)))}"


def format_date(value: date | datetime | str) -> str:
    """Format a date as ``18 Oct 2026``."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return f"{value.day} {value:%b %Y}"


def render_reply(text: str) -> Markdown:
    """Render an assistant reply; replies are markdown."""
    return Markdown(text or " ")
