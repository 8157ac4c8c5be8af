"""Alert rendering.

``text`` is the single-line plain form written to the alert log and used for
dedup; ``rich_text`` is the same sentence with Discord ``**bold**`` emphasis.
Markdown characters inside the emphasised parts are backslash-escaped.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

from .models import Absent, ChangeEvent, EventKind, Price, RenderedAlert, Scalar, Variants

_TITLES = {
    EventKind.NEW: "New product",
    EventKind.RESTOCK: "Restock",
    EventKind.SOLD_OUT: "Sold out",
    EventKind.PRICE_CHANGE: "Price changed",
}

_ICONS = {
    EventKind.NEW: "🆕",
    EventKind.RESTOCK: "🔄",
    EventKind.SOLD_OUT: "❌",
    EventKind.PRICE_CHANGE: "💸",
}


def clean_name(name: str) -> str:
    """Drop a ``| Site name`` style suffix from a product title."""
    return name.split("|", 1)[0].strip()


def format_amount(amount: Decimal, currency: str = "€") -> str:
    # normalize() alone would print 10 as 1E+1
    return f"{format(amount.normalize(), 'f')}{currency}"


def format_price(price: Price, currency: str = "€") -> str:
    if isinstance(price, Scalar):
        return format_amount(price.amount, currency)
    if isinstance(price, Variants):
        return " / ".join(format_amount(a, currency) for a in price.amounts)
    if isinstance(price, Absent):
        return "n/a"
    raise TypeError(f"unknown price type: {price!r}")


_MARKDOWN_CHARS = re.compile(r"([\\*_~`|>])")


def escape_markdown(s: str) -> str:
    return _MARKDOWN_CHARS.sub(r"\\\1", s)


def _bold(s: str) -> str:
    return f"**{escape_markdown(s)}**"


def _sentence(event: ChangeEvent, currency: str, emphasis) -> str:
    name = emphasis(clean_name(event.snapshot.key))
    head = f"{_ICONS[event.kind]} {_TITLES[event.kind]}"

    if event.kind in (EventKind.NEW, EventKind.RESTOCK):
        return f"{head}: {name} ({format_price(event.snapshot.price, currency)})"
    if event.kind is EventKind.SOLD_OUT:
        return f"{head}: {name}"

    old = format_amount(event.old_amount, currency) if event.old_amount is not None else "n/a"
    new = format_amount(event.new_amount, currency) if event.new_amount is not None else "n/a"
    msg = f"{head}: {name} from {emphasis(old)} to {emphasis(new)}"
    if event.delta is not None:
        msg += f" ({event.delta}%)"
    return msg


def render(event: ChangeEvent, currency: str = "€") -> Optional[RenderedAlert]:
    """Render an event; UNCHANGED events produce nothing."""
    if event.kind is EventKind.UNCHANGED:
        return None

    return RenderedAlert(
        text=_sentence(event, currency, lambda s: s),
        title=f"{_TITLES[event.kind]}: {clean_name(event.snapshot.key)}",
        rich_text=_sentence(event, currency, _bold),
        link=event.snapshot.source_url or None,
        image=event.snapshot.image_url or None,
    )


__all__ = ["clean_name", "escape_markdown", "format_amount", "format_price", "render"]
