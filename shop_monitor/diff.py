"""Change detection between the stored record and a fresh snapshot.

Exactly one event is produced per product and cycle.  When several axes
change at once, availability transitions win over price changes:

    NEW > RESTOCK > SOLD_OUT > PRICE_CHANGE > UNCHANGED

Prices are compared on their lead amount (the scalar, or the first variant).
A scalar on one side and variants on the other always counts as a change.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from .errors import ComputationError
from .models import (
    Absent,
    ChangeEvent,
    EventKind,
    Price,
    ProductRecord,
    ProductSnapshot,
    Scalar,
    Variants,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def prices_differ(old: Price, new: Price) -> bool:
    """True when both prices are present and they differ."""
    if isinstance(old, Absent) or isinstance(new, Absent):
        return False
    if isinstance(old, Scalar) and isinstance(new, Scalar):
        return old.amount != new.amount
    if isinstance(old, Variants) and isinstance(new, Variants):
        return old.lead != new.lead
    # scalar vs variants
    return True


def percent_delta(old: Decimal, new: Decimal) -> str:
    """Signed percentage change, e.g. ``"+20.00"`` or ``"-20.00"``."""
    try:
        pct = (new - old) / old * 100
    except (ZeroDivisionError, InvalidOperation) as e:
        raise ComputationError(f"cannot compute change from {old} to {new}") from e
    pct = pct.quantize(_CENT, rounding=ROUND_HALF_UP)
    if pct.is_zero():
        # a tiny drop rounds to -0.00
        pct = abs(pct)
    sign = "" if pct.is_signed() else "+"
    return f"{sign}{pct}"


def decide(prior: Optional[ProductRecord], current: ProductSnapshot) -> ChangeEvent:
    if prior is None:
        return ChangeEvent(EventKind.NEW, current)
    if not prior.available and current.available:
        return ChangeEvent(EventKind.RESTOCK, current)
    if prior.available and not current.available:
        return ChangeEvent(EventKind.SOLD_OUT, current)
    if prices_differ(prior.price, current.price):
        old, new = prior.price.lead, current.price.lead
        delta: Optional[str] = None
        if old is not None and new is not None:
            try:
                delta = percent_delta(old, new)
            except ComputationError as e:
                logger.warning("Price change for %s reported without percentage: %s", current.key, e)
        return ChangeEvent(
            EventKind.PRICE_CHANGE,
            current,
            old_amount=old,
            new_amount=new,
            delta=delta,
        )
    return ChangeEvent(EventKind.UNCHANGED, current)


def to_record(snapshot: ProductSnapshot) -> ProductRecord:
    return ProductRecord(
        price=snapshot.price,
        available=snapshot.available,
        quantity_hint=snapshot.quantity_hint,
    )


__all__ = ["prices_differ", "percent_delta", "decide", "to_record"]
