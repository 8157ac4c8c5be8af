"""Turn raw page fields into a ProductSnapshot."""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from .errors import ParseError
from .models import ABSENT, Absent, Price, ProductSnapshot, RawProduct, Scalar, Variants

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "N/A"


def parse_price_token(text: str, currency: str = "€") -> Decimal:
    """Parse a single price string such as ``"1.299,00 €"`` into a Decimal.

    The last separator (``,`` or ``.``) is the decimal point and any earlier
    ones are thousands separators, so ``"$1,299.00"`` and ``"1.299,00 €"``
    both give 1299.00.  A separator that appears more than once is always a
    thousands separator (``"1.299.000"``).  A lone comma is read as a decimal
    point: ``"1,299"`` is 1.299.
    """
    if text is None:
        raise ParseError("price token is missing")
    t = str(text).replace(currency, "").strip()
    t = re.sub(r"[^0-9\.,]", "", t)
    last = max(t.rfind(","), t.rfind("."))
    if last >= 0:
        if t.count(t[last]) > 1:
            t = t.replace(",", "").replace(".", "")
        else:
            t = re.sub(r"[\.,]", "", t[:last]) + "." + t[last + 1:]
    if not t:
        raise ParseError(f"no digits in price token {text!r}")
    try:
        return Decimal(t)
    except InvalidOperation as e:
        raise ParseError(f"unparseable price token {text!r}") from e


def normalize_price(tokens: Iterable[str], currency: str = "€") -> Price:
    amounts: List[Decimal] = []
    for tok in tokens:
        try:
            amounts.append(parse_price_token(tok, currency))
        except ParseError as e:
            logger.debug("Skipping price token: %s", e)
    if len(amounts) > 1:
        return Variants(tuple(amounts))
    if amounts:
        return Scalar(amounts[0])
    return ABSENT


def is_listed(price: Price) -> bool:
    """False for prices that are absent or whose lead amount is zero."""
    lead = price.lead
    return lead is not None and lead != 0


def normalize(raw: RawProduct, currency: str = "€") -> Optional[ProductSnapshot]:
    """Build a snapshot, or return None when the product is not a real listing."""
    price = normalize_price(raw.price_texts, currency)
    available = (
        raw.has_add_to_cart
        and not raw.has_out_of_stock
        and not isinstance(price, Absent)
    )
    if not is_listed(price):
        logger.debug("Dropping %s: no usable price (%r)", raw.url, price)
        return None

    # one line per alert in the log
    name = " ".join((raw.name or "").split()) or PLACEHOLDER_NAME
    return ProductSnapshot(
        key=name,
        price=price,
        available=available,
        source_url=raw.url,
        quantity_hint=raw.quantity or None,
        image_url=raw.image_url or None,
    )


__all__ = ["PLACEHOLDER_NAME", "parse_price_token", "normalize_price", "is_listed", "normalize"]
