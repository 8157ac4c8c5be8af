"""Data model shared by the monitor components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Absent:
    """No price could be read from the page."""

    @property
    def lead(self) -> Optional[Decimal]:
        return None


@dataclass(frozen=True)
class Scalar:
    amount: Decimal

    @property
    def lead(self) -> Optional[Decimal]:
        return self.amount


@dataclass(frozen=True)
class Variants:
    """One amount per product variant, in page order."""

    amounts: Tuple[Decimal, ...]

    @property
    def lead(self) -> Optional[Decimal]:
        return self.amounts[0] if self.amounts else None


Price = Union[Absent, Scalar, Variants]

ABSENT = Absent()


@dataclass
class RawProduct:
    """Fields extracted from a product page before normalization."""

    url: str
    name: str = ""
    price_texts: List[str] = field(default_factory=list)
    has_add_to_cart: bool = False
    has_out_of_stock: bool = False
    quantity: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class ProductSnapshot:
    key: str
    price: Price
    available: bool
    source_url: str
    quantity_hint: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class ProductRecord:
    price: Price
    available: bool
    quantity_hint: Optional[str] = None


class EventKind(enum.Enum):
    NEW = "new"
    RESTOCK = "restock"
    SOLD_OUT = "sold_out"
    PRICE_CHANGE = "price_change"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ChangeEvent:
    kind: EventKind
    snapshot: ProductSnapshot
    # Only set for PRICE_CHANGE.
    old_amount: Optional[Decimal] = None
    new_amount: Optional[Decimal] = None
    delta: Optional[str] = None

    @property
    def key(self) -> str:
        return self.snapshot.key


@dataclass(frozen=True)
class RenderedAlert:
    text: str
    title: str
    rich_text: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None


__all__ = [
    "ABSENT",
    "Absent",
    "Scalar",
    "Variants",
    "Price",
    "RawProduct",
    "ProductSnapshot",
    "ProductRecord",
    "EventKind",
    "ChangeEvent",
    "RenderedAlert",
]
