"""JSON-file persistence of the last known record per product."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Mapping

from .models import ABSENT, Price, ProductRecord, Scalar, Variants

logger = logging.getLogger(__name__)


def _amount_to_json(amount: Decimal) -> int | float:
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def _to_decimal(value: Any) -> Decimal:
    # ints come back as int even with parse_float=Decimal
    return value if isinstance(value, Decimal) else Decimal(str(value))


def price_to_json(price: Price) -> Any:
    if isinstance(price, Scalar):
        return _amount_to_json(price.amount)
    if isinstance(price, Variants):
        return [_amount_to_json(a) for a in price.amounts]
    return None


def price_from_json(value: Any) -> Price:
    if value is None or isinstance(value, bool):
        return ABSENT
    if isinstance(value, list):
        amounts = tuple(_to_decimal(v) for v in value if v is not None)
        if not amounts:
            return ABSENT
        return Variants(amounts)
    return Scalar(_to_decimal(value))


def record_to_json(record: ProductRecord) -> Dict[str, Any]:
    return {
        "price": price_to_json(record.price),
        "available": record.available,
        "quantity": record.quantity_hint,
    }


def record_from_json(data: Mapping[str, Any]) -> ProductRecord:
    qty = data.get("quantity")
    return ProductRecord(
        price=price_from_json(data.get("price")),
        available=bool(data.get("available", False)),
        quantity_hint=str(qty) if qty is not None else None,
    )


class JsonStateStore:
    """Whole-file load/save of ``{product key: record}``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Dict[str, ProductRecord]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f, parse_float=Decimal)
        state = {str(k): record_from_json(v) for k, v in raw.items()}
        logger.debug("Loaded %d product records from %s", len(state), self.path)
        return state

    def save(self, state: Mapping[str, ProductRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: record_to_json(v) for k, v in state.items()}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.info("Saved %d product records to %s", len(data), self.path)


__all__ = [
    "JsonStateStore",
    "price_to_json",
    "price_from_json",
    "record_to_json",
    "record_from_json",
]
