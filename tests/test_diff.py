# tests/test_diff.py

"""Tests for change detection precedence and price comparison."""

import unittest
from decimal import Decimal

from shop_monitor.diff import decide, percent_delta, prices_differ, to_record
from shop_monitor.errors import ComputationError
from shop_monitor.models import (
    ABSENT,
    EventKind,
    ProductRecord,
    ProductSnapshot,
    Scalar,
    Variants,
)


def _d(*values: str) -> tuple:
    return tuple(Decimal(v) for v in values)


def _snap(price=Scalar(Decimal("10")), available: bool = True) -> ProductSnapshot:
    return ProductSnapshot(
        key="Widget",
        price=price,
        available=available,
        source_url="https://shop.example/shop/widget/",
        quantity_hint="4",
    )


def _rec(price=Scalar(Decimal("10")), available: bool = True) -> ProductRecord:
    return ProductRecord(price=price, available=available)


class TestPricesDiffer(unittest.TestCase):
    """prices_differ across the three price shapes."""

    def test_equal_scalars(self) -> None:
        self.assertFalse(prices_differ(Scalar(Decimal("10")), Scalar(Decimal("10.00"))))

    def test_different_scalars(self) -> None:
        self.assertTrue(prices_differ(Scalar(Decimal("10")), Scalar(Decimal("12"))))

    def test_variants_compare_lead_only(self) -> None:
        self.assertFalse(prices_differ(Variants(_d("10", "12")), Variants(_d("10", "15"))))
        self.assertTrue(prices_differ(Variants(_d("10", "12")), Variants(_d("11", "12"))))

    def test_mixed_shapes_always_differ(self) -> None:
        self.assertTrue(prices_differ(Scalar(Decimal("10")), Variants(_d("10", "12"))))
        self.assertTrue(prices_differ(Variants(_d("10", "12")), Scalar(Decimal("10"))))

    def test_absent_never_differs(self) -> None:
        self.assertFalse(prices_differ(ABSENT, Scalar(Decimal("10"))))
        self.assertFalse(prices_differ(Scalar(Decimal("10")), ABSENT))


class TestPercentDelta(unittest.TestCase):
    """percent_delta formatting."""

    def test_increase(self) -> None:
        self.assertEqual(percent_delta(Decimal("100"), Decimal("120")), "+20.00")

    def test_decrease(self) -> None:
        self.assertEqual(percent_delta(Decimal("100"), Decimal("80")), "-20.00")

    def test_tiny_drop_has_no_negative_zero(self) -> None:
        self.assertEqual(percent_delta(Decimal("1000"), Decimal("999.99")), "+0.00")

    def test_tiny_drop_above_rounding_keeps_minus(self) -> None:
        self.assertEqual(percent_delta(Decimal("100"), Decimal("99.99")), "-0.01")

    def test_rounding(self) -> None:
        self.assertEqual(percent_delta(Decimal("3"), Decimal("4")), "+33.33")

    def test_zero_base_raises(self) -> None:
        with self.assertRaises(ComputationError):
            percent_delta(Decimal("0"), Decimal("5"))


class TestDecide(unittest.TestCase):
    """decide() precedence."""

    def test_unknown_key_is_new(self) -> None:
        self.assertEqual(decide(None, _snap()).kind, EventKind.NEW)
        self.assertEqual(decide(None, _snap(available=False)).kind, EventKind.NEW)

    def test_restock_beats_price_change(self) -> None:
        event = decide(_rec(available=False), _snap(price=Scalar(Decimal("15"))))
        self.assertEqual(event.kind, EventKind.RESTOCK)
        self.assertIsNone(event.delta)

    def test_sold_out(self) -> None:
        event = decide(_rec(), _snap(available=False))
        self.assertEqual(event.kind, EventKind.SOLD_OUT)

    def test_sold_out_beats_price_change(self) -> None:
        event = decide(_rec(), _snap(price=Scalar(Decimal("5")), available=False))
        self.assertEqual(event.kind, EventKind.SOLD_OUT)

    def test_scalar_price_change(self) -> None:
        event = decide(_rec(price=Scalar(Decimal("100"))), _snap(price=Scalar(Decimal("120"))))
        self.assertEqual(event.kind, EventKind.PRICE_CHANGE)
        self.assertEqual(event.old_amount, Decimal("100"))
        self.assertEqual(event.new_amount, Decimal("120"))
        self.assertEqual(event.delta, "+20.00")

    def test_equal_scalars_are_unchanged(self) -> None:
        event = decide(_rec(), _snap())
        self.assertEqual(event.kind, EventKind.UNCHANGED)

    def test_both_unavailable_equal_price_unchanged(self) -> None:
        event = decide(_rec(available=False), _snap(available=False))
        self.assertEqual(event.kind, EventKind.UNCHANGED)

    def test_non_lead_variant_change_is_ignored(self) -> None:
        event = decide(
            _rec(price=Variants(_d("10", "12"))),
            _snap(price=Variants(_d("10", "15"))),
        )
        self.assertEqual(event.kind, EventKind.UNCHANGED)

    def test_lead_variant_change_reports_leads(self) -> None:
        event = decide(
            _rec(price=Variants(_d("10", "12"))),
            _snap(price=Variants(_d("8", "12"))),
        )
        self.assertEqual(event.kind, EventKind.PRICE_CHANGE)
        self.assertEqual((event.old_amount, event.new_amount), (Decimal("10"), Decimal("8")))
        self.assertEqual(event.delta, "-20.00")

    def test_mixed_shape_is_price_change(self) -> None:
        event = decide(_rec(price=Scalar(Decimal("10"))), _snap(price=Variants(_d("10", "12"))))
        self.assertEqual(event.kind, EventKind.PRICE_CHANGE)
        self.assertEqual(event.delta, "+0.00")

    def test_zero_old_price_has_no_delta(self) -> None:
        event = decide(_rec(price=Scalar(Decimal("0"))), _snap(price=Scalar(Decimal("9"))))
        self.assertEqual(event.kind, EventKind.PRICE_CHANGE)
        self.assertIsNone(event.delta)

    def test_absent_prior_price_is_unchanged(self) -> None:
        event = decide(_rec(price=ABSENT), _snap())
        self.assertEqual(event.kind, EventKind.UNCHANGED)


class TestToRecord(unittest.TestCase):
    def test_copies_state_fields(self) -> None:
        record = to_record(_snap(available=False))
        self.assertEqual(
            record,
            ProductRecord(price=Scalar(Decimal("10")), available=False, quantity_hint="4"),
        )


if __name__ == "__main__":
    unittest.main()
