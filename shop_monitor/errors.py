"""Typed error kinds raised at the monitor's boundaries.

Every error carries a short ``kind`` tag so the orchestrator can log it to the
alert log in a uniform way and decide how much work to abandon.
"""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for all monitor errors."""

    kind: str = "monitor"


class RetrievalError(MonitorError):
    """Raised when the sitemap or a product page could not be fetched."""

    kind = "retrieval"


class ParseError(MonitorError):
    """Raised when an expected field could not be parsed."""

    kind = "parse"


class ComputationError(MonitorError):
    """Raised when a derived value (e.g. a percentage) cannot be computed."""

    kind = "computation"


class DeliveryError(MonitorError):
    """Raised when an alert could not be delivered to the webhook."""

    kind = "delivery"


__all__ = [
    "MonitorError",
    "RetrievalError",
    "ParseError",
    "ComputationError",
    "DeliveryError",
]
