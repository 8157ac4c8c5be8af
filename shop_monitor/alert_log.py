"""Append-only alert log and the text-equality dedup check.

Alert lines hold the plain rendered text.  Error lines are written as
``[<iso timestamp>] ERROR: <kind>: <message>`` and are skipped when the
recent-alert set is rebuilt at the start of a cycle.
"""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import AbstractSet, Set

from .errors import MonitorError

logger = logging.getLogger(__name__)

ERROR_TAG = "ERROR:"


def is_duplicate(text: str, recent_alerts: AbstractSet[str]) -> bool:
    return text in recent_alerts


class AlertLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load_recent(self) -> Set[str]:
        """Return every previously emitted alert text (error lines excluded)."""
        if not self.path.exists():
            return set()
        with open(self.path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
        recent = {ln for ln in lines if ln.strip() and ERROR_TAG not in ln}
        logger.debug("Loaded %d recent alerts from %s", len(recent), self.path)
        return recent

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def append_alert(self, text: str) -> None:
        self._append(text)

    def append_error(self, error: BaseException) -> None:
        kind = error.kind if isinstance(error, MonitorError) else type(error).__name__
        now = _dt.datetime.now(_dt.timezone.utc).isoformat()
        message = " ".join(str(error).split())
        self._append(f"[{now}] {ERROR_TAG} {kind}: {message}")


__all__ = ["ERROR_TAG", "AlertLog", "is_duplicate"]
