from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass
from typing import AbstractSet, Dict, Optional

import requests

from . import config, diff, notifier, scraper
from .alert_log import AlertLog, is_duplicate
from .errors import DeliveryError, RetrievalError
from .models import ChangeEvent, ProductRecord, ProductSnapshot
from .normalizer import normalize
from .renderer import render
from .state_store import JsonStateStore
from .utils import get_http_session

logger = logging.getLogger(__name__)


def setup_logging(level_name: str = "INFO") -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@dataclass
class CycleStats:
    products: int = 0
    skipped: int = 0
    failed: int = 0
    emitted: int = 0
    suppressed: int = 0


def process_snapshot(
    snapshot: ProductSnapshot,
    state: Dict[str, ProductRecord],
    recent_alerts: AbstractSet[str],
    *,
    settings: config.Settings,
    alert_log: AlertLog,
    stats: CycleStats,
    session: Optional[requests.Session] = None,
    emit: bool = True,
) -> ChangeEvent:
    """Decide, render, dedup and emit for one product, then refresh its record."""
    event = diff.decide(state.get(snapshot.key), snapshot)
    state[snapshot.key] = diff.to_record(snapshot)

    alert = render(event, settings.currency_symbol)
    if alert is None:
        return event
    if not emit:
        logger.debug("Seeding %s without alert (%s)", snapshot.key, event.kind.value)
        return event
    if is_duplicate(alert.text, recent_alerts):
        logger.info("Suppressed duplicate alert: %s", alert.text)
        stats.suppressed += 1
        return event

    logger.info("%s", alert.text)
    alert_log.append_alert(alert.text)
    stats.emitted += 1

    if settings.discord_webhook_url:
        try:
            notifier.send_alert(
                alert,
                settings.discord_webhook_url,
                attach_images=settings.discord_attach_images,
                session=session,
            )
        except DeliveryError as e:
            logger.error("%s", e)
            alert_log.append_error(e)
    return event


def run_cycle(settings: config.Settings, session: Optional[requests.Session] = None) -> Optional[CycleStats]:
    """One full pass: sitemap, every product in order, state write-back.

    Returns None when the sitemap could not be retrieved (nothing processed).
    """
    alert_log = AlertLog(settings.alert_log_path)
    store = JsonStateStore(settings.state_file_path)

    recent_alerts = alert_log.load_recent()
    state = store.load()
    emit = not (settings.silent_first_run and not state)
    if not emit:
        logger.info("Empty state: seeding all products without alerts.")

    close_session = False
    if session is None:
        session = get_http_session(settings.user_agent)
        close_session = True

    stats = CycleStats()
    try:
        try:
            urls = scraper.fetch_product_urls(
                settings.sitemap_url,
                path_filter=settings.product_path_filter,
                session=session,
                timeout=settings.request_timeout,
            )
        except RetrievalError as e:
            logger.error("Cycle aborted: %s", e)
            alert_log.append_error(e)
            return None

        for url in urls:
            try:
                raw = scraper.fetch_product(url, session=session, timeout=settings.request_timeout)
            except RetrievalError as e:
                logger.error("%s", e)
                alert_log.append_error(e)
                stats.failed += 1
                continue

            logger.debug("Extracted product: %s", raw)
            snapshot = normalize(raw, settings.currency_symbol)
            if snapshot is None:
                stats.skipped += 1
                continue

            stats.products += 1
            try:
                process_snapshot(
                    snapshot,
                    state,
                    recent_alerts,
                    settings=settings,
                    alert_log=alert_log,
                    stats=stats,
                    session=session,
                    emit=emit,
                )
            except Exception as e:
                logger.exception("Unexpected error while processing %s", url)
                alert_log.append_error(e)
                stats.failed += 1

        store.save(state)
    finally:
        if close_session:
            session.close()

    logger.info(
        "Cycle done: %d products, %d alerts, %d duplicates suppressed, %d skipped, %d failed.",
        stats.products, stats.emitted, stats.suppressed, stats.skipped, stats.failed,
    )
    return stats


def poll_forever(settings: config.Settings) -> None:
    """Run cycles back to back, sleeping the configured interval in between."""
    while True:
        try:
            fresh = config.load_settings()
            config.validate(fresh)
            settings = fresh
        except RuntimeError:
            logger.exception("Invalid configuration; keeping the previous settings.")

        try:
            run_cycle(settings)
        except Exception:
            logger.exception("Unexpected error during cycle.")

        logger.info("Sleeping %d seconds before the next cycle.", settings.poll_interval_seconds)
        time.sleep(settings.poll_interval_seconds)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shop-monitor",
        description="Watch a shop sitemap and alert on new products, restocks, sell-outs and price changes.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run a single cycle and exit.",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Initialise and run the monitoring loop."""
    args = _build_parser().parse_args(argv)
    settings = config.load_settings()
    config.validate(settings)
    setup_logging(settings.log_level)

    logger.info(
        "Starting shop monitor for %s (interval %ss).",
        settings.sitemap_url,
        settings.poll_interval_seconds,
    )
    if not settings.discord_webhook_url:
        logger.warning("DISCORD_WEBHOOK_URL is not set; alerts will only be written to %s.", settings.alert_log_path)

    if args.once:
        run_cycle(settings)
        return
    try:
        poll_forever(settings)
    except KeyboardInterrupt:
        logger.info("Shop monitor stopped.")


if __name__ == "__main__":
    main()
