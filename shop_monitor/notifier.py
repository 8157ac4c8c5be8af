"""Discord webhook notifier.

Sends rendered alerts to a Discord channel via webhook.
If DISCORD_ATTACH_IMAGES=true, images are uploaded as attachments
and referenced via attachment://, which bypasses hotlink issues.
"""
from __future__ import annotations

import io
import json
import logging
import mimetypes
from typing import Optional
from urllib.parse import urlparse

import requests

from .errors import DeliveryError
from .models import RenderedAlert
from .utils import HTTPError, get_http_session, retryable_request

logger = logging.getLogger(__name__)


@retryable_request
def _post(session: requests.Session, url: str, **kwargs) -> requests.Response:
    return session.post(url, **kwargs)


def _guess_filename_and_mime(url: str, fallback_name: str = "image") -> tuple[str, str]:
    """
    Guess a safe filename and mime type from a URL.
    Defaults to .jpg if unknown.
    """
    parsed = urlparse(url)
    name = (parsed.path.rsplit("/", 1)[-1] or fallback_name).split("?")[0].split("#")[0]
    if "." not in name:
        name += ".jpg"
    mime = mimetypes.guess_type(name)[0] or "image/jpeg"
    return name, mime


def _download_image_bytes(session: requests.Session, url: str, *, max_bytes: int = 8 * 1024 * 1024) -> tuple[bytes, str, str] | None:
    """
    Fetch image bytes (capped) and return (bytes, filename, mime).
    Returns None on failure.
    """
    try:
        with session.get(url, timeout=20, stream=True) as resp:
            if resp.status_code != 200:
                logger.debug("Image download failed (%s): HTTP %s", url, resp.status_code)
                return None
            data = io.BytesIO()
            total = 0
            for chunk in resp.iter_content(8192):
                if not chunk:
                    continue
                total += len(chunk)
                if total > max_bytes:
                    logger.debug("Image too large (> %d bytes): %s", max_bytes, url)
                    return None
                data.write(chunk)
            b = data.getvalue()
        filename, mime = _guess_filename_and_mime(url)
        return b, filename, mime
    except requests.RequestException:
        logger.warning("Failed to download image: %s", url, exc_info=True)
        return None


def build_embed(alert: RenderedAlert, *, attachment_name: str | None = None) -> dict:
    embed = {
        "title": alert.title,
        "description": alert.rich_text or alert.text,
    }
    if alert.link:
        embed["url"] = alert.link

    if attachment_name:
        embed["image"] = {"url": f"attachment://{attachment_name}"}
    elif alert.image:
        embed["image"] = {"url": alert.image}

    return embed


def send_alert(
    alert: RenderedAlert,
    webhook_url: str,
    *,
    attach_images: bool = False,
    session: Optional[requests.Session] = None,
) -> None:
    """Post one alert to the webhook. Raises DeliveryError on failure."""
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    try:
        # Try attachment route if enabled and we have a URL to fetch
        if attach_images and alert.image:
            dl = _download_image_bytes(session, alert.image)
            if dl:
                data, filename, mime = dl
                payload = {"embeds": [build_embed(alert, attachment_name=filename)]}
                files = {"files[0]": (filename, data, mime)}
                logger.info("Sending alert (with attachment): %s", alert.text)
                _post(session, webhook_url, data={"payload_json": json.dumps(payload)}, files=files)
                return
            logger.debug("Falling back to direct image URL for %s", alert.link)

        payload = {"embeds": [build_embed(alert)]}
        logger.info("Sending alert: %s", alert.text)
        _post(session, webhook_url, json=payload)
    except (requests.RequestException, HTTPError) as e:
        raise DeliveryError(f"webhook delivery failed for {alert.text!r}: {e}") from e
    finally:
        if close_session:
            session.close()


__all__ = ["build_embed", "send_alert"]
