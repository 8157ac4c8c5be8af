"""Sitemap and WooCommerce product page retrieval.

Only raw fields are extracted here; turning them into a snapshot is the
normalizer's job.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .errors import RetrievalError
from .models import RawProduct
from .utils import HTTPError, get_http_session, retryable_request

logger = logging.getLogger(__name__)

_NAME_SELECTOR = "h1.product_title"
_PRICE_SELECTOR = "p.price span.woocommerce-Price-amount bdi"
_ADD_TO_CART_SELECTOR = "button.single_add_to_cart_button"
_OUT_OF_STOCK_SELECTOR = "p.stock.out-of-stock"
_QTY_SELECTOR = "input.qty"

# Prefer meta og:image first (absolute CDN URL), then the gallery image.
_IMAGE_SELECTORS = [
    'meta[property="og:image"]',
    'meta[name="og:image"]',
    "div.woocommerce-product-gallery__image img",
    "img.wp-post-image",
]


@retryable_request
def _get(session: requests.Session, url: str, **kwargs) -> requests.Response:
    """Thin wrapper around session.get with retry policy from utils.retryable_request."""
    return session.get(url, **kwargs)


def _fetch_text(session: requests.Session, url: str, timeout: int) -> str:
    try:
        return _get(session, url, timeout=timeout).text
    except (requests.RequestException, HTTPError) as e:
        raise RetrievalError(f"failed to fetch {url}: {e}") from e


def _locs(soup: BeautifulSoup) -> List[str]:
    return [loc.get_text(strip=True) for loc in soup.find_all("loc")]


def fetch_product_urls(
    sitemap_url: str,
    *,
    path_filter: str = "/shop/",
    session: Optional[requests.Session] = None,
    timeout: int = 20,
) -> List[str]:
    """Return product page URLs listed in a sitemap, in sitemap order.

    A sitemap index is followed one level down into its child sitemaps.
    Raises RetrievalError if the top-level sitemap cannot be fetched.
    """
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    try:
        xml = _fetch_text(session, sitemap_url, timeout)
        soup = BeautifulSoup(xml, "html.parser")
        entries = _locs(soup)

        if soup.find("sitemapindex") is not None:
            logger.info("Sitemap index with %d child sitemaps", len(entries))
            children = entries
            entries = []
            for child in children:
                try:
                    child_xml = _fetch_text(session, child, timeout)
                except RetrievalError:
                    logger.warning("Skipping child sitemap %s", child, exc_info=True)
                    continue
                entries.extend(_locs(BeautifulSoup(child_xml, "html.parser")))

        urls = [u for u in entries if u.startswith("http") and path_filter in u]
        logger.info("Found %d product URLs in sitemap", len(urls))
        return urls
    finally:
        if close_session:
            session.close()


def _extract_image_url(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    for sel in _IMAGE_SELECTORS:
        el = soup.select_one(sel)
        if not el:
            continue
        # meta provides content; img provides src
        src = el.get("content") or el.get("data-src") or el.get("src")
        if not src:
            continue
        return urljoin(page_url, src.strip())
    return None


def parse_product_page(html: str, url: str) -> RawProduct:
    """Extract raw fields from a product page. Missing fields get defaults."""
    soup = BeautifulSoup(html, "html.parser")

    title = soup.select_one(_NAME_SELECTOR)
    name = title.get_text(" ", strip=True) if title else ""

    price_texts = [el.get_text(strip=True) for el in soup.select(_PRICE_SELECTOR)]

    qty_el = soup.select_one(_QTY_SELECTOR)
    quantity = (qty_el.get("max") or None) if qty_el else None

    return RawProduct(
        url=url,
        name=name,
        price_texts=price_texts,
        has_add_to_cart=soup.select_one(_ADD_TO_CART_SELECTOR) is not None,
        has_out_of_stock=soup.select_one(_OUT_OF_STOCK_SELECTOR) is not None,
        quantity=quantity,
        image_url=_extract_image_url(soup, url),
    )


def fetch_product(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: int = 20,
) -> RawProduct:
    """Fetch and parse one product page. Raises RetrievalError on fetch failure."""
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True
    try:
        html = _fetch_text(session, url, timeout)
    finally:
        if close_session:
            session.close()
    return parse_product_page(html, url)


__all__ = ["fetch_product_urls", "fetch_product", "parse_product_page"]
