"""
Shop monitoring service package.

This package contains modules for reading a shop's product sitemap,
normalizing scraped product pages, detecting new products, restocks,
sell-outs and price changes against the last saved state, and notifying
Discord.  See README.md for details.
"""

__all__ = [
    "alert_log",
    "config",
    "diff",
    "errors",
    "main",
    "models",
    "normalizer",
    "notifier",
    "renderer",
    "scraper",
    "state_store",
    "utils",
]
