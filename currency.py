"""
currency.py
-----------
Convert amounts into the local reporting currency and fetch the live
local-per-USD rate.

A record is USD-denominated when its ``currency`` field says so.  Older
records only carried that information inside the description text, as a
``(USD)`` or ``U$D`` marker, so the marker is still honoured when the
field is missing or local.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

import config

logger = logging.getLogger(__name__)

USD = "USD"
USD_MARKERS = ("(usd)", "u$d")
SUPPORTED_CURRENCIES = (config.LOCAL_CURRENCY, USD)


def is_usd_marked(description: Optional[str]) -> bool:
    """Case-insensitive check for a USD marker in free text."""
    if not description:
        return False
    lowered = str(description).lower()
    return any(marker in lowered for marker in USD_MARKERS)


def is_usd(currency: Optional[str] = None, description: Optional[str] = None) -> bool:
    if currency and str(currency).upper() == USD:
        return True
    return is_usd_marked(description)


def to_local(amount: float, rate: float, currency: Optional[str] = None, description: Optional[str] = None) -> float:
    """
    Express ``amount`` in the local currency.

    USD amounts are multiplied by ``rate``; everything else is returned
    unchanged.  No rounding happens here.
    """
    amount = float(amount)
    if is_usd(currency, description):
        return amount * rate
    return amount


def normalize_amount(amount: float, description: Optional[str], rate: float) -> float:
    """Marker-only conversion, for records without a currency field."""
    return to_local(amount, rate, description=description)


def fetch_usd_rate(default: float = config.DEFAULT_USD_RATE, url: str = config.USD_RATE_URL,
                   timeout: float = config.USD_RATE_TIMEOUT) -> float:
    """
    Fetch the current selling rate (local units per 1 USD).

    Best effort: any network error, bad status or unusable payload returns
    ``default``.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("USD rate unavailable, keeping %s: %s", default, exc)
        return default

    venta = data.get("venta") if isinstance(data, dict) else None
    try:
        rate = float(venta)
    except (TypeError, ValueError):
        logger.warning("USD rate payload without a usable 'venta': %r", data)
        return default

    if rate <= 0:
        logger.warning("Ignoring non-positive USD rate %s", rate)
        return default

    logger.info("USD rate refreshed", extra={"rate": rate, "source": url})
    return rate
