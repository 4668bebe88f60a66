"""Hand checkout over to a human in the system browser."""
from __future__ import annotations

import webbrowser

from . import logger
from . import endpoints
from .sku import CartOutcome

log = logger.get("HANDOFF")


def open_browser(url: str) -> bool:
    """Open `url` in the default browser."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        log.error(f"Error opening browser: {e}")
        return False

    if opened:
        log.info(f"Browser opened at {url}")
    else:
        log.warning(f"No browser available, open manually: {url}")
    return opened


def hand_off(outcome: CartOutcome, product_url: str) -> str:
    """
    Point the user at the basket on success, or the product page on failure.

    Returns:
        The URL handed over
    """
    if outcome.success:
        log.success(f"{outcome.product} in basket, opening basket for checkout")
        url = endpoints.BASKET_URL
    else:
        log.warning(f"Could not add {outcome.product}, opening product page")
        url = product_url

    open_browser(url)
    return url
