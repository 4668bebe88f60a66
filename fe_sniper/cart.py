"""Add-to-cart driver with page-state verification."""
from __future__ import annotations

from enum import Enum

from . import logger
from . import endpoints
from .page import PageSession
from .sku import CartOutcome

log = logger.get("CART")


class CartState(Enum):
    """Whether the current page proves the item is in the basket."""

    IN_CART = "in_cart"
    NOT_IN_CART = "not_in_cart"


async def classify_cart_state(session: PageSession) -> CartState:
    """
    Inspect the page for basket signals.

    Any one of the basket URL, the basket app root or a checkout link is
    enough. proshop reserves some items just by visiting the product URL
    and redirects straight to the basket.
    """
    if endpoints.BASKET_URL_MARKER in session.current_url.lower():
        log.debug("Basket URL detected")
        return CartState.IN_CART

    if await session.is_present(endpoints.CART_APP_MARKER):
        log.debug("Basket app detected")
        return CartState.IN_CART

    if await session.is_present(endpoints.CHECKOUT_LINK):
        log.debug("Checkout link detected")
        return CartState.IN_CART

    return CartState.NOT_IN_CART


async def commit(session: PageSession, product: str) -> CartOutcome:
    """Click add-to-basket, let the page settle and verify the basket."""
    log.info(f"Adding {product} to basket")
    await session.click(endpoints.ADD_TO_BASKET)
    await session.settle("networkidle")

    if await classify_cart_state(session) is CartState.IN_CART:
        log.success(f"{product} added to basket")
        return CartOutcome(success=True, product=product)

    log.warning(f"{product} not in basket after clicking")
    return CartOutcome(success=False, product=product)


async def add_to_cart(
    session: PageSession,
    url: str,
    affordance_timeout: float = endpoints.AFFORDANCE_WAIT_MS,
) -> CartOutcome:
    """
    Try to get one product into the basket.

    Failures are reported, never retried here; the inventory prober will
    offer the SKU again on a later tick if it's still live.
    """
    product = endpoints.product_id(url)

    try:
        await session.navigate(url, wait_until="networkidle")

        if await classify_cart_state(session) is CartState.IN_CART:
            log.success(f"{product} already in basket")
            return CartOutcome(success=True, product=product)

        if not await session.wait_for_selector(endpoints.ADD_TO_BASKET, affordance_timeout):
            log.warning(f"No add-to-basket button for {product} within {affordance_timeout / 1000:g}s")
            return CartOutcome(success=False, product=product)

        return await commit(session, product)

    except Exception as e:
        log.error(f"Add to cart failed for {product}: {e}")
        return CartOutcome(success=False, product=product)
