"""Scheduled drop mode: hammer one product page from a known start time."""
from __future__ import annotations

import asyncio
from typing import Callable, Optional
from urllib.parse import urlparse

from . import logger
from . import endpoints
from .captcha import ChallengeWatch, solve_challenge, SOLVE_TIMEOUT_MS
from .cart import commit
from .page import PageSession
from .sku import CartOutcome
from .timing import backoff_delay, now_epoch, wait_until

log = logger.get("DROP")


async def wait_for_drop(
    session: PageSession,
    url: str,
    target: float,
    affordance_timeout: float = endpoints.DROP_AFFORDANCE_WAIT_MS,
    challenge_timeout: float = SOLVE_TIMEOUT_MS,
    max_attempts: int = 0,  # 0 = unlimited
    clock: Callable[[], float] = now_epoch,
    delay: Callable[[], float] = backoff_delay,
) -> Optional[CartOutcome]:
    """
    Wait for the drop time, then reload until add-to-basket shows up.

    Args:
        session: Page session, held exclusively by the caller
        url: Product page URL
        target: Drop time as an epoch timestamp (seconds)
        affordance_timeout: Per-reload wait for the button (ms)
        challenge_timeout: Bound on each challenge attempt (ms)
        max_attempts: Reload budget
        clock: Time source, epoch seconds
        delay: Backoff source, seconds

    Returns:
        CartOutcome once the button was clicked, or None if the reload
        budget ran out
    """
    product = endpoints.product_id(url)
    site_host = urlparse(url).hostname or "proshop.fi"

    remaining = target - clock()
    if remaining > 0:
        log.info(f"Waiting {remaining:.1f}s for {product} drop")
    await wait_until(target, clock=clock)

    log.info(f"Drop time reached, opening {product}")
    watch = ChallengeWatch()
    session.on_response(watch)

    try:
        await session.navigate(url, wait_until="domcontentloaded")

        attempts = 0
        while max_attempts == 0 or attempts < max_attempts:
            attempts += 1

            try:
                await session.reload(wait_until="domcontentloaded")
                live = await session.wait_for_selector(endpoints.ADD_TO_BASKET, affordance_timeout)

                if not live and watch.seen:
                    log.warning("Challenge served, attempting pointer response")
                    await solve_challenge(session, site_host, challenge_timeout)
                    watch.reset()
            except Exception as e:
                # Redirects mid-reload destroy the page context; try again
                log.warning(f"{product} reload #{attempts} failed: {e}")
                watch.reset()
                await asyncio.sleep(delay())
                continue

            if live:
                log.success(f"Add-to-basket live after {attempts} reloads")
                try:
                    return await commit(session, product)
                except Exception as e:
                    log.error(f"Commit failed for {product}: {e}")
                    return CartOutcome(success=False, product=product)

            if attempts % 10 == 0:
                log.debug(f"{product} reload #{attempts}, still no button")

            await asyncio.sleep(delay())

        log.warning(f"{product} never became purchasable in {attempts} reloads")
        return None

    finally:
        session.remove_response_listener(watch)
