"""Wires the cache, pollers and browser session into the two run modes."""
from __future__ import annotations

import asyncio
import signal
from typing import Optional

from . import logger
from . import notifier
from .cache import CacheLoadError, SkuCache
from .cart import add_to_cart
from .config import Config
from .display import console, sku_table
from .handoff import hand_off
from .http_client import HTTPClient
from .inventory import InventoryProber, StockHandler
from .listing import poll_listing
from .page import PageSession, PlaywrightSession
from .session import BootstrapError, bootstrap
from .sku import GpuModel
from .waiter import wait_for_drop

log = logger.get("RUNNER")


class GracefulShutdown:
    """Turn Ctrl+C into a stop event; a second Ctrl+C force quits."""

    def __init__(self):
        self.stop = asyncio.Event()

    def request(self):
        if self.stop.is_set():
            log.warning("Force quitting...")
            raise SystemExit(1)
        log.info("Shutdown requested, finishing current tick...")
        self.stop.set()

    def install(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no signal handler support
                signal.signal(sig, lambda signum, frame: self.request())


def load_cache(config: Config) -> Optional[SkuCache]:
    """Load the baseline SKU data. None means the process must not continue."""
    cache = SkuCache(config.sku_data_path)
    try:
        cache.load()
    except CacheLoadError as e:
        log.error(f"Something went wrong reading the local SKU data: {e}")
        return None
    return cache


async def open_session(config: Config, headless: bool) -> Optional[PageSession]:
    """Launch the browser and log in. Closes the browser on failure."""
    if config.uses_placeholder_credentials:
        log.error("Credentials missing from .env, run 'fe-sniper setup' first")
        return None

    session = await PlaywrightSession.launch(headless=headless)
    try:
        await bootstrap(session, config.username, config.password, config.realname)
    except BootstrapError as e:
        log.error(f"Session bootstrap failed at {e.step}: {e.message}")
        await session.close()
        return None
    except Exception:
        await session.close()
        raise

    return session


def checkout_handler(
    session: PageSession,
    lock: asyncio.Lock,
    on_success: Optional[asyncio.Event] = None,
) -> StockHandler:
    """
    Build the handler the inventory prober calls on confirmed stock.

    `lock` serializes use of the single browser page.
    """

    async def on_stock(gpu: GpuModel, product_url: str) -> None:
        await notifier.stock_found(gpu.value, product_url)

        async with lock:
            outcome = await add_to_cart(session, product_url)

        hand_off(outcome, product_url)

        if outcome.success:
            await notifier.carted(outcome.product)
            if on_success is not None:
                on_success.set()
        else:
            await notifier.cart_failed(outcome.product, product_url)

    return on_stock


async def run_reactive(config: Config, headless: bool, keep_running: bool = False) -> int:
    """
    Poll the listing and inventory feeds and cart anything that goes live.

    Returns:
        Process exit code
    """
    cache = load_cache(config)
    if cache is None:
        return 1

    console.print(sku_table(cache))

    session = await open_session(config, headless)
    if session is None:
        return 1

    shutdown = GracefulShutdown()
    shutdown.install()

    lock = asyncio.Lock()
    handler = checkout_handler(session, lock, None if keep_running else shutdown.stop)

    try:
        async with HTTPClient(locale=config.locale) as client:
            prober = InventoryProber(cache, client, handler, locale=config.locale)

            await asyncio.gather(
                poll_listing(
                    cache,
                    client,
                    interval=config.listing_interval,
                    locale=config.locale,
                    stop=shutdown.stop,
                ),
                prober.run(interval=config.inventory_interval, stop=shutdown.stop),
            )
            await prober.drain()
    finally:
        await session.close()

    log.info("Stopped")
    return 0


async def run_drop(config: Config, url: str, target: float, headless: bool) -> int:
    """
    Scheduled drop mode: wait for `target`, then reload `url` until it carts.

    Returns:
        Process exit code
    """
    session = await open_session(config, headless)
    if session is None:
        return 1

    # The waiter is the only user of the page in this mode
    try:
        outcome = await wait_for_drop(session, url, target)
    finally:
        await session.close()

    if outcome is None:
        return 1

    hand_off(outcome, url)

    if outcome.success:
        await notifier.carted(outcome.product)
        return 0

    await notifier.cart_failed(outcome.product, url)
    return 1
