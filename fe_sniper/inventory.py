"""Inventory prober: per-SKU stock checks against NVIDIA's partner feed."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Set

from . import logger
from . import endpoints
from .cache import SkuCache
from .http_client import HTTPClient
from .sku import GpuModel, InventoryResult, SkuRecord
from .timing import sleep_or_stop

log = logger.get("INVENTORY")

StockHandler = Callable[[GpuModel, str], Awaitable[None]]


def is_in_stock(data: dict) -> bool:
    """
    Classify a raw inventory response.

    Stock is confirmed iff success is true, listMap[0].is_active is the
    string "true" and listMap[0].product_url is non-empty.
    """
    return InventoryResult.from_dict(data).in_stock


async def check_sku(client: HTTPClient, sku: str, locale: str = endpoints.DEFAULT_LOCALE) -> InventoryResult:
    """
    Query the inventory feed for one SKU.

    Raises:
        UpstreamError: On transport failure or non-200
    """
    data = await client.get_json(endpoints.INVENTORY_URL, params=endpoints.inventory_params(sku, locale))
    return InventoryResult.from_dict(data)


class InventoryProber:
    """
    Polls every cached SKU and hands confirmed stock to a checkout handler.

    Handlers run as background tasks so a slow checkout never delays the
    next tick. A SKU with a handler still running is not dispatched again.
    """

    def __init__(
        self,
        cache: SkuCache,
        client: HTTPClient,
        on_stock: StockHandler,
        locale: str = endpoints.DEFAULT_LOCALE,
    ):
        self.cache = cache
        self.client = client
        self.on_stock = on_stock
        self.locale = locale
        self.ticks = 0
        self._in_flight: Set[str] = set()
        self._pending: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> Set[str]:
        return set(self._in_flight)

    async def probe(self, record: SkuRecord) -> Optional[bool]:
        """
        Check one SKU and dispatch on stock.

        Errors stay local to this SKU.

        Returns:
            Stock classification, or None if the call failed
        """
        sku = record.product_sku
        try:
            result = await check_sku(self.client, sku, self.locale)
        except Exception as e:
            log.warning(f"{record.gpu.value} ({sku}) inventory check failed: {e}")
            return None

        if not result.in_stock:
            log.debug(f"{record.gpu.value} not in stock")
            return False

        log.success(f"{record.gpu.value} is in stock: {result.product_url}")
        self.dispatch(record.gpu, sku, result.product_url)
        return True

    def dispatch(self, gpu: GpuModel, sku: str, product_url: str) -> bool:
        """Start a checkout task unless one is already running for `sku`."""
        if sku in self._in_flight:
            log.debug(f"{gpu.value} checkout already in flight, skipping")
            return False

        self._in_flight.add(sku)
        task = asyncio.create_task(self._run_handler(gpu, sku, product_url))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def _run_handler(self, gpu: GpuModel, sku: str, product_url: str) -> None:
        try:
            await self.on_stock(gpu, product_url)
        except Exception as e:
            log.error(f"{gpu.value} checkout handler failed: {e}")
        finally:
            self._in_flight.discard(sku)

    async def tick(self) -> Dict[GpuModel, Optional[bool]]:
        """Fan out one inventory call per cached SKU."""
        self.ticks += 1
        records = self.cache.records()

        results = await asyncio.gather(
            *[self.probe(r) for r in records],
            return_exceptions=True,
        )

        classified: Dict[GpuModel, Optional[bool]] = {}
        for record, result in zip(records, results):
            if isinstance(result, BaseException):
                log.error(f"{record.gpu.value} probe crashed: {result}")
                result = None
            classified[record.gpu] = result
        return classified

    async def run(
        self,
        interval: float = 5.0,
        max_ticks: int = 0,  # 0 = unlimited
        stop: Optional[asyncio.Event] = None,
    ) -> int:
        """
        Poll on a fixed interval.

        Returns:
            Number of ticks run
        """
        ran = 0
        log.info(f"Inventory poll every {interval:g}s for {len(self.cache)} SKUs")

        while max_ticks == 0 or ran < max_ticks:
            if stop is not None and stop.is_set():
                break

            ran += 1

            try:
                await self.tick()
            except Exception as e:
                log.error(f"Inventory tick #{self.ticks} failed: {e}")

            if ran % 100 == 0:
                log.debug(f"Inventory poll #{ran}")

            if max_ticks and ran >= max_ticks:
                break

            if await sleep_or_stop(interval, stop):
                break

        return ran

    async def drain(self) -> None:
        """Wait for all dispatched checkout tasks to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
