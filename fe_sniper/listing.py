"""Listing resolver: keeps the cached retailer SKUs in step with NVIDIA's feed."""
from __future__ import annotations

import asyncio
import time
from typing import List, Optional

from . import logger
from . import endpoints
from .cache import SkuCache
from .http_client import HTTPClient, UpstreamError
from .sku import GpuModel, ListingRecord
from .timing import sleep_or_stop

log = logger.get("LISTING")


def parse_listing(data: dict) -> List[ListingRecord]:
    """
    Extract tracked GPU -> SKU pairs from a listing search response.

    The products live under searchedProducts.productDetails. Entries for
    GPUs we don't track are dropped here.
    """
    searched = data.get("searchedProducts") or {}
    details = searched.get("productDetails") or []

    records = []
    for entry in details:
        if not isinstance(entry, dict):
            continue
        record = ListingRecord.from_dict(entry)
        if record is not None:
            records.append(record)
    return records


async def fetch_listing(client: HTTPClient, locale: str = endpoints.DEFAULT_LOCALE) -> List[ListingRecord]:
    """
    Fetch the current Founders Edition listing.

    Raises:
        UpstreamError: On transport failure or non-200
    """
    data = await client.get_json(endpoints.LISTING_URL, params=endpoints.listing_params(locale))
    return parse_listing(data)


def reconcile(cache: SkuCache, records: List[ListingRecord], now_ms: Optional[int] = None) -> List[GpuModel]:
    """
    Apply a listing to the cache.

    The cache decides which models are tracked; listing entries without a
    cached model are ignored. A record changes only when the feed reports a
    different, non-empty SKU, so applying the same listing twice is a no-op.

    Returns:
        Models whose SKU changed
    """
    updated: List[GpuModel] = []

    for record in records:
        current = cache.get(record.gpu)
        if current is None:
            continue

        if not record.product_sku:
            log.debug(f"{record.gpu.value} listed without a SKU, keeping {current.product_sku}")
            continue

        if current.product_sku == record.product_sku:
            log.debug(f"{record.gpu.value} local SKU up to date")
            continue

        old_sku = current.product_sku
        current.product_sku = record.product_sku
        current.update_at = now_ms if now_ms is not None else int(time.time() * 1000)
        cache.upsert(record.gpu, current)
        updated.append(record.gpu)

        log.success(f"{record.gpu.value} SKU changed {old_sku} -> {record.product_sku}")

    return updated


async def resolve_once(cache: SkuCache, client: HTTPClient, locale: str = endpoints.DEFAULT_LOCALE) -> List[GpuModel]:
    """One listing tick. Upstream failures are logged and absorbed."""
    try:
        records = await fetch_listing(client, locale)
    except UpstreamError as e:
        log.warning(f"Listing fetch failed: {e}")
        return []

    return reconcile(cache, records)


async def poll_listing(
    cache: SkuCache,
    client: HTTPClient,
    interval: float = 20.0,
    locale: str = endpoints.DEFAULT_LOCALE,
    max_ticks: int = 0,  # 0 = unlimited
    stop: Optional[asyncio.Event] = None,
) -> int:
    """
    Poll the listing on a fixed interval and reconcile each result.

    Returns:
        Number of ticks run
    """
    ticks = 0
    log.info(f"Listing poll every {interval:g}s")

    while max_ticks == 0 or ticks < max_ticks:
        if stop is not None and stop.is_set():
            break

        ticks += 1

        try:
            await resolve_once(cache, client, locale)
        except Exception as e:
            log.error(f"Listing tick #{ticks} failed: {e}")

        if max_ticks and ticks >= max_ticks:
            break

        if await sleep_or_stop(interval, stop):
            break

    return ticks

