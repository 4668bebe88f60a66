"""Pre-flight health checks before running."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import httpx

from . import logger
from . import endpoints
from .cache import CacheLoadError, SkuCache
from .config import Config
from .http_client import HTTPClient, UpstreamError
from .listing import fetch_listing

log = logger.get("HEALTH")


@dataclass
class HealthResult:
    """Result of a health check."""

    name: str
    passed: bool
    message: str


def check_cache(cache: SkuCache) -> HealthResult:
    """Check the SKU file loads."""
    try:
        records = cache.load()
    except CacheLoadError as e:
        return HealthResult("Cache", False, str(e))
    return HealthResult("Cache", True, f"{len(records)} records")


async def check_listing(client: HTTPClient, locale: str) -> HealthResult:
    """Check the listing API answers with products."""
    try:
        records = await fetch_listing(client, locale)
    except UpstreamError as e:
        return HealthResult("Listing API", False, e.message)
    return HealthResult("Listing API", True, f"{len(records)} tracked products listed")


async def check_inventory(client: HTTPClient, sku: str, locale: str) -> HealthResult:
    """Check the inventory API answers for one SKU."""
    try:
        data = await client.get_json(endpoints.INVENTORY_URL, params=endpoints.inventory_params(sku, locale))
    except UpstreamError as e:
        return HealthResult("Inventory API", False, e.message)

    if "success" not in data:
        return HealthResult("Inventory API", False, "unexpected response shape")
    return HealthResult("Inventory API", True, f"{sku}: success={data['success']}")


async def check_site(url: str = endpoints.BASE_URL) -> HealthResult:
    """Check the retailer site is reachable."""
    try:
        async with httpx.AsyncClient(timeout=10.0, follow_redirects=True) as client:
            r = await client.get(url)
    except httpx.RequestError as e:
        return HealthResult("Retailer", False, str(e))

    if r.status_code < 400:
        return HealthResult("Retailer", True, f"{url} OK")
    return HealthResult("Retailer", False, f"{url} returned {r.status_code}")


async def run_all_checks(config: Config, client: Optional[HTTPClient] = None) -> List[HealthResult]:
    """Run all health checks."""
    results: List[HealthResult] = []

    log.info("Checking cache...")
    cache = SkuCache(config.sku_data_path)
    results.append(check_cache(cache))

    own_client = client is None
    client = client or HTTPClient(locale=config.locale)
    await client.start()

    try:
        log.info("Checking listing API...")
        results.append(await check_listing(client, config.locale))

        records = cache.records()
        if records:
            log.info("Checking inventory API...")
            results.append(await check_inventory(client, records[0].product_sku, config.locale))
        else:
            results.append(HealthResult("Inventory API", False, "No SKU to check"))
    finally:
        if own_client:
            await client.close()

    log.info("Checking retailer...")
    results.append(await check_site())

    if config.uses_placeholder_credentials:
        results.append(HealthResult("Credentials", False, "Placeholder values, run setup"))
    else:
        results.append(HealthResult("Credentials", True, config.username))

    return results


def print_results(results: List[HealthResult]) -> bool:
    """Print health check results. Returns True if all passed."""
    from .display import console

    all_passed = True

    console.print("\n[bold]Health Check Results[/]\n")

    for r in results:
        status = "[green]PASS[/]" if r.passed else "[red]FAIL[/]"
        console.print(f"  {status}  {r.name}: {r.message}")
        if not r.passed:
            all_passed = False

    console.print()
    return all_passed
