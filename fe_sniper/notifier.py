"""Discord webhook notifications."""

import httpx

from . import logger
from .config import Config

log = logger.get("NOTIFY")

COLORS = {
    "success": 0x76B900,
    "warning": 0xFFAA00,
    "error": 0xFF0000,
    "info": 0x0099FF,
}


async def send(
    message: str,
    level: str = "info",
    title: str = "FE Sniper",
    webhook: str = "",
) -> bool:
    """Send a Discord webhook notification. No-op without a webhook."""
    webhook = webhook or Config.load().discord_webhook

    if not webhook:
        log.debug("No webhook configured")
        return False

    payload = {
        "embeds": [
            {
                "title": title,
                "description": message,
                "color": COLORS.get(level, COLORS["info"]),
            }
        ]
    }

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            r = await client.post(webhook, json=payload)
            return r.is_success
    except httpx.RequestError as e:
        log.error(f"Webhook failed: {e}")
        return False


async def stock_found(gpu: str, url: str) -> bool:
    """Notify stock detected."""
    return await send(f"**STOCK** {gpu}\n{url}", level="success")


async def carted(product: str) -> bool:
    """Notify item in basket."""
    return await send(f"**IN BASKET**\n`{product}`\nCheck out now!", level="success")


async def cart_failed(product: str, url: str) -> bool:
    """Notify failed add-to-cart."""
    return await send(f"**CART FAILED**\n`{product}`\n{url}", level="warning")
