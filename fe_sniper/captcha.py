"""Cloudflare challenge detection and a best-effort pointer response."""
from __future__ import annotations

import random
from urllib.parse import urlparse

from . import logger
from . import endpoints
from .page import PageSession
from .timing import human_delay

log = logger.get("CAPTCHA")

CHALLENGE_MARKERS = (
    "challenges.cloudflare.com",
    "/cdn-cgi/challenge-platform",
)

SOLVE_TIMEOUT_MS = 30_000


def is_challenge_url(url: str) -> bool:
    """Check if a response URL belongs to the challenge provider."""
    return any(marker in url for marker in CHALLENGE_MARKERS)


def is_same_site(url: str, site_host: str) -> bool:
    """True for a first-party response that isn't itself a challenge asset."""
    host = urlparse(url).hostname or ""
    return host.endswith(site_host) and not is_challenge_url(url)


class ChallengeWatch:
    """Response listener that records whether a challenge was served."""

    def __init__(self):
        self.seen = False
        self.last_url = ""

    def __call__(self, url: str) -> None:
        if is_challenge_url(url):
            if not self.seen:
                log.warning(f"Challenge response observed: {url[:80]}")
            self.seen = True
            self.last_url = url

    def reset(self) -> None:
        self.seen = False
        self.last_url = ""


async def solve_challenge(
    session: PageSession,
    site_host: str = "proshop.fi",
    timeout: float = SOLVE_TIMEOUT_MS,
) -> bool:
    """
    Try to clear the challenge widget with human-like pointer input.

    Moves to the widget in a few wandering steps, presses and releases, then
    waits up to `timeout` ms for a same-site response. This is a heuristic;
    False means nothing first-party came back in time.
    """
    box = await session.bounding_box(endpoints.CHALLENGE_WIDGET)
    if box is None:
        log.warning("Challenge widget not found on page")
        return False

    # Checkbox sits near the left edge of the widget
    target_x = box["x"] + min(30.0, box["width"] / 2) + random.uniform(-4, 4)
    target_y = box["y"] + box["height"] / 2 + random.uniform(-4, 4)

    start_x = target_x + random.uniform(-200, 200)
    start_y = target_y + random.uniform(-150, 150)
    await session.mouse_move(start_x, start_y)

    for i in range(1, 4):
        frac = i / 4
        await session.mouse_move(
            start_x + (target_x - start_x) * frac + random.uniform(-10, 10),
            start_y + (target_y - start_y) * frac + random.uniform(-10, 10),
            steps=random.randint(5, 12),
        )
        await human_delay("move")

    await session.mouse_move(target_x, target_y, steps=random.randint(3, 6))
    await human_delay("click")
    await session.mouse_down()
    await human_delay("click")
    await session.mouse_up()

    log.info("Challenge clicked, waiting for first-party response...")
    cleared = await session.wait_for_response(lambda u: is_same_site(u, site_host), timeout)

    if cleared:
        log.success("Challenge appears cleared")
    else:
        log.error(f"No first-party response within {timeout / 1000:g}s")
    return cleared
