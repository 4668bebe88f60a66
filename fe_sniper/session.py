"""Authenticated retailer session: consent dismissal and login."""
from __future__ import annotations

import asyncio

from . import logger
from . import endpoints
from .page import PageSession
from .timing import human_delay

log = logger.get("SESSION")


class BootstrapError(Exception):
    """Session setup failed. Without it there is nothing to purchase with."""

    def __init__(self, step: str, message: str):
        self.step = step
        self.message = message
        super().__init__(f"{step}: {message}")


async def _require(session: PageSession, selector: str, step: str, timeout: float) -> None:
    if not await session.wait_for_selector(selector, timeout):
        raise BootstrapError(step, f"{selector} did not appear within {timeout / 1000:g}s")


async def _await_account_label(session: PageSession, realname: str, timeout: float) -> str:
    """Poll the header label until it names `realname`. Returns the last text read."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout / 1000

    while True:
        label = await session.read_text(endpoints.LOGIN_CONFIRM_LABEL)
        if realname.lower() in label.lower() or loop.time() >= deadline:
            return label
        await asyncio.sleep(endpoints.LOGIN_CONFIRM_POLL_MS / 1000)


async def first_contact(
    session: PageSession,
    url: str = endpoints.BASE_URL,
    timeout: float = endpoints.BOOTSTRAP_WAIT_MS,
) -> None:
    """
    Open the site root and decline the GDPR consent sheet.

    The decline sticks for the session, so later page visits aren't blocked
    by the overlay.
    """
    log.info(f"Opening {url}")
    await session.navigate(url, wait_until="domcontentloaded")

    await _require(session, endpoints.CONSENT_TRIGGER, "consent", timeout)
    await session.click(endpoints.CONSENT_TRIGGER)

    await _require(session, endpoints.CONSENT_DECLINE, "consent", timeout)
    await session.click(endpoints.CONSENT_DECLINE)

    log.info("Consent declined")


async def login(
    session: PageSession,
    username: str,
    password: str,
    realname: str,
    timeout: float = endpoints.BOOTSTRAP_WAIT_MS,
    confirm_timeout: float = endpoints.LOGIN_CONFIRM_WAIT_MS,
) -> bool:
    """
    Submit the login form and confirm the header shows the account name.

    Returns:
        True if the post-login label contains `realname`

    Raises:
        BootstrapError: If a login control never appears
    """
    await _require(session, endpoints.LOGIN_OPEN, "login", timeout)
    await session.click(endpoints.LOGIN_OPEN)

    await _require(session, endpoints.LOGIN_USERNAME, "login", timeout)
    await session.fill(endpoints.LOGIN_USERNAME, username)
    await human_delay("type")
    await session.fill(endpoints.LOGIN_PASSWORD, password)
    await human_delay("click")
    await session.click(endpoints.LOGIN_SUBMIT)
    await session.settle("networkidle")

    await _require(session, endpoints.LOGIN_CONFIRM_LABEL, "login", timeout)
    label = await _await_account_label(session, realname, confirm_timeout)

    if realname.lower() not in label.lower():
        log.error(f"Login not confirmed, header reads '{label}'")
        return False

    log.success(f"Logged in as {realname}")
    return True


async def bootstrap(
    session: PageSession,
    username: str,
    password: str,
    realname: str,
    confirm_timeout: float = endpoints.LOGIN_CONFIRM_WAIT_MS,
) -> None:
    """
    Prepare the session for purchasing: consent, then login.

    Raises:
        BootstrapError: On any failure, including an unconfirmed login
    """
    try:
        await first_contact(session)
        logged_in = await login(session, username, password, realname, confirm_timeout=confirm_timeout)
    except BootstrapError:
        raise
    except Exception as e:
        raise BootstrapError("bootstrap", str(e)) from e

    if not logged_in:
        raise BootstrapError("login", "display name not found after login")
