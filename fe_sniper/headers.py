"""Browser-accurate HTTP headers for the NVIDIA feeds."""
from __future__ import annotations

CHROME_VERSION = "135.0.7049.95"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    f"Chrome/{CHROME_VERSION} Safari/537.36"
)

# Client hints (Sec-Ch-* headers) - Windows desktop
CLIENT_HINTS = {
    "Sec-Ch-Ua": '"Google Chrome";v="135", "Not-A.Brand";v="8", "Chromium";v="135"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
}

# The feeds sit behind the marketplace front end and check the origin
MARKETPLACE_ORIGIN = "https://marketplace.nvidia.com"


def get_headers(locale: str = "fi-fi") -> dict:
    """
    Get headers matching a marketplace XHR.

    Args:
        locale: Marketplace locale, used for Referer and Accept-Language
    """
    lang = locale.split("-")[0]

    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": f"{locale},{lang};q=0.9,en;q=0.8",
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
        "Origin": MARKETPLACE_ORIGIN,
        "Referer": f"{MARKETPLACE_ORIGIN}/{locale}/consumer/graphics-cards/",
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "cross-site",
    }

    headers.update(CLIENT_HINTS)
    return headers
