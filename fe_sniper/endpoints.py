"""
NVIDIA partner feed endpoints and proshop.fi page selectors.

The NVIDIA marketplace exposes two unauthenticated JSON APIs: a product
listing search that names the current Founders Edition SKU per GPU, and a
per-SKU inventory feed that carries the retailer product URL when stock is
live. Everything past that happens in a browser on the retailer site.
"""

# =============================================================================
# NVIDIA APIS
# =============================================================================
LISTING_URL = "https://api.nvidia.partners/edge/product/search"
INVENTORY_URL = "https://api.store.nvidia.com/partner/v1/feinventory"

DEFAULT_LOCALE = "fi-fi"


def listing_params(locale: str = DEFAULT_LOCALE) -> dict:
    """Query parameters for the Founders Edition listing search."""
    return {
        "page": 1,
        "limit": 12,
        "locale": locale,
        "manufacturer": "NVIDIA",
        "manufacturer_filter": "NVIDIA~2",
        "category": "GPU",
    }


def inventory_params(skus, locale: str = DEFAULT_LOCALE) -> dict:
    """Query parameters for the inventory feed. `skus` may be one or many."""
    if not isinstance(skus, str):
        skus = ",".join(skus)
    return {
        "status": 1,
        "skus": skus,
        "locale": locale,
    }


# =============================================================================
# RETAILER
# =============================================================================
BASE_URL = "https://www.proshop.fi"
BASKET_URL = f"{BASE_URL}/Basket"

# Substring of the current URL that means we landed in the basket
BASKET_URL_MARKER = "basket"


# =============================================================================
# SELECTORS
# =============================================================================
# GDPR consent: the search box opens the consent sheet, decline closes it
CONSENT_TRIGGER = "#search-input"
CONSENT_DECLINE = "#declineButton"

# Login dialog
LOGIN_OPEN = "#openLogin"
LOGIN_USERNAME = "#UserName"
LOGIN_PASSWORD = "#Password"
LOGIN_SUBMIT = "#loginForm button[type='submit']"
# The login button is reused: its label switches to the account holder name
# once logged in, so confirmation polls its text rather than its presence
LOGIN_CONFIRM_LABEL = "#openLogin"

# Product page
ADD_TO_BASKET = "button[data-form-action='addToBasket']"

# Basket signals
CART_APP_MARKER = "#basketApp"
CHECKOUT_LINK = "a[href*='/Basket/CheckOut']"

# Cloudflare turnstile widget
CHALLENGE_WIDGET = "iframe[src*='challenges.cloudflare.com']"


# =============================================================================
# TIMEOUTS (milliseconds)
# =============================================================================
BOOTSTRAP_WAIT_MS = 15_000
AFFORDANCE_WAIT_MS = 5_000
DROP_AFFORDANCE_WAIT_MS = 200
LOGIN_CONFIRM_WAIT_MS = 10_000
LOGIN_CONFIRM_POLL_MS = 250


def product_id(url: str) -> str:
    """
    Best-effort product identifier for logging.

    proshop URLs look like https://www.proshop.fi/<category>/<slug>/<id>,
    so index 4 of the slash split is the product slug.
    """
    parts = url.split("/")
    if len(parts) > 4 and parts[4]:
        return parts[4]
    return url
