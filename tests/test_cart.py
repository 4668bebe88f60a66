import asyncio

import pytest

from fe_sniper import endpoints
from fe_sniper.cart import CartState, add_to_cart, classify_cart_state
from fe_sniper.sku import CartOutcome

from conftest import PRODUCT_URL, FakeSession, go_to_basket

PRODUCT = "NVIDIA-GeForce-RTX-5080-Founders-Edition"


def test_product_id_is_the_fifth_slash_segment() -> None:
    assert endpoints.product_id(PRODUCT_URL) == PRODUCT


def test_product_id_falls_back_to_the_url() -> None:
    assert endpoints.product_id("https://www.proshop.fi/Basket") == "https://www.proshop.fi/Basket"
    assert endpoints.product_id("not a url") == "not a url"


def test_no_signal_means_not_in_cart(session) -> None:
    session.url = PRODUCT_URL
    assert asyncio.run(classify_cart_state(session)) is CartState.NOT_IN_CART


@pytest.mark.parametrize(
    "url, selector",
    [
        ("https://www.proshop.fi/Basket", None),
        (PRODUCT_URL, endpoints.CART_APP_MARKER),
        (PRODUCT_URL, endpoints.CHECKOUT_LINK),
    ],
)
def test_any_single_signal_means_in_cart(session, url, selector) -> None:
    session.url = url
    if selector:
        session.present.add(selector)
    assert asyncio.run(classify_cart_state(session)) is CartState.IN_CART


def test_already_in_cart_skips_commit(session) -> None:
    session.redirects[PRODUCT_URL] = endpoints.BASKET_URL

    outcome = asyncio.run(add_to_cart(session, PRODUCT_URL))

    assert outcome == CartOutcome(success=True, product=PRODUCT)
    assert session.called("click") == []
    assert session.called("wait_for_selector") == []


def test_navigation_waits_for_network_idle(session) -> None:
    asyncio.run(add_to_cart(session, PRODUCT_URL))
    assert session.called("navigate")[0] == ("navigate", PRODUCT_URL, "networkidle")


def test_missing_button_fails_with_product_id(session) -> None:
    outcome = asyncio.run(add_to_cart(session, PRODUCT_URL))

    assert outcome == CartOutcome(success=False, product=PRODUCT)
    assert session.called("wait_for_selector") == [
        ("wait_for_selector", endpoints.ADD_TO_BASKET, endpoints.AFFORDANCE_WAIT_MS)
    ]
    assert session.called("click") == []


def test_missing_button_on_short_url_reports_full_url(session) -> None:
    url = "https://www.proshop.fi/3331521"
    outcome = asyncio.run(add_to_cart(session, url))
    assert outcome == CartOutcome(success=False, product=url)


def test_commit_succeeds_when_basket_signal_follows(session) -> None:
    session.present.add(endpoints.ADD_TO_BASKET)
    session.on_click[endpoints.ADD_TO_BASKET] = go_to_basket

    outcome = asyncio.run(add_to_cart(session, PRODUCT_URL))

    assert outcome.success is True
    assert session.called("click") == [("click", endpoints.ADD_TO_BASKET)]
    assert session.called("settle") == [("settle", "networkidle")]


def test_commit_succeeds_on_checkout_link(session) -> None:
    session.present.add(endpoints.ADD_TO_BASKET)
    session.on_click[endpoints.ADD_TO_BASKET] = lambda s: s.present.add(endpoints.CHECKOUT_LINK)

    assert asyncio.run(add_to_cart(session, PRODUCT_URL)).success is True


def test_commit_fails_without_basket_signal(session) -> None:
    session.present.add(endpoints.ADD_TO_BASKET)

    outcome = asyncio.run(add_to_cart(session, PRODUCT_URL))

    assert outcome == CartOutcome(success=False, product=PRODUCT)
    assert len(session.called("click")) == 1


def test_exceptions_map_to_failure(session) -> None:
    session.fail_on["navigate"] = RuntimeError("net::ERR_CONNECTION_RESET")

    outcome = asyncio.run(add_to_cart(session, PRODUCT_URL))

    assert outcome == CartOutcome(success=False, product=PRODUCT)


def test_click_exception_maps_to_failure() -> None:
    session = FakeSession()
    session.present.add(endpoints.ADD_TO_BASKET)
    session.fail_on["click"] = TimeoutError("element detached")

    assert asyncio.run(add_to_cart(session, PRODUCT_URL)).success is False
