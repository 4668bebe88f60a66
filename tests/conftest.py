from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

import httpx
import pytest

from fe_sniper import endpoints
from fe_sniper.cache import SkuCache

PRODUCT_URL = "https://www.proshop.fi/Naeytoenohjaimet/NVIDIA-GeForce-RTX-5080-Founders-Edition/3331521"


class FakeSession:
    """In-memory PageSession with scriptable page state."""

    def __init__(self, url: str = "about:blank"):
        self.url = url
        self.present: Set[str] = set()
        self.texts: Dict[str, str] = {}
        self.boxes: Dict[str, dict] = {}
        self.on_click: Dict[str, Callable[["FakeSession"], None]] = {}
        self.redirects: Dict[str, str] = {}
        # selector -> number of reloads after which it appears
        self.appear_after_reloads: Dict[str, int] = {}
        # urls emitted to response listeners on each reload
        self.reload_responses: List[str] = []
        self.response_result = True
        self.fail_on: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.reloads = 0
        self.closed = False
        self._listeners: List[Callable[[str], None]] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise self.fail_on[name]

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    @property
    def current_url(self) -> str:
        return self.url

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None:
        self._record("navigate", url, wait_until)
        self.url = self.redirects.get(url, url)

    async def reload(self, wait_until: str = "domcontentloaded") -> None:
        self._record("reload", wait_until)
        self.reloads += 1
        for selector, after in self.appear_after_reloads.items():
            if self.reloads >= after:
                self.present.add(selector)
        for url in self.reload_responses:
            self.emit(url)

    async def settle(self, state: str = "networkidle") -> None:
        self._record("settle", state)

    async def wait_for_selector(self, selector: str, timeout: float) -> bool:
        self._record("wait_for_selector", selector, timeout)
        return selector in self.present

    async def is_present(self, selector: str) -> bool:
        self._record("is_present", selector)
        return selector in self.present

    async def click(self, selector: str) -> None:
        self._record("click", selector)
        handler = self.on_click.get(selector)
        if handler is not None:
            handler(self)

    async def fill(self, selector: str, text: str) -> None:
        self._record("fill", selector, text)

    async def read_text(self, selector: str) -> str:
        self._record("read_text", selector)
        return self.texts.get(selector, "")

    async def bounding_box(self, selector: str) -> Optional[dict]:
        self._record("bounding_box", selector)
        return self.boxes.get(selector)

    async def mouse_move(self, x: float, y: float, steps: int = 1) -> None:
        self._record("mouse_move", x, y, steps)

    async def mouse_down(self) -> None:
        self._record("mouse_down")

    async def mouse_up(self) -> None:
        self._record("mouse_up")

    def on_response(self, listener) -> None:
        self._listeners.append(listener)

    def remove_response_listener(self, listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, url: str) -> None:
        for listener in list(self._listeners):
            listener(url)

    async def wait_for_response(self, predicate, timeout: float) -> bool:
        self._record("wait_for_response", timeout)
        return self.response_result

    async def close(self) -> None:
        self.closed = True


def go_to_basket(session: FakeSession) -> None:
    session.url = endpoints.BASKET_URL


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def sku_file(tmp_path: Path) -> Path:
    path = tmp_path / "sku_data.json"
    path.write_text(json.dumps({
        "RTX 5090": {
            "displayName": "RTX 5090",
            "productTitle": "NVIDIA GeForce RTX 5090 Founders Edition",
            "gpu": "RTX 5090",
            "productSKU": "PRO5090FESHOP_FI",
            "updateAt": None,
        },
        "RTX 5080": {
            "displayName": "RTX 5080",
            "productTitle": "NVIDIA GeForce RTX 5080 Founders Edition",
            "gpu": "RTX 5080",
            "productSKU": "OLD123",
            "updateAt": 1700000000000,
        },
    }, indent=2))
    return path


@pytest.fixture()
def cache(sku_file: Path) -> SkuCache:
    c = SkuCache(sku_file)
    c.load()
    return c


def mock_transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


def inventory_body(success=True, is_active="true", product_url=PRODUCT_URL, sku="PRO5080FESHOP_FI") -> dict:
    return {
        "success": success,
        "map": None,
        "listMap": [
            {
                "is_active": is_active,
                "product_url": product_url,
                "price": "1199",
                "fe_sku": sku,
                "locale": "FI",
            }
        ],
    }


def listing_body(*pairs) -> dict:
    return {
        "searchedProducts": {
            "totalProducts": len(pairs),
            "productDetails": [
                {"gpu": gpu, "productSKU": sku, "displayName": f"NVIDIA {gpu}"}
                for gpu, sku in pairs
            ],
        }
    }
