"""GPU models, SKU records and feed response types."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class GpuModel(str, Enum):
    """Tracked Founders Edition tiers. Values match the feed's `gpu` tag."""

    RTX_5090 = "RTX 5090"
    RTX_5080 = "RTX 5080"
    RTX_5070 = "RTX 5070"

    @classmethod
    def parse(cls, value) -> Optional[GpuModel]:
        """Return the model for a feed tag, or None if it isn't tracked."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class SkuRecord:
    """Locally known retailer SKU for one GPU model."""

    gpu: GpuModel
    display_name: str
    product_title: str
    product_sku: str
    update_at: Optional[int] = None  # epoch milliseconds

    @classmethod
    def from_dict(cls, data: dict) -> SkuRecord:
        """Build from the on-disk camelCase shape."""
        return cls(
            gpu=GpuModel(data["gpu"]),
            display_name=data.get("displayName", ""),
            product_title=data.get("productTitle", ""),
            product_sku=data["productSKU"],
            update_at=data.get("updateAt"),
        )

    def to_dict(self) -> dict:
        return {
            "displayName": self.display_name,
            "productTitle": self.product_title,
            "gpu": self.gpu.value,
            "productSKU": self.product_sku,
            "updateAt": self.update_at,
        }


@dataclass
class ListingRecord:
    """One product from the listing search. Transient, never persisted."""

    gpu: GpuModel
    product_sku: str

    @classmethod
    def from_dict(cls, data: dict) -> Optional[ListingRecord]:
        """Parse a productDetails entry; None for untracked or malformed ones."""
        gpu = GpuModel.parse(data.get("gpu"))
        if gpu is None:
            return None
        return cls(gpu=gpu, product_sku=str(data.get("productSKU") or ""))


@dataclass
class StockEntry:
    """A single listMap entry from the inventory feed."""

    is_active: str
    product_url: str
    price: str = ""
    fe_sku: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> StockEntry:
        return cls(
            is_active=str(data.get("is_active", "")),
            product_url=data.get("product_url") or "",
            price=str(data.get("price", "")),
            fe_sku=data.get("fe_sku") or "",
        )


@dataclass
class InventoryResult:
    """Snapshot of one inventory feed response."""

    success: bool
    entries: List[StockEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> InventoryResult:
        entries = [
            StockEntry.from_dict(e)
            for e in (data.get("listMap") or [])
            if isinstance(e, dict)
        ]
        return cls(success=data.get("success") is True, entries=entries)

    @property
    def in_stock(self) -> bool:
        """
        Stock is confirmed only when the call succeeded, the first entry is
        flagged active with the literal string "true", and it carries a
        product URL.
        """
        if not self.success or not self.entries:
            return False
        first = self.entries[0]
        return first.is_active == "true" and len(first.product_url) > 0

    @property
    def product_url(self) -> str:
        return self.entries[0].product_url if self.entries else ""


@dataclass
class CartOutcome:
    """Terminal result of an add-to-cart attempt."""

    success: bool
    product: str
