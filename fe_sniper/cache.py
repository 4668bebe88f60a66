"""Local SKU cache, written through to a JSON file."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import logger
from .sku import GpuModel, SkuRecord

log = logger.get("CACHE")


class CacheLoadError(Exception):
    """The durable SKU file is missing or unparseable."""
    pass


class SkuCache:
    """
    GpuModel -> SkuRecord map backed by a flat JSON file.

    The file is the baseline the inventory prober polls from, so it must load
    before anything else starts. Every upsert rewrites the whole file.
    """

    def __init__(self, path: Path, write_through: bool = True):
        self.path = Path(path)
        self.write_through = write_through
        self._records: Dict[GpuModel, SkuRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, model: GpuModel) -> bool:
        return model in self._records

    def load(self) -> Dict[GpuModel, SkuRecord]:
        """
        Read the durable file into memory.

        Raises:
            CacheLoadError: If the file can't be read or a record is invalid
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CacheLoadError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise CacheLoadError(f"{self.path} must hold a JSON object")

        records: Dict[GpuModel, SkuRecord] = {}
        for key, value in raw.items():
            try:
                model = GpuModel(key)
                record = SkuRecord.from_dict(value)
            except (ValueError, KeyError, TypeError) as e:
                raise CacheLoadError(f"Bad record '{key}' in {self.path}: {e}") from e

            if record.gpu != model:
                raise CacheLoadError(f"Record '{key}' in {self.path} holds {record.gpu.value}")
            records[model] = record

        self._records = records
        log.info(f"Loaded {len(records)} SKU records from {self.path}")
        return dict(records)

    def get(self, model: GpuModel) -> Optional[SkuRecord]:
        return self._records.get(model)

    def models(self) -> List[GpuModel]:
        return list(self._records)

    def records(self) -> List[SkuRecord]:
        return list(self._records.values())

    def upsert(self, model: GpuModel, record: SkuRecord) -> bool:
        """
        Set a record and write the whole cache to disk.

        The in-memory update stands even if the write fails.

        Returns:
            True if the durable write succeeded
        """
        self._records[model] = record
        if not self.write_through:
            return False
        return self.save()

    def snapshot(self) -> List[Tuple[GpuModel, SkuRecord]]:
        """Ordered (model, record) pairs for full persistence."""
        return list(self._records.items())

    def save(self) -> bool:
        """Overwrite the durable file with the current snapshot."""
        data = {model.value: record.to_dict() for model, record in self.snapshot()}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            log.error(f"Failed to write {self.path}: {e}")
            return False

        log.debug(f"Wrote {len(data)} records to {self.path}")
        return True
