from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pharmstock.models import CacheKey, StoreRecord

LOG = logging.getLogger(__name__)

_STORE_LIST = TypeAdapter(list[StoreRecord])


class StoreCache:
    """Store lists persisted per (postcode, radius). Entries never expire."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: CacheKey) -> Path:
        return self.directory / f"stores_{key.slug}.json"

    def load(self, key: CacheKey) -> list[StoreRecord] | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
            stores = _STORE_LIST.validate_json(raw)
        except (OSError, ValueError, ValidationError) as exc:
            LOG.debug("store cache miss for %s: %s", path, exc)
            return None
        return stores

    def save(self, key: CacheKey, stores: list[StoreRecord]) -> Path:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [store.model_dump(by_alias=True) for store in stores]
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    def invalidate(self, key: CacheKey) -> bool:
        path = self.path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True
