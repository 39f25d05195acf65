from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Callable

from pharmstock.models import StoreStockResult, format_radius, normalize_postcode


class ResultWriter:
    def __init__(self, directory: str | Path, clock: Callable[[], float] = time.time) -> None:
        self.directory = Path(directory)
        self._clock = clock

    def path_for(self, postcode: str, radius: float) -> Path:
        stamp = int(self._clock() * 1000)
        return self.directory / (
            f"stock_{normalize_postcode(postcode)}_{format_radius(radius)}_{stamp}.json"
        )

    def write(self, results: list[StoreStockResult], postcode: str, radius: float) -> Path:
        path = self.path_for(postcode, radius)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(by_alias=True) for r in results]
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path
