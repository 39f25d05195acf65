from __future__ import annotations

import json
from pathlib import Path

from pharmstock.models import StoreStockResult
from pharmstock.writer import ResultWriter


def test_writes_full_results_with_timestamped_name(tmp_path: Path) -> None:
    writer = ResultWriter(tmp_path / "out", clock=lambda: 1700000000.5)
    results = [
        StoreStockResult(store_name="A", store_postcode="SW1", store_phone_number="1", stock_status="G"),
        StoreStockResult(store_name="B", store_postcode=None, store_phone_number=None, stock_status="R"),
    ]

    path = writer.write(results, "SW1A 1AA", 50)

    assert path.name == "stock_SW1A1AA_50_1700000000500.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload[0] == {
        "storeName": "A",
        "storePostcode": "SW1",
        "storePhoneNumber": "1",
        "stockStatus": "G",
    }
    assert payload[1]["stockStatus"] == "R"


def test_successive_runs_do_not_collide(tmp_path: Path) -> None:
    ticks = iter([1.0, 2.0])
    writer = ResultWriter(tmp_path, clock=lambda: next(ticks))

    first = writer.write([], "SW1A1AA", 50)
    second = writer.write([], "SW1A1AA", 50)

    assert first != second
    assert first.exists() and second.exists()
