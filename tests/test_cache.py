from __future__ import annotations

import json
from pathlib import Path

from pharmstock.cache import StoreCache
from pharmstock.models import CacheKey, StoreRecord

STORES = [
    StoreRecord(store_id=1, display_name="Boots One", postcode="SW1A 1AA", phone_number="0100"),
    StoreRecord(store_id=2, display_name="Boots Two", postcode=None, phone_number=None),
]


def test_round_trip_returns_equal_stores(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path / "data")
    key = CacheKey.for_search("SW1A 1AA", 50)

    path = cache.save(key, STORES)

    assert path == tmp_path / "data" / "stores_SW1A1AA_50.json"
    assert cache.load(key) == STORES


def test_cache_file_uses_camel_case_fields(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path)
    path = cache.save(CacheKey.for_search("SW1A1AA", 50), STORES[:1])

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert payload == [
        {"storeId": 1, "displayName": "Boots One", "postcode": "SW1A 1AA", "phoneNumber": "0100"}
    ]


def test_other_postcode_or_radius_is_a_miss(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path)
    cache.save(CacheKey.for_search("SW1A1AA", 50), STORES)

    assert cache.load(CacheKey.for_search("EC1A1BB", 50)) is None
    assert cache.load(CacheKey.for_search("SW1A1AA", 25)) is None


def test_whitespace_in_postcode_shares_the_key(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path)
    cache.save(CacheKey.for_search("SW1A1AA", 50), STORES)

    assert cache.load(CacheKey.for_search(" SW1A  1AA ", 50)) == STORES


def test_malformed_cache_file_is_a_miss(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path)
    key = CacheKey.for_search("SW1A1AA", 50)
    cache.path_for(key).write_text("[{\"storeId\": ", encoding="utf-8")

    assert cache.load(key) is None

    cache.path_for(key).write_text(json.dumps([{"displayName": "no id"}]), encoding="utf-8")
    assert cache.load(key) is None


def test_invalidate_removes_cache_file(tmp_path: Path) -> None:
    cache = StoreCache(tmp_path)
    key = CacheKey.for_search("SW1A1AA", 50)
    cache.save(key, STORES)

    assert cache.invalidate(key) is True
    assert cache.load(key) is None
    assert cache.invalidate(key) is False
