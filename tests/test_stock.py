from __future__ import annotations

import pytest

from pharmstock.errors import RemoteRequestError
from pharmstock.models import StockResponse
from pharmstock.stock import StockBatchFetcher

MEDICATION = "42013411000001102"


class FakeStockClient:
    def __init__(self, fail_batches: set[int] | None = None) -> None:
        self.fail_batches = fail_batches or set()
        self.batches: list[list[int]] = []
        self.products: list[list[str]] = []

    def item_stock(self, product_ids: list[str], store_ids: list[int]) -> StockResponse:
        self.products.append(product_ids)
        self.batches.append(store_ids)
        if len(self.batches) in self.fail_batches:
            raise RemoteRequestError("stock endpoint returned 500", status_code=500)
        return StockResponse.model_validate(
            {"stockLevels": [{"storeId": str(i), "stockLevel": "G"} for i in store_ids]}
        )


class CountingLimiter:
    def __init__(self) -> None:
        self.calls = 0

    def wait(self) -> None:
        self.calls += 1


def test_trailing_partial_batch_is_not_queried() -> None:
    client = FakeStockClient()
    store_ids = list(range(1, 26))

    result = StockBatchFetcher(client, batch_size=10).fetch_all(MEDICATION, store_ids)

    assert client.batches == [list(range(1, 11)), list(range(11, 21))]
    assert client.products == [[MEDICATION], [MEDICATION]]
    assert [r.store_id for r in result.records] == list(range(1, 21))
    assert result.skipped_store_ids == [21, 22, 23, 24, 25]


def test_trailing_batch_included_when_enabled() -> None:
    client = FakeStockClient()

    result = StockBatchFetcher(client, batch_size=10, include_trailing_batch=True).fetch_all(
        MEDICATION, list(range(1, 26))
    )

    assert client.batches[-1] == [21, 22, 23, 24, 25]
    assert len(result.records) == 25
    assert result.skipped_store_ids == []


def test_fewer_stores_than_a_batch_queries_nothing() -> None:
    client = FakeStockClient()

    result = StockBatchFetcher(client, batch_size=10).fetch_all(MEDICATION, [1, 2, 3])

    assert client.batches == []
    assert result.records == []
    assert result.skipped_store_ids == [1, 2, 3]


def test_failed_batch_does_not_stop_later_batches() -> None:
    client = FakeStockClient(fail_batches={2})

    result = StockBatchFetcher(client, batch_size=10).fetch_all(MEDICATION, list(range(1, 41)))

    assert len(client.batches) == 4
    assert len(result.records) == 30
    assert 11 not in {r.store_id for r in result.records}
    [failure] = result.failed_batches
    assert failure.batch_number == 2
    assert failure.store_ids == list(range(11, 21))


def test_every_batch_failing_yields_empty_result() -> None:
    client = FakeStockClient(fail_batches={1, 2})

    result = StockBatchFetcher(client, batch_size=10).fetch_all(MEDICATION, list(range(1, 21)))

    assert result.records == []
    assert len(result.failed_batches) == 2


@pytest.mark.parametrize("store_count,expected_waits", [(10, 0), (20, 1), (35, 2)])
def test_no_delay_after_last_batch(store_count: int, expected_waits: int) -> None:
    limiter = CountingLimiter()

    StockBatchFetcher(FakeStockClient(), rate_limiter=limiter, batch_size=10).fetch_all(
        MEDICATION, list(range(store_count))
    )

    assert limiter.calls == expected_waits


def test_delay_still_applied_after_failed_batch() -> None:
    limiter = CountingLimiter()
    client = FakeStockClient(fail_batches={1})

    StockBatchFetcher(client, rate_limiter=limiter, batch_size=5).fetch_all(MEDICATION, list(range(10)))

    assert limiter.calls == 1


def test_batch_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        StockBatchFetcher(FakeStockClient(), batch_size=0)
