from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Union

from pharmstock.errors import JoinError
from pharmstock.models import StockRecord, StoreRecord, StoreStockResult

LOG = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Matched:
    result: StoreStockResult


@dataclass(slots=True, frozen=True)
class Unmatched:
    store_id: int


JoinOutcome = Union[Matched, Unmatched]


@dataclass(slots=True)
class AggregateResult:
    results: list[StoreStockResult] = field(default_factory=list)
    unmatched_store_ids: list[int] = field(default_factory=list)

    @property
    def in_stock(self) -> list[StoreStockResult]:
        return in_stock(self.results)


def in_stock(results: Iterable[StoreStockResult]) -> list[StoreStockResult]:
    return [r for r in results if r.in_stock]


class ResultAggregator:
    def __init__(self, stores: Iterable[StoreRecord], strict: bool = False) -> None:
        self._stores = {store.store_id: store for store in stores}
        self.strict = strict

    def join(self, record: StockRecord) -> JoinOutcome:
        store = self._stores.get(record.store_id)
        if store is None:
            return Unmatched(store_id=record.store_id)
        return Matched(
            StoreStockResult(
                store_name=store.display_name,
                store_postcode=store.postcode,
                store_phone_number=store.phone_number,
                stock_status=record.stock_level,
            )
        )

    def aggregate(self, records: Iterable[StockRecord]) -> AggregateResult:
        aggregated = AggregateResult()
        for record in records:
            outcome = self.join(record)
            if isinstance(outcome, Matched):
                aggregated.results.append(outcome.result)
                continue
            if self.strict:
                raise JoinError(outcome.store_id)
            LOG.warning("stock returned for unknown store %d, skipping", outcome.store_id)
            aggregated.unmatched_store_ids.append(outcome.store_id)
        return aggregated
