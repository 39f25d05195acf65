from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from pharmstock.client import BootsClient
from pharmstock.errors import RemoteRequestError, ResponseSchemaError, StockBatchError
from pharmstock.models import StockRecord
from pharmstock.ratelimit import NoDelayRateLimiter, RateLimiter

LOG = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


@dataclass(slots=True)
class StockFetchResult:
    records: list[StockRecord] = field(default_factory=list)
    failed_batches: list[StockBatchError] = field(default_factory=list)
    skipped_store_ids: list[int] = field(default_factory=list)


class StockBatchFetcher:
    """Queries stock levels for a medication across stores, a batch at a time.

    Only whole batches are queried unless ``include_trailing_batch`` is set;
    the remainder ids are reported in ``skipped_store_ids``.
    """

    def __init__(
        self,
        client: BootsClient,
        rate_limiter: RateLimiter | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        include_trailing_batch: bool = False,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.client = client
        self.rate_limiter = rate_limiter or NoDelayRateLimiter()
        self.batch_size = batch_size
        self.include_trailing_batch = include_trailing_batch

    def batch_count(self, store_count: int) -> int:
        if self.include_trailing_batch:
            return math.ceil(store_count / self.batch_size)
        return store_count // self.batch_size

    def fetch_all(self, medication_id: str, store_ids: list[int]) -> StockFetchResult:
        result = StockFetchResult()
        pages = self.batch_count(len(store_ids))
        covered = min(pages * self.batch_size, len(store_ids))
        result.skipped_store_ids = list(store_ids[covered:])
        if result.skipped_store_ids:
            LOG.warning(
                "%d trailing store(s) do not fill a batch of %d and will not be checked",
                len(result.skipped_store_ids),
                self.batch_size,
            )

        LOG.info("Fetching stock for %d stores...", covered)

        for page in range(1, pages + 1):
            offset = (page - 1) * self.batch_size
            batch = list(store_ids[offset : offset + self.batch_size])
            LOG.debug(
                "Fetching page %d of %d (stores %d - %d)...",
                page,
                pages,
                offset + 1,
                offset + len(batch),
            )
            try:
                result.records.extend(self._fetch_batch(medication_id, batch, page))
            except StockBatchError as exc:
                LOG.error("There was a problem fetching stock for page %d: %s", page, exc)
                result.failed_batches.append(exc)
            finally:
                if page != pages:
                    self.rate_limiter.wait()

        return result

    def _fetch_batch(self, medication_id: str, batch: list[int], page: int) -> list[StockRecord]:
        try:
            response = self.client.item_stock([medication_id], batch)
        except (RemoteRequestError, ResponseSchemaError) as exc:
            raise StockBatchError(str(exc), batch_number=page, store_ids=batch) from exc
        return response.stock_levels
