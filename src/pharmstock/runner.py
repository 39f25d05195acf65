from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pharmstock.aggregate import ResultAggregator
from pharmstock.cache import StoreCache
from pharmstock.client import BootsClient
from pharmstock.config import load_config
from pharmstock.errors import StockBatchError
from pharmstock.geo import GeoResolver
from pharmstock.models import AppConfig, CacheKey, StoreRecord, StoreStockResult
from pharmstock.ratelimit import FixedDelayRateLimiter, NoDelayRateLimiter, RateLimiter
from pharmstock.stock import StockBatchFetcher
from pharmstock.stores import StoreEnumerator
from pharmstock.writer import ResultWriter

LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepReport:
    postcode: str
    radius: float
    medication_id: str
    stores: list[StoreRecord]
    results: list[StoreStockResult]
    in_stock: list[StoreStockResult]
    output_path: Path
    from_cache: bool
    unmatched_store_ids: list[int] = field(default_factory=list)
    failed_batches: list[StockBatchError] = field(default_factory=list)
    skipped_store_ids: list[int] = field(default_factory=list)


class StockSweepService:
    def __init__(
        self,
        config: AppConfig,
        client: BootsClient | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.client = client or BootsClient(
            endpoints=config.endpoints,
            timeout_seconds=config.timeout_seconds,
        )
        self.rate_limiter = rate_limiter or FixedDelayRateLimiter(config.request_delay_seconds)
        self.cache = StoreCache(config.data_dir)
        self.writer = ResultWriter(config.data_dir, clock=clock)
        self.geo = GeoResolver(self.client)
        self.enumerator = StoreEnumerator(
            self.client,
            rate_limiter=self.rate_limiter,
            snapshot_total=config.snapshot_total,
        )
        self.fetcher = StockBatchFetcher(
            self.client,
            rate_limiter=self.rate_limiter,
            batch_size=config.batch_size,
            include_trailing_batch=config.include_trailing_batch,
        )

    def run(self, postcode: str, medication_id: str, refresh: bool = False) -> SweepReport:
        key = CacheKey.for_search(postcode, self.config.radius_miles)
        if not key.postcode:
            raise ValueError("postcode is required")

        stores, from_cache = self._load_stores(key, refresh)

        fetched = self.fetcher.fetch_all(medication_id, [s.store_id for s in stores])
        aggregated = ResultAggregator(stores, strict=self.config.strict_join).aggregate(
            fetched.records
        )

        in_stock = aggregated.in_stock
        if in_stock:
            LOG.info("Found stock in %d locations.", len(in_stock))
        else:
            LOG.warning("Found stock in 0 locations.")

        LOG.debug("Writing stock data to JSON file...")
        output_path = self.writer.write(aggregated.results, key.postcode, key.radius)
        LOG.info("Stock check complete.")

        return SweepReport(
            postcode=key.postcode,
            radius=key.radius,
            medication_id=medication_id,
            stores=stores,
            results=aggregated.results,
            in_stock=in_stock,
            output_path=output_path,
            from_cache=from_cache,
            unmatched_store_ids=aggregated.unmatched_store_ids,
            failed_batches=fetched.failed_batches,
            skipped_store_ids=fetched.skipped_store_ids,
        )

    def _load_stores(self, key: CacheKey, refresh: bool) -> tuple[list[StoreRecord], bool]:
        if not refresh:
            LOG.debug("Checking for cached store data at %s", self.cache.path_for(key))
            cached = self.cache.load(key)
            if cached is not None:
                LOG.info("Using %d cached stores for %s.", len(cached), key.postcode)
                return cached, True

        LOG.info(
            "No store data cached for %s, fetching stores within a %g mile radius "
            "(this may take a few minutes)...",
            key.postcode,
            key.radius,
        )
        center = self.geo.resolve(key.postcode)
        stores = self.enumerator.enumerate(center, key.radius)
        path = self.cache.save(key, stores)
        LOG.debug("Wrote store data to %s", path)
        return stores, False

    def close(self) -> None:
        self.client.close()


def build_service(config_path: str | None = None, no_delay: bool = False) -> StockSweepService:
    config = load_config(config_path)
    rate_limiter = NoDelayRateLimiter() if no_delay else None
    return StockSweepService(config=config, rate_limiter=rate_limiter)
