from __future__ import annotations

import logging

from pharmstock.client import BootsClient
from pharmstock.errors import RemoteRequestError, ResponseSchemaError, StoreEnumerationError
from pharmstock.models import GeoCoordinate, StoreRecord, StoreSearchResponse
from pharmstock.ratelimit import NoDelayRateLimiter, RateLimiter

LOG = logging.getLogger(__name__)


class StoreEnumerator:
    """Walks the paginated store search until the server-declared total is reached.

    By default each page's ``total`` is trusted, so a total that moves between
    requests bounds the walk by the most recent answer. ``snapshot_total`` pins
    the bound to the first page instead.
    """

    def __init__(
        self,
        client: BootsClient,
        rate_limiter: RateLimiter | None = None,
        snapshot_total: bool = False,
    ) -> None:
        self.client = client
        self.rate_limiter = rate_limiter or NoDelayRateLimiter()
        self.snapshot_total = snapshot_total

    def enumerate(self, center: GeoCoordinate, radius_miles: float) -> list[StoreRecord]:
        stores: list[StoreRecord] = []
        seen: set[int] = set()
        offset = 0
        bound: int | None = None

        while True:
            page = self._fetch_page(center, radius_miles, offset)
            if bound is None or not self.snapshot_total:
                if bound is not None and page.total != bound:
                    LOG.warning("store total changed from %d to %d at offset %d", bound, page.total, offset)
                bound = page.total

            end = min(offset + page.size, bound)
            LOG.info("Fetched stores %d to %d of %d", offset + 1, end, bound)

            for entry in page.results:
                record = entry.to_record()
                if record.store_id in seen:
                    LOG.debug("dropping duplicate store %d", record.store_id)
                    continue
                seen.add(record.store_id)
                stores.append(record)

            self.rate_limiter.wait()

            if offset + page.size >= bound:
                break
            if page.size <= 0:
                raise StoreEnumerationError(
                    f"store search returned an empty page at offset {offset} of {bound}"
                )
            offset += page.size

        LOG.info("Fetched %d stores.", len(stores))
        return stores

    def _fetch_page(
        self, center: GeoCoordinate, radius_miles: float, offset: int
    ) -> StoreSearchResponse:
        try:
            return self.client.search_stores(center, radius_miles, offset)
        except (RemoteRequestError, ResponseSchemaError) as exc:
            raise StoreEnumerationError(f"store search failed at offset {offset}: {exc}") from exc
