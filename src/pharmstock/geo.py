from __future__ import annotations

import logging
from dataclasses import dataclass

from pharmstock.client import BootsClient
from pharmstock.errors import GeoResolutionError, RemoteRequestError, ResponseSchemaError
from pharmstock.models import GeoCoordinate

LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class GeoResolver:
    client: BootsClient

    def resolve(self, postcode: str) -> GeoCoordinate:
        if not postcode or not postcode.strip():
            raise ValueError("postcode is required")

        try:
            payload = self.client.geocode(postcode)
        except (RemoteRequestError, ResponseSchemaError) as exc:
            raise GeoResolutionError(f"postcode lookup failed for {postcode}: {exc}") from exc

        if not payload.results:
            raise GeoResolutionError(f"no location found for postcode {postcode}")

        location = payload.results[0].geometry.location
        LOG.debug("postcode %s resolved to %s,%s", postcode, location.lat, location.lng)
        return GeoCoordinate(latitude=location.lat, longitude=location.lng)
