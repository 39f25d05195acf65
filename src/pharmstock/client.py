from __future__ import annotations

import logging
from typing import TypeVar

import requests
from pydantic import BaseModel, ValidationError

from pharmstock.errors import RemoteRequestError, ResponseSchemaError
from pharmstock.models import (
    EndpointsConfig,
    GeoCoordinate,
    GeocodeResponse,
    StockResponse,
    StoreSearchResponse,
    format_radius,
)

LOG = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class BootsClient:
    """Thin wrapper over the pharmacy stock checker endpoints.

    Every response body is validated against its pydantic model before it is
    handed back, so callers never poke at raw JSON.
    """

    def __init__(
        self,
        endpoints: EndpointsConfig | None = None,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoints = endpoints or EndpointsConfig()
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def geocode(self, postcode: str) -> GeocodeResponse:
        response = self._send(
            "GET",
            self.endpoints.geocoder_url,
            params={"postalcode": postcode},
        )
        return self._decode(response, GeocodeResponse)

    def search_stores(self, center: GeoCoordinate, radius: float, offset: int) -> StoreSearchResponse:
        params = {
            "type": "geo",
            "radius": format_radius(radius),
            "from": offset,
            "latitude": center.latitude,
            "longitude": center.longitude,
        }
        response = self._send("GET", self.endpoints.store_search_url, params=params)
        return self._decode(response, StoreSearchResponse)

    def item_stock(self, product_ids: list[str], store_ids: list[int]) -> StockResponse:
        body = {"productIdList": product_ids, "storeIdList": store_ids}
        response = self._send("POST", self.endpoints.stock_url, json=body)
        return self._decode(response, StockResponse)

    def close(self) -> None:
        self.session.close()

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as exc:
            raise RemoteRequestError(f"{method} {url} failed: {exc}") from exc

    def _decode(self, response: requests.Response, model: type[PayloadT]) -> PayloadT:
        if response.status_code >= 300:
            raise RemoteRequestError(
                f"{response.url} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseSchemaError(f"{response.url} returned a non-JSON body") from exc

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            LOG.debug("unexpected payload from %s: %s", response.url, payload)
            raise ResponseSchemaError(
                f"{response.url} returned an unexpected {model.__name__}: "
                f"{exc.error_count()} validation error(s)"
            ) from exc
