from __future__ import annotations


class PharmStockError(RuntimeError):
    pass


class RemoteRequestError(PharmStockError):
    """The remote endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseSchemaError(PharmStockError):
    """The remote endpoint answered, but the body did not have the expected shape."""


class GeoResolutionError(PharmStockError):
    pass


class StoreEnumerationError(PharmStockError):
    pass


class StockBatchError(PharmStockError):
    def __init__(self, message: str, batch_number: int, store_ids: list[int]) -> None:
        super().__init__(message)
        self.batch_number = batch_number
        self.store_ids = store_ids


class JoinError(PharmStockError):
    def __init__(self, store_id: int) -> None:
        super().__init__(f"stock returned for unknown store id {store_id}")
        self.store_id = store_id
