from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StockLevel(str, Enum):
    """Traffic-light codes used by the stock endpoint."""

    IN_STOCK = "G"
    LOW_STOCK = "A"
    OUT_OF_STOCK = "R"


IN_STOCK_CODE = StockLevel.IN_STOCK.value


class GeoCoordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class StoreRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    store_id: int = Field(alias="storeId")
    display_name: str = Field(alias="displayName")
    postcode: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")


class StockRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # the endpoint sends ids as strings; coerced so joins compare numbers
    store_id: int = Field(alias="storeId")
    stock_level: str = Field(alias="stockLevel")


class StoreStockResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    store_name: str = Field(alias="storeName")
    store_postcode: str | None = Field(default=None, alias="storePostcode")
    store_phone_number: str | None = Field(default=None, alias="storePhoneNumber")
    stock_status: str = Field(alias="stockStatus")

    @property
    def in_stock(self) -> bool:
        return self.stock_status == IN_STOCK_CODE


class CacheKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    postcode: str
    radius: float

    @classmethod
    def for_search(cls, postcode: str, radius: float) -> "CacheKey":
        return cls(postcode=normalize_postcode(postcode), radius=radius)

    @property
    def slug(self) -> str:
        return f"{self.postcode}_{format_radius(self.radius)}"


def normalize_postcode(postcode: str) -> str:
    return "".join(postcode.split())


def format_radius(radius: float) -> str:
    return f"{radius:g}"


# Remote response shapes. Unknown fields are ignored; only what the sweep reads is declared.


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GeocodeLocation(_Payload):
    lat: float
    lng: float


class GeocodeGeometry(_Payload):
    location: GeocodeLocation


class GeocodeMatch(_Payload):
    geometry: GeocodeGeometry


class GeocodeResponse(_Payload):
    results: list[GeocodeMatch]


class StoreAddress(_Payload):
    postcode: str | None = None


class StoreContactDetails(_Payload):
    phone: str | None = None


class StoreLocation(_Payload):
    id: int
    displayname: str
    address: StoreAddress | None = Field(default=None, alias="Address")
    contact_details: StoreContactDetails | None = Field(default=None, alias="contactDetails")


class StoreSearchEntry(_Payload):
    location: StoreLocation = Field(alias="Location")

    def to_record(self) -> StoreRecord:
        loc = self.location
        return StoreRecord(
            store_id=loc.id,
            display_name=loc.displayname,
            postcode=loc.address.postcode if loc.address else None,
            phone_number=loc.contact_details.phone if loc.contact_details else None,
        )


class StoreSearchResponse(_Payload):
    size: int
    total: int
    results: list[StoreSearchEntry]


class StockResponse(_Payload):
    stock_levels: list[StockRecord] = Field(alias="stockLevels")


# Configuration


class Medication(BaseModel):
    id: str
    name: str


DEFAULT_MEDICATIONS = [
    Medication(id="42013311000001109", name="Lisdexamfetamine 20mg capsules"),
    Medication(id="42013411000001102", name="Lisdexamfetamine 30mg capsules"),
    Medication(id="42013511000001103", name="Lisdexamfetamine 40mg capsules"),
    Medication(id="42013611000001104", name="Lisdexamfetamine 50mg capsules"),
    Medication(id="42013711000001108", name="Lisdexamfetamine 60mg capsules"),
    Medication(id="42013811000001100", name="Lisdexamfetamine 70mg capsules"),
]


class EndpointsConfig(BaseModel):
    geocoder_url: str = "https://www.boots.com/online/psc/geocoder/postalcode"
    store_search_url: str = "https://www.boots.com/online/psc/search/store"
    stock_url: str = "https://www.boots.com/online/psc/itemStock"


class AppConfig(BaseModel):
    radius_miles: float = Field(default=50, gt=0)
    batch_size: int = Field(default=10, ge=1)
    request_delay_seconds: float = Field(default=6.0, ge=0)
    include_trailing_batch: bool = False
    snapshot_total: bool = False
    strict_join: bool = False
    data_dir: str = "data"
    timeout_seconds: float = Field(default=15.0, gt=0)
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    medications: list[Medication] = Field(
        default_factory=lambda: list(DEFAULT_MEDICATIONS), min_length=1
    )

    def find_medication(self, medication_id: str) -> Medication | None:
        for medication in self.medications:
            if medication.id == medication_id:
                return medication
        return None
