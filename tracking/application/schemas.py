from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime, date, timezone

ServiceType = Literal["standard", "express", "overnight", "freight"]
Currency = Literal["USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CNY"]
QuoteServiceType = Literal["ocean", "land", "air", "warehouse", "delivery", "multimodal"]

SERVICE_TYPES = ["standard", "express", "overnight", "freight"]
CURRENCIES = ["USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CNY"]
QUOTE_SERVICE_TYPES = {
    "ocean": "Ocean Freight",
    "land": "Land Transport",
    "air": "Air Freight",
    "warehouse": "Warehousing & Handling",
    "delivery": "Last Mile Delivery",
    "multimodal": "Multimodal Logistics",
}

# -- form structs ------------------------------------------------------

class PartyInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None

    def to_columns(self, prefix: str, exclude_unset: bool = False) -> dict:
        data = self.model_dump(exclude_unset=exclude_unset)
        return {f"{prefix}_{key}": _blank_to_none(value) for key, value in data.items()}

class SenderInfo(PartyInfo):
    pass

class RecipientInfo(PartyInfo):
    pass

class PackageDetails(BaseModel):
    description: Optional[str] = None
    weight_kg: Optional[float] = Field(None, ge=0)
    package_value: Optional[float] = Field(None, ge=0)
    service_type: ServiceType = "standard"
    delivery_days: Optional[int] = Field(None, ge=0)

    def to_columns(self, exclude_unset: bool = False) -> dict:
        data = self.model_dump(exclude_unset=exclude_unset)
        if "description" in data:
            data["package_description"] = _blank_to_none(data.pop("description"))
        return data

class Pricing(BaseModel):
    shipping_fee: Optional[float] = Field(None, ge=0)
    currency: Currency = "USD"

    def to_columns(self, exclude_unset: bool = False) -> dict:
        return self.model_dump(exclude_unset=exclude_unset)

class EventInput(BaseModel):
    # Rows without an id are new; rows with one update the stored event
    id: Optional[int] = None
    title: str = ""
    location: str = ""
    event_date: datetime = Field(default_factory=datetime.utcnow)
    completed: bool = False

    @field_validator("event_date")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        """Stored dates are naive UTC, so offsets are folded in before they are dropped"""
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

class ShipmentCreate(BaseModel):
    sender: SenderInfo = Field(default_factory=SenderInfo)
    recipient: RecipientInfo = Field(default_factory=RecipientInfo)
    origin: Optional[str] = None
    destination: Optional[str] = None
    package: PackageDetails = Field(default_factory=PackageDetails)
    pricing: Pricing = Field(default_factory=Pricing)

class ShipmentUpdate(BaseModel):
    status: Optional[str] = None
    current_location: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    estimated_delivery: Optional[date] = None
    customs_hold: Optional[bool] = None
    sender: Optional[SenderInfo] = None
    recipient: Optional[RecipientInfo] = None
    package: Optional[PackageDetails] = None
    pricing: Optional[Pricing] = None
    package_images: Optional[List[str]] = None
    # None leaves events untouched; a list (even empty) is reconciled against the store
    events: Optional[List[EventInput]] = None

class QuoteCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    service_type: Optional[QuoteServiceType] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    weight_kg: Optional[float] = Field(None, ge=0)
    details: Optional[str] = None

# -- read models -------------------------------------------------------

class EventRead(BaseModel):
    id: Optional[int] = None
    title: str
    location: str
    event_date: Optional[datetime] = None
    completed: bool

    class Config:
        from_attributes = True

class ShipmentRead(BaseModel):
    id: int
    tracking_number: str
    status: str
    origin_location: str
    destination_location: str
    current_location: Optional[str] = None
    estimated_delivery: Optional[date] = None
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    sender_address: Optional[str] = None
    sender_country: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_address: Optional[str] = None
    recipient_country: Optional[str] = None
    package_description: Optional[str] = None
    weight_kg: Optional[float] = None
    package_value: Optional[float] = None
    service_type: str
    delivery_days: Optional[int] = None
    package_images: Optional[List[str]] = None
    shipping_fee: Optional[float] = None
    currency: str
    customs_hold: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ShipmentDetail(ShipmentRead):
    events: List[EventRead] = []

class BadgeRead(BaseModel):
    label: str
    tone: str
    customs_hold: bool
    message: Optional[str] = None

    class Config:
        from_attributes = True

class StepRead(BaseModel):
    key: str
    label: str
    state: str

    class Config:
        from_attributes = True

class TimelineRead(BaseModel):
    status: str
    current_index: int
    progress: float
    progress_percent: int
    badge: BadgeRead
    steps: List[StepRead]
    events: List[EventRead]

class TrackingResponse(BaseModel):
    shipment: ShipmentRead
    display_location: str
    timeline: TimelineRead

class ItemResult(BaseModel):
    target: Literal["shipment", "event", "image"]
    action: Literal["insert", "update", "delete", "upload", "skip"]
    id: Optional[int] = None
    name: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None

class SaveReport(BaseModel):
    shipment_id: int
    results: List[ItemResult] = []

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failures(self) -> List[ItemResult]:
        return [r for r in self.results if not r.ok]

class ImageUploadReport(BaseModel):
    shipment_id: int
    package_images: List[str] = []
    results: List[ItemResult] = []

class DashboardStats(BaseModel):
    total: int
    in_transit: int
    delivered: int
    pending: int

class QuoteRead(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    service_type: str
    origin: Optional[str] = None
    destination: Optional[str] = None
    weight_kg: Optional[float] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LoginRequest(BaseModel):
    password: str

def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value
