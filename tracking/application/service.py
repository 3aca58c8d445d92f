from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple
import os
import random
import string
import time

from shared.core import get_logger
from tracking.domain.models import QuoteRequest, Shipment, ShipmentEvent
from tracking.domain.statuses import ShipmentStatus
from tracking.infrastructure.storage import FileStorage
from tracking.infrastructure.store import ShipmentStore
from .errors import NotFoundError, StoreError, TrackingError, ValidationError
from .schemas import (
    DashboardStats, ImageUploadReport, ItemResult, QuoteCreate,
    SaveReport, ShipmentCreate, ShipmentUpdate,
)

logger = get_logger(__name__)

BASE36_DIGITS = string.digits + string.ascii_uppercase
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
MAX_TRACKING_ATTEMPTS = 5

# (path on ShipmentCreate, human name) for fields a shipment cannot be created without
REQUIRED_CREATE_FIELDS = [
    (("sender", "name"), "sender name"),
    (("recipient", "name"), "recipient name"),
    (("recipient", "address"), "recipient address"),
    (("recipient", "country"), "recipient country"),
    (("origin",), "origin"),
    (("destination",), "destination"),
]

ALLOWED_UPLOAD_TYPES = ("image/", "video/")

def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_DIGITS[rem])
    return "".join(reversed(digits))

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())

@dataclass
class UploadPayload:
    filename: str
    content_type: Optional[str]
    data: bytes

class ShipmentService:
    def __init__(
        self,
        store: ShipmentStore,
        storage: Optional[FileStorage] = None,
        prefix: str = "GLX",
        default_delivery_days: int = 7,
        max_upload_bytes: int = 10 * 1024 * 1024,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.storage = storage
        self.prefix = prefix
        self.default_delivery_days = default_delivery_days
        self.max_upload_bytes = max_upload_bytes
        self.now = now

    def generate_tracking_number(self) -> str:
        """Prefix + base-36 millisecond timestamp + 4 random characters, uppercase."""
        timestamp = to_base36(int(self.now().timestamp() * 1000))
        suffix = "".join(random.choices(SUFFIX_ALPHABET, k=4))
        return f"{self.prefix}{timestamp}{suffix}".upper()

    def _unique_tracking_number(self) -> str:
        for _ in range(MAX_TRACKING_ATTEMPTS):
            candidate = self.generate_tracking_number()
            if not self.store.tracking_number_exists(candidate):
                return candidate
        raise StoreError("could not allocate a tracking number")

    # -- read ----------------------------------------------------------

    def list(self, search: Optional[str] = None) -> List[Shipment]:
        shipments = self.store.list_shipments()
        if search and search.strip():
            needle = search.strip().lower()
            shipments = [
                s for s in shipments
                if needle in s.tracking_number.lower()
                or needle in (s.sender_name or "").lower()
                or needle in (s.recipient_name or "").lower()
            ]
        return shipments

    def stats(self, shipments: Sequence[Shipment]) -> DashboardStats:
        return DashboardStats(
            total=len(shipments),
            in_transit=sum(1 for s in shipments if s.status == ShipmentStatus.IN_TRANSIT.value),
            delivered=sum(1 for s in shipments if s.status == ShipmentStatus.DELIVERED.value),
            pending=sum(1 for s in shipments if s.status == ShipmentStatus.PROCESSING.value),
        )

    def get(self, shipment_id: int) -> Shipment:
        shipment = self.store.get_shipment(shipment_id)
        if not shipment:
            raise NotFoundError("Shipment not found")
        return shipment

    def get_with_events(self, shipment_id: int) -> Tuple[Shipment, List[ShipmentEvent]]:
        shipment = self.get(shipment_id)
        return shipment, self.store.list_events(shipment_id, newest_first=False)

    # -- create --------------------------------------------------------

    def create(self, data: ShipmentCreate) -> Shipment:
        missing = []
        for path, label in REQUIRED_CREATE_FIELDS:
            value = data
            for attr in path:
                value = getattr(value, attr, None)
            if _is_blank(value):
                missing.append(label)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

        delivery_days = data.package.delivery_days
        days = delivery_days if delivery_days is not None else self.default_delivery_days
        created = self.now()

        payload = {
            "tracking_number": self._unique_tracking_number(),
            "status": ShipmentStatus.PROCESSING.value,
            "customs_hold": False,
            "origin_location": data.origin.strip(),
            "destination_location": data.destination.strip(),
            "estimated_delivery": (created + timedelta(days=days)).date(),
        }
        payload.update(data.sender.to_columns("sender"))
        payload.update(data.recipient.to_columns("recipient"))
        payload.update(data.package.to_columns())
        payload.update(data.pricing.to_columns())

        shipment = self.store.insert_shipment(payload)
        logger.info(f"Shipment created: {shipment.tracking_number}")
        return shipment

    # -- update --------------------------------------------------------

    def _update_fields(self, data: ShipmentUpdate) -> dict:
        provided = data.model_fields_set
        fields = {}
        if "status" in provided:
            if _is_blank(data.status):
                raise ValidationError("Status cannot be blank", fields=["status"])
            fields["status"] = data.status.strip()
        for attr, column in (("origin", "origin_location"), ("destination", "destination_location")):
            if attr in provided:
                value = getattr(data, attr)
                if _is_blank(value):
                    raise ValidationError(f"Missing required fields: {attr}", fields=[attr])
                fields[column] = value.strip()
        if "current_location" in provided:
            fields["current_location"] = None if _is_blank(data.current_location) else data.current_location.strip()
        if "estimated_delivery" in provided:
            fields["estimated_delivery"] = data.estimated_delivery
        if "customs_hold" in provided and data.customs_hold is not None:
            fields["customs_hold"] = data.customs_hold
        if "package_images" in provided:
            fields["package_images"] = list(data.package_images or []) or None
        if data.sender is not None:
            fields.update(data.sender.to_columns("sender", exclude_unset=True))
        if data.recipient is not None:
            fields.update(data.recipient.to_columns("recipient", exclude_unset=True))
        if data.package is not None:
            fields.update(data.package.to_columns(exclude_unset=True))
        if data.pricing is not None:
            fields.update(data.pricing.to_columns(exclude_unset=True))
        return fields

    def update(self, shipment_id: int, data: ShipmentUpdate) -> SaveReport:
        """Write shipment fields, then reconcile its events one write at a time.

        A failing shipment write raises before any event is touched. Event
        writes after that are independent: failures are collected in the
        report and earlier writes stay in place.
        """
        fields = self._update_fields(data)
        self.get(shipment_id)
        report = SaveReport(shipment_id=shipment_id)

        self.store.update_shipment(shipment_id, fields)
        report.results.append(ItemResult(target="shipment", action="update", id=shipment_id))
        logger.info(f"Shipment {shipment_id} updated: {sorted(fields)}")

        if data.events is not None:
            self._reconcile_events(shipment_id, data.events, report)

        if not report.ok:
            logger.warning(f"Shipment {shipment_id} saved with {len(report.failures)} failed event write(s)")
        return report

    def _reconcile_events(self, shipment_id: int, rows, report: SaveReport) -> None:
        try:
            existing = {e.id: e for e in self.store.list_events(shipment_id)}
        except StoreError as e:
            report.results.append(ItemResult(target="event", action="skip", ok=False, error=e.message))
            return

        kept_ids = {row.id for row in rows if row.id is not None}
        for event_id in existing:
            if event_id in kept_ids:
                continue
            report.results.append(self._event_write("delete", event_id, lambda: self.store.delete_event(event_id)))

        for row in rows:
            if _is_blank(row.title) or _is_blank(row.location):
                report.results.append(ItemResult(target="event", action="skip", id=row.id))
                continue
            fields = {
                "title": row.title.strip(),
                "location": row.location.strip(),
                "event_date": row.event_date,
                "completed": row.completed,
            }
            if row.id is None:
                report.results.append(self._event_insert(shipment_id, fields))
            elif row.id not in existing:
                report.results.append(ItemResult(
                    target="event", action="update", id=row.id, ok=False, error="Event not found",
                ))
            else:
                report.results.append(
                    self._event_write("update", row.id, lambda row=row, fields=fields: self.store.update_event(row.id, fields))
                )

    def _event_insert(self, shipment_id: int, fields: dict) -> ItemResult:
        try:
            event = self.store.insert_event(shipment_id, fields)
        except TrackingError as e:
            return ItemResult(target="event", action="insert", name=fields["title"], ok=False, error=e.message)
        return ItemResult(target="event", action="insert", id=event.id, name=event.title)

    def _event_write(self, action: str, event_id: int, write: Callable[[], None]) -> ItemResult:
        try:
            write()
        except TrackingError as e:
            return ItemResult(target="event", action=action, id=event_id, ok=False, error=e.message)
        return ItemResult(target="event", action=action, id=event_id)

    # -- delete --------------------------------------------------------

    def delete(self, shipment_id: int) -> None:
        self.store.delete_shipment(shipment_id)
        logger.info(f"Shipment {shipment_id} deleted")

    # -- images --------------------------------------------------------

    def _require_storage(self) -> FileStorage:
        if self.storage is None:
            raise StoreError("file storage is not configured")
        return self.storage

    def _image_path(self, filename: str) -> str:
        ext = os.path.splitext(filename or "")[1].lower().lstrip(".") or "bin"
        token = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
        return f"packages/{int(time.time() * 1000)}-{token}.{ext}"

    def upload_images(self, shipment_id: int, files: Sequence[UploadPayload]) -> ImageUploadReport:
        storage = self._require_storage()
        shipment = self.get(shipment_id)
        report = ImageUploadReport(shipment_id=shipment_id, package_images=list(shipment.package_images or []))
        uploaded = []
        for upload in files:
            if not (upload.content_type or "").startswith(ALLOWED_UPLOAD_TYPES):
                report.results.append(ItemResult(
                    target="image", action="upload", name=upload.filename, ok=False,
                    error="Only image and video files are accepted",
                ))
                continue
            if len(upload.data) > self.max_upload_bytes:
                report.results.append(ItemResult(
                    target="image", action="upload", name=upload.filename, ok=False,
                    error="File is too large",
                ))
                continue
            try:
                url = storage.upload_file(upload.data, self._image_path(upload.filename))
            except TrackingError as e:
                report.results.append(ItemResult(
                    target="image", action="upload", name=upload.filename, ok=False, error=e.message,
                ))
                continue
            uploaded.append(url)
            report.results.append(ItemResult(target="image", action="upload", name=url))

        if uploaded:
            images = report.package_images + uploaded
            try:
                self.store.update_shipment(shipment_id, {"package_images": images})
                report.package_images = images
            except StoreError as e:
                report.results.append(ItemResult(
                    target="shipment", action="update", id=shipment_id, ok=False, error=e.message,
                ))
            logger.info(f"Shipment {shipment_id}: {len(uploaded)} image(s) uploaded")
        return report

    def remove_image(self, shipment_id: int, url: str) -> Shipment:
        storage = self._require_storage()
        shipment = self.get(shipment_id)
        images = list(shipment.package_images or [])
        if url not in images:
            raise NotFoundError("Image not found")
        images.remove(url)
        shipment = self.store.update_shipment(shipment_id, {"package_images": images or None})
        try:
            storage.delete_file(storage.path_from_url(url))
        except TrackingError as e:
            logger.warning(f"Image detached but not deleted: {url} ({e.message})")
        return shipment

class QuoteService:
    REQUIRED = [("name", "name"), ("email", "email"), ("service_type", "service type")]

    def __init__(self, store: ShipmentStore):
        self.store = store

    def submit(self, data: QuoteCreate) -> QuoteRequest:
        missing = [label for attr, label in self.REQUIRED if _is_blank(getattr(data, attr))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)
        payload = {
            key: (value.strip() or None) if isinstance(value, str) else value
            for key, value in data.model_dump().items()
        }
        quote = self.store.insert_quote(payload)
        logger.info(f"Quote request received: {quote.id} ({quote.service_type})")
        return quote

    def list(self) -> List[QuoteRequest]:
        return self.store.list_quotes()
