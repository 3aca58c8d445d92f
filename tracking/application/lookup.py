"""Customer-facing tracking lookup."""

from dataclasses import dataclass
from typing import List, Union

from shared.core import get_logger
from tracking.domain.models import Shipment, ShipmentEvent
from tracking.domain.timeline import TimelineView, build_timeline
from tracking.infrastructure.store import ShipmentStore
from .errors import StoreError, ValidationError

logger = get_logger(__name__)

LOOKUP_FAILED = "could not fetch shipment data"

@dataclass
class TrackingResult:
    tracking_number: str
    shipment: Shipment
    events: List[ShipmentEvent]
    timeline: TimelineView

    @property
    def display_location(self) -> str:
        return self.shipment.current_location or self.shipment.origin_location

@dataclass
class NotFoundResult:
    tracking_number: str

def normalize_tracking_number(raw) -> str:
    code = (raw or "").strip().upper()
    if not code:
        raise ValidationError("missing tracking number", fields=["tracking_number"])
    return code

class LookupService:
    def __init__(self, store: ShipmentStore):
        self.store = store

    def lookup(self, raw, newest_first: bool = True) -> Union[TrackingResult, NotFoundResult]:
        code = normalize_tracking_number(raw)
        try:
            shipment = self.store.find_shipment_by_tracking_number(code)
            if shipment is None:
                logger.info(f"Tracking lookup miss: {code}")
                return NotFoundResult(tracking_number=code)
            events = self.store.list_events(shipment.id, newest_first=newest_first)
        except StoreError:
            logger.warning(f"Tracking lookup failed: {code}")
            raise StoreError(LOOKUP_FAILED)
        logger.info(f"Tracking lookup hit: {code} ({len(events)} events)")
        return TrackingResult(
            tracking_number=code,
            shipment=shipment,
            events=events,
            timeline=build_timeline(shipment, events),
        )
