"""Record store for shipments, their events and quote requests.

Every write commits on its own: there is no cross-record transaction, so a
caller that performs several writes gets per-call success or failure.
Driver and ORM failures surface as ``StoreError``.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core import get_logger
from tracking.application.errors import NotFoundError, StoreError
from tracking.domain.models import QuoteRequest, Shipment, ShipmentEvent

logger = get_logger(__name__)

EVENT_FIELDS = ("title", "location", "event_date", "completed")

class ShipmentStore:
    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception) -> StoreError:
        self.db.rollback()
        logger.error(f"Store {action} failed: {exc}")
        return StoreError(f"could not {action}")

    # -- shipments -----------------------------------------------------

    def find_shipment_by_tracking_number(self, code: str) -> Optional[Shipment]:
        try:
            return self.db.execute(
                select(Shipment).where(Shipment.tracking_number == code)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("fetch shipment data", e)

    def tracking_number_exists(self, code: str) -> bool:
        return self.find_shipment_by_tracking_number(code) is not None

    def get_shipment(self, shipment_id: int) -> Optional[Shipment]:
        try:
            return self.db.get(Shipment, shipment_id)
        except SQLAlchemyError as e:
            raise self._fail("fetch shipment data", e)

    def list_shipments(self) -> List[Shipment]:
        try:
            return list(self.db.execute(
                select(Shipment).order_by(Shipment.created_at.desc(), Shipment.id.desc())
            ).scalars())
        except SQLAlchemyError as e:
            raise self._fail("list shipments", e)

    def insert_shipment(self, fields: Dict[str, Any]) -> Shipment:
        obj = Shipment(**fields)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail("create shipment", e)
        return obj

    def update_shipment(self, shipment_id: int, fields: Dict[str, Any]) -> Shipment:
        shipment = self.get_shipment(shipment_id)
        if not shipment:
            raise NotFoundError("Shipment not found")
        for key, value in fields.items():
            setattr(shipment, key, value)
        try:
            self.db.commit()
            self.db.refresh(shipment)
        except SQLAlchemyError as e:
            raise self._fail("update shipment", e)
        return shipment

    def delete_shipment(self, shipment_id: int) -> None:
        shipment = self.get_shipment(shipment_id)
        if not shipment:
            raise NotFoundError("Shipment not found")
        # reload so the ORM cascade also sees events written through other calls
        self.db.expire(shipment, ["events"])
        try:
            self.db.delete(shipment)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete shipment", e)

    # -- events --------------------------------------------------------

    def list_events(self, shipment_id: int, newest_first: bool = False) -> List[ShipmentEvent]:
        order = ShipmentEvent.event_date.desc() if newest_first else ShipmentEvent.event_date.asc()
        try:
            return list(self.db.execute(
                select(ShipmentEvent)
                .where(ShipmentEvent.shipment_id == shipment_id)
                .order_by(order, ShipmentEvent.id)
            ).scalars())
        except SQLAlchemyError as e:
            raise self._fail("fetch shipment events", e)

    def insert_event(self, shipment_id: int, fields: Dict[str, Any]) -> ShipmentEvent:
        values = {k: v for k, v in fields.items() if k in EVENT_FIELDS}
        obj = ShipmentEvent(shipment_id=shipment_id, **values)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail("create event", e)
        return obj

    def update_event(self, event_id: int, fields: Dict[str, Any]) -> None:
        try:
            obj = self.db.get(ShipmentEvent, event_id)
        except SQLAlchemyError as e:
            raise self._fail("fetch event", e)
        if not obj:
            raise NotFoundError("Event not found")
        for key, value in fields.items():
            if key in EVENT_FIELDS:
                setattr(obj, key, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update event", e)

    def delete_event(self, event_id: int) -> None:
        try:
            obj = self.db.get(ShipmentEvent, event_id)
            if obj is None:
                return
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete event", e)

    # -- quote requests ------------------------------------------------

    def insert_quote(self, fields: Dict[str, Any]) -> QuoteRequest:
        obj = QuoteRequest(**fields)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail("submit quote request", e)
        return obj

    def list_quotes(self) -> List[QuoteRequest]:
        try:
            return list(self.db.execute(
                select(QuoteRequest).order_by(QuoteRequest.created_at.desc(), QuoteRequest.id.desc())
            ).scalars())
        except SQLAlchemyError as e:
            raise self._fail("list quote requests", e)
