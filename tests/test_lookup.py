from datetime import datetime

import pytest

from tracking.application.errors import StoreError, ValidationError
from tracking.application.lookup import LookupService, NotFoundResult, TrackingResult, normalize_tracking_number

class UnreachableStore:
    """Store double whose every read fails like a dropped connection."""

    def __init__(self):
        self.calls = 0

    def find_shipment_by_tracking_number(self, code):
        self.calls += 1
        raise StoreError("could not fetch shipment data")

    def list_events(self, shipment_id, newest_first=False):
        self.calls += 1
        raise StoreError("could not fetch shipment events")

def test_normalize():
    assert normalize_tracking_number("  glx123abc ") == "GLX123ABC"

@pytest.mark.parametrize("raw", ["", "   ", None])
def test_missing_tracking_number(raw):
    with pytest.raises(ValidationError) as exc:
        normalize_tracking_number(raw)
    assert exc.value.message == "missing tracking number"

def test_validation_happens_before_store_access():
    store = UnreachableStore()
    with pytest.raises(ValidationError):
        LookupService(store).lookup("  ")
    assert store.calls == 0

def test_created_shipment_found_by_any_spelling(service, store, shipment_form):
    created = service.create(shipment_form)
    code = created.tracking_number
    lookup = LookupService(store)
    for raw in (code, code.lower(), f"  {code}  "):
        result = lookup.lookup(raw)
        assert isinstance(result, TrackingResult)
        assert result.shipment.id == created.id
        assert result.tracking_number == code

def test_not_found(store):
    result = LookupService(store).lookup("glx-nope")
    assert isinstance(result, NotFoundResult)
    assert result.tracking_number == "GLX-NOPE"

def test_store_failure_surfaces_as_store_error():
    with pytest.raises(StoreError) as exc:
        LookupService(UnreachableStore()).lookup("GLX1")
    assert exc.value.message == "could not fetch shipment data"

def test_events_newest_first_with_display_location(service, store, shipment_form):
    created = service.create(shipment_form)
    store.insert_event(created.id, {"title": "Picked up", "location": "Shanghai", "event_date": datetime(2024, 12, 20, 9), "completed": True})
    store.insert_event(created.id, {"title": "Departed", "location": "Shanghai Port", "event_date": datetime(2024, 12, 21, 9), "completed": False})

    result = LookupService(store).lookup(created.tracking_number)
    assert [e.title for e in result.events] == ["Departed", "Picked up"]
    assert [r.completed for r in result.timeline.rows] == [False, True]
    # no current location yet, so the origin is shown
    assert result.display_location == "Shanghai, China"

    oldest_first = LookupService(store).lookup(created.tracking_number, newest_first=False)
    assert [e.title for e in oldest_first.events] == ["Picked up", "Departed"]
