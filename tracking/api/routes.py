from fastapi import APIRouter, Depends, HTTPException
from tracking.api.deps import get_lookup_service, get_quote_service
from tracking.application.lookup import LookupService, NotFoundResult, TrackingResult
from tracking.application.schemas import (
    BadgeRead, EventRead, QuoteCreate, QuoteRead, ShipmentRead, StepRead, TimelineRead, TrackingResponse,
)
from tracking.application.service import QuoteService
from tracking.domain.timeline import TimelineView

router = APIRouter(prefix="/api", tags=["tracking"])

def timeline_payload(view: TimelineView) -> TimelineRead:
    return TimelineRead(
        status=view.status,
        current_index=view.current_index,
        progress=view.progress,
        progress_percent=view.progress_percent,
        badge=BadgeRead.model_validate(view.badge),
        steps=[StepRead(key=s.key, label=s.label, state=s.state.value) for s in view.steps],
        events=[EventRead.model_validate(row) for row in view.rows],
    )

def tracking_payload(result: TrackingResult) -> TrackingResponse:
    return TrackingResponse(
        shipment=ShipmentRead.model_validate(result.shipment),
        display_location=result.display_location,
        timeline=timeline_payload(result.timeline),
    )

@router.get("/track/{tracking_number}", response_model=TrackingResponse)
def track_shipment(tracking_number: str, lookup: LookupService = Depends(get_lookup_service)):
    """Look up a shipment by tracking number (case and surrounding spaces are ignored)."""
    result = lookup.lookup(tracking_number, newest_first=True)
    if isinstance(result, NotFoundResult):
        raise HTTPException(status_code=404, detail=f"Shipment not found: {result.tracking_number}")
    return tracking_payload(result)

@router.post("/quotes", response_model=QuoteRead, status_code=201)
def request_quote(payload: QuoteCreate, quotes: QuoteService = Depends(get_quote_service)):
    return quotes.submit(payload)
