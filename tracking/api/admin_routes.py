from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from typing import List, Optional
from tracking.api.deps import SESSION_COOKIE, get_auth, get_quote_service, get_shipment_service, require_admin
from tracking.application.auth import AuthSession
from tracking.application.schemas import (
    DashboardStats, EventRead, ImageUploadReport, LoginRequest, QuoteRead,
    SaveReport, ShipmentCreate, ShipmentDetail, ShipmentRead, ShipmentUpdate,
)
from tracking.application.service import QuoteService, ShipmentService, UploadPayload

router = APIRouter(prefix="/api/admin", tags=["admin"])
protected = [Depends(require_admin)]

@router.post("/login")
def login(payload: LoginRequest, response: Response, auth: AuthSession = Depends(get_auth)):
    if not auth.verify(payload.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    token = auth.issue_token()
    response.set_cookie(SESSION_COOKIE, token, httponly=True, samesite="lax")
    return {"access_token": token, "token_type": "bearer"}

@router.post("/logout", status_code=204)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return None

@router.get("/shipments", response_model=list[ShipmentRead], dependencies=protected)
def list_shipments(
    q: Optional[str] = Query(None, max_length=100, description="Search tracking number, sender or recipient"),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    return shipments.list(q)

@router.get("/stats", response_model=DashboardStats, dependencies=protected)
def dashboard_stats(shipments: ShipmentService = Depends(get_shipment_service)):
    return shipments.stats(shipments.list())

@router.post("/shipments", response_model=ShipmentRead, status_code=201, dependencies=protected)
def create_shipment(payload: ShipmentCreate, shipments: ShipmentService = Depends(get_shipment_service)):
    return shipments.create(payload)

@router.get("/shipments/{shipment_id}", response_model=ShipmentDetail, dependencies=protected)
def get_shipment(shipment_id: int, shipments: ShipmentService = Depends(get_shipment_service)):
    shipment, events = shipments.get_with_events(shipment_id)
    detail = ShipmentDetail.model_validate(shipment)
    detail.events = [EventRead.model_validate(e) for e in events]
    return detail

@router.put("/shipments/{shipment_id}", response_model=SaveReport, dependencies=protected)
def update_shipment(shipment_id: int, payload: ShipmentUpdate, shipments: ShipmentService = Depends(get_shipment_service)):
    return shipments.update(shipment_id, payload)

@router.delete("/shipments/{shipment_id}", status_code=204, dependencies=protected)
def delete_shipment(shipment_id: int, shipments: ShipmentService = Depends(get_shipment_service)):
    shipments.delete(shipment_id)
    return None

@router.post("/shipments/{shipment_id}/images", response_model=ImageUploadReport, dependencies=protected)
def upload_images(
    shipment_id: int,
    files: List[UploadFile] = File(...),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    # one byte past the limit is enough to reject an oversized file
    limit = shipments.max_upload_bytes + 1
    payloads = [UploadPayload(f.filename or "upload", f.content_type, f.file.read(limit)) for f in files]
    return shipments.upload_images(shipment_id, payloads)

@router.delete("/shipments/{shipment_id}/images", response_model=ShipmentRead, dependencies=protected)
def remove_image(
    shipment_id: int,
    url: str = Query(..., description="URL of the stored image"),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    return shipments.remove_image(shipment_id, url)

@router.get("/quotes", response_model=list[QuoteRead], dependencies=protected)
def list_quotes(quotes: QuoteService = Depends(get_quote_service)):
    return quotes.list()
