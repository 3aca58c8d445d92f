"""Server-rendered pages: public tracking and the admin panel."""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from shared.core import get_logger
from tracking.api import forms
from tracking.api.deps import (
    SESSION_COOKIE, get_auth, get_lookup_service, get_quote_service, get_shipment_service, is_admin,
)
from tracking.application.auth import AuthSession
from tracking.application.errors import TrackingError, ValidationError
from tracking.application.lookup import LookupService, NotFoundResult, normalize_tracking_number
from tracking.application.schemas import CURRENCIES, QUOTE_SERVICE_TYPES, SERVICE_TYPES
from tracking.application.service import QuoteService, ShipmentService, UploadPayload
from tracking.core_settings import get_settings
from tracking.domain.statuses import STATUS_OPTIONS, status_label, status_tone
from tracking.domain.timeline import build_timeline

logger = get_logger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals.update(
    status_label=status_label,
    status_tone=status_tone,
    status_options=STATUS_OPTIONS,
    service_types=SERVICE_TYPES,
    currencies=CURRENCIES,
    quote_service_types=QUOTE_SERVICE_TYPES,
)

router = APIRouter(tags=["pages"], include_in_schema=False)

def render(request: Request, name: str, status_code: int = 200, **context) -> HTMLResponse:
    context.setdefault("notice", request.query_params.get("notice"))
    context.setdefault("settings", get_settings())
    return templates.TemplateResponse(request, name, context, status_code=status_code)

def redirect(url: str, notice: Optional[str] = None) -> RedirectResponse:
    if notice:
        url = f"{url}?notice={quote(notice)}"
    return RedirectResponse(url, status_code=303)

def to_login() -> RedirectResponse:
    return redirect("/admin", "Please log in to continue")

# -- public ------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return render(request, "home.html")

@router.get("/track")
def track_form(request: Request, tracking_number: Optional[str] = None):
    try:
        code = normalize_tracking_number(tracking_number)
    except ValidationError as e:
        return render(request, "home.html", status_code=422, notice="Please enter a tracking number", error=e.message)
    return RedirectResponse(f"/track/{quote(code)}", status_code=303)

@router.get("/track/{tracking_number}", response_class=HTMLResponse)
def track_page(request: Request, tracking_number: str, lookup: LookupService = Depends(get_lookup_service)):
    try:
        result = lookup.lookup(tracking_number, newest_first=True)
    except TrackingError as e:
        return render(request, "track.html", status_code=e.status_code, result=None, not_found=None, notice=e.message)
    if isinstance(result, NotFoundResult):
        return render(request, "track.html", status_code=404, result=None, not_found=result)
    return render(request, "track.html", result=result, not_found=None)

@router.post("/quote", response_class=HTMLResponse)
async def submit_quote(request: Request, quotes: QuoteService = Depends(get_quote_service)):
    form = await request.form()
    try:
        data = forms.quote_from_form(form)
        await run_in_threadpool(quotes.submit, data)
    except TrackingError as e:
        return render(request, "home.html", status_code=e.status_code, notice=e.message, quote_form=form)
    return render(request, "home.html", quote_sent=True, notice="Quote request submitted successfully!")

# -- admin session ---------------------------------------------------

@router.get("/admin", response_class=HTMLResponse)
def login_page(request: Request, auth: AuthSession = Depends(get_auth)):
    if is_admin(request, auth):
        return redirect("/admin/dashboard")
    return render(request, "admin/login.html")

@router.post("/admin", response_class=HTMLResponse)
async def login_submit(request: Request, auth: AuthSession = Depends(get_auth)):
    form = await request.form()
    if not auth.verify(form.get("password")):
        logger.warning("Admin login rejected")
        return render(request, "admin/login.html", status_code=401, notice="Invalid password")
    response = redirect("/admin/dashboard", "Logged in")
    response.set_cookie(SESSION_COOKIE, auth.issue_token(), httponly=True, samesite="lax")
    return response

@router.get("/admin/logout")
def logout():
    response = redirect("/admin", "Logged out successfully")
    response.delete_cookie(SESSION_COOKIE)
    return response

# -- admin pages ---------------------------------------------------------

@router.get("/admin/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    q: Optional[str] = None,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    try:
        everything = shipments.list()
        listed = shipments.list(q)
    except TrackingError as e:
        return render(request, "admin/dashboard.html", status_code=e.status_code,
                      shipments=[], stats=None, q=q or "", notice="Failed to fetch shipments")
    return render(request, "admin/dashboard.html", shipments=listed, stats=shipments.stats(everything), q=q or "")

@router.post("/admin/shipments/{shipment_id}/delete")
def delete_shipment(
    request: Request,
    shipment_id: int,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    try:
        shipments.delete(shipment_id)
    except TrackingError as e:
        return redirect("/admin/dashboard", f"Failed to delete shipment: {e.message}")
    return redirect("/admin/dashboard", "Shipment deleted")

@router.get("/admin/shipments/new", response_class=HTMLResponse)
def create_page(request: Request, auth: AuthSession = Depends(get_auth)):
    if not is_admin(request, auth):
        return to_login()
    return render(request, "admin/create.html", form={}, created=None)

@router.post("/admin/shipments/new", response_class=HTMLResponse)
async def create_submit(
    request: Request,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    form = await request.form()
    try:
        data = forms.shipment_create_from_form(form)
        shipment = await run_in_threadpool(shipments.create, data)
    except TrackingError as e:
        return render(request, "admin/create.html", status_code=e.status_code,
                      form=form, created=None, notice=e.message)
    tracking_link = str(request.url_for("track_page", tracking_number=shipment.tracking_number))
    return render(request, "admin/create.html", status_code=201, form={}, created=shipment,
                  tracking_link=tracking_link, notice="Shipment created successfully!")

def _edit_context(shipments: ShipmentService, shipment_id: int) -> dict:
    shipment, events = shipments.get_with_events(shipment_id)
    return {
        "shipment": shipment,
        "events": events,
        "timeline": build_timeline(shipment, events),
    }

@router.get("/admin/shipments/{shipment_id}", response_class=HTMLResponse)
def edit_page(
    request: Request,
    shipment_id: int,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    try:
        context = _edit_context(shipments, shipment_id)
    except TrackingError as e:
        return redirect("/admin/dashboard", f"Failed to fetch shipment: {e.message}")
    return render(request, "admin/edit.html", report=None, **context)

@router.post("/admin/shipments/{shipment_id}", response_class=HTMLResponse)
async def edit_submit(
    request: Request,
    shipment_id: int,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    form = await request.form()
    try:
        data = forms.shipment_update_from_form(form)
        report = await run_in_threadpool(shipments.update, shipment_id, data)
    except TrackingError as e:
        try:
            context = await run_in_threadpool(_edit_context, shipments, shipment_id)
        except TrackingError:
            return redirect("/admin/dashboard", f"Failed to update shipment: {e.message}")
        return render(request, "admin/edit.html", status_code=e.status_code, report=None,
                      notice=f"Failed to update shipment: {e.message}", **context)
    if report.ok:
        return redirect("/admin/dashboard", "Shipment updated successfully!")
    context = await run_in_threadpool(_edit_context, shipments, shipment_id)
    return render(request, "admin/edit.html", report=report,
                  notice=f"Shipment saved, but {len(report.failures)} event change(s) failed", **context)

@router.post("/admin/shipments/{shipment_id}/images", response_class=HTMLResponse)
async def upload_images(
    request: Request,
    shipment_id: int,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    form = await request.form()
    limit = shipments.max_upload_bytes + 1
    payloads = []
    for upload in form.getlist("files"):
        if not getattr(upload, "filename", None):
            continue
        payloads.append(UploadPayload(upload.filename, upload.content_type, await upload.read(limit)))
    try:
        report = await run_in_threadpool(shipments.upload_images, shipment_id, payloads)
    except TrackingError as e:
        return redirect(f"/admin/shipments/{shipment_id}", f"Upload failed: {e.message}")
    uploaded = sum(1 for r in report.results if r.target == "image" and r.ok)
    failed = [r.name for r in report.results if not r.ok]
    notice = f"{uploaded} image(s) uploaded"
    if failed:
        notice += f"; failed: {', '.join(n or 'shipment' for n in failed)}"
    return redirect(f"/admin/shipments/{shipment_id}", notice)

@router.post("/admin/shipments/{shipment_id}/images/remove")
async def remove_image(
    request: Request,
    shipment_id: int,
    auth: AuthSession = Depends(get_auth),
    shipments: ShipmentService = Depends(get_shipment_service),
):
    if not is_admin(request, auth):
        return to_login()
    form = await request.form()
    try:
        await run_in_threadpool(shipments.remove_image, shipment_id, form.get("url") or "")
    except TrackingError as e:
        return redirect(f"/admin/shipments/{shipment_id}", f"Failed to remove image: {e.message}")
    return redirect(f"/admin/shipments/{shipment_id}", "Image removed")
