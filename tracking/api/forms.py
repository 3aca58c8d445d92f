"""Translate posted HTML forms into the typed admin/quote structs.

Browsers post every field as a string, blanks included; numbers and dates
are parsed here and any schema violation becomes a ``ValidationError`` so
page handlers can show it as a notice.
"""

from datetime import date, datetime
from typing import List, Optional

import pydantic

from tracking.application.errors import ValidationError
from tracking.application.schemas import (
    EventInput, PackageDetails, Pricing, QuoteCreate, RecipientInfo, SenderInfo, ShipmentCreate, ShipmentUpdate,
)

def _text(form, name: str) -> str:
    return (form.get(name) or "").strip()

def _number(form, name: str, cast=float):
    raw = _text(form, name)
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError:
        raise ValidationError(f"Invalid number for {name.replace('_', ' ')}", fields=[name])

def _date(raw: str) -> Optional[date]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid date: {raw}", fields=["estimated_delivery"])

def _datetime(raw: str) -> datetime:
    raw = (raw or "").strip()
    if not raw:
        return datetime.utcnow()
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid event date: {raw}", fields=["event_date"])

def _build(model, **values):
    try:
        return model(**values)
    except pydantic.ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ValidationError(f"Invalid value for: {', '.join(fields)}", fields=fields)

def _party(form, prefix: str, model):
    return _build(
        model,
        name=_text(form, f"{prefix}_name"),
        email=_text(form, f"{prefix}_email"),
        address=_text(form, f"{prefix}_address"),
        country=_text(form, f"{prefix}_country"),
    )

def _package(form) -> PackageDetails:
    return _build(
        PackageDetails,
        description=_text(form, "package_description"),
        weight_kg=_number(form, "weight_kg"),
        package_value=_number(form, "package_value"),
        service_type=_text(form, "service_type") or "standard",
        delivery_days=_number(form, "delivery_days", int),
    )

def _pricing(form) -> Pricing:
    return _build(
        Pricing,
        shipping_fee=_number(form, "shipping_fee"),
        currency=_text(form, "currency") or "USD",
    )

def shipment_create_from_form(form) -> ShipmentCreate:
    return _build(
        ShipmentCreate,
        sender=_party(form, "sender", SenderInfo),
        recipient=_party(form, "recipient", RecipientInfo),
        origin=_text(form, "origin"),
        destination=_text(form, "destination"),
        package=_package(form),
        pricing=_pricing(form),
    )

def events_from_form(form) -> List[EventInput]:
    ids = form.getlist("event_id")
    titles = form.getlist("event_title")
    locations = form.getlist("event_location")
    dates = form.getlist("event_date")
    completed = form.getlist("event_completed")
    actions = form.getlist("event_action")
    rows = []
    for i, title in enumerate(titles):
        if i < len(actions) and actions[i] == "remove":
            continue
        raw_id = ids[i] if i < len(ids) else ""
        rows.append(_build(
            EventInput,
            id=int(raw_id) if raw_id.strip().isdigit() else None,
            title=title,
            location=locations[i] if i < len(locations) else "",
            event_date=_datetime(dates[i] if i < len(dates) else ""),
            completed=(completed[i] if i < len(completed) else "0") == "1",
        ))
    return rows

def shipment_update_from_form(form) -> ShipmentUpdate:
    return _build(
        ShipmentUpdate,
        status=_text(form, "status"),
        current_location=_text(form, "current_location"),
        origin=_text(form, "origin"),
        destination=_text(form, "destination"),
        estimated_delivery=_date(form.get("estimated_delivery")),
        customs_hold=form.get("customs_hold") == "on",
        sender=_party(form, "sender", SenderInfo),
        recipient=_party(form, "recipient", RecipientInfo),
        package=_package(form),
        pricing=_pricing(form),
        events=events_from_form(form),
    )

def quote_from_form(form) -> QuoteCreate:
    return _build(
        QuoteCreate,
        name=_text(form, "name"),
        email=_text(form, "email"),
        phone=_text(form, "phone"),
        company=_text(form, "company"),
        service_type=_text(form, "service_type") or None,
        origin=_text(form, "origin"),
        destination=_text(form, "destination"),
        weight_kg=_number(form, "weight_kg"),
        details=_text(form, "details"),
    )
