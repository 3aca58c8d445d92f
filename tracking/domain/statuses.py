"""Canonical shipment statuses.

The sequence order is the progression order shown on the tracking page.
Status is stored as a plain string, so anything outside the sequence is
tolerated and simply has no position in it.
"""

from enum import Enum
from typing import Optional

UNKNOWN_INDEX = -1

class ShipmentStatus(str, Enum):
    PROCESSING = "processing"
    PICKED_UP = "picked-up"
    IN_TRANSIT = "in-transit"
    AT_SORTING_CENTER = "at-sorting-center"
    CUSTOMS_CLEARANCE = "customs-clearance"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"

# Selectable by staff but never part of the progression
CANCELLED = "cancelled"

STATUS_SEQUENCE = tuple(s.value for s in ShipmentStatus)

STATUS_LABELS = {
    ShipmentStatus.PROCESSING.value: "Processing",
    ShipmentStatus.PICKED_UP.value: "Picked Up",
    ShipmentStatus.IN_TRANSIT.value: "In Transit",
    ShipmentStatus.AT_SORTING_CENTER.value: "At Sorting Center",
    ShipmentStatus.CUSTOMS_CLEARANCE.value: "Customs Clearance",
    ShipmentStatus.OUT_FOR_DELIVERY.value: "Out for Delivery",
    ShipmentStatus.DELIVERED.value: "Delivered",
}

DISPLAY_ONLY_LABELS = {
    CANCELLED: "Cancelled",
}

STATUS_TONES = {
    ShipmentStatus.PROCESSING.value: "info",
    ShipmentStatus.IN_TRANSIT.value: "warning",
    ShipmentStatus.OUT_FOR_DELIVERY.value: "accent",
    ShipmentStatus.DELIVERED.value: "success",
    CANCELLED: "danger",
}

# (value, label) pairs offered by the admin status selector
STATUS_OPTIONS = [(s, STATUS_LABELS[s]) for s in STATUS_SEQUENCE] + list(DISPLAY_ONLY_LABELS.items())

def status_index(status: Optional[str]) -> int:
    """Zero-based position of ``status`` in the sequence, or ``UNKNOWN_INDEX``."""
    try:
        return STATUS_SEQUENCE.index(status)
    except ValueError:
        return UNKNOWN_INDEX

def status_label(status: Optional[str]) -> str:
    if status in STATUS_LABELS:
        return STATUS_LABELS[status]
    if status in DISPLAY_ONLY_LABELS:
        return DISPLAY_ONLY_LABELS[status]
    return status or ""

def status_tone(status: Optional[str]) -> str:
    return STATUS_TONES.get(status, "neutral")
