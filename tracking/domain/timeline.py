"""Timeline engine: turns stored shipment/event data into render state.

Everything here is pure. Inputs are any objects exposing the ORM attribute
names (``status``, ``customs_hold``, ``title``, ``location``,
``event_date``, ``completed``), so the same functions serve the ORM models,
the read schemas and test doubles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence

from .statuses import STATUS_SEQUENCE, UNKNOWN_INDEX, status_index, status_label, status_tone

CUSTOMS_HOLD_LABEL = "Customs Hold"
CUSTOMS_HOLD_TONE = "urgent"
CUSTOMS_HOLD_MESSAGE = (
    "Your goods have been seized by customs. To avoid losing your package, "
    "please contact our support team immediately. Failure to respond within "
    "48 hours may result in permanent confiscation of your shipment."
)

class StepState(str, Enum):
    PAST = "past"
    CURRENT = "current"
    FUTURE = "future"

@dataclass(frozen=True)
class StatusBadge:
    label: str
    tone: str
    customs_hold: bool = False
    message: Optional[str] = None

@dataclass(frozen=True)
class Step:
    key: str
    label: str
    state: StepState

@dataclass(frozen=True)
class EventRow:
    id: Optional[int]
    title: str
    location: str
    event_date: Optional[datetime]
    completed: bool

class EventRows:
    """Lazy, restartable view over caller-ordered events.

    Each iteration walks the underlying sequence again, so the same object can
    be rendered more than once (page body and JSON payload, for instance).
    """

    def __init__(self, events: Optional[Iterable] = None):
        self._events = list(events) if events is not None else []

    def __iter__(self) -> Iterator[EventRow]:
        for event in self._events:
            yield EventRow(
                id=getattr(event, "id", None),
                title=event.title,
                location=event.location,
                event_date=event.event_date,
                completed=bool(event.completed),
            )

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

@dataclass
class TimelineView:
    status: str
    current_index: int
    steps: List[Step]
    progress: float
    badge: StatusBadge
    rows: EventRows = field(default_factory=EventRows)

    @property
    def progress_percent(self) -> int:
        return round(self.progress * 100)

def current_index(shipment) -> int:
    return status_index(getattr(shipment, "status", None))

def step_state(step_index: int, current: int) -> StepState:
    if step_index < current:
        return StepState.PAST
    if step_index == current:
        return StepState.CURRENT
    return StepState.FUTURE

def progress_fraction(current: int, total_steps: int = len(STATUS_SEQUENCE)) -> float:
    """Share of the sequence reached, as drawn by the progress bar.

    An unknown status (``UNKNOWN_INDEX``) shows no progress at all.
    """
    if current == UNKNOWN_INDEX or total_steps <= 0:
        return 0.0
    fraction = (current + 1) / total_steps
    return max(0.0, min(1.0, fraction))

def display_state(shipment) -> StatusBadge:
    """Badge for the shipment header.

    A customs hold replaces the label and tone only; step positions and
    progress keep following the stored status.
    """
    if getattr(shipment, "customs_hold", False):
        return StatusBadge(
            label=CUSTOMS_HOLD_LABEL,
            tone=CUSTOMS_HOLD_TONE,
            customs_hold=True,
            message=CUSTOMS_HOLD_MESSAGE,
        )
    status = getattr(shipment, "status", None)
    return StatusBadge(label=status_label(status), tone=status_tone(status))

def event_rows(events: Optional[Sequence]) -> EventRows:
    return EventRows(events)

def build_steps(current: int) -> List[Step]:
    return [
        Step(key=key, label=status_label(key), state=step_state(i, current))
        for i, key in enumerate(STATUS_SEQUENCE)
    ]

def build_timeline(shipment, events: Optional[Sequence] = None) -> TimelineView:
    index = current_index(shipment)
    return TimelineView(
        status=getattr(shipment, "status", "") or "",
        current_index=index,
        steps=build_steps(index),
        progress=progress_fraction(index, len(STATUS_SEQUENCE)),
        badge=display_state(shipment),
        rows=event_rows(events),
    )
