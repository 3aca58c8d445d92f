from datetime import datetime
from types import SimpleNamespace

import pytest

from tracking.domain.statuses import STATUS_SEQUENCE, UNKNOWN_INDEX
from tracking.domain.timeline import (
    CUSTOMS_HOLD_LABEL, StepState, build_timeline, current_index, display_state,
    event_rows, progress_fraction, step_state,
)

TOTAL = len(STATUS_SEQUENCE)

def make_shipment(status="processing", customs_hold=False):
    return SimpleNamespace(status=status, customs_hold=customs_hold)

def make_event(id, title, completed, event_date):
    return SimpleNamespace(id=id, title=title, location="Rotterdam", event_date=event_date, completed=completed)

def test_current_index_follows_status():
    assert current_index(make_shipment("in-transit")) == 2
    assert current_index(make_shipment("delivered")) == TOTAL - 1
    assert current_index(make_shipment("cancelled")) == UNKNOWN_INDEX

@pytest.mark.parametrize("current", range(TOTAL))
def test_step_state_partitions_indices(current):
    states = [step_state(i, current) for i in range(TOTAL)]
    assert states.count(StepState.CURRENT) == 1
    assert all(s == StepState.PAST for s in states[:current])
    assert all(s == StepState.FUTURE for s in states[current + 1:])

def test_progress_monotonic_and_bounded():
    fractions = [progress_fraction(i, TOTAL) for i in range(TOTAL)]
    assert fractions == sorted(fractions)
    assert all(0.0 <= f <= 1.0 for f in fractions)
    assert fractions[-1] == 1.0

def test_progress_edges():
    assert progress_fraction(UNKNOWN_INDEX, TOTAL) == 0.0
    assert progress_fraction(3, 0) == 0.0
    assert progress_fraction(TOTAL + 5, TOTAL) == 1.0

def test_in_transit_without_hold():
    view = build_timeline(make_shipment("in-transit"))
    assert view.current_index == 2
    assert view.progress == pytest.approx(3 / 7)
    assert view.progress_percent == 43
    assert view.badge.label == "In Transit"
    assert view.badge.customs_hold is False
    assert [s.state for s in view.steps[:3]] == [StepState.PAST, StepState.PAST, StepState.CURRENT]

def test_customs_hold_overrides_badge_only():
    view = build_timeline(make_shipment("in-transit", customs_hold=True))
    assert view.badge.label == CUSTOMS_HOLD_LABEL
    assert view.badge.customs_hold is True
    assert view.badge.message
    assert view.progress == pytest.approx(3 / 7)
    assert view.current_index == 2

@pytest.mark.parametrize("status", list(STATUS_SEQUENCE) + ["cancelled", "mystery"])
def test_customs_hold_label_for_every_status(status):
    assert display_state(make_shipment(status, customs_hold=True)).label == CUSTOMS_HOLD_LABEL

def test_unknown_status_renders_without_progress():
    view = build_timeline(make_shipment("mystery"))
    assert view.progress == 0.0
    assert view.badge.label == "mystery"
    assert all(s.state == StepState.FUTURE for s in view.steps)

def test_event_flags_rendered_verbatim():
    early_pending = make_event(1, "Departed origin", False, datetime(2024, 1, 1, 8))
    later_done = make_event(2, "Arrived hub", True, datetime(2024, 1, 3, 8))
    rows = list(event_rows([early_pending, later_done]))
    assert [r.id for r in rows] == [1, 2]
    assert [r.completed for r in rows] == [False, True]

def test_event_rows_keep_caller_order():
    newest_first = [
        make_event(2, "Arrived hub", True, datetime(2024, 1, 3)),
        make_event(1, "Departed origin", True, datetime(2024, 1, 1)),
    ]
    assert [r.title for r in event_rows(newest_first)] == ["Arrived hub", "Departed origin"]

def test_event_rows_can_be_iterated_twice():
    rows = event_rows([make_event(1, "Picked up", True, datetime(2024, 1, 1))])
    assert list(rows) == list(rows)
    assert len(rows) == 1

def test_no_events():
    view = build_timeline(make_shipment(), None)
    assert not view.rows
    assert list(view.rows) == []
