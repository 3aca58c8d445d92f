from tracking.domain.statuses import (
    CANCELLED, STATUS_OPTIONS, STATUS_SEQUENCE, UNKNOWN_INDEX, ShipmentStatus,
    status_index, status_label, status_tone,
)

def test_sequence_order():
    assert STATUS_SEQUENCE == (
        "processing", "picked-up", "in-transit", "at-sorting-center",
        "customs-clearance", "out-for-delivery", "delivered",
    )

def test_index_strictly_increasing_and_unique():
    indices = [status_index(s) for s in STATUS_SEQUENCE]
    assert indices == list(range(len(STATUS_SEQUENCE)))
    assert len(set(indices)) == len(indices)

def test_unknown_status_gets_sentinel():
    assert status_index("lost-at-sea") == UNKNOWN_INDEX
    assert status_index(None) == UNKNOWN_INDEX
    assert status_index("") == UNKNOWN_INDEX

def test_cancelled_is_not_in_progression():
    assert CANCELLED not in STATUS_SEQUENCE
    assert status_index(CANCELLED) == UNKNOWN_INDEX
    assert status_label(CANCELLED) == "Cancelled"
    assert status_tone(CANCELLED) == "danger"

def test_labels():
    assert status_label(ShipmentStatus.IN_TRANSIT.value) == "In Transit"
    assert status_label("out-for-delivery") == "Out for Delivery"
    # raw value comes back for anything we do not know
    assert status_label("returned") == "returned"
    assert status_label(None) == ""

def test_tones_fall_back_to_neutral():
    assert status_tone("delivered") == "success"
    assert status_tone("picked-up") == "neutral"
    assert status_tone("whatever") == "neutral"

def test_selector_offers_sequence_then_cancelled():
    values = [value for value, _ in STATUS_OPTIONS]
    assert values[:len(STATUS_SEQUENCE)] == list(STATUS_SEQUENCE)
    assert values[-1] == CANCELLED
