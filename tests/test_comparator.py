"""Tests for the early-order comparator."""

from direction_pipeline.engine.comparator import Order, compare, order_is_consistent, sort_key
from direction_pipeline.engine.models import ClassifiedStop
from direction_pipeline.gtfs.models import RawTripStop


def stop(stop_id: str, position: int, sequence: int) -> ClassifiedStop:
    return ClassifiedStop(
        raw_stop=RawTripStop(trip_id="T1", stop_id=stop_id, stop_sequence=sequence),
        direction_id=0,
        canonical_position=position,
    )


def test_compare_by_canonical_position() -> None:
    """Test the canonical position decides before stop_sequence."""
    a = stop("A", 0, 5)
    b = stop("B", 1, 1)

    assert compare(a, b) is Order.EARLIER
    assert compare(b, a) is Order.LATER


def test_compare_tie_break_on_stop_sequence() -> None:
    """Test stops sharing a position are ordered by stop_sequence."""
    a = stop("A", 2, 3)
    n = stop("N", 2, 4)

    assert compare(a, n) is Order.EARLIER
    assert compare(n, a) is Order.LATER


def test_compare_equal() -> None:
    """Test identical keys compare equal without further tie-breaking."""
    assert compare(stop("A", 1, 1), stop("B", 1, 1)) is Order.EQUAL


def test_compare_is_antisymmetric() -> None:
    """Test swapping the arguments negates the result."""
    stops = [stop("A", 0, 1), stop("B", 0, 2), stop("C", 3, 1), stop("D", 3, 1)]

    for a in stops:
        for b in stops:
            assert compare(a, b) == -compare(b, a)


def test_sort_key_orders_stops() -> None:
    """Test sorting by sort_key matches pairwise comparison."""
    stops = [stop("C", 2, 3), stop("N", 0, 2), stop("A", 0, 1)]

    ordered = sorted(stops, key=sort_key)

    assert [s.stop_id for s in ordered] == ["A", "N", "C"]


def test_order_is_consistent() -> None:
    """Test consistency requires strict order following feed sequence."""
    assert order_is_consistent([stop("A", 0, 1), stop("N", 0, 2), stop("B", 1, 3)])
    assert not order_is_consistent([stop("A", 1, 1), stop("B", 0, 2)])
    assert not order_is_consistent([stop("A", 0, 2), stop("B", 1, 1)])
