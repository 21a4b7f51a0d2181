"""Early-order comparison of classified stop visits."""

from collections.abc import Sequence
from enum import IntEnum

from direction_pipeline.engine.models import ClassifiedStop


class Order(IntEnum):
    """Result of comparing two stop visits."""

    EARLIER = -1
    EQUAL = 0
    LATER = 1


def sort_key(stop: ClassifiedStop) -> tuple[int, int]:
    """Canonical position first, feed stop_sequence as the tie-break."""
    return (stop.canonical_position, stop.raw_stop.stop_sequence)


def compare(a: ClassifiedStop, b: ClassifiedStop) -> Order:
    """
    Order two stop visits of the same trip leg.

    EQUAL means both keys tie, which valid reference data never produces;
    no further tie-breaking is attempted.
    """
    key_a, key_b = sort_key(a), sort_key(b)
    if key_a < key_b:
        return Order.EARLIER
    if key_a > key_b:
        return Order.LATER
    return Order.EQUAL


def order_is_consistent(stops: Sequence[ClassifiedStop]) -> bool:
    """Check a leg is strictly ordered and its positions follow feed order."""
    for previous, current in zip(stops, stops[1:]):
        if compare(previous, current) is not Order.EARLIER:
            return False
        if current.raw_stop.stop_sequence < previous.raw_stop.stop_sequence:
            return False
    return True
