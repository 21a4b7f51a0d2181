"""Stop sequence alignment of raw trips against reference sequences."""

import logging
from collections.abc import Sequence

from direction_pipeline.engine.errors import ClassificationFailure
from direction_pipeline.engine.models import (
    Alignment,
    ClassifiedStop,
    DirectionSpec,
    RouteSpec,
    SplitPoint,
    StopRole,
    TripAlignment,
)
from direction_pipeline.gtfs.models import RawTrip, RawTripStop

logger = logging.getLogger(__name__)


def align_stop_ids(direction: DirectionSpec, stop_ids: Sequence[str]) -> Alignment:
    """
    Longest order-preserving match of raw stop ids against a reference sequence.

    The reference pointer only moves forward and each reference occurrence is
    consumed at most once. Among equally long matches a raw visit takes the
    nearest unconsumed occurrence at or after the pointer, so a loop stop
    listed twice is resolved by position rather than by identity.

    Args:
        direction: Direction whose reference sequence is matched
        stop_ids: Raw stop ids in trip order

    Returns:
        Alignment with one reference index (or None) per raw stop
    """
    reference = direction.stop_ids
    n, m = len(stop_ids), len(reference)

    # next_match[j][stop_id]: first reference index >= j holding stop_id
    next_match: list[dict[str, int]] = [{} for _ in range(m + 1)]
    for j in range(m - 1, -1, -1):
        next_match[j] = dict(next_match[j + 1])
        next_match[j][reference[j]] = j

    # best[i][j]: matches available for stop_ids[i:] against reference[j:]
    best = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = best[i], best[i + 1]
        stop_id = stop_ids[i]
        for j in range(m, -1, -1):
            skip = below[j]
            k = next_match[j].get(stop_id)
            take = 1 + below[k + 1] if k is not None else 0
            row[j] = take if take > skip else skip

    positions: list[int | None] = []
    j = 0
    for i, stop_id in enumerate(stop_ids):
        k = next_match[j].get(stop_id)
        if k is not None and 1 + best[i + 1][k + 1] == best[i][j]:
            positions.append(k)
            j = k + 1
        else:
            positions.append(None)

    return Alignment(direction_id=direction.direction_id, positions=tuple(positions))


def find_split_point(
    route: RouteSpec, stop_ids: Sequence[str], best_single: int
) -> tuple[SplitPoint, Alignment, Alignment] | None:
    """
    Find where a raw trip leaves one direction and continues in the other.

    A candidate is a raw visit of a SHARED stop that the head of the trip
    reaches in one direction and the tail leaves from in the other, with the
    tail progressing past it. The two legs must cover strictly more raw stops
    than the best single direction. Ties go to the earliest visit, then to
    the registry's direction order.
    """
    shared_ids = {
        ref.stop_id
        for direction in route.directions
        for ref in direction.reference_sequence
        if ref.role is StopRole.SHARED
    }
    if not shared_ids:
        return None

    best: tuple[SplitPoint, Alignment, Alignment] | None = None
    best_coverage = best_single

    for k, stop_id in enumerate(stop_ids):
        if stop_id not in shared_ids:
            continue

        for first in route.directions:
            second = route.other(first.direction_id)

            head = align_stop_ids(first, stop_ids[: k + 1])
            head_position = head.positions[k]
            if head_position is None:
                continue

            tail = align_stop_ids(second, stop_ids[k:])
            tail_position = tail.positions[0]
            if tail_position is None or tail.matched_count < 2:
                continue

            if (
                first.reference_sequence[head_position].role is not StopRole.SHARED
                and second.reference_sequence[tail_position].role is not StopRole.SHARED
            ):
                continue

            coverage = head.matched_count + tail.matched_count - 1
            if coverage > best_coverage:
                best_coverage = coverage
                split_point = SplitPoint(
                    index=k,
                    first_direction_id=first.direction_id,
                    second_direction_id=second.direction_id,
                )
                best = (split_point, head, tail)

    return best


def align_trip(route: RouteSpec, trip: RawTrip) -> TripAlignment:
    """
    Assign every raw stop of a trip to a direction and canonical position.

    Raises:
        ClassificationFailure: the trip matches neither direction, matches both
            equally, or revisits a reference stop out of order
    """
    stops = sorted(trip.stops, key=lambda stop: stop.stop_sequence)
    stop_ids = [stop.stop_id for stop in stops]
    if not stops:
        raise ClassificationFailure(route.route_id, trip.trip_id, stop_ids, "trip has no stops")

    alignments = [align_stop_ids(direction, stop_ids) for direction in route.directions]
    best_single = max(alignment.matched_count for alignment in alignments)

    split = find_split_point(route, stop_ids, best_single)
    if split is not None:
        split_point, head, tail = split
        k = split_point.index
        first = route.direction(split_point.first_direction_id)
        second = route.direction(split_point.second_direction_id)
        logger.debug(
            f"Route {route.route_id} trip {trip.trip_id}: split at stop {stop_ids[k]} "
            f"(index {k}) from direction {first.direction_id} to {second.direction_id}"
        )
        legs = (
            _classify_leg(route, trip, first, stops[: k + 1], head.positions),
            _classify_leg(route, trip, second, stops[k:], tail.positions),
        )
        return TripAlignment(
            primary_direction_id=first.direction_id, legs=legs, split_point=split_point
        )

    ranked = sorted(alignments, key=lambda alignment: alignment.matched_count, reverse=True)
    if ranked[0].matched_count == 0:
        raise ClassificationFailure(
            route.route_id, trip.trip_id, stop_ids, "shares no stop with either direction"
        )
    if ranked[0].matched_count == ranked[1].matched_count:
        raise ClassificationFailure(
            route.route_id,
            trip.trip_id,
            stop_ids,
            f"matches both directions equally ({ranked[0].matched_count} stops)",
        )

    primary = route.direction(ranked[0].direction_id)
    leg = _classify_leg(route, trip, primary, stops, ranked[0].positions)
    return TripAlignment(primary_direction_id=primary.direction_id, legs=(leg,))


def _classify_leg(
    route: RouteSpec,
    trip: RawTrip,
    direction: DirectionSpec,
    stops: Sequence[RawTripStop],
    positions: Sequence[int | None],
) -> tuple[ClassifiedStop, ...]:
    """Build ClassifiedStops for a contiguous leg, interpolating unlisted stops."""
    reference_ids = set(direction.stop_ids)
    unresolved = [
        stop.stop_id
        for stop, position in zip(stops, positions)
        if position is None and stop.stop_id in reference_ids
    ]
    if unresolved:
        raise ClassificationFailure(
            route.route_id,
            trip.trip_id,
            trip.stop_ids,
            f"stop(s) {', '.join(unresolved)} visited out of reference order "
            f"in direction {direction.direction_id}",
        )

    matched = [position for position in positions if position is not None]
    if not matched:
        raise ClassificationFailure(
            route.route_id,
            trip.trip_id,
            trip.stop_ids,
            f"no stop matches direction {direction.direction_id}",
        )

    anchor = matched[0]
    classified: list[ClassifiedStop] = []
    for stop, position in zip(stops, positions):
        if position is None:
            classified.append(
                ClassifiedStop(
                    raw_stop=stop,
                    direction_id=direction.direction_id,
                    canonical_position=anchor,
                    interpolated=True,
                )
            )
        else:
            anchor = position
            classified.append(
                ClassifiedStop(
                    raw_stop=stop,
                    direction_id=direction.direction_id,
                    canonical_position=position,
                )
            )
    return tuple(classified)
