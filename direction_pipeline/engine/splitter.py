"""Direction classification and splitting of raw trips into trip variants."""

import logging
from dataclasses import dataclass, field

from direction_pipeline.engine.aligner import align_trip
from direction_pipeline.engine.comparator import sort_key
from direction_pipeline.engine.errors import DataIntegrityWarning
from direction_pipeline.engine.models import ClassifiedStop, RouteSpec, TripVariant
from direction_pipeline.gtfs.models import RawTrip

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """Variants emitted for one raw trip."""

    variants: list[TripVariant]
    warnings: list[DataIntegrityWarning] = field(default_factory=list)


def split_trip(route: RouteSpec, trip: RawTrip) -> SplitResult:
    """
    Turn one raw trip into one or two direction-consistent TripVariants.

    Args:
        route: RouteSpec of the trip's route
        trip: Raw trip from the feed

    Returns:
        SplitResult with the variants and any declared-direction discrepancy

    Raises:
        ClassificationFailure: propagated from the aligner
    """
    alignment = align_trip(route, trip)
    warnings: list[DataIntegrityWarning] = []

    if (
        trip.declared_direction_id is not None
        and trip.declared_direction_id != alignment.primary_direction_id
    ):
        warning = DataIntegrityWarning(
            route_id=route.route_id,
            trip_id=trip.trip_id,
            declared_direction_id=trip.declared_direction_id,
            classified_direction_id=alignment.primary_direction_id,
        )
        logger.warning(str(warning))
        warnings.append(warning)

    is_split = alignment.split_point is not None
    variants = []
    for leg_index, leg in enumerate(alignment.legs):
        direction = route.direction(leg[0].direction_id)
        if is_split or not trip.headsign:
            headsign = direction.headsign_label
        else:
            headsign = trip.headsign
        variants.append(
            TripVariant(
                route_id=route.route_id,
                direction_id=direction.direction_id,
                headsign_label=headsign,
                stops=tuple(sorted(leg, key=sort_key)),
                trip_id=trip.trip_id,
                leg=leg_index,
            )
        )

    return SplitResult(variants=variants, warnings=warnings)


def passthrough_trip(trip: RawTrip) -> TripVariant:
    """Emit a trip of an unconfigured route as-is, in feed order."""
    direction_id = trip.declared_direction_id if trip.declared_direction_id is not None else 0
    stops = sorted(trip.stops, key=lambda stop: stop.stop_sequence)
    return TripVariant(
        route_id=trip.route_id,
        direction_id=direction_id,
        headsign_label=trip.headsign,
        stops=tuple(
            ClassifiedStop(raw_stop=stop, direction_id=direction_id, canonical_position=idx)
            for idx, stop in enumerate(stops)
        ),
        trip_id=trip.trip_id,
    )
