"""Per-route direction split pipeline with optional process fan-out."""

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor

from direction_pipeline.engine.errors import ClassificationFailure, MergeFailure, RouteFailure
from direction_pipeline.engine.merger import merge_headsigns
from direction_pipeline.engine.models import RouteResult, RouteSpec, TripVariant
from direction_pipeline.engine.registry import Registry
from direction_pipeline.engine.splitter import passthrough_trip, split_trip
from direction_pipeline.gtfs.models import RawTrip

logger = logging.getLogger(__name__)


def process_route(route: RouteSpec, trips: Sequence[RawTrip]) -> RouteResult:
    """
    Classify every trip of a route, then merge headsigns per direction.

    Classification failures are collected per trip. The merge only starts
    once every trip of the route is classified; a MergeFailure drops the
    route's variants.
    """
    result = RouteResult(route_id=route.route_id, trip_count=len(trips))
    classified: list[TripVariant] = []

    for trip in sorted(trips, key=lambda t: t.trip_id):
        try:
            split = split_trip(route, trip)
        except ClassificationFailure as e:
            logger.error(str(e))
            result.failures.append(e)
            continue
        classified.extend(split.variants)
        result.warnings.extend(split.warnings)

    merged: dict[int, list[TripVariant]] = {}
    merge_failed = False
    for direction in route.directions:
        members = [v for v in classified if v.direction_id == direction.direction_id]
        try:
            merged[direction.direction_id] = merge_headsigns(direction, members)
        except MergeFailure as e:
            logger.error(str(e))
            result.failures.append(e)
            merge_failed = True

    if merge_failed:
        logger.error(f"Route {route.route_id}: dropping output after headsign merge failure")
        return result

    # Keep trip order; each direction's merged list preserves its members' order
    iterators = {direction_id: iter(variants) for direction_id, variants in merged.items()}
    result.variants = [next(iterators[v.direction_id]) for v in classified]

    logger.debug(
        f"Route {route.route_id}: {len(trips)} trips -> {len(result.variants)} variants, "
        f"{len(result.failures)} failures"
    )
    return result


def passthrough_route(route_id: str, trips: Sequence[RawTrip]) -> RouteResult:
    """Emit the trips of a route without a RouteSpec unchanged."""
    ordered = sorted(trips, key=lambda t: t.trip_id)
    return RouteResult(
        route_id=route_id,
        variants=[passthrough_trip(trip) for trip in ordered],
        trip_count=len(trips),
    )


def _run_route(
    route_id: str, route: RouteSpec | None, trips: Sequence[RawTrip], unknown_routes: str
) -> RouteResult | None:
    if route is not None:
        try:
            return process_route(route, trips)
        except Exception as e:
            # Isolated to this route; the failure still blocks a strict run
            logger.exception(f"Route {route_id}: unexpected error")
            return RouteResult(
                route_id=route_id,
                failures=[RouteFailure(route_id, type(e).__name__, str(e))],
                trip_count=len(trips),
            )
    if unknown_routes == "passthrough":
        return passthrough_route(route_id, trips)
    return None


def run_engine(
    registry: Registry,
    trips_by_route: Mapping[str, Sequence[RawTrip]],
    jobs: int = 1,
    unknown_routes: str = "passthrough",
) -> list[RouteResult]:
    """
    Run the direction split over every route of a feed.

    Args:
        registry: Route spec registry
        trips_by_route: Raw trips grouped by route id
        jobs: Worker processes; 1 runs in-process
        unknown_routes: "passthrough" or "skip" for routes absent from the registry

    Returns:
        RouteResults sorted by route id
    """
    if unknown_routes not in ("passthrough", "skip"):
        raise ValueError(f"Unknown unknown_routes policy: {unknown_routes}")

    route_ids = sorted(trips_by_route)
    unconfigured = [route_id for route_id in route_ids if route_id not in registry]
    if unconfigured:
        logger.info(
            f"{len(unconfigured)} route(s) without reference spec ({unknown_routes}): "
            f"{', '.join(unconfigured)}"
        )

    logger.info(f"Splitting {len(route_ids)} routes with {jobs} job(s)")
    tasks = [
        (route_id, registry.lookup(route_id), list(trips_by_route[route_id]), unknown_routes)
        for route_id in route_ids
    ]

    if jobs > 1 and len(tasks) > 1:
        with ProcessPoolExecutor(max_workers=jobs) as executor:
            futures = [executor.submit(_run_route, *task) for task in tasks]
            outcomes = [future.result() for future in futures]
    else:
        outcomes = [_run_route(*task) for task in tasks]

    results = [outcome for outcome in outcomes if outcome is not None]

    failures = sum(len(result.failures) for result in results)
    variants = sum(len(result.variants) for result in results)
    logger.info(f"Emitted {variants} trip variants across {len(results)} routes, {failures} failures")
    return results
