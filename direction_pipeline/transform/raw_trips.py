"""Build raw trips per route from GTFS records."""

import logging
from collections import defaultdict

from direction_pipeline.gtfs.calendar import active_service_ids, is_excluded_trip
from direction_pipeline.gtfs.models import RawTrip, RawTripStop, SplitConfig
from direction_pipeline.gtfs.reader import GTFSReader
from direction_pipeline.transform.headsigns import clean_trip_headsign
from direction_pipeline.transform.route_ids import derive_route_id
from direction_pipeline.transform.stop_ids import clean_stop_id

logger = logging.getLogger(__name__)


def build_route_keys(reader: GTFSReader, route_id_source: str = "gtfs") -> dict[str, str]:
    """
    Map each GTFS route_id to the key used for registry lookup.

    With ``short_name`` several GTFS routes ("2EB", "2WB") collapse onto one
    derived route id ("2").
    """
    if route_id_source == "gtfs":
        return {route.route_id: route.route_id for route in reader.routes}
    if route_id_source == "short_name":
        return {
            route.route_id: str(derive_route_id(route.route_short_name))
            for route in reader.routes
        }
    raise ValueError(f"Unknown route id source: {route_id_source}")


def build_raw_trips(reader: GTFSReader, config: SplitConfig) -> dict[str, list[RawTrip]]:
    """
    Group feed trips into RawTrips keyed by registry route id.

    Trips of inactive services and non-revenue trips are dropped here, so
    the engine only sees trips that must be published. Stop ids are cleaned
    to the form the registry uses unless disabled in the config.
    """
    logger.info("Building raw trips")

    route_keys = build_route_keys(reader, config.route_id_source)
    service_ids = active_service_ids(reader, config.service_start, config.service_end)

    # Group stop_times by trip
    stops_by_trip: dict[str, list[RawTripStop]] = defaultdict(list)
    for st in reader.stop_times:
        stops_by_trip[st.trip_id].append(
            RawTripStop(
                trip_id=st.trip_id,
                stop_id=clean_stop_id(st.stop_id) if config.clean_stop_ids else st.stop_id,
                stop_sequence=st.stop_sequence,
            )
        )

    trips_by_route: dict[str, list[RawTrip]] = defaultdict(list)
    excluded = 0
    for trip in reader.trips:
        if is_excluded_trip(trip, service_ids, config.exclude_headsigns):
            excluded += 1
            continue

        route_key = route_keys.get(trip.route_id)
        if route_key is None:
            logger.warning(f"Trip {trip.trip_id} references unknown route {trip.route_id}, skipping")
            continue

        stops = stops_by_trip.get(trip.trip_id)
        if not stops:
            logger.warning(f"Trip {trip.trip_id} has no stop times, skipping")
            continue

        trips_by_route[route_key].append(
            RawTrip(
                trip_id=trip.trip_id,
                route_id=route_key,
                stops=tuple(stops),
                declared_direction_id=trip.direction_id,
                headsign=clean_trip_headsign(trip.trip_headsign),
                service_id=trip.service_id,
            )
        )

    total = sum(len(trips) for trips in trips_by_route.values())
    logger.info(
        f"Built {total} raw trips across {len(trips_by_route)} routes ({excluded} excluded)"
    )
    return dict(trips_by_route)
