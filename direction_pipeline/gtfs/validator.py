"""GTFS data validator."""

import logging
from collections import defaultdict

from direction_pipeline.gtfs.models import StopTime, ValidationReport
from direction_pipeline.gtfs.reader import GTFSReader
from direction_pipeline.transform.route_ids import derive_route_id

logger = logging.getLogger(__name__)


class GTFSValidator:
    """Check the feed references direction classification relies on."""

    def __init__(self, reader: GTFSReader, route_id_source: str = "gtfs") -> None:
        """Initialize validator with GTFS reader."""
        self.reader = reader
        self.route_id_source = route_id_source
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self) -> ValidationReport:
        """Run all validation checks."""
        logger.info("Validating GTFS data")

        self._validate_routes()
        self._validate_trips()
        self._validate_stop_times()

        valid = len(self.errors) == 0

        stats = {
            "routes": len(self.reader.routes),
            "trips": len(self.reader.trips),
            "stop_times": len(self.reader.stop_times),
        }

        report = ValidationReport(
            valid=valid,
            errors=self.errors.copy(),
            warnings=self.warnings.copy(),
            stats=stats,
        )

        if not valid:
            logger.error(f"Validation failed with {len(self.errors)} errors")
        elif self.warnings:
            logger.warning(f"Validation passed with {len(self.warnings)} warnings")
        else:
            logger.info("Validation passed")

        return report

    def _validate_routes(self) -> None:
        """Validate routes exist and, when needed, have parseable short names."""
        if not self.reader.routes:
            self.errors.append("No routes found in GTFS data")

        if self.route_id_source != "short_name":
            return

        for route in self.reader.routes:
            try:
                derive_route_id(route.route_short_name)
            except ValueError:
                self.errors.append(
                    f"Route {route.route_id} has unparseable short name "
                    f"'{route.route_short_name}'"
                )

    def _validate_trips(self) -> None:
        """Validate trips reference valid routes."""
        route_ids = {route.route_id for route in self.reader.routes}

        for trip in self.reader.trips:
            if trip.route_id not in route_ids:
                self.errors.append(
                    f"Trip {trip.trip_id} references non-existent route {trip.route_id}"
                )
            if trip.direction_id not in (None, 0, 1):
                self.warnings.append(
                    f"Trip {trip.trip_id} has invalid direction_id {trip.direction_id}"
                )

    def _validate_stop_times(self) -> None:
        """Validate stop_times reference valid stops/trips and sequences are unique."""
        stop_ids = {stop.stop_id for stop in self.reader.stops}
        trip_ids = {trip.trip_id for trip in self.reader.trips}

        # Group by trip
        trip_stop_times: dict[str, list[StopTime]] = defaultdict(list)
        for st in self.reader.stop_times:
            trip_stop_times[st.trip_id].append(st)

        for trip_id in sorted(trip_ids - set(trip_stop_times)):
            self.warnings.append(f"Trip {trip_id} has no stop times")

        for trip_id, stop_times in trip_stop_times.items():
            if trip_id not in trip_ids:
                self.errors.append(f"Stop times reference non-existent trip {trip_id}")
                continue

            sequences = [st.stop_sequence for st in stop_times]
            if len(set(sequences)) != len(sequences):
                self.errors.append(
                    f"Trip {trip_id} has duplicate stop_sequence values: {sequences}"
                )

            # stops.txt is optional for this pipeline
            if stop_ids:
                for st in stop_times:
                    if st.stop_id not in stop_ids:
                        self.errors.append(
                            f"Stop time for trip {trip_id} references non-existent stop {st.stop_id}"
                        )
