"""GTFS data reader."""

import csv
import logging
from pathlib import Path

from direction_pipeline.gtfs.models import Calendar, CalendarDate, Route, Stop, StopTime, Trip

logger = logging.getLogger(__name__)


class GTFSReader:
    """Read the GTFS tables the direction split needs from a directory."""

    def __init__(self, gtfs_path: str) -> None:
        """Initialize reader with GTFS directory path."""
        self.gtfs_path = Path(gtfs_path)
        if not self.gtfs_path.is_dir():
            raise ValueError(f"GTFS path not found or not a directory: {gtfs_path}")

        self.stops: list[Stop] = []
        self.routes: list[Route] = []
        self.trips: list[Trip] = []
        self.stop_times: list[StopTime] = []
        self.calendar: list[Calendar] = []
        self.calendar_dates: list[CalendarDate] = []

    def read_all(self) -> None:
        """Read all GTFS files."""
        logger.info(f"Reading GTFS data from {self.gtfs_path}")
        self.read_stops()
        self.read_routes()
        self.read_calendar()
        self.read_calendar_dates()
        self.read_trips()
        self.read_stop_times()
        logger.info(
            f"Loaded {len(self.stops)} stops, {len(self.routes)} routes, "
            f"{len(self.trips)} trips, {len(self.stop_times)} stop_times, "
            f"{len(self.calendar)} calendar entries, "
            f"{len(self.calendar_dates)} calendar date exceptions"
        )

    def read_stops(self) -> None:
        """Read stops.txt if present; only names are used."""
        file_path = self.gtfs_path / "stops.txt"
        if not file_path.exists():
            logger.info("stops.txt not found, skipping")
            return

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                self.stops.append(Stop(stop_id=row["stop_id"], name=row.get("stop_name", "")))

        self.stops.sort(key=lambda stop: stop.stop_id)

    def read_routes(self) -> None:
        """Read routes.txt."""
        file_path = self.gtfs_path / "routes.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                route = Route(
                    route_id=row["route_id"],
                    route_short_name=row.get("route_short_name", ""),
                    route_long_name=row.get("route_long_name", ""),
                    route_type=int(row.get("route_type") or 3),
                )
                self.routes.append(route)

        # Sort by route_id for stable processing order
        self.routes.sort(key=lambda route: route.route_id)

    def read_calendar(self) -> None:
        """Read calendar.txt."""
        file_path = self.gtfs_path / "calendar.txt"
        if not file_path.exists():
            logger.info("calendar.txt not found, skipping")
            return

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                calendar = Calendar(
                    service_id=row["service_id"],
                    monday=row["monday"] == "1",
                    tuesday=row["tuesday"] == "1",
                    wednesday=row["wednesday"] == "1",
                    thursday=row["thursday"] == "1",
                    friday=row["friday"] == "1",
                    saturday=row["saturday"] == "1",
                    sunday=row["sunday"] == "1",
                    start_date=row["start_date"],
                    end_date=row["end_date"],
                )
                self.calendar.append(calendar)

    def read_calendar_dates(self) -> None:
        """Read calendar_dates.txt."""
        file_path = self.gtfs_path / "calendar_dates.txt"
        if not file_path.exists():
            logger.info("calendar_dates.txt not found, skipping")
            return

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                calendar_date = CalendarDate(
                    service_id=row["service_id"],
                    date=row["date"],
                    exception_type=int(row["exception_type"]),
                )
                self.calendar_dates.append(calendar_date)

    def read_trips(self) -> None:
        """Read trips.txt; direction_id stays None when the feed omits it."""
        file_path = self.gtfs_path / "trips.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                direction = (row.get("direction_id") or "").strip()
                trip = Trip(
                    trip_id=row["trip_id"],
                    route_id=row["route_id"],
                    service_id=row["service_id"],
                    direction_id=int(direction) if direction else None,
                    trip_headsign=row.get("trip_headsign", "") or "",
                )
                self.trips.append(trip)

        # Sort by trip_id for stable processing order
        self.trips.sort(key=lambda trip: trip.trip_id)

    def read_stop_times(self) -> None:
        """Read stop_times.txt."""
        file_path = self.gtfs_path / "stop_times.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                stop_time = StopTime(
                    trip_id=row["trip_id"],
                    stop_id=row["stop_id"],
                    stop_sequence=int(row["stop_sequence"]),
                )
                self.stop_times.append(stop_time)

        # Sort by trip_id, then stop_sequence for normalization
        self.stop_times.sort(key=lambda st: (st.trip_id, st.stop_sequence))
