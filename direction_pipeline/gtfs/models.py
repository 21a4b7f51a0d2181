"""Data models for GTFS records and run configuration."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Stop:
    """GTFS stop."""

    stop_id: str
    name: str


@dataclass(frozen=True)
class Route:
    """GTFS route."""

    route_id: str
    route_short_name: str
    route_long_name: str
    route_type: int


@dataclass(frozen=True)
class Trip:
    """GTFS trip."""

    trip_id: str
    route_id: str
    service_id: str
    direction_id: int | None = None  # optional in the feed
    trip_headsign: str = ""


@dataclass(frozen=True)
class StopTime:
    """GTFS stop time, reduced to what ordering needs."""

    trip_id: str
    stop_id: str
    stop_sequence: int


@dataclass(frozen=True)
class Calendar:
    """GTFS calendar entry."""

    service_id: str
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    sunday: bool
    start_date: str  # YYYYMMDD
    end_date: str  # YYYYMMDD

    @property
    def weekdays(self) -> tuple[bool, ...]:
        return (
            self.monday,
            self.tuesday,
            self.wednesday,
            self.thursday,
            self.friday,
            self.saturday,
            self.sunday,
        )


@dataclass(frozen=True)
class CalendarDate:
    """GTFS calendar exception."""

    service_id: str
    date: str  # YYYYMMDD
    exception_type: int  # 1 = added, 2 = removed


@dataclass(frozen=True)
class RawTripStop:
    """One stop-time row of a raw trip."""

    trip_id: str
    stop_id: str
    stop_sequence: int


@dataclass(frozen=True)
class RawTrip:
    """A feed trip with its stops, ready for direction classification."""

    trip_id: str
    route_id: str
    stops: tuple[RawTripStop, ...]
    declared_direction_id: int | None = None
    headsign: str = ""
    service_id: str = ""

    @property
    def stop_ids(self) -> tuple[str, ...]:
        return tuple(stop.stop_id for stop in self.stops)


@dataclass
class Manifest:
    """Build manifest with metadata and checksums."""

    schema_version: int
    tool_version: str
    created_at_iso: str
    inputs: dict[str, Any]
    outputs: dict[str, str]  # filename -> sha256
    stats: dict[str, int]
    build: dict[str, str]


@dataclass
class ValidationReport:
    """Report from validation process."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class SplitConfig:
    """Configuration for a direction split run."""

    input_path: str
    output_path: str
    registry_path: str | None = None  # None uses the bundled registry
    mode: str = "strict"  # strict, permissive
    jobs: int = 1
    route_id_source: str = "gtfs"  # gtfs, short_name
    unknown_routes: str = "passthrough"  # passthrough, skip
    service_start: str | None = None  # YYYYMMDD
    service_end: str | None = None  # YYYYMMDD
    exclude_headsigns: list[str] = field(default_factory=lambda: ["Not In Service"])
    clean_stop_ids: bool = True  # strip agency prefix and timepoint suffix
