"""Data models for the direction split engine."""

from dataclasses import dataclass, field
from enum import Enum

from direction_pipeline.engine.errors import DataIntegrityWarning, DirectionSplitError
from direction_pipeline.gtfs.models import RawTripStop


class StopRole(Enum):
    """Role of a stop within a direction's reference sequence."""

    PLAIN = "plain"
    SHARED = "shared"  # also listed by the other direction of the route
    AMBIGUOUS = "ambiguous"  # listed more than once by this direction


@dataclass(frozen=True)
class StopRef:
    """One entry of a reference sequence."""

    stop_id: str
    role: StopRole = StopRole.PLAIN


@dataclass(frozen=True)
class HeadsignClass:
    """Observed headsigns that all name the same destination."""

    canonical: str
    aliases: tuple[str, ...] = ()

    def covers(self, label: str) -> bool:
        return label == self.canonical or label in self.aliases


@dataclass(frozen=True)
class DirectionSpec:
    """Curated stop order for one direction of a route."""

    route_id: str
    direction_id: int
    name: str
    headsign_label: str
    reference_sequence: tuple[StopRef, ...]
    headsign_classes: tuple[HeadsignClass, ...] = ()

    @property
    def stop_ids(self) -> tuple[str, ...]:
        return tuple(ref.stop_id for ref in self.reference_sequence)

    @property
    def canonical_labels(self) -> frozenset[str]:
        labels = {headsign_class.canonical for headsign_class in self.headsign_classes}
        labels.add(self.headsign_label)
        return frozenset(labels)

    def resolve_headsign(self, label: str) -> str | None:
        """Return the canonical label for an observed one, or None if unknown."""
        for headsign_class in self.headsign_classes:
            if headsign_class.covers(label):
                return headsign_class.canonical
        if label in self.canonical_labels:
            return label
        return None


@dataclass(frozen=True)
class RouteSpec:
    """Both directions of one route."""

    route_id: str
    directions: tuple[DirectionSpec, ...]

    @property
    def direction_ids(self) -> tuple[int, ...]:
        return tuple(direction.direction_id for direction in self.directions)

    def direction(self, direction_id: int) -> DirectionSpec:
        for direction in self.directions:
            if direction.direction_id == direction_id:
                return direction
        raise KeyError(f"Route {self.route_id} has no direction {direction_id}")

    def other(self, direction_id: int) -> DirectionSpec:
        for direction in self.directions:
            if direction.direction_id != direction_id:
                return direction
        raise KeyError(f"Route {self.route_id} has no direction other than {direction_id}")


@dataclass(frozen=True)
class ClassifiedStop:
    """A raw stop visit placed on a direction's reference sequence."""

    raw_stop: RawTripStop
    direction_id: int
    canonical_position: int
    interpolated: bool = False  # absent from the reference, placed after its anchor

    @property
    def stop_id(self) -> str:
        return self.raw_stop.stop_id


@dataclass(frozen=True)
class TripVariant:
    """One direction-consistent leg of a raw trip, emitted downstream."""

    route_id: str
    direction_id: int
    headsign_label: str
    stops: tuple[ClassifiedStop, ...]
    trip_id: str = ""
    leg: int = 0  # 1 for the second leg of a split trip

    @property
    def stop_ids(self) -> tuple[str, ...]:
        return tuple(stop.stop_id for stop in self.stops)

    @property
    def canonical_positions(self) -> tuple[int, ...]:
        return tuple(stop.canonical_position for stop in self.stops)


@dataclass(frozen=True)
class Alignment:
    """Match of a raw stop list against one reference sequence."""

    direction_id: int
    positions: tuple[int | None, ...]  # reference index per raw stop, None if unmatched

    @property
    def matched_count(self) -> int:
        return sum(1 for position in self.positions if position is not None)

    def matched_indices(self) -> list[int]:
        return [idx for idx, position in enumerate(self.positions) if position is not None]


@dataclass(frozen=True)
class SplitPoint:
    """Raw stop index where a trip moves from one direction to the other."""

    index: int
    first_direction_id: int
    second_direction_id: int


@dataclass
class RouteResult:
    """Outcome of processing every trip of one route."""

    route_id: str
    variants: list[TripVariant] = field(default_factory=list)
    failures: list[DirectionSplitError] = field(default_factory=list)
    warnings: list[DataIntegrityWarning] = field(default_factory=list)
    trip_count: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class TripAlignment:
    """Classified stops of a raw trip, one tuple per emitted leg."""

    primary_direction_id: int
    legs: tuple[tuple[ClassifiedStop, ...], ...]
    split_point: SplitPoint | None = None
