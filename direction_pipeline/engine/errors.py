"""Error and warning types raised by the direction split engine."""

from dataclasses import dataclass


class DirectionSplitError(Exception):
    """Base class for engine errors."""


class ConfigError(DirectionSplitError):
    """Malformed or incomplete registry configuration."""

    def __init__(self, message: str, route_id: str | None = None) -> None:
        self.route_id = route_id
        if route_id is not None:
            message = f"Route {route_id}: {message}"
        super().__init__(message)


class ClassificationFailure(DirectionSplitError):
    """A raw trip that cannot be placed on its route's reference sequences."""

    def __init__(
        self, route_id: str, trip_id: str, stop_ids: tuple[str, ...] | list[str], reason: str
    ) -> None:
        self.route_id = route_id
        self.trip_id = trip_id
        self.stop_ids = tuple(stop_ids)
        self.reason = reason
        super().__init__(
            f"Route {route_id} trip {trip_id}: {reason} (stops: {', '.join(self.stop_ids)})"
        )

    def __reduce__(self):
        return (self.__class__, (self.route_id, self.trip_id, self.stop_ids, self.reason))

    def to_dict(self) -> dict:
        return {
            "type": "classification",
            "route_id": self.route_id,
            "trip_id": self.trip_id,
            "stop_ids": list(self.stop_ids),
            "reason": self.reason,
        }


class MergeFailure(DirectionSplitError):
    """Observed headsigns not covered by the route direction's declared labels."""

    def __init__(self, route_id: str, direction_id: int, labels: tuple[str, ...] | list[str]) -> None:
        self.route_id = route_id
        self.direction_id = direction_id
        self.labels = tuple(labels)
        quoted = ", ".join(f"'{label}'" for label in self.labels)
        super().__init__(
            f"Route {route_id} direction {direction_id}: unexpected headsign(s) {quoted}"
        )

    def __reduce__(self):
        return (self.__class__, (self.route_id, self.direction_id, self.labels))

    def to_dict(self) -> dict:
        return {
            "type": "merge",
            "route_id": self.route_id,
            "direction_id": self.direction_id,
            "labels": list(self.labels),
        }


class RouteFailure(DirectionSplitError):
    """Unexpected error while processing one route; other routes are unaffected."""

    def __init__(self, route_id: str, error_type: str, message: str) -> None:
        self.route_id = route_id
        self.error_type = error_type
        self.message = message
        super().__init__(f"Route {route_id}: {error_type}: {message}")

    def __reduce__(self):
        return (self.__class__, (self.route_id, self.error_type, self.message))

    def to_dict(self) -> dict:
        return {
            "type": "route",
            "route_id": self.route_id,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass(frozen=True)
class DataIntegrityWarning:
    """Declared direction flag disagreeing with the classified direction."""

    route_id: str
    trip_id: str
    declared_direction_id: int
    classified_direction_id: int

    def __str__(self) -> str:
        return (
            f"Route {self.route_id} trip {self.trip_id}: declared direction "
            f"{self.declared_direction_id}, classified as {self.classified_direction_id}"
        )

    def to_dict(self) -> dict:
        return {
            "route_id": self.route_id,
            "trip_id": self.trip_id,
            "declared_direction_id": self.declared_direction_id,
            "classified_direction_id": self.classified_direction_id,
        }


class SplitFailed(DirectionSplitError):
    """Raised by a strict run when any trip or route failed."""

    def __init__(self, failures: list[DirectionSplitError]) -> None:
        self.failures = list(failures)
        super().__init__(f"Direction split failed with {len(self.failures)} failure(s)")
