"""Route spec registry: curated stop orders per route and direction."""

import json
import logging
from collections import Counter
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from direction_pipeline.engine.errors import ConfigError
from direction_pipeline.engine.models import (
    DirectionSpec,
    HeadsignClass,
    RouteSpec,
    StopRef,
    StopRole,
)

logger = logging.getLogger(__name__)

BUNDLED_REGISTRY = Path(__file__).resolve().parent.parent / "registries" / "milton_transit.json"


class Registry:
    """Immutable lookup of RouteSpecs by route id."""

    def __init__(self, routes: Mapping[str, RouteSpec]) -> None:
        """Validate every RouteSpec; raise ConfigError on the first bad one."""
        for route_id, route in routes.items():
            _validate_route(route_id, route)
        self._routes = MappingProxyType(dict(sorted(routes.items())))

    def lookup(self, route_id: str) -> RouteSpec | None:
        """Return the RouteSpec for a route, or None when it is not configured."""
        return self._routes.get(route_id)

    @property
    def route_ids(self) -> list[str]:
        return list(self._routes)

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __reduce__(self):
        return (self.__class__, (dict(self._routes),))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Registry":
        """Build a registry from parsed JSON configuration."""
        if not isinstance(data, Mapping) or not isinstance(data.get("routes"), Mapping):
            raise ConfigError("Registry configuration must have a 'routes' mapping")

        routes: dict[str, RouteSpec] = {}
        for route_key, route_data in data["routes"].items():
            routes[str(route_key)] = _parse_route(str(route_key), route_data)
        return cls(routes)


def load_registry(path: str | Path | None = None) -> Registry:
    """
    Load a registry from a JSON file.

    Args:
        path: Registry file; None loads the bundled Milton Transit registry

    Returns:
        Validated Registry
    """
    file_path = BUNDLED_REGISTRY if path is None else Path(path)
    if not file_path.exists():
        raise ConfigError(f"Registry file not found: {file_path}")

    logger.info(f"Loading registry from {file_path}")
    text = file_path.read_text(encoding="utf-8")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Registry file is not valid JSON: {e}") from e

    registry = Registry.from_dict(data)
    logger.info(f"Loaded {len(registry)} route specs")
    return registry


def _parse_route(route_key: str, route_data: Any) -> RouteSpec:
    if not isinstance(route_data, Mapping):
        raise ConfigError("route entry must be a mapping", route_key)

    route_id = str(route_data.get("route_id", route_key))
    directions_data = route_data.get("directions")
    if not isinstance(directions_data, list):
        raise ConfigError("'directions' must be a list", route_key)

    directions = tuple(
        _parse_direction(route_id, direction_data) for direction_data in directions_data
    )
    return RouteSpec(route_id=route_id, directions=directions)


def _parse_direction(route_id: str, data: Any) -> DirectionSpec:
    if not isinstance(data, Mapping):
        raise ConfigError("direction entry must be a mapping", route_id)

    try:
        direction_id = int(data["direction_id"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError("direction entry needs an integer 'direction_id'", route_id) from e

    name = str(data.get("name", direction_id))
    stops = tuple(_parse_stop_ref(route_id, entry) for entry in data.get("stops", []))
    headsign_classes = tuple(
        _parse_headsign_class(route_id, entry) for entry in data.get("headsign_classes", [])
    )

    return DirectionSpec(
        route_id=str(data.get("route_id", route_id)),
        direction_id=direction_id,
        name=name,
        headsign_label=str(data.get("headsign", name)),
        reference_sequence=stops,
        headsign_classes=headsign_classes,
    )


def _parse_headsign_class(route_id: str, entry: Any) -> HeadsignClass:
    if not isinstance(entry, Mapping) or "canonical" not in entry:
        raise ConfigError(f"headsign class needs a 'canonical' label: {entry!r}", route_id)
    return HeadsignClass(
        canonical=str(entry["canonical"]),
        aliases=tuple(str(alias) for alias in entry.get("aliases", [])),
    )


def _parse_stop_ref(route_id: str, entry: Any) -> StopRef:
    if isinstance(entry, str):
        return StopRef(stop_id=entry)
    if isinstance(entry, Mapping) and "stop_id" in entry:
        role_name = str(entry.get("role", StopRole.PLAIN.value)).lower()
        try:
            role = StopRole(role_name)
        except ValueError as e:
            raise ConfigError(f"unknown stop role '{role_name}'", route_id) from e
        return StopRef(stop_id=str(entry["stop_id"]), role=role)
    raise ConfigError(f"invalid stop entry: {entry!r}", route_id)


def _validate_route(route_key: str, route: RouteSpec) -> None:
    """Check the invariants every RouteSpec must hold."""
    if route.route_id != route_key:
        raise ConfigError(
            f"registered under '{route_key}' but declares '{route.route_id}'", route_key
        )

    if len(route.directions) != 2:
        raise ConfigError(
            f"must have exactly two directions, found {len(route.directions)}", route_key
        )

    first, second = route.directions
    if first.direction_id == second.direction_id:
        raise ConfigError(f"both directions use direction_id {first.direction_id}", route_key)

    for direction in route.directions:
        if direction.route_id != route.route_id:
            raise ConfigError(
                f"direction {direction.direction_id} belongs to route {direction.route_id}",
                route_key,
            )
        if not direction.reference_sequence:
            raise ConfigError(
                f"direction {direction.direction_id} has an empty reference sequence", route_key
            )

    _validate_roles(route_key, first, second)
    _validate_roles(route_key, second, first)
    for direction in route.directions:
        _validate_headsign_classes(route_key, direction)


def _validate_roles(route_key: str, direction: DirectionSpec, other: DirectionSpec) -> None:
    counts = Counter(direction.stop_ids)
    other_ids = set(other.stop_ids)

    for position, ref in enumerate(direction.reference_sequence):
        repeated = counts[ref.stop_id] > 1
        if repeated and ref.role is not StopRole.AMBIGUOUS:
            raise ConfigError(
                f"stop {ref.stop_id} repeats in direction {direction.direction_id} "
                f"(position {position}) but is not tagged ambiguous",
                route_key,
            )
        if ref.role is StopRole.AMBIGUOUS and not repeated:
            raise ConfigError(
                f"stop {ref.stop_id} is tagged ambiguous but appears once in direction "
                f"{direction.direction_id}",
                route_key,
            )
        if ref.role is StopRole.SHARED and ref.stop_id not in other_ids:
            raise ConfigError(
                f"stop {ref.stop_id} is tagged shared but is not in direction "
                f"{other.direction_id}",
                route_key,
            )


def _validate_headsign_classes(route_key: str, direction: DirectionSpec) -> None:
    seen: dict[str, str] = {}
    for headsign_class in direction.headsign_classes:
        for label in (headsign_class.canonical, *headsign_class.aliases):
            owner = seen.get(label)
            if owner is not None and owner != headsign_class.canonical:
                raise ConfigError(
                    f"headsign '{label}' is declared for both '{owner}' and "
                    f"'{headsign_class.canonical}' in direction {direction.direction_id}",
                    route_key,
                )
            seen[label] = headsign_class.canonical
