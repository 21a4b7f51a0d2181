"""Tests for the reference spec registry."""

import pickle
from pathlib import Path

import pytest
from conftest import make_direction

from direction_pipeline.engine.errors import ConfigError
from direction_pipeline.engine.models import HeadsignClass, RouteSpec, StopRole
from direction_pipeline.engine.registry import Registry, load_registry


def test_load_registry_from_file(registry_loop: Path) -> None:
    """Test loading a registry file."""
    registry = load_registry(registry_loop)

    assert registry.route_ids == ["R1", "R2"]
    assert "R1" in registry
    assert len(registry) == 2

    route = registry.lookup("R1")
    assert route is not None
    assert route.direction_ids == (0, 1)
    east = route.direction(0)
    assert east.name == "East"
    assert east.headsign_label == "North Terminal"
    assert east.stop_ids == ("X", "Y", "Z")
    assert east.reference_sequence[2].role is StopRole.SHARED
    assert east.resolve_headsign("Milton Go") == "North Terminal"


def test_lookup_unknown_route(registry_loop: Path) -> None:
    """Test lookup of an unconfigured route returns None."""
    registry = load_registry(registry_loop)

    assert registry.lookup("R9") is None
    assert "R9" not in registry


def test_load_bundled_registry() -> None:
    """Test the bundled Milton Transit registry is valid."""
    registry = load_registry()

    assert "3" in registry
    assert "10001" in registry
    assert "99000" in registry

    south = registry.lookup("5").direction(1)
    assert south.stop_ids[-2:] == ("2225", "2225")
    assert south.reference_sequence[-1].role is StopRole.AMBIGUOUS


def test_load_registry_missing_file(tmp_path: Path) -> None:
    """Test a missing registry file is a configuration error."""
    with pytest.raises(ConfigError, match="not found"):
        load_registry(tmp_path / "missing.json")


def test_load_registry_bad_json(tmp_path: Path) -> None:
    """Test an unparseable registry file is a configuration error."""
    path = tmp_path / "registry.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="not valid JSON"):
        load_registry(path)


def test_untagged_repeated_stop(registry_invalid: Path) -> None:
    """Test a stop repeated within a direction must be tagged ambiguous."""
    with pytest.raises(ConfigError, match="not tagged ambiguous"):
        load_registry(registry_invalid)


def test_ambiguous_stop_must_repeat() -> None:
    """Test an ambiguous tag on a stop listed once is rejected."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", [("A", StopRole.AMBIGUOUS), "B"]),
            make_direction("R1", 1, "West", ["B", "A"]),
        ),
    )
    with pytest.raises(ConfigError, match="appears once"):
        Registry({"R1": route})


def test_shared_stop_must_exist_in_other_direction() -> None:
    """Test a shared tag needs the stop in the opposite direction."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", ["A", ("B", StopRole.SHARED)]),
            make_direction("R1", 1, "West", ["C", "D"]),
        ),
    )
    with pytest.raises(ConfigError, match="tagged shared"):
        Registry({"R1": route})


def test_route_needs_two_directions() -> None:
    """Test a route with a single direction is rejected."""
    route = RouteSpec(route_id="R1", directions=(make_direction("R1", 0, "East", ["A"]),))

    with pytest.raises(ConfigError, match="exactly two directions"):
        Registry({"R1": route})


def test_duplicate_direction_ids() -> None:
    """Test both directions cannot share a direction_id."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", ["A"]),
            make_direction("R1", 0, "West", ["B"]),
        ),
    )
    with pytest.raises(ConfigError, match="both directions"):
        Registry({"R1": route})


def test_empty_reference_sequence() -> None:
    """Test an empty reference sequence is rejected."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", ["A"]),
            make_direction("R1", 1, "West", []),
        ),
    )
    with pytest.raises(ConfigError, match="empty reference sequence"):
        Registry({"R1": route})


def test_route_key_mismatch() -> None:
    """Test a RouteSpec must be registered under its own route id."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", ["A"]),
            make_direction("R1", 1, "West", ["B"]),
        ),
    )
    with pytest.raises(ConfigError, match="declares 'R1'"):
        Registry({"R2": route})


def test_conflicting_headsign_classes() -> None:
    """Test one label cannot belong to two canonical headsigns."""
    route = RouteSpec(
        route_id="R1",
        directions=(
            make_direction(
                "R1",
                0,
                "East",
                ["A"],
                classes=(
                    HeadsignClass("Milton Go", ("Station",)),
                    HeadsignClass("Downtown", ("Station",)),
                ),
            ),
            make_direction("R1", 1, "West", ["B"]),
        ),
    )
    with pytest.raises(ConfigError, match="Station"):
        Registry({"R1": route})


def test_from_dict_requires_routes() -> None:
    """Test configuration without a routes mapping is rejected."""
    with pytest.raises(ConfigError, match="'routes' mapping"):
        Registry.from_dict({"agency": "Test"})


def test_from_dict_unknown_role() -> None:
    """Test an unknown stop role is rejected with the route id."""
    data = {
        "routes": {
            "R1": {
                "directions": [
                    {"direction_id": 0, "stops": [{"stop_id": "A", "role": "loop"}]},
                    {"direction_id": 1, "stops": ["B"]},
                ]
            }
        }
    }
    with pytest.raises(ConfigError, match="Route R1: unknown stop role 'loop'"):
        Registry.from_dict(data)


def test_registry_is_read_only(registry_loop: Path) -> None:
    """Test the registry cannot be mutated after construction."""
    registry = load_registry(registry_loop)

    with pytest.raises(TypeError):
        registry._routes["R3"] = registry.lookup("R1")  # type: ignore[index]


def test_registry_pickles(registry_loop: Path) -> None:
    """Test the registry survives a round trip to worker processes."""
    registry = load_registry(registry_loop)
    restored = pickle.loads(pickle.dumps(registry))

    assert restored.route_ids == registry.route_ids
    assert restored.lookup("R2") == registry.lookup("R2")
