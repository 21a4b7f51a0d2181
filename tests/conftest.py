"""Pytest configuration and fixtures."""

import shutil
from pathlib import Path

import pytest

from direction_pipeline.engine.models import (
    DirectionSpec,
    HeadsignClass,
    RouteSpec,
    StopRef,
    StopRole,
)
from direction_pipeline.gtfs.models import RawTrip, RawTripStop

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def gtfs_loop() -> Path:
    """Path to GTFS fixture with a split trip, a loop route and an unconfigured route."""
    return FIXTURES / "gtfs_loop"


@pytest.fixture
def gtfs_edgecases() -> Path:
    """Path to edge cases GTFS fixture."""
    return FIXTURES / "gtfs_edgecases"


@pytest.fixture
def registry_loop() -> Path:
    """Path to the registry matching the gtfs_loop fixture."""
    return FIXTURES / "registry_loop.json"


@pytest.fixture
def registry_invalid() -> Path:
    """Path to a registry with an untagged repeated stop."""
    return FIXTURES / "registry_invalid.json"


@pytest.fixture
def gtfs_failing(gtfs_loop: Path, tmp_path: Path) -> Path:
    """gtfs_loop plus one unclassifiable trip and one unknown headsign."""
    feed = tmp_path / "gtfs_failing"
    shutil.copytree(gtfs_loop, feed)
    with open(feed / "trips.txt", "a", encoding="utf-8") as f:
        f.write("R1,WK,T9,North Terminal,0\n")
        f.write("R2,WK,T10,Unknown Loop,0\n")
    with open(feed / "stop_times.txt", "a", encoding="utf-8") as f:
        f.write("T9,16:00:00,16:00:00,M1,1\n")
        f.write("T9,16:10:00,16:10:00,M2,2\n")
        f.write("T10,17:00:00,17:00:00,P,1\n")
        f.write("T10,17:10:00,17:10:00,Q,2\n")
        f.write("T10,17:20:00,17:20:00,P,3\n")
    return feed


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Temporary output directory."""
    output_dir = tmp_path / "split_data"
    output_dir.mkdir()
    yield output_dir
    # Cleanup
    if output_dir.exists():
        shutil.rmtree(output_dir)


def make_direction(
    route_id: str,
    direction_id: int,
    name: str,
    stops: list[str | tuple[str, StopRole]],
    headsign: str | None = None,
    classes: tuple[HeadsignClass, ...] = (),
) -> DirectionSpec:
    """Build a DirectionSpec from plain ids or (id, role) pairs."""
    refs = tuple(
        StopRef(stop_id=stop) if isinstance(stop, str) else StopRef(stop_id=stop[0], role=stop[1])
        for stop in stops
    )
    return DirectionSpec(
        route_id=route_id,
        direction_id=direction_id,
        name=name,
        headsign_label=headsign or name,
        reference_sequence=refs,
        headsign_classes=classes,
    )


def make_trip(
    trip_id: str,
    stop_ids: list[str],
    route_id: str = "R1",
    declared_direction_id: int | None = None,
    headsign: str = "",
) -> RawTrip:
    """Build a RawTrip with stop_sequence 1..n."""
    return RawTrip(
        trip_id=trip_id,
        route_id=route_id,
        stops=tuple(
            RawTripStop(trip_id=trip_id, stop_id=stop_id, stop_sequence=seq)
            for seq, stop_id in enumerate(stop_ids, start=1)
        ),
        declared_direction_id=declared_direction_id,
        headsign=headsign,
    )


@pytest.fixture
def straight_route() -> RouteSpec:
    """East [A, B, C] / West [C, B, A]."""
    return RouteSpec(
        route_id="R1",
        directions=(
            make_direction("R1", 0, "East", ["A", "B", "C"]),
            make_direction("R1", 1, "West", ["C", "B", "A"]),
        ),
    )


@pytest.fixture
def anchor_route() -> RouteSpec:
    """East [X, Y, Z*] / West [Z*, Y2, X2] sharing the terminal Z."""
    return RouteSpec(
        route_id="R1",
        directions=(
            make_direction(
                "R1",
                0,
                "East",
                ["X", "Y", ("Z", StopRole.SHARED)],
                headsign="North Terminal",
                classes=(HeadsignClass("North Terminal", ("Milton Go",)),),
            ),
            make_direction(
                "R1", 1, "West", [("Z", StopRole.SHARED), "Y2", "X2"], headsign="South Terminal"
            ),
        ),
    )


@pytest.fixture
def loop_route() -> RouteSpec:
    """North [P, Q, P] revisiting P / South [S1, S2, S3]."""
    return RouteSpec(
        route_id="R2",
        directions=(
            make_direction(
                "R2", 0, "North", [("P", StopRole.AMBIGUOUS), "Q", ("P", StopRole.AMBIGUOUS)]
            ),
            make_direction("R2", 1, "South", ["S1", "S2", "S3"]),
        ),
    )
