"""Public API for the direction split pipeline."""

import hashlib
import json
import logging
import platform
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from direction_pipeline.engine.errors import ConfigError, SplitFailed
from direction_pipeline.engine.models import StopRole
from direction_pipeline.engine.registry import load_registry
from direction_pipeline.engine.runner import run_engine
from direction_pipeline.gtfs.models import Manifest, SplitConfig, ValidationReport
from direction_pipeline.gtfs.reader import GTFSReader
from direction_pipeline.gtfs.validator import GTFSValidator
from direction_pipeline.output.json import write_json_files
from direction_pipeline.transform.raw_trips import build_raw_trips
from direction_pipeline.version import SCHEMA_VERSION, VERSION

logger = logging.getLogger(__name__)

MODES = ("strict", "permissive")


def split(
    input_path: str,
    output_path: str,
    config: SplitConfig | None = None,
) -> Manifest:
    """
    Split every trip of a GTFS feed into direction-consistent trip variants.

    Args:
        input_path: Path to GTFS directory
        output_path: Path to output directory
        config: Optional run configuration

    Returns:
        Manifest with build metadata

    Raises:
        ConfigError: the registry is invalid; nothing is processed
        SplitFailed: strict mode and at least one trip or route failed
    """
    if config is None:
        config = SplitConfig(input_path=input_path, output_path=output_path)
    if config.mode not in MODES:
        raise ValueError(f"Unknown mode: {config.mode}")

    logger.info(f"Starting direction split: {input_path} -> {output_path} ({config.mode})")
    start_time = datetime.now(UTC)

    # Registry problems abort before any trip is read
    registry = load_registry(config.registry_path)

    # Read GTFS
    reader = GTFSReader(input_path)
    reader.read_all()

    # Validate
    validator = GTFSValidator(reader, route_id_source=config.route_id_source)
    validation_report = validator.validate()
    if not validation_report.valid:
        raise ValueError(f"GTFS validation failed with {len(validation_report.errors)} errors")

    # Split
    trips_by_route = build_raw_trips(reader, config)
    results = run_engine(
        registry,
        trips_by_route,
        jobs=config.jobs,
        unknown_routes=config.unknown_routes,
    )
    failures = [failure for result in results for failure in result.failures]

    # Write outputs
    output_dir = Path(output_path)
    blocked = config.mode == "strict" and bool(failures)
    files_written = write_json_files(output_dir, results, include_trips=not blocked)

    if blocked:
        manifest_path = output_dir / "manifest.json"
        if manifest_path.exists():
            manifest_path.unlink()
        logger.error(f"Strict mode: {len(failures)} failure(s), trip output not written")
        raise SplitFailed(failures)

    # Compute checksums
    checksums = {}
    for filename, filepath in files_written.items():
        with open(filepath, "rb") as f:
            checksums[filename] = hashlib.sha256(f.read()).hexdigest()

    # Create manifest
    stats = {
        "routes": len(results),
        "configured_routes": sum(1 for result in results if result.route_id in registry),
        "trips": sum(result.trip_count for result in results),
        "variants": sum(len(result.variants) for result in results),
        "split_trips": sum(
            1 for result in results for variant in result.variants if variant.leg == 1
        ),
        "failures": len(failures),
        "warnings": sum(len(result.warnings) for result in results),
    }

    manifest = Manifest(
        schema_version=SCHEMA_VERSION,
        tool_version=VERSION,
        created_at_iso=start_time.isoformat(),
        inputs={
            "gtfs_path": input_path,
            "registry_path": config.registry_path or "bundled",
            "mode": config.mode,
        },
        outputs=checksums,
        stats=stats,
        build={
            "python": platform.python_version(),
            "platform": platform.platform(),
        },
    )

    # Write manifest
    manifest_path = output_dir / "manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(
            {
                "schema_version": manifest.schema_version,
                "tool_version": manifest.tool_version,
                "created_at": manifest.created_at_iso,
                "inputs": manifest.inputs,
                "outputs": manifest.outputs,
                "stats": manifest.stats,
                "build": manifest.build,
            },
            f,
            indent=2,
            sort_keys=True,
        )

    logger.info(f"Wrote manifest to {manifest_path}")

    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    logger.info(f"Direction split completed in {elapsed:.2f}s")

    return manifest


def check_registry(registry_path: str | None = None) -> ValidationReport:
    """
    Load and validate a registry file.

    Args:
        registry_path: Registry JSON file; None checks the bundled registry

    Returns:
        ValidationReport with results
    """
    logger.info(f"Checking registry: {registry_path or 'bundled'}")

    try:
        registry = load_registry(registry_path)
    except ConfigError as e:
        return ValidationReport(valid=False, errors=[str(e)])

    warnings: list[str] = []
    roles: Counter[str] = Counter()
    stop_refs = 0
    for route_id in registry:
        route = registry.lookup(route_id)
        for direction in route.directions:
            stop_refs += len(direction.reference_sequence)
            roles.update(ref.role.value for ref in direction.reference_sequence)
        if not any(
            ref.role is StopRole.SHARED
            for direction in route.directions
            for ref in direction.reference_sequence
        ):
            warnings.append(f"Route {route_id} has no shared stop; trips will never be split")

    stats = {
        "routes": len(registry),
        "stop_refs": stop_refs,
        **{f"{role.value}_stops": roles[role.value] for role in StopRole},
    }
    return ValidationReport(valid=True, warnings=warnings, stats=stats)
