"""JSON output of trip variants and the failure summary."""

import json
import logging
from pathlib import Path
from typing import Any

from direction_pipeline.engine.models import RouteResult, TripVariant

logger = logging.getLogger(__name__)


def variant_to_dict(variant: TripVariant) -> dict[str, Any]:
    """Serialize one TripVariant."""
    return {
        "trip_id": variant.trip_id,
        "leg": variant.leg,
        "direction_id": variant.direction_id,
        "headsign": variant.headsign_label,
        "stops": [
            {
                "stop_id": stop.stop_id,
                "stop_sequence": stop.raw_stop.stop_sequence,
                "canonical_position": stop.canonical_position,
                "interpolated": stop.interpolated,
            }
            for stop in variant.stops
        ],
    }


def build_summary(results: list[RouteResult]) -> dict[str, Any]:
    """Collect counts, failures and warnings of a run."""
    failures = [failure.to_dict() for result in results for failure in result.failures]
    warnings = [warning.to_dict() for result in results for warning in result.warnings]
    return {
        "routes": len(results),
        "trips": sum(result.trip_count for result in results),
        "variants": sum(len(result.variants) for result in results),
        "failed_routes": sorted(result.route_id for result in results if not result.ok),
        "failures": failures,
        "warnings": warnings,
    }


def write_json_files(
    output_path: Path,
    results: list[RouteResult],
    include_trips: bool = True,
) -> dict[str, str]:
    """
    Write trips.json and summary.json.

    Args:
        output_path: Output directory
        results: Route results of the run
        include_trips: False writes the summary only and removes any earlier trips.json

    Returns:
        Mapping of file name to written path
    """
    logger.info(f"Writing JSON files to {output_path}")

    output_path.mkdir(parents=True, exist_ok=True)

    files_written = {}

    if include_trips:
        routes_data = [
            {
                "route_id": result.route_id,
                "variant_count": len(result.variants),
                "variants": [variant_to_dict(variant) for variant in result.variants],
            }
            for result in results
            if result.variants
        ]

        trips_path = output_path / "trips.json"
        with open(trips_path, "w", encoding="utf-8") as f:
            json.dump(routes_data, f, indent=2, sort_keys=True)
        files_written["trips.json"] = str(trips_path)
        logger.info(f"Wrote {trips_path}")
    else:
        # Trips of an earlier run must not outlive a withheld run
        stale_path = output_path / "trips.json"
        if stale_path.exists():
            stale_path.unlink()
            logger.info(f"Removed stale {stale_path}")

    summary_path = output_path / "summary.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(build_summary(results), f, indent=2, sort_keys=True)
    files_written["summary.json"] = str(summary_path)
    logger.info(f"Wrote {summary_path}")

    return files_written
