"""Command-line interface for the direction split pipeline."""

import argparse
import logging
import sys

from direction_pipeline.api import check_registry, split
from direction_pipeline.engine.errors import ConfigError, SplitFailed
from direction_pipeline.gtfs.models import SplitConfig
from direction_pipeline.version import VERSION


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_split(args: argparse.Namespace) -> int:
    """Execute split command."""
    setup_logging(args.verbose)

    config = SplitConfig(
        input_path=args.input,
        output_path=args.output,
        registry_path=args.registry,
        mode=args.mode,
        jobs=args.jobs,
        route_id_source=args.route_ids,
        unknown_routes=args.unknown_routes,
        service_start=args.service_start,
        service_end=args.service_end,
        exclude_headsigns=args.exclude_headsign or ["Not In Service"],
        clean_stop_ids=not args.raw_stop_ids,
    )

    try:
        manifest = split(args.input, args.output, config)
        print("\nDirection split successful!")
        print(f"Output: {args.output}")
        print(f"Stats: {manifest.stats}")
        return 0
    except SplitFailed as e:
        print(f"\nDirection split failed with {len(e.failures)} failures:", file=sys.stderr)
        for failure in e.failures:
            print(f"  - {failure}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Direction split failed")
        return 1


def cmd_check_registry(args: argparse.Namespace) -> int:
    """Execute check-registry command."""
    setup_logging(args.verbose)

    try:
        report = check_registry(args.registry)
        if report.valid:
            print("\nRegistry is valid!")
            print(f"Stats: {report.stats}")
            if report.warnings:
                print(f"Warnings ({len(report.warnings)}):")
                for warning in report.warnings:
                    print(f"  - {warning}")
            return 0
        else:
            print(f"\nRegistry check failed with {len(report.errors)} errors:")
            for error in report.errors:
                print(f"  - {error}")
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Registry check failed")
        return 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="direction-split",
        description="Split GTFS trips into direction-consistent trip variants",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Split command
    split_parser = subparsers.add_parser("split", help="Classify and split trips by direction")
    split_parser.add_argument("--input", required=True, help="Path to GTFS directory")
    split_parser.add_argument(
        "--output", default="./split_data", help="Output directory (default: ./split_data)"
    )
    split_parser.add_argument(
        "--registry",
        default=None,
        help="Reference stop order JSON file (default: bundled Milton Transit registry)",
    )
    split_parser.add_argument(
        "--mode",
        choices=["strict", "permissive"],
        default="strict",
        help="strict: any failure blocks output; permissive: write unaffected trips (default: strict)",
    )
    split_parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of parallel jobs (default: 1)",
    )
    split_parser.add_argument(
        "--route-ids",
        choices=["gtfs", "short_name"],
        default="gtfs",
        help="Registry key: GTFS route_id or id derived from route_short_name (default: gtfs)",
    )
    split_parser.add_argument(
        "--unknown-routes",
        choices=["passthrough", "skip"],
        default="passthrough",
        help="Handling of routes without reference stop order (default: passthrough)",
    )
    split_parser.add_argument(
        "--service-start", default=None, help="First service date to keep (YYYYMMDD)"
    )
    split_parser.add_argument(
        "--service-end", default=None, help="Last service date to keep (YYYYMMDD)"
    )
    split_parser.add_argument(
        "--exclude-headsign",
        action="append",
        default=None,
        help='Trip headsign marking non-revenue trips, repeatable (default: "Not In Service")',
    )
    split_parser.add_argument(
        "--raw-stop-ids",
        action="store_true",
        help="Match feed stop ids as-is instead of stripping agency prefix and suffix",
    )
    split_parser.set_defaults(func=cmd_split)

    # Check-registry command
    check_parser = subparsers.add_parser("check-registry", help="Validate a registry file")
    check_parser.add_argument(
        "--registry", default=None, help="Registry JSON file (default: bundled registry)"
    )
    check_parser.set_defaults(func=cmd_check_registry)

    # Parse and execute
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
