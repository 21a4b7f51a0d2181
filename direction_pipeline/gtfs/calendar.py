"""Calendar analysis and service-date exclusion."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta

from direction_pipeline.gtfs.models import Trip
from direction_pipeline.gtfs.reader import GTFSReader

logger = logging.getLogger(__name__)

EXCEPTION_ADDED = 1
EXCEPTION_REMOVED = 2


def parse_gtfs_date(value: str) -> date:
    """Parse a YYYYMMDD GTFS date."""
    try:
        return datetime.strptime(value.strip(), "%Y%m%d").date()
    except ValueError as e:
        raise ValueError(f"Invalid GTFS date: {value}") from e


def service_dates(reader: GTFSReader, start: date, end: date) -> dict[str, set[date]]:
    """
    Compute the dates each service runs on within [start, end].

    Weekly calendar patterns are expanded first, then calendar_dates
    exceptions add or remove single dates.
    """
    dates: dict[str, set[date]] = defaultdict(set)

    for cal in reader.calendar:
        first = max(parse_gtfs_date(cal.start_date), start)
        last = min(parse_gtfs_date(cal.end_date), end)
        day = first
        while day <= last:
            if cal.weekdays[day.weekday()]:
                dates[cal.service_id].add(day)
            day += timedelta(days=1)

    for exception in reader.calendar_dates:
        day = parse_gtfs_date(exception.date)
        if not start <= day <= end:
            continue
        if exception.exception_type == EXCEPTION_ADDED:
            dates[exception.service_id].add(day)
        elif exception.exception_type == EXCEPTION_REMOVED:
            dates[exception.service_id].discard(day)
        else:
            logger.warning(
                f"Service {exception.service_id} has unknown exception_type "
                f"{exception.exception_type} on {exception.date}"
            )

    return dict(dates)


def active_service_ids(
    reader: GTFSReader, start: str | None = None, end: str | None = None
) -> set[str] | None:
    """
    Get the service ids running at least once in a date window.

    Args:
        reader: GTFSReader with loaded data
        start: First date (YYYYMMDD); defaults to ``end``
        end: Last date (YYYYMMDD); defaults to ``start``

    Returns:
        Set of active service ids, or None when no window is given
    """
    if start is None and end is None:
        return None

    first = parse_gtfs_date(start or end)  # type: ignore[arg-type]
    last = parse_gtfs_date(end or start)  # type: ignore[arg-type]
    if last < first:
        raise ValueError(f"Service window ends before it starts: {start} > {end}")

    dates = service_dates(reader, first, last)
    active = {service_id for service_id, days in dates.items() if days}

    known = {cal.service_id for cal in reader.calendar}
    known.update(cd.service_id for cd in reader.calendar_dates)
    logger.info(
        f"{len(active)} of {len(known)} services active between {first:%Y%m%d} and {last:%Y%m%d}"
    )
    return active


def is_excluded_trip(
    trip: Trip, service_ids: set[str] | None, exclude_headsigns: list[str]
) -> bool:
    """Check whether the loader must drop a trip before classification."""
    if service_ids is not None and trip.service_id not in service_ids:
        return True
    headsign = trip.trip_headsign.strip().lower()
    return any(headsign == excluded.strip().lower() for excluded in exclude_headsigns)
