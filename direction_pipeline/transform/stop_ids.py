"""Stop id normalization for matching feed stops against registry stop ids."""

import re

# Feed stop ids carry an agency prefix and a timepoint suffix around the
# numeric id the registry uses: "MI2351T" -> "2351"
AGENCY_PREFIX = re.compile(r"^mi", re.IGNORECASE)
TIMEPOINT_SUFFIX = re.compile(r"t$", re.IGNORECASE)


def clean_stop_id(stop_id: str) -> str:
    """Strip the agency prefix and timepoint suffix from a GTFS stop id."""
    cleaned = stop_id.strip()
    cleaned = AGENCY_PREFIX.sub("", cleaned)
    cleaned = TIMEPOINT_SUFFIX.sub("", cleaned)
    return cleaned
