"""Route id derivation from encoded route short names."""

import re

DIGITS = re.compile(r"\d+")

# Direction and time-of-day variants share the numeric route
VARIANT_MARKERS = ("EB", "WB", "AM", "PM")

# Letter-suffixed branches get their own id block
SUFFIX_OFFSETS = {
    "A": 10_000,
    "B": 20_000,
    "C": 30_000,
}

NAMED_ROUTES = {
    "DMSF": 99_000,
}


def derive_route_id(short_name: str) -> int:
    """
    Derive a numeric route id from a route short name.

    "7" -> 7, "2EB" -> 2, "1A" -> 10001, "1C" -> 30001, "DMSF" -> 99000.

    Raises:
        ValueError: the short name follows none of the known encodings
    """
    rsn = short_name.strip()
    if rsn.isdigit():
        return int(rsn)

    for marker in VARIANT_MARKERS:
        index = rsn.find(marker)
        if index > 0 and rsn[:index].isdigit():
            return int(rsn[:index])

    match = DIGITS.search(rsn)
    if match:
        offset = SUFFIX_OFFSETS.get(rsn[-1:].upper())
        if offset is not None:
            return offset + int(match.group())

    named = NAMED_ROUTES.get(rsn.upper())
    if named is not None:
        return named

    raise ValueError(f"Unexpected route short name: '{short_name}'")


def derive_route_short_name(short_name: str) -> str:
    """Strip a direction or time-of-day marker: "2EB" -> "2"."""
    rsn = short_name.strip()
    for marker in VARIANT_MARKERS:
        index = rsn.find(marker)
        if index > 0 and rsn[:index].isdigit():
            return rsn[:index]
    return rsn
