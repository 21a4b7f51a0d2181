"""Trip headsign label cleanup."""

import re

STARTS_WITH_TO = re.compile(r"^to\s+", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")


def clean_trip_headsign(headsign: str) -> str:
    """
    Normalize an observed trip headsign for comparison with registry labels.

    All-caps labels are lowercased and capitalized word by word, only at
    whitespace boundaries, and a leading "to " is dropped:
    "TO MILTON GO" -> "Milton Go", "LOUIS ST. LAURENT & 4TH" -> "Louis St. Laurent & 4th".
    """
    label = WHITESPACE.sub(" ", headsign).strip()
    if not label:
        return ""
    if label.isupper():
        label = " ".join(word.capitalize() for word in label.lower().split(" "))
    label = STARTS_WITH_TO.sub("", label)
    return label.strip()
