"""Headsign merging across the trip variants of a route direction."""

import logging
from collections.abc import Iterable
from dataclasses import replace

from direction_pipeline.engine.errors import MergeFailure
from direction_pipeline.engine.models import DirectionSpec, TripVariant

logger = logging.getLogger(__name__)


def merge_headsigns(direction: DirectionSpec, variants: Iterable[TripVariant]) -> list[TripVariant]:
    """
    Rewrite every variant's headsign to its declared canonical label.

    Must see all variants of the route direction at once, so that no
    unrecognized label is published next to recognized ones.

    Raises:
        MergeFailure: a label is neither canonical nor a declared alias
    """
    merged: list[TripVariant] = []
    unexpected: list[str] = []

    for variant in variants:
        canonical = direction.resolve_headsign(variant.headsign_label)
        if canonical is None:
            if variant.headsign_label not in unexpected:
                unexpected.append(variant.headsign_label)
            continue
        if canonical != variant.headsign_label:
            variant = replace(variant, headsign_label=canonical)
        merged.append(variant)

    if unexpected:
        raise MergeFailure(direction.route_id, direction.direction_id, sorted(unexpected))

    off_label = sum(1 for variant in merged if variant.headsign_label != direction.headsign_label)
    logger.debug(
        f"Route {direction.route_id} direction {direction.direction_id}: "
        f"merged {len(merged)} variant(s), {off_label} not on the direction label"
    )
    return merged
