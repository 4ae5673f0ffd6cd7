"""
Classification of non-adjustable segments.

The role of a segment depends only on how many of its neighbours are currently
adjustable, so it is recomputed on every call and never cached:

- 2 adjustable neighbours -> tab-connector (sits between two tab sides, moves rigidly)
- 1 adjustable neighbour  -> slot-edge (anchor at a slot opening)
- 0 adjustable neighbours -> perimeter (ordinary boundary, also an anchor)
"""
from __future__ import annotations

import logging
from typing import Optional

from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.geometry_primitives import LineType, Segment

logger = logging.getLogger(__name__)


def count_adjustable_neighbors(segment: Segment, arena: SegmentArena) -> int:
    count = 0
    for neighbor_id in segment.adjacent.ids():
        neighbor = arena.get(neighbor_id)
        if neighbor is not None and neighbor.is_adjustable:
            count += 1
    return count


def classify_segment(segment: Segment, arena: SegmentArena) -> LineType:
    """
    Classify a non-adjustable segment by its adjustable neighbour count.

    Args:
        segment: The segment to classify. Must not be adjustable.
        arena: Current segment state used to resolve neighbour ids.

    Returns:
        LineType.TAB_CONNECTOR, LineType.SLOT_EDGE or LineType.PERIMETER.
    """
    if segment.is_adjustable:
        raise ValueError(f"Segment '{segment.id}' is adjustable and cannot be classified.")

    count = count_adjustable_neighbors(segment, arena)
    logger.debug(f"Line {segment.id} has {count} adjustable neighbors")

    if count == 2:
        return LineType.TAB_CONNECTOR
    if count == 1:
        return LineType.SLOT_EDGE
    return LineType.PERIMETER


def neighbor_type(neighbor: Optional[Segment], arena: SegmentArena) -> LineType:
    """Role of a neighbour as seen from an adjustable segment (NONE if absent)."""
    if neighbor is None:
        return LineType.NONE
    if neighbor.is_adjustable:
        return LineType.ADJUSTABLE
    return classify_segment(neighbor, arena)
