"""
Propagation of adjusted endpoints through the adjacency graph.

After the adjustable segments have been resized, their neighbours still point
at the old endpoint positions. The propagator walks outward from each adjusted
segment and reconnects them:

- adjustable neighbour: its shared endpoint is overwritten with the moved point
- tab-connector: the whole segment is translated by the endpoint's delta, and
  the walk continues from it (tab connectors can form chains)
- slot-edge / perimeter: only the shared endpoint is re-anchored

A visited set shared by the whole batch guarantees each segment is fixed up at
most once, which also terminates the walk on cyclic graphs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from thicknessadjuster.analysis.classifier import classify_segment
from thicknessadjuster.config import EPSILON
from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.geometry_primitives import Endpoint, LineType, Point, Segment

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """A segment whose endpoints moved, and the next endpoint to process."""
    segment: Segment
    old_start: Point
    old_end: Point
    next_endpoint: int = 0


class Propagator:
    """
    Restores endpoint connectivity for one adjustment batch.

    Create one instance per batch and call `propagate` once for every adjusted
    segment; the visited set lives as long as the instance.
    """
    def __init__(self, arena: SegmentArena, epsilon: float = EPSILON) -> None:
        self.arena = arena
        self.epsilon = epsilon
        self.visited: set[str] = set()
        # Non-adjustable segments that were moved or re-anchored, in order
        self.touched: List[str] = []

    def propagate(self, segment: Segment, old_start: Point, old_end: Point) -> None:
        """
        Reconnect everything reachable from `segment`.

        Args:
            segment: A segment whose endpoints have already been moved.
            old_start: Its start point before the move.
            old_end: Its end point before the move.
        """
        if segment.id in self.visited:
            return
        self.visited.add(segment.id)
        logger.debug(f"Propagating changes from line {segment.id}")

        # Explicit stack instead of recursion; the start side of a segment is
        # fully processed (including any tab-connector chain) before its end side.
        stack: List[_Frame] = [_Frame(segment, old_start, old_end)]
        while stack:
            frame = stack[-1]
            if frame.next_endpoint > 1:
                stack.pop()
                continue
            which = Endpoint.START if frame.next_endpoint == 0 else Endpoint.END
            frame.next_endpoint += 1

            child = self._fix_neighbor(frame, which)
            if child is not None:
                stack.append(child)

    def _fix_neighbor(self, frame: _Frame, which: Endpoint) -> Optional[_Frame]:
        segment = frame.segment
        old_point = frame.old_start if which is Endpoint.START else frame.old_end
        new_point = segment.endpoint(which)

        neighbor = self.arena.get(segment.adjacent.get(which))
        if neighbor is None or neighbor.id in self.visited:
            return None
        if neighbor.is_curve:
            logger.debug(f"Adjacent {neighbor.id} is a curve reference, leaving it fixed")
            return None

        if neighbor.is_adjustable:
            self._reanchor(segment, which, neighbor, old_point, new_point)
            return None

        line_type = classify_segment(neighbor, self.arena)
        if line_type is LineType.TAB_CONNECTOR:
            delta = new_point - old_point
            logger.debug(f"Translating tab connector {neighbor.id} by ({delta.x:.3f}, {delta.y:.3f})")
            frame_child = _Frame(neighbor, neighbor.start_point, neighbor.end_point)
            neighbor.translate(delta)
            self.visited.add(neighbor.id)
            self.touched.append(neighbor.id)
            return frame_child

        if self._reanchor(segment, which, neighbor, old_point, new_point):
            self.touched.append(neighbor.id)
        return None

    def _shared_endpoint(
        self, segment: Segment, which: Endpoint, neighbor: Segment, old_point: Point
    ) -> Optional[Endpoint]:
        """
        Endpoint of `neighbor` joined to `which` end of `segment`.

        An end link pairs with the neighbour's start and a start link with its
        end. The neighbour may already have been resized, so its position can
        no longer be compared with `old_point`; proximity is only used when the
        neighbour does not link back.
        """
        facing = Endpoint.START if which is Endpoint.END else Endpoint.END
        if neighbor.adjacent.get(facing) == segment.id:
            return facing
        if neighbor.start_point.is_close(old_point, self.epsilon):
            return Endpoint.START
        if neighbor.end_point.is_close(old_point, self.epsilon):
            return Endpoint.END
        return None

    def _reanchor(
        self, segment: Segment, which: Endpoint, neighbor: Segment, old_point: Point, new_point: Point
    ) -> bool:
        """Move the endpoint of `neighbor` shared with `segment` to `new_point`."""
        shared = self._shared_endpoint(segment, which, neighbor, old_point)
        if shared is None:
            logger.warning(f"Adjacent {neighbor.id} no longer shares an endpoint with {segment.id}, skipping")
            return False
        if shared is Endpoint.START:
            neighbor.start_point = new_point
        else:
            neighbor.end_point = new_point
        return True
