"""
Segment storage addressed by stable id.

Segments never own each other: neighbour links are ids, resolved through the
arena's id -> index lookup.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from thicknessadjuster.model.geometry_primitives import Segment


class SegmentArena:
    """
    Ordered collection of segments with O(1) lookup by id.

    Iteration follows insertion order, which is the input order the shape graph
    relies on for deterministic output.
    """
    def __init__(self, segments: Optional[Iterable[Segment]] = None) -> None:
        self._segments: List[Segment] = []
        self._index: Dict[str, int] = {}
        if segments is not None:
            self.extend(segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __contains__(self, segment_id: object) -> bool:
        return segment_id in self._index

    def __getitem__(self, segment_id: str) -> Segment:
        try:
            return self._segments[self._index[segment_id]]
        except KeyError:
            raise KeyError(f"No segment with id '{segment_id}'") from None

    def add(self, segment: Segment) -> None:
        if segment.id in self._index:
            raise ValueError(f"Segment with id '{segment.id}' already exists.")
        self._index[segment.id] = len(self._segments)
        self._segments.append(segment)

    def extend(self, segments: Iterable[Segment]) -> None:
        for segment in segments:
            self.add(segment)

    def get(self, segment_id: Optional[str]) -> Optional[Segment]:
        """Resolve an id, returning None for a missing id or None."""
        if segment_id is None:
            return None
        idx = self._index.get(segment_id)
        return None if idx is None else self._segments[idx]

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def adjustable(self) -> List[Segment]:
        return [s for s in self._segments if s.is_adjustable]
