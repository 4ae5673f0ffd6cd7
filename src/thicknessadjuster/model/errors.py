"""
Error types and recoverable issue records.

Hard errors are raised as exceptions. Conditions a pipeline stage recovers
from on its own (a degenerate segment, an open walk, a doubly anchored edge)
are reported as ``Issue`` records so the caller can surface them.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class ThicknessAdjusterError(Exception):
    """Base class for all errors raised by this package."""


class GeometryError(ThicknessAdjusterError):
    """Custom exception for geometry processing errors."""


class ZeroLengthSegmentError(GeometryError):
    """A segment or vector has no length, so it has no direction."""


class ConversionError(ThicknessAdjusterError, ValueError):
    """A unit conversion input was rejected."""


class InvalidDPIError(ConversionError):
    pass


class NegativeLengthError(ConversionError):
    pass


class PathDataError(ThicknessAdjusterError, ValueError):
    """SVG path data could not be parsed."""


class IssueCode(StrEnum):
    ZERO_LENGTH_SEGMENT = "ZeroLengthSegment"
    INVALID_DPI = "InvalidDPI"
    NEGATIVE_LENGTH = "NegativeLength"
    MALFORMED_ADJACENCY = "MalformedAdjacency"
    UNEXPECTED_DOUBLE_ANCHOR = "UnexpectedDoubleAnchor"


@dataclass
class Issue:
    code: IssueCode
    message: str
    segment_id: Optional[str] = None
    severity: str = "warn"  # error|warn|info

    def __str__(self) -> str:
        where = f" [{self.segment_id}]" if self.segment_id else ""
        return f"{self.severity.upper()} {self.code}{where}: {self.message}"
