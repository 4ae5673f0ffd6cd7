"""
Project State (Data Model)
==========================
This module defines the central data structure for one open drawing.

Why is this file needed?
------------------------
1. Context: every pipeline stage (flatten, build graph, adjust, propagate)
   receives this object explicitly instead of reading globals.
2. Ownership: it owns the segment arena, the extracted shapes and the global
   parameters, and is the only place that replaces them.
3. Decoupling: the SVG adapter writes into this object; the CLI reads from it.

Classes:
    GlobalParameters: Material thickness and DPI.
    ProjectState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from thicknessadjuster.analysis.shape_graph import build_shape_graph
from thicknessadjuster.config import DEFAULT_DPI, DEFAULT_MATERIAL_THICKNESS_MM, EPSILON
from thicknessadjuster.model.arena import SegmentArena
from thicknessadjuster.model.errors import (
    ConversionError,
    InvalidDPIError,
    Issue,
    IssueCode,
    NegativeLengthError,
)
from thicknessadjuster.model.geometry_primitives import Segment, Shape
from thicknessadjuster.utils import mm_to_units

if TYPE_CHECKING:
    from thicknessadjuster.solvers.solver import BatchReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalParameters:
    """Physical parameters used for the mm -> drawing unit conversion."""
    material_thickness_mm: float = DEFAULT_MATERIAL_THICKNESS_MM
    dpi: float = DEFAULT_DPI

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise InvalidDPIError(f"DPI must be greater than 0, got {self.dpi}.")
        if self.material_thickness_mm <= 0:
            raise NegativeLengthError(
                f"Material thickness must be positive, got {self.material_thickness_mm} mm."
            )

    def target_length(self, multiplier: int = 1) -> float:
        """Target length in drawing units for a segment with this multiplier."""
        return mm_to_units(self.material_thickness_mm * multiplier, self.dpi)


@dataclass
class ProjectState:
    """
    Holds the entire state of the open drawing.
    Pass this instance to the pipeline stages.
    """
    project_name: str = "Untitled Drawing"
    filepath: Optional[str] = None

    parameters: GlobalParameters = field(default_factory=GlobalParameters)
    arena: SegmentArena = field(default_factory=SegmentArena)
    shapes: List[Shape] = field(default_factory=list)

    # Zero-length segments found while flattening, kept for reference only
    degenerate: List[Segment] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    # Source document and its path elements keyed by path id (set by the SVG adapter)
    document: Any = None
    path_elements: Dict[str, Any] = field(default_factory=dict)

    epsilon: float = EPSILON

    def reset(self) -> None:
        """Clear all data for a new drawing (parameters are kept)."""
        self.project_name = "Untitled Drawing"
        self.filepath = None
        self.arena = SegmentArena()
        self.shapes = []
        self.degenerate = []
        self.issues = []
        self.document = None
        self.path_elements = {}
        logger.info("Project state has been reset.")

    # --- parameters ---
    def set_parameters(
        self,
        material_thickness_mm: Optional[float] = None,
        dpi: Optional[float] = None,
    ) -> GlobalParameters:
        """
        Replace the global parameters.

        The new pair is validated before it is stored, so a refused change
        leaves the previous parameters in place.
        """
        try:
            new = GlobalParameters(
                material_thickness_mm=(
                    self.parameters.material_thickness_mm
                    if material_thickness_mm is None else float(material_thickness_mm)
                ),
                dpi=self.parameters.dpi if dpi is None else float(dpi),
            )
        except ConversionError as e:
            code = IssueCode.INVALID_DPI if isinstance(e, InvalidDPIError) else IssueCode.NEGATIVE_LENGTH
            self.issues.append(Issue(code, f"Refused parameter change: {e}"))
            logger.warning(f"Refused parameter change, keeping {self.parameters}: {e}")
            raise
        self.parameters = new
        logger.info(f"Parameters set: {new.material_thickness_mm} mm at {new.dpi} DPI")
        return new

    # --- segments & shapes ---
    def load_segments(self, segments: Iterable[Segment], degenerate: Iterable[Segment] = ()) -> None:
        """Replace the segment arena and rebuild the shape graph."""
        self.arena = SegmentArena(segments)
        self.degenerate = list(degenerate)
        self.rebuild_shape_graph()

    def rebuild_shape_graph(self) -> List[Shape]:
        """Re-run adjacency matching and shape extraction on the current segments."""
        self.shapes = build_shape_graph(self.arena, epsilon=self.epsilon, issues=self.issues)
        return self.shapes

    def get_segment(self, segment_id: str) -> Segment:
        return self.arena[segment_id]

    def shape_for(self, segment_id: str) -> Optional[Shape]:
        for shape in self.shapes:
            if segment_id in shape.segment_ids:
                return shape
        return None

    def mark_adjustable(self, segment_id: str, multiplier: int = 1) -> Segment:
        segment = self.arena[segment_id]
        segment.set_adjustable(multiplier)
        logger.debug(f"Line {segment_id} state: {multiplier}x adjustable")
        return segment

    def toggle_segment(self, segment_id: str) -> Segment:
        """Cycle a segment normal -> 1x -> 2x -> normal."""
        segment = self.arena[segment_id]
        segment.cycle_adjustable()
        state = f"{segment.multiplier}x adjustable" if segment.is_adjustable else "normal"
        logger.debug(f"Line {segment_id} state: {state}")
        return segment

    def run_adjustment_batch(self, propagate: bool = True) -> BatchReport:
        """Adjust every adjustable segment, then restore connectivity."""
        from thicknessadjuster.solvers.solver import AdjustmentSolver

        report = AdjustmentSolver(self).run(propagate=propagate)
        self.issues.extend(report.issues)
        return report
