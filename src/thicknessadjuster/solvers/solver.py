from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from thicknessadjuster.analysis.shape_graph import OpenJoint, find_open_joints
from thicknessadjuster.model.errors import Issue
from thicknessadjuster.model.geometry_primitives import Point, Segment, Shape
from thicknessadjuster.solvers.adjustment import Adjustment, adjust_segment
from thicknessadjuster.solvers.propagation import Propagator

if TYPE_CHECKING:
    from thicknessadjuster.model.state import ProjectState

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Outcome of one adjustment batch."""
    adjustments: List[Adjustment] = field(default_factory=list)
    propagated_ids: List[str] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    open_joints: List[OpenJoint] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        """Number of adjustable segments whose geometry changed."""
        return len(self.adjustments)


class AdjustmentSolver:
    """
    Runs a full adjustment batch over a project.
    """

    def __init__(
        self,
        state: ProjectState,
    ) -> None:
        """
        Initialize the solver with a project state.

        Args:
            state: The project whose shapes and parameters are used.
        """
        self.state = state

    def _collect_adjustable(self) -> List[Tuple[Segment, Optional[Shape]]]:
        """Every adjustable segment in arena order, with its shape if it has one."""
        return [
            (segment, self.state.shape_for(segment.id))
            for segment in self.state.arena.adjustable()
            if not segment.is_curve
        ]

    def run(self, propagate: bool = True) -> BatchReport:
        """
        Adjust every adjustable segment, then restore connectivity.

        All segments are adjusted before any propagation so that no adjustment
        sees an anchor already moved by another one.

        Args:
            propagate: When False only the adjustment pass runs, and shapes
                are left open where segments moved.

        Returns:
            The BatchReport for this run.
        """
        report = BatchReport()
        pending = self._collect_adjustable()
        logger.info(f"Adjusting {len(pending)} adjustable segments")

        moved: List[Tuple[Segment, Point, Point]] = []
        for segment, shape in pending:
            old_start, old_end = segment.start_point, segment.end_point
            adjustment = adjust_segment(
                segment, shape, self.state.arena, self.state.parameters, issues=report.issues
            )
            if adjustment is not None:
                report.adjustments.append(adjustment)
                moved.append((segment, old_start, old_end))

        if propagate and moved:
            propagator = Propagator(self.state.arena, epsilon=self.state.epsilon)
            for segment, old_start, old_end in moved:
                propagator.propagate(segment, old_start, old_end)
            report.propagated_ids = list(propagator.touched)

        report.open_joints = find_open_joints(self.state.arena, epsilon=self.state.epsilon)
        if propagate and report.open_joints:
            logger.warning(
                f"{len(report.open_joints)} joints are still open after propagation: "
                + ", ".join(f"{j.segment_id}/{j.neighbor_id}" for j in report.open_joints[:5])
            )

        logger.info(
            f"Adjusted {report.changed_count} segments, "
            f"moved {len(report.propagated_ids)} neighbours"
        )
        return report
