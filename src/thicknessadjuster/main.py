"""
Command-Line Entry Point
========================
Loads an SVG drawing, marks the requested segments adjustable, runs one
adjustment batch and writes the adjusted drawing.

Why is this file needed?
------------------------
It is the orchestration root. It:
1. Sets up logging.
2. Instantiates the explicit pipeline context (ProjectState).
3. Hands it to the SVG adapter, the solver and back to the adapter.
"""
import argparse
import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence

from thicknessadjuster import __version__
from thicknessadjuster.config import load_parameters
from thicknessadjuster.logging_config import setup_logging
from thicknessadjuster.model.io import IOManager
from thicknessadjuster.model.state import ProjectState
from thicknessadjuster.pre.flatten import CurveMode, Flattener

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thicknessadjuster",
        description="Resize tab and slot edges of a laser-cut SVG drawing to the material thickness.",
    )
    parser.add_argument("input", type=Path, help="Input SVG drawing")
    parser.add_argument("-o", "--output", type=Path, help="Output SVG (default: <input>_adjusted.svg)")
    parser.add_argument("--thickness", type=float, help="Material thickness in mm")
    parser.add_argument("--dpi", type=float, help="Drawing resolution in dots per inch")
    parser.add_argument("--config", type=Path, help="JSON file with material_thickness_mm and dpi")
    parser.add_argument(
        "--adjust", nargs="+", default=[], metavar="ID",
        help="Segment ids to resize to one material thickness",
    )
    parser.add_argument(
        "--adjust-double", nargs="+", default=[], metavar="ID",
        help="Segment ids to resize to two material thicknesses",
    )
    parser.add_argument(
        "--subdivide", action="store_true",
        help="Split curves into straight segments instead of keeping them as references",
    )
    parser.add_argument("--list", action="store_true", help="List shapes and segments, then exit")
    parser.add_argument("--no-propagate", action="store_true", help="Adjust segments without moving neighbours")
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}_adjusted.svg")


def print_segments(state: ProjectState) -> None:
    in_shapes = set()
    for shape in state.shapes:
        print(f"{shape.id} ({shape.winding_order}, {len(shape)} segments, perimeter {shape.perimeter:.3f})")
        for segment in shape.lines:
            in_shapes.add(segment.id)
            flags = []
            if segment.is_curve:
                flags.append("curve")
            if segment.is_adjustable:
                flags.append(f"{segment.multiplier}x")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            print(
                f"  {segment.id}: length {segment.length:.3f}, "
                f"angle {math.degrees(segment.angle):.1f} deg{suffix}"
            )

    loose = [s for s in state.arena if s.id not in in_shapes]
    if loose:
        print(f"not in a closed shape ({len(loose)} segments)")
        for segment in loose:
            print(f"  {segment.id}: length {segment.length:.3f}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=args.log_level, log_file=args.log_file)

    # 2. Initialize the Data Model
    state = ProjectState()
    try:
        if args.config is not None:
            state.parameters = load_parameters(args.config)
        state.set_parameters(material_thickness_mm=args.thickness, dpi=args.dpi)
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Invalid parameters: {e}")
        return EXIT_USAGE

    # 3. Load the drawing
    curve_mode = CurveMode.SUBDIVIDE if args.subdivide else CurveMode.REFERENCE
    try:
        IOManager.load_drawing(state, args.input, flattener=Flattener(curve_mode=curve_mode, epsilon=state.epsilon))
    except (OSError, ValueError, SyntaxError) as e:
        logger.error(f"Could not load '{args.input}': {e}")
        return EXIT_USAGE

    if args.list:
        print_segments(state)
        return EXIT_OK

    # 4. Mark the requested segments
    requested: List[tuple[str, int]] = [(i, 1) for i in args.adjust] + [(i, 2) for i in args.adjust_double]
    for segment_id, multiplier in requested:
        if segment_id not in state.arena:
            logger.error(f"Unknown segment id: {segment_id}")
            return EXIT_USAGE
        try:
            state.mark_adjustable(segment_id, multiplier)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_USAGE

    # 5. Run the batch
    report = state.run_adjustment_batch(propagate=not args.no_propagate)

    output = args.output or default_output_path(args.input)
    try:
        IOManager.save_drawing(state, output)
    except OSError as e:
        logger.error(f"Could not write '{output}': {e}")
        return EXIT_USAGE

    print(
        f"Adjusted {report.changed_count} segments, moved {len(report.propagated_ids)} neighbours, "
        f"{len(report.issues)} warnings -> {output}"
    )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
