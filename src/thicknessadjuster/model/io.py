"""
Input/Output Manager (SVG)
Loads the path elements of an SVG drawing into a ProjectState and writes the
adjusted geometry back into the same document.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from lxml import etree

from thicknessadjuster.model.geometry_primitives import Segment
from thicknessadjuster.model.state import ProjectState
from thicknessadjuster.pre.flatten import Flattener
from thicknessadjuster.pre.path_data import format_path_data, parse_path_data

# Get module logger
logger = logging.getLogger(__name__)

PATH_XPATH = "//*[local-name()='path']"


class IOManager:

    @staticmethod
    def _parser() -> etree.XMLParser:
        # External entities and network access are never needed for drawings
        return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)

    @staticmethod
    def load_drawing(
        state: ProjectState,
        filepath: Union[str, Path],
        flattener: Optional[Flattener] = None,
    ) -> None:
        """
        Read every <path> of an SVG file into the project.

        Each path element gets the id "path_{k}" in document order; its
        segments are flattened into the arena and the shape graph is rebuilt.
        Other elements are kept in the document untouched.
        """
        filepath = Path(filepath)
        logger.info(f"Loading drawing from: {filepath}")
        flattener = flattener or Flattener(epsilon=state.epsilon)

        try:
            document = etree.parse(str(filepath), IOManager._parser())
        except (OSError, etree.XMLSyntaxError) as e:
            logger.error(f"Failed to read drawing '{filepath}': {e}")
            raise

        # reset the state to clear existing data
        state.reset()
        state.project_name = filepath.stem
        state.filepath = str(filepath)

        segments: List[Segment] = []
        degenerate: List[Segment] = []
        elements: Dict[str, etree._Element] = {}

        for k, element in enumerate(document.xpath(PATH_XPATH)):
            path_id = f"path_{k}"
            elements[path_id] = element
            d = element.get("d")
            if not d:
                logger.debug(f"Path element {path_id} has no path data")
                continue

            try:
                commands = parse_path_data(d)
            except ValueError as e:
                logger.error(f"Invalid path data in {path_id}: {e}")
                raise

            result = flattener.flatten(commands, path_id=path_id)
            segments.extend(result.segments)
            degenerate.extend(result.degenerate)
            state.issues.extend(result.issues)

        state.document = document
        state.path_elements = elements
        state.load_segments(segments, degenerate)
        logger.info(
            f"Loaded {len(elements)} paths, {len(state.arena)} segments, "
            f"{len(state.shapes)} shapes from {filepath.name}"
        )

    @staticmethod
    def save_drawing(state: ProjectState, filepath: Union[str, Path]) -> None:
        """
        Write the drawing with each path's data regenerated from its segments.

        Paths that produced no segments keep their original data.
        """
        if state.document is None:
            msg = "No drawing is loaded; nothing to save."
            logger.error(msg)
            raise ValueError(msg)

        logger.info(f"Saving drawing to: {filepath}")
        by_path: Dict[str, List[Segment]] = {}
        for segment in state.arena:
            if segment.path_id is not None:
                by_path.setdefault(segment.path_id, []).append(segment)

        for path_id, element in state.path_elements.items():
            path_segments = by_path.get(path_id)
            if not path_segments:
                continue
            element.set("d", format_path_data(path_segments, epsilon=state.epsilon))

        try:
            state.document.write(str(filepath), xml_declaration=True, encoding="utf-8")
        except OSError as e:
            logger.exception(f"Failed to save drawing: {e}")
            raise
        logger.info(f"Drawing saved to: {filepath}")
