"""
typeforge Custom Code Preservation

Extracts hand-written blocks from a previously generated file so they can be
spliced into the regenerated content. Blocks are delimited by single-line
marker comments:

    //<custom-head>          //<custom-body>
    ...                      ...
    //</custom-head>         //</custom-body>

Older files may wrap the body in //<keep-ts> ... //</keep-ts>; that region is
used when no custom-body region is present.

Preservation is best-effort: a missing file yields nothing, a malformed file
yields nothing plus a PreservationWarning.
"""

import logging
import textwrap
import warnings
from pathlib import Path
from typing import Callable, List, Optional

from typeforge.core.errors import PreservationWarning
from typeforge.core.utils import get_tab_text


logger = logging.getLogger(__name__)

KEEP_TAG_NAME = "keep-ts"
CUSTOM_HEAD_TAG_NAME = "custom-head"
CUSTOM_BODY_TAG_NAME = "custom-body"


def read_existing_file(file_path: str) -> Optional[str]:
    """Read a previously generated file; None when it does not exist."""
    path = Path(file_path)
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def _opening_marker(tag_name: str) -> str:
    return f"//<{tag_name}>"


def _closing_marker(tag_name: str) -> str:
    return f"//</{tag_name}>"


class ContentMerger:
    """
    Content Merger. Touches only the file it is asked about, so one instance
    can serve all generation workers.
    """

    def __init__(self, read_file: Callable[[str], Optional[str]] = read_existing_file):
        self._read_file = read_file

    def extract_region(self, file_path: str, indent_size: int, outer_tag_name: str,
                       inner_tag_name: Optional[str] = None) -> str:
        """
        Get the text enclosed by a marker pair in an existing file.

        Args:
            file_path: Path of the previously generated file
            indent_size: Indentation (in spaces) applied to every extracted line
            outer_tag_name: Marker name used when no inner tag is given, and as
                the fallback container when the inner region is absent
            inner_tag_name: Marker name nested inside the outer region

        Returns:
            Re-indented content with each line newline-terminated, or "" when the
            file or region does not exist or the markers are malformed
        """
        try:
            content = self._read_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self._warn(file_path, f"could not be read ({e})")
            return ""

        if not content:
            return ""

        lines = content.splitlines()
        tag_name = inner_tag_name or outer_tag_name
        region = self._find_region(lines, tag_name, file_path)

        if region is None and inner_tag_name:
            region = self._find_region(lines, outer_tag_name, file_path)

        if not region:
            return ""

        return _reindent(region, indent_size)

    def get_custom_head(self, file_path: str) -> str:
        """Custom head block of a file, wrapped in its markers, or ""."""
        content = self.extract_region(file_path, 0, CUSTOM_HEAD_TAG_NAME)
        if not content:
            return ""
        return f"{_opening_marker(CUSTOM_HEAD_TAG_NAME)}\n{content}{_closing_marker(CUSTOM_HEAD_TAG_NAME)}\n\n"

    def get_custom_body(self, file_path: str, indent_size: int) -> str:
        """Custom body block of a file, wrapped in its markers and indented, or ""."""
        content = self.extract_region(file_path, indent_size, KEEP_TAG_NAME, CUSTOM_BODY_TAG_NAME)
        if not content:
            return ""
        tab = get_tab_text(indent_size)
        return (
            f"\n\n{tab}{_opening_marker(CUSTOM_BODY_TAG_NAME)}\n"
            f"{content}{tab}{_closing_marker(CUSTOM_BODY_TAG_NAME)}"
        )

    def _find_region(self, lines: List[str], tag_name: str, file_path: str) -> Optional[List[str]]:
        """
        Collect the lines of every region delimited by tag_name.

        Returns None when the tag does not occur at all and [] when its
        markers are unbalanced.
        """
        opening = _opening_marker(tag_name)
        closing = _closing_marker(tag_name)

        collected: List[str] = []
        start: Optional[int] = None
        found = False

        for index, line in enumerate(lines):
            stripped = line.strip()
            if stripped == opening:
                if start is not None:
                    self._warn(file_path, f"nested {opening} at line {index + 1}")
                    return []
                start = index
                found = True
            elif stripped == closing:
                if start is None:
                    self._warn(file_path, f"{closing} at line {index + 1} has no matching {opening}")
                    return []
                collected.extend(lines[start + 1:index])
                start = None

        if start is not None:
            self._warn(file_path, f"{opening} at line {start + 1} is never closed")
            return []

        return collected if found else None

    @staticmethod
    def _warn(file_path: str, problem: str):
        message = f"Ignoring custom code in {file_path}: {problem}"
        logger.debug(message)
        warnings.warn(message, PreservationWarning, stacklevel=3)


def _reindent(region_lines: List[str], indent_size: int) -> str:
    """Dedent a block, drop blank edge lines and indent it by indent_size spaces."""
    body = textwrap.dedent("\n".join(region_lines))
    lines = body.split("\n")

    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    if not lines:
        return ""

    tab = get_tab_text(indent_size)
    return "".join(f"{tab}{line}\n" if line.strip() else "\n" for line in lines)
