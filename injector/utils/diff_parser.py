"""
Unified diff parser.

Turns ``git diff`` text into a FileLineMap: for every destination path, the
ranges of new-file line numbers that the diff actually shows. Suggestions are
expressed in new-file coordinates, so these ranges decide which of them can be
anchored at all.
"""

import re
from typing import Dict, List, Optional, Tuple

from injector.core.exceptions import DiffParseError
from injector.core.logging_config import get_logger
from injector.models.diff import DiffHunk, FileLineMap

logger = get_logger(__name__)

FILE_HEADER_PREFIX = "diff --git"
HUNK_HEADER_PREFIX = "@@"

FILE_HEADER_RE = re.compile(r"^diff --git a/(?P<old>.+?) b/(?P<new>.+)$")
_QUOTED_FILE_HEADER_RE = re.compile(
    r'^diff --git "a/(?P<old>(?:[^"\\]|\\.)+)" "b/(?P<new>(?:[^"\\]|\\.)+)"$'
)
_HUNK_HEADER_RE = re.compile(
    r"^@@\s*-(?P<old_start>\d+)(?:,(?P<old_count>\d+))?"
    r"\s+\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))?\s*@@"
)


def _unquote(path: str) -> str:
    return path.replace('\\"', '"').replace("\\\\", "\\")


def _split_symmetric_header(rest: str) -> Optional[str]:
    """
    Split ``a/<path> b/<path>`` when both sides are the same path.

    Handles paths that themselves contain `` b/``, which the regex would cut
    at the wrong place.
    """
    if len(rest) % 2 == 0:
        return None
    half = len(rest) // 2
    left, sep, right = rest[:half], rest[half], rest[half + 1 :]
    if sep != " " or not left.startswith("a/") or not right.startswith("b/"):
        return None
    if left[2:] != right[2:]:
        return None
    return right[2:]


class DiffParser:
    """Parse unified diff text into per-file new-file line ranges."""

    def parse(self, diff_text: str) -> FileLineMap:
        """
        Parse a unified diff.

        Args:
            diff_text: Raw ``git diff`` output

        Returns:
            FileLineMap: New-file ranges keyed by destination path

        Raises:
            DiffParseError: On a malformed file or hunk header, a hunk outside a
                file section, or hunks that overlap within one file. Nothing
                partial is ever returned.
        """
        if not diff_text:
            return FileLineMap()

        files: List[str] = []
        hunks: List[DiffHunk] = []
        last_end: Dict[str, Tuple[int, int]] = {}

        current_file: Optional[str] = None
        # (new_start, old_start, old_count, header line number) of the open hunk
        open_hunk: Optional[Tuple[int, int, int, int]] = None
        counter = 0

        def close_hunk() -> None:
            nonlocal open_hunk
            if open_hunk is None:
                return
            new_start, old_start, old_count, header_line = open_hunk
            hunks.append(
                DiffHunk(
                    file=current_file,
                    new_start=new_start,
                    new_line_count=counter - new_start,
                    diff_start_line=header_line,
                    old_start=old_start,
                    old_line_count=old_count,
                )
            )
            last_end[current_file] = (new_start, counter - 1)
            open_hunk = None

        for line_number, raw_line in enumerate(diff_text.split("\n"), start=1):
            line = raw_line[:-1] if raw_line.endswith("\r") else raw_line

            if line.startswith(FILE_HEADER_PREFIX):
                close_hunk()
                current_file = self._parse_file_header(line_number, line)
                if current_file not in files:
                    files.append(current_file)
                continue

            if line.startswith(HUNK_HEADER_PREFIX):
                if current_file is None:
                    raise DiffParseError(
                        line_number, line, "hunk header outside of a file section"
                    )
                close_hunk()
                new_start, old_start, old_count = self._parse_hunk_header(
                    line_number, line
                )
                previous = last_end.get(current_file)
                if previous is not None and (
                    new_start < previous[0] or new_start <= previous[1]
                ):
                    raise DiffParseError(
                        line_number,
                        line,
                        f"hunk starting at {new_start} overlaps the previous hunk "
                        f"ending at {previous[1]} in {current_file}",
                    )
                open_hunk = (new_start, old_start, old_count, line_number)
                counter = new_start
                continue

            if open_hunk is None:
                # Extended headers, ---/+++ lines, binary patch bodies
                continue

            if line[:1] in ("+", " "):
                counter += 1
            # "-" lines and "\ No newline at end of file" leave the counter alone

        close_hunk()

        line_map = FileLineMap.from_hunks(files, hunks)
        logger.debug(
            f"Parsed diff into {len(files)} file(s) and {len(hunks)} hunk(s)."
        )
        return line_map

    @staticmethod
    def _parse_file_header(line_number: int, line: str) -> str:
        rest = line[len(FILE_HEADER_PREFIX) :].lstrip(" ")
        symmetric = _split_symmetric_header(rest)
        if symmetric:
            return symmetric

        quoted = _QUOTED_FILE_HEADER_RE.match(line)
        if quoted:
            return _unquote(quoted.group("new"))

        match = FILE_HEADER_RE.match(line)
        if not match or not match.group("new").strip():
            raise DiffParseError(
                line_number, line, "expected 'diff --git a/<old> b/<new>'"
            )
        return match.group("new")

    @staticmethod
    def _parse_hunk_header(line_number: int, line: str) -> Tuple[int, int, int]:
        match = _HUNK_HEADER_RE.match(line)
        if not match:
            raise DiffParseError(
                line_number, line, "expected '@@ -<start>[,<count>] +<start>[,<count>] @@'"
            )
        old_count = match.group("old_count")
        return (
            int(match.group("new_start")),
            int(match.group("old_start")),
            int(old_count) if old_count is not None else 1,
        )


def parse_diff(diff_text: str) -> FileLineMap:
    """Parse a unified diff with a default DiffParser."""
    return DiffParser().parse(diff_text)
