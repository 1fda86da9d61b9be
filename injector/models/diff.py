"""Diff data structures: hunks and the per-file map of new-file line ranges."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class DiffHunk:
    """One ``@@ -a,b +c,d @@`` block's effect on the new file's numbering."""

    file: str
    new_start: int
    # Lines actually counted ("+" and context), not the header's declared count
    new_line_count: int
    # 1-based line of the hunk header inside the diff text
    diff_start_line: int
    old_start: int = 0
    old_line_count: int = 0

    @property
    def end_line(self) -> int:
        return self.new_start + self.new_line_count - 1


@dataclass(frozen=True)
class LineRange:
    """Inclusive range of new-file line numbers shown by one hunk."""

    start_line: int
    end_line: int

    def __contains__(self, line_number: object) -> bool:
        return (
            isinstance(line_number, int)
            and self.start_line <= line_number <= self.end_line
        )

    def __len__(self) -> int:
        return max(0, self.end_line - self.start_line + 1)

    def to_dict(self) -> Dict[str, int]:
        return {"startLine": self.start_line, "endLine": self.end_line}


@dataclass(frozen=True)
class FileLineMap:
    """
    Read-only mapping of new-file path to its ordered, non-overlapping ranges.

    Built once per diff text by the parser; files without hunks (renames,
    mode changes) map to an empty tuple.
    """

    ranges: Mapping[str, Tuple[LineRange, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    hunks: Tuple[DiffHunk, ...] = ()

    @classmethod
    def from_hunks(cls, files: List[str], hunks: List[DiffHunk]) -> "FileLineMap":
        by_file: Dict[str, List[LineRange]] = {path: [] for path in files}
        for hunk in hunks:
            by_file.setdefault(hunk.file, []).append(
                LineRange(hunk.new_start, hunk.end_line)
            )
        frozen = {path: tuple(items) for path, items in by_file.items()}
        return cls(ranges=MappingProxyType(frozen), hunks=tuple(hunks))

    def __contains__(self, file_path: object) -> bool:
        return file_path in self.ranges

    def __iter__(self) -> Iterator[str]:
        return iter(self.ranges)

    def __len__(self) -> int:
        return len(self.ranges)

    @property
    def files(self) -> List[str]:
        return list(self.ranges)

    def ranges_for(self, file_path: str) -> Tuple[LineRange, ...]:
        return self.ranges.get(file_path, ())

    def hunks_for(self, file_path: str) -> List[DiffHunk]:
        return [hunk for hunk in self.hunks if hunk.file == file_path]

    def find_range(self, file_path: str, line_number: int) -> Optional[LineRange]:
        for line_range in self.ranges_for(file_path):
            if line_number in line_range:
                return line_range
        return None

    def line_count(self, file_path: str) -> int:
        """Number of new-file lines (added plus context) the diff shows for a file."""
        return sum(len(line_range) for line_range in self.ranges_for(file_path))

    def to_dict(self) -> Dict[str, List[Dict[str, int]]]:
        return {
            path: [line_range.to_dict() for line_range in items]
            for path, items in self.ranges.items()
        }
