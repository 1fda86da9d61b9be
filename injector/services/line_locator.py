"""Validation of (file, line) coordinates against a parsed diff."""

from injector.core.exceptions import LineNotInDiffError
from injector.models.diff import FileLineMap, LineRange


def locate(line_map: FileLineMap, file_path: str, line_number: int) -> LineRange:
    """
    Check that a new-file coordinate is shown by the diff.

    Args:
        line_map: Ranges produced by the diff parser
        file_path: Destination path, compared verbatim
        line_number: 1-based new-file line number

    Returns:
        LineRange: The range covering the line

    Raises:
        LineNotInDiffError: If the file is absent or no range covers the line
    """
    line_range = line_map.find_range(file_path, line_number)
    if line_range is None:
        raise LineNotInDiffError(file_path, line_number)
    return line_range


def is_line_in_diff(line_map: FileLineMap, file_path: str, line_number: int) -> bool:
    return line_map.find_range(file_path, line_number) is not None
