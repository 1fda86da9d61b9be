import pytest

from injector.core.exceptions import LineNotInDiffError
from injector.models.diff import LineRange
from injector.models.suggestion import ErrorKind
from injector.services.line_locator import is_line_in_diff, locate
from injector.utils.diff_parser import parse_diff

DIFF = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "@@ -1,2 +1,3 @@",
        " a",
        "+b",
        " c",
        "@@ -20,2 +21,2 @@",
        " x",
        " y",
        "diff --git a/old.py b/renamed.py",
        "similarity index 100%",
        "rename from old.py",
        "rename to renamed.py",
    ]
)


@pytest.fixture
def line_map():
    return parse_diff(DIFF)


class TestLocate:
    def test_returns_covering_range(self, line_map):
        assert locate(line_map, "src/app.py", 2) == LineRange(1, 3)
        assert locate(line_map, "src/app.py", 22) == LineRange(21, 22)

    def test_range_boundaries(self, line_map):
        assert locate(line_map, "src/app.py", 1) == LineRange(1, 3)
        assert locate(line_map, "src/app.py", 3) == LineRange(1, 3)

    @pytest.mark.parametrize("line_number", [4, 10, 20, 23])
    def test_lines_outside_every_hunk(self, line_map, line_number):
        with pytest.raises(LineNotInDiffError) as exc_info:
            locate(line_map, "src/app.py", line_number)

        assert exc_info.value.kind == ErrorKind.LINE_NOT_IN_DIFF
        assert exc_info.value.line_number == line_number

    def test_unknown_file(self, line_map):
        with pytest.raises(LineNotInDiffError):
            locate(line_map, "src/other.py", 1)

    def test_paths_are_compared_verbatim(self, line_map):
        with pytest.raises(LineNotInDiffError):
            locate(line_map, "./src/app.py", 1)
        with pytest.raises(LineNotInDiffError):
            locate(line_map, "app.py", 1)

    def test_file_without_hunks(self, line_map):
        assert "renamed.py" in line_map
        with pytest.raises(LineNotInDiffError):
            locate(line_map, "renamed.py", 1)


class TestIsLineInDiff:
    def test_boolean_form(self, line_map):
        assert is_line_in_diff(line_map, "src/app.py", 21)
        assert not is_line_in_diff(line_map, "src/app.py", 5)
