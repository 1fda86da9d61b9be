"""
Custom exceptions module.

Every exception carries the ErrorKind the injection coordinator records when
it captures the failure for a single suggestion.
"""

from typing import Optional, Sequence

from injector.models.suggestion import ErrorKind


class SuggestionInjectorException(Exception):
    """Base exception class for all application-specific exceptions."""

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str = "An error occurred in the Suggestion Injector application",
        status_code: int = 500,
    ):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# Diff Parsing Exceptions
class DiffParseError(SuggestionInjectorException):
    """Raised when a file header or hunk header cannot be trusted."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        message = f"Malformed diff at line {line_number} ({line[:80]!r}): {reason}"
        super().__init__(message, status_code=422)


# Placement Exceptions
class PlacementException(SuggestionInjectorException):
    """Base exception for locating a suggestion's anchor."""

    def __init__(
        self, message: str = "Suggestion placement failed", status_code: int = 500
    ):
        super().__init__(message, status_code)


class LineNotInDiffError(PlacementException):
    """Raised when a (file, line) coordinate is not covered by any hunk."""

    kind = ErrorKind.LINE_NOT_IN_DIFF

    def __init__(self, file_path: str, line_number: int):
        self.file_path = file_path
        self.line_number = line_number
        message = f"Line {line_number} of {file_path} is not part of the diff"
        super().__init__(message, status_code=422)


class AnchorNotFoundError(PlacementException):
    """Raised when every placement tier failed for a coordinate."""

    kind = ErrorKind.ANCHOR_NOT_FOUND

    def __init__(self, file_path: str, line_number: int):
        self.file_path = file_path
        self.line_number = line_number
        message = f"No anchor found for {file_path}:{line_number}"
        super().__init__(message, status_code=404)


class AmbiguousFilenameError(PlacementException):
    """Raised when a path can only be matched by a basename shared by several files."""

    kind = ErrorKind.AMBIGUOUS_FILENAME

    def __init__(self, file_path: str, candidates: int, matched_on: str = "basename"):
        self.file_path = file_path
        self.candidates = candidates
        message = (
            f"Cannot place {file_path}: {candidates} file containers match "
            f"its {matched_on}"
        )
        super().__init__(message, status_code=409)


# Render Target Exceptions
class RenderTargetGoneError(SuggestionInjectorException):
    """Raised when the rendered view was torn down while it was being used."""

    kind = ErrorKind.RENDER_TARGET_GONE

    def __init__(self, reason: str = "render target is no longer attached"):
        message = f"Render target unavailable: {reason}"
        super().__init__(message, status_code=410)


class InvalidSuggestionError(SuggestionInjectorException):
    """Raised when a suggestion payload is missing required fields."""

    kind = ErrorKind.INVALID_SUGGESTION

    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems)
        message = "Invalid suggestion: " + "; ".join(self.problems)
        super().__init__(message, status_code=422)
