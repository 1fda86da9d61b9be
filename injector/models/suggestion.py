"""Suggestion-related data models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfidenceTier(str, Enum):
    """How structurally certain a placement is, best first."""

    EXACT_ID = "EXACT_ID"
    EXACT_ATTRIBUTE = "EXACT_ATTRIBUTE"
    UNIQUE_TEXT_MATCH = "UNIQUE_TEXT_MATCH"


class ErrorKind(str, Enum):
    """Why a suggestion was not placed."""

    PARSE_ERROR = "ParseError"
    LINE_NOT_IN_DIFF = "LineNotInDiff"
    ANCHOR_NOT_FOUND = "AnchorNotFound"
    AMBIGUOUS_FILENAME = "AmbiguousFilename"
    RENDER_TARGET_GONE = "RenderTargetGone"
    INVALID_SUGGESTION = "InvalidSuggestion"


class Suggestion(BaseModel):
    """A reviewer-produced code suggestion for one new-file line."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Matched verbatim against the diff's destination path
    file_path: str = Field(alias="filePath", min_length=1)
    line_number: int = Field(alias="lineNumber", ge=1)
    suggested_code: str = Field(alias="suggestedCode", min_length=1)
    description: Optional[str] = None


@dataclass(frozen=True)
class PlacementResult:
    """Where a suggestion goes. Valid only for the render it was resolved against."""

    anchor: Any
    confidence_tier: ConfidenceTier
    matched_by: str


@dataclass(frozen=True)
class ItemError:
    """A suggestion that could not be placed, with the reason."""

    suggestion: Any
    kind: ErrorKind
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        payload = self.suggestion
        if isinstance(payload, Suggestion):
            payload = payload.model_dump(by_alias=True)
        return {"suggestion": payload, "error": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class PlacedSuggestion:
    suggestion: Suggestion
    confidence_tier: ConfidenceTier
    matched_by: str
    # Description plus suggestion block, ready to paste into a review comment
    copy_text: str = ""


@dataclass
class InjectionOutcome:
    """Aggregate result of one injection call."""

    success_count: int = 0
    failed_count: int = 0
    per_item_errors: List[ItemError] = field(default_factory=list)
    placed: List[PlacedSuggestion] = field(default_factory=list)
    # Set when the whole batch was aborted (malformed diff)
    fatal_error: Optional[str] = None

    def record_success(self, placed: PlacedSuggestion) -> None:
        self.success_count += 1
        self.placed.append(placed)

    def record_failure(self, suggestion: Any, kind: ErrorKind, message: str = "") -> None:
        self.failed_count += 1
        self.per_item_errors.append(ItemError(suggestion, kind, message))

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count

    def summary(self) -> str:
        return f"{self.success_count} of {self.total} suggestions placed"

    def to_counts(self) -> Dict[str, int]:
        return {"success": self.success_count, "failed": self.failed_count}
