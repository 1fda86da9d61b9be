"""Request and response models for the HTTP API"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from injector.models.suggestion import InjectionOutcome, Suggestion


class DiffRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    diff_text: str = Field(alias="diffText")


class InjectRequest(DiffRequest):
    # Snapshot of the rendered diff page
    html: str = Field(min_length=1)
    # Validated per item so one bad entry does not reject the batch
    suggestions: List[Dict[str, Any]] = Field(default_factory=list)


class ItemErrorResponse(BaseModel):
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    error: str
    message: str = ""


class PlacementResponse(BaseModel):
    file_path: str
    line_number: int
    confidence_tier: str
    matched_by: str
    copy_text: str = ""


class InjectResponse(BaseModel):
    success: int
    failed: int
    summary: str
    fatal_error: Optional[str] = None
    errors: List[ItemErrorResponse] = Field(default_factory=list)
    placements: List[PlacementResponse] = Field(default_factory=list)
    html: str = ""

    @classmethod
    def from_outcome(cls, outcome: InjectionOutcome, html: str) -> "InjectResponse":
        errors = []
        for item_error in outcome.per_item_errors:
            payload = item_error.suggestion
            if isinstance(payload, Suggestion):
                file_path, line_number = payload.file_path, payload.line_number
            elif isinstance(payload, dict):
                file_path = payload.get("filePath", payload.get("file_path"))
                line_number = payload.get("lineNumber", payload.get("line_number"))
            else:
                file_path, line_number = None, None
            errors.append(
                ItemErrorResponse(
                    file_path=file_path if isinstance(file_path, str) else None,
                    line_number=line_number if isinstance(line_number, int) else None,
                    error=item_error.kind.value,
                    message=item_error.message,
                )
            )

        placements = [
            PlacementResponse(
                file_path=placed.suggestion.file_path,
                line_number=placed.suggestion.line_number,
                confidence_tier=placed.confidence_tier.value,
                matched_by=placed.matched_by,
                copy_text=placed.copy_text,
            )
            for placed in outcome.placed
        ]
        return cls(
            success=outcome.success_count,
            failed=outcome.failed_count,
            summary=outcome.summary(),
            fatal_error=outcome.fatal_error,
            errors=errors,
            placements=placements,
            html=html,
        )


class LineRangeResponse(BaseModel):
    start_line: int
    end_line: int


class LineMapResponse(BaseModel):
    files: Dict[str, List[LineRangeResponse]]


class FilterResponse(BaseModel):
    filtered_patch: str
    original_file_count: int
    filtered_file_count: int
    removed_file_count: int
    removed_files: List[str]
    summary: str
