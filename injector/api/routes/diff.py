"""
Diff inspection endpoints.

Expose the new-file line map the injector validates suggestions against, and
the media/binary filter applied to patches before review.
"""

from fastapi import APIRouter, HTTPException

from injector.core.exceptions import DiffParseError
from injector.core.logging_config import get_logger
from injector.models.api import (
    DiffRequest,
    FilterResponse,
    LineMapResponse,
    LineRangeResponse,
)
from injector.utils.diff_parser import parse_diff
from injector.utils.patch_filter import filter_patch, get_filter_summary

router = APIRouter()
logger = get_logger(__name__)


@router.post("/diff/line-map", response_model=LineMapResponse)
async def diff_line_map(request: DiffRequest):
    """
    Parse a unified diff into new-file line ranges per file.

    Raises:
        HTTPException: 422 if a file or hunk header is malformed
    """
    try:
        line_map = parse_diff(request.diff_text)
    except DiffParseError as e:
        logger.warning(f"Rejected malformed diff: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return LineMapResponse(
        files={
            path: [
                LineRangeResponse(start_line=r.start_line, end_line=r.end_line)
                for r in line_map.ranges_for(path)
            ]
            for path in line_map
        }
    )


@router.post("/diff/filter", response_model=FilterResponse)
async def diff_filter(request: DiffRequest):
    """Drop media and binary file sections from a diff."""
    result = filter_patch(request.diff_text)
    return FilterResponse(
        filtered_patch=result.filtered_patch,
        original_file_count=result.original_file_count,
        filtered_file_count=result.filtered_file_count,
        removed_file_count=result.removed_file_count,
        removed_files=result.removed_files,
        summary=get_filter_summary(result),
    )
