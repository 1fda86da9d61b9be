"""
Suggestion injection endpoints.

Takes a reviewer's suggestions, the diff they refer to and a snapshot of the
rendered diff page, and returns the page with the suggestions placed next to
their lines.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from lxml import etree

from injector.core.config import Settings, get_settings
from injector.core.logging_config import get_logger
from injector.models.api import InjectRequest, InjectResponse
from injector.render.html_target import HtmlRenderTarget
from injector.services.injection_service import InjectionContext, InjectionCoordinator
from injector.services.notification_service import notify_injection_summary

router = APIRouter()
logger = get_logger(__name__)


@router.post("/suggestions/inject", response_model=InjectResponse)
async def inject_suggestions(
    request: InjectRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
):
    """
    Place code suggestions into a rendered diff page.

    Per-suggestion failures are reported in ``errors``; a malformed diff is
    reported through ``fatal_error`` with every suggestion failed.

    Raises:
        HTTPException: If the page cannot be parsed as HTML
    """
    try:
        target = HtmlRenderTarget.from_string(request.html)
    except (etree.ParserError, ValueError) as e:
        logger.error(f"Failed to parse rendered page: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Invalid HTML document: {str(e)}")

    logger.info(
        f"Received {len(request.suggestions)} suggestion(s) for injection",
        extra={"suggestion_count": len(request.suggestions)},
    )

    try:
        context = InjectionContext.from_settings(target, settings)
        outcome = await InjectionCoordinator(context).inject(
            request.suggestions, request.diff_text
        )
    except Exception as e:
        logger.exception(f"Error injecting suggestions: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    if settings.WEBHOOK_URL:
        background_tasks.add_task(notify_injection_summary, outcome, settings)

    html = target.to_html() if target.is_attached() else ""
    return InjectResponse.from_outcome(outcome, html)
