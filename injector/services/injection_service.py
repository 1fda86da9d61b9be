"""Injection service module.

Coordinates one injection run: parse the diff, wait for the rendered view,
then validate, place, render and insert each suggestion in input order. A
malformed diff aborts the whole batch; every other failure is recorded for the
suggestion it belongs to and the batch carries on.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError

from injector.core.config import Settings
from injector.core.exceptions import (
    AnchorNotFoundError,
    DiffParseError,
    InvalidSuggestionError,
    RenderTargetGoneError,
    SuggestionInjectorException,
)
from injector.core.logging_config import get_logger
from injector.models.diff import FileLineMap
from injector.models.suggestion import (
    ErrorKind,
    InjectionOutcome,
    PlacedSuggestion,
    Suggestion,
)
from injector.render.target import RenderTarget
from injector.services.line_locator import locate
from injector.services.placement import PlacementResolver
from injector.services.readiness import wait_until_ready
from injector.services.suggestion_renderer import SuggestionRenderer
from injector.utils.diff_parser import DiffParser
from injector.utils.patch_filter import filter_patch, get_filter_summary

logger = get_logger(__name__)

SuggestionInput = Union[Suggestion, Mapping[str, Any]]


@dataclass
class InjectionContext:
    """Everything one coordinator run needs; nothing is shared between runs."""

    target: RenderTarget
    resolver: PlacementResolver = field(default_factory=PlacementResolver)
    renderer: SuggestionRenderer = field(default_factory=SuggestionRenderer)
    parser: DiffParser = field(default_factory=DiffParser)
    ready_timeout: float = 15.0
    poll_interval: float = 0.5
    settle_delay: float = 0.0
    filter_media_files: bool = False

    @classmethod
    def from_settings(
        cls, target: RenderTarget, settings: Settings, **overrides: Any
    ) -> "InjectionContext":
        values: Dict[str, Any] = {
            "ready_timeout": settings.READY_TIMEOUT_SECONDS,
            "poll_interval": settings.READY_POLL_INTERVAL_SECONDS,
            "settle_delay": settings.SETTLE_DELAY_SECONDS,
            "filter_media_files": settings.FILTER_MEDIA_FILES,
        }
        values.update(overrides)
        return cls(target=target, **values)


def coerce_suggestion(item: SuggestionInput) -> Suggestion:
    """
    Validate a suggestion payload.

    Raises:
        InvalidSuggestionError: If required fields are missing or invalid
    """
    if isinstance(item, Suggestion):
        return item
    if not isinstance(item, Mapping):
        raise InvalidSuggestionError([f"expected an object, got {type(item).__name__}"])
    try:
        return Suggestion.model_validate(item)
    except ValidationError as e:
        raise InvalidSuggestionError(
            [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
        ) from e


def _describe(item: SuggestionInput) -> str:
    if isinstance(item, Suggestion):
        return f"{item.file_path}:{item.line_number}"
    if isinstance(item, Mapping):
        return f"{item.get('filePath', item.get('file_path'))}:{item.get('lineNumber', item.get('line_number'))}"
    return repr(item)


class InjectionCoordinator:
    """Places a batch of suggestions into one render target."""

    def __init__(self, context: InjectionContext):
        self.context = context

    async def inject(
        self, suggestions: Iterable[SuggestionInput], diff_text: str
    ) -> InjectionOutcome:
        """
        Inject suggestions next to their diff lines.

        Args:
            suggestions: Suggestion models or raw ``filePath``/``lineNumber``/
                ``suggestedCode``/``description`` mappings
            diff_text: Unified diff the rendered view shows

        Returns:
            InjectionOutcome: Counts, per-item errors and placements. On a
            malformed diff every item is failed with ParseError and
            ``fatal_error`` is set.
        """
        items: List[SuggestionInput] = list(suggestions)
        outcome = InjectionOutcome()
        if not items:
            logger.info("No suggestions to inject")
            return outcome

        try:
            line_map = self._parse(diff_text)
        except DiffParseError as e:
            logger.error(f"Aborting injection of {len(items)} suggestion(s): {e.message}")
            outcome.fatal_error = e.message
            for item in items:
                outcome.record_failure(item, ErrorKind.PARSE_ERROR, e.message)
            return outcome

        target = self.context.target
        ready = await wait_until_ready(
            target, self.context.ready_timeout, self.context.poll_interval
        )
        if ready and self.context.settle_delay > 0:
            await asyncio.sleep(self.context.settle_delay)

        for index, item in enumerate(items):
            if not target.is_attached():
                self._abandon(outcome, items[index:], "render target is no longer attached")
                break
            try:
                placed = self._inject_one(item, line_map)
            except RenderTargetGoneError as e:
                self._abandon(outcome, items[index:], e.message)
                break
            except SuggestionInjectorException as e:
                self._record(outcome, item, e.kind or ErrorKind.ANCHOR_NOT_FOUND, e.message)
            except Exception as e:
                logger.exception(f"Unexpected error injecting {_describe(item)}: {e}")
                self._record(outcome, item, ErrorKind.ANCHOR_NOT_FOUND, str(e))
            else:
                outcome.record_success(placed)

        logger.info(f"Injection complete: {outcome.summary()}")
        return outcome

    def _parse(self, diff_text: str) -> FileLineMap:
        if self.context.filter_media_files:
            result = filter_patch(diff_text)
            if result.removed_file_count:
                logger.info(get_filter_summary(result))
            diff_text = result.filtered_patch
        return self.context.parser.parse(diff_text)

    def _inject_one(self, item: SuggestionInput, line_map: FileLineMap) -> PlacedSuggestion:
        suggestion = coerce_suggestion(item)
        locate(line_map, suggestion.file_path, suggestion.line_number)

        placement = self.context.resolver.resolve(
            self.context.target, suggestion.file_path, suggestion.line_number
        )
        if placement is None:
            raise AnchorNotFoundError(suggestion.file_path, suggestion.line_number)

        rendered = self.context.renderer.render(suggestion)
        self.context.target.insert_after(placement.anchor, rendered.display_fragment)
        logger.debug(
            f"Injected suggestion for {suggestion.file_path}:{suggestion.line_number}",
            extra={"confidence_tier": placement.confidence_tier.value},
        )
        return PlacedSuggestion(
            suggestion=suggestion,
            confidence_tier=placement.confidence_tier,
            matched_by=placement.matched_by,
            copy_text=rendered.copy_text,
        )

    @staticmethod
    def _record(
        outcome: InjectionOutcome, item: SuggestionInput, kind: ErrorKind, message: str
    ) -> None:
        logger.warning(
            f"Skipping suggestion {_describe(item)}: {message}",
            extra={"error_kind": kind.value},
        )
        outcome.record_failure(item, kind, message)

    def _abandon(
        self, outcome: InjectionOutcome, remaining: List[SuggestionInput], reason: str
    ) -> None:
        logger.warning(
            f"Render target gone; {len(remaining)} suggestion(s) not injected: {reason}"
        )
        for item in remaining:
            outcome.record_failure(item, ErrorKind.RENDER_TARGET_GONE, reason)


async def inject_code_suggestions(
    suggestions: Iterable[SuggestionInput], diff_text: str, context: InjectionContext
) -> Dict[str, int]:
    """
    Inject suggestions into the context's render target.

    Returns:
        Dict[str, int]: ``{"success": n, "failed": m}``
    """
    outcome = await InjectionCoordinator(context).inject(suggestions, diff_text)
    return outcome.to_counts()
