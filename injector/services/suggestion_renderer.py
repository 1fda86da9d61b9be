"""
Suggestion rendering.

Builds the fragment shown next to a diff line and the inline suggestion block a
reviewer can paste back into a merge request discussion.
"""

import re
from dataclasses import dataclass
from typing import Optional

from injector.models.suggestion import Suggestion

DEFAULT_BLOCK_LABEL = "Copy GitLab suggestion format"

# Replace zero lines above and below the commented line
DEFAULT_LINE_OFFSETS = "-0+0"

_BACKTICK_RUN_RE = re.compile(r"`+")


@dataclass(frozen=True)
class DisplayFragment:
    """Structured fragment; targets write ``code`` as text, never as markup."""

    description: Optional[str]
    code: str
    suggestion_block: str
    block_label: str = DEFAULT_BLOCK_LABEL


@dataclass(frozen=True)
class RenderedSuggestion:
    display_fragment: DisplayFragment
    suggestion_block_text: str
    copy_text: str


def fence_for(code: str) -> str:
    """A backtick fence longer than any backtick run inside ``code``."""
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(code)), default=0)
    return "`" * max(3, longest + 1)


def create_suggestion_block(code: str, line_offsets: str = DEFAULT_LINE_OFFSETS) -> str:
    fence = fence_for(code)
    return f"{fence}suggestion:{line_offsets}\n{code}\n{fence}"


class SuggestionRenderer:
    """Render suggestions into display fragments and suggestion blocks."""

    def __init__(
        self,
        line_offsets: str = DEFAULT_LINE_OFFSETS,
        block_label: str = DEFAULT_BLOCK_LABEL,
    ):
        self.line_offsets = line_offsets
        self.block_label = block_label

    def render(self, suggestion: Suggestion) -> RenderedSuggestion:
        block = create_suggestion_block(suggestion.suggested_code, self.line_offsets)
        fragment = DisplayFragment(
            description=suggestion.description or None,
            code=suggestion.suggested_code,
            suggestion_block=block,
            block_label=self.block_label,
        )

        copy_lines = []
        if suggestion.description:
            copy_lines.extend([suggestion.description, ""])
        copy_lines.append(block)

        return RenderedSuggestion(
            display_fragment=fragment,
            suggestion_block_text=block,
            copy_text="\n".join(copy_lines),
        )
