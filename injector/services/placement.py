"""
Placement of suggestions inside the rendered diff view.

The view's structure is undocumented and changes between host versions, so
the anchor for a (file, line) coordinate is searched with an ordered list of
matchers, most structurally certain first. Each matcher is an independent
function returning a PlacementResult or None; the resolver stops at the first
hit. A matcher that can only see a basename shared by several files raises
AmbiguousFilenameError instead of guessing.
"""

import hashlib
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from injector.core.exceptions import AmbiguousFilenameError
from injector.core.logging_config import get_logger
from injector.models.suggestion import ConfidenceTier, PlacementResult
from injector.render.target import PATH_ATTRIBUTES, Node, RenderTarget

logger = get_logger(__name__)

# <content hash>_<old line>_<new line>, e.g. GitLab's line codes
LINE_ID_RE = re.compile(r"^(?P<hash>[0-9a-f]{8,64})_(?P<old>\d*)_(?P<new>\d+)$")

# Attributes that only ever hold the new-file line number
NEW_LINE_ATTRIBUTES = ("data-new-line-number", "data-new-line")
# Attributes used for both sides; the rightmost carrier in a row is the new side
SHARED_LINE_ATTRIBUTES = ("data-line-number", "data-linenumber", "data-qa-line-number")

# A line number possibly padded or decorated with symbols, never with words
LINE_NUMBER_TEXT_RE = re.compile(r"[^\w]*(\d+)[^\w]*")

Matcher = Callable[[RenderTarget, str, int], Optional[PlacementResult]]


def path_hash(file_path: str) -> str:
    """SHA-1 of the path, the hash line ids carry for a file section."""
    return hashlib.sha1(file_path.encode("utf-8")).hexdigest()


def parse_line_number(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = LINE_NUMBER_TEXT_RE.fullmatch(value.strip())
    return int(match.group(1)) if match else None


def exact_path_containers(target: RenderTarget, file_path: str) -> List[Node]:
    """File sections whose path attribute equals ``file_path`` exactly."""
    scopes: List[Node] = []
    for attribute in PATH_ATTRIBUTES:
        for node in target.find_by_attribute(attribute, file_path):
            scope = target.container_of(node)
            if scope is None:
                scope = node
            if not any(scope is seen for seen in scopes):
                scopes.append(scope)
    return scopes


def _last_cell_per_row(
    target: RenderTarget, cells: Sequence[Node]
) -> List[Tuple[Node, Node]]:
    order: List[Node] = []
    last: Dict[int, Tuple[Node, Node]] = {}
    for cell in cells:
        row = target.row_of(cell)
        key = row if row is not None else cell
        if id(key) not in last:
            order.append(key)
        last[id(key)] = (key, cell)
    return [last[id(key)] for key in order]


def find_line_by_attribute(
    target: RenderTarget, scope: Node, line_number: int
) -> Optional[Tuple[Node, str]]:
    """Find the node labelled with ``line_number`` through a line attribute."""
    for attribute in NEW_LINE_ATTRIBUTES:
        for node in target.find_by_attribute(attribute, within=scope):
            if parse_line_number(target.get_attribute(node, attribute)) == line_number:
                return node, attribute

    for attribute in SHARED_LINE_ATTRIBUTES:
        carriers = target.find_by_attribute(attribute, within=scope)
        for _row, cell in _last_cell_per_row(target, carriers):
            if parse_line_number(target.get_attribute(cell, attribute)) == line_number:
                return cell, attribute
    return None


def _is_gutter_text(text: str) -> bool:
    return not text or parse_line_number(text) is not None


def new_line_columns(target: RenderTarget, rows: Sequence[List[Node]]) -> Dict[int, int]:
    """
    Index of the new-side line-number column for each row width.

    A gutter column holds only blanks and line numbers in every row of that
    width and a number in at least one. The last column is the code and never
    counts, so a source line that reads like a number cannot pass for one.
    The new side is the rightmost gutter column.
    """
    texts_by_width: Dict[int, List[List[str]]] = {}
    for cells in rows:
        texts_by_width.setdefault(len(cells), []).append(
            [target.get_text(cell).strip() for cell in cells]
        )

    columns: Dict[int, int] = {}
    for width, texts in texts_by_width.items():
        gutter = [
            index
            for index in range(width - 1)
            if all(_is_gutter_text(row[index]) for row in texts)
            and any(row[index] for row in texts)
        ]
        if gutter:
            columns[width] = gutter[-1]
    return columns


def find_line_by_text(
    target: RenderTarget, scope: Node, line_number: int
) -> Optional[Node]:
    """Find the new-side line-number cell reading ``line_number`` in rows of plain text."""
    rows: Dict[int, Node] = {}
    for cell in target.find_by_text(LINE_NUMBER_TEXT_RE, within=scope):
        row = target.row_of(cell)
        if row is not None:
            rows.setdefault(id(row), row)

    cells_by_row = [target.cells_of(row) for row in rows.values()]
    columns = new_line_columns(target, cells_by_row)
    for cells in cells_by_row:
        column = columns.get(len(cells))
        if column is None:
            continue
        if parse_line_number(target.get_text(cells[column])) == line_number:
            return cells[column]
    return None


def _mentions(text: str, needle: str, exact_token: bool = False) -> bool:
    before = r"(?<![\w.\-/])" if exact_token else r"(?<![\w.\-])"
    return re.search(before + re.escape(needle) + r"(?![\w.\-])", text) is not None


def container_mentions(
    target: RenderTarget, container: Node, needle: str, exact_token: bool = False
) -> bool:
    """Whether any visible text or attribute inside ``container`` names ``needle``."""
    for node in target.find_by_text(needle, within=container):
        haystacks = [target.get_text(node)]
        haystacks.extend(target.get_attributes(node).values())
        if any(_mentions(text, needle, exact_token) for text in haystacks):
            return True
    return False


# Matchers, in cascade order


def match_line_id(
    target: RenderTarget, file_path: str, line_number: int
) -> Optional[PlacementResult]:
    """Per-line ids encoding (old line, new line) for the file's content hash."""
    scopes = exact_path_containers(target, file_path)
    if scopes:
        searches = [(scope, None) for scope in scopes]
    else:
        searches = [(None, path_hash(file_path))]

    for scope, expected_hash in searches:
        for node in target.find_by_id_pattern(LINE_ID_RE, within=scope):
            match = LINE_ID_RE.search(target.get_attribute(node, "id") or "")
            if not match:
                continue
            if expected_hash is not None and match.group("hash") != expected_hash:
                continue
            if int(match.group("new")) == line_number:
                return PlacementResult(
                    anchor=node,
                    confidence_tier=ConfidenceTier.EXACT_ID,
                    matched_by=f"id:{match.group(0)}",
                )
    return None


def match_line_attribute(
    target: RenderTarget, file_path: str, line_number: int
) -> Optional[PlacementResult]:
    """Line-number attributes inside a container isolated by its exact path."""
    for scope in exact_path_containers(target, file_path):
        found = find_line_by_attribute(target, scope, line_number)
        if found:
            node, attribute = found
            return PlacementResult(
                anchor=node,
                confidence_tier=ConfidenceTier.EXACT_ATTRIBUTE,
                matched_by=f"attribute:{attribute}",
            )
    return None


def match_unique_text(
    target: RenderTarget, file_path: str, line_number: int
) -> Optional[PlacementResult]:
    """
    Text fallback for views without structural attributes.

    The container must mention the full path. A basename is only accepted
    after counting every container that mentions it and finding exactly one.

    Raises:
        AmbiguousFilenameError: If several containers match and nothing
            distinguishes them
    """
    containers = target.file_containers()

    # "src/a.py" as its own token first, then also as the tail of a longer path or URL
    by_path = [
        c for c in containers if container_mentions(target, c, file_path, exact_token=True)
    ]
    if not by_path:
        by_path = [c for c in containers if container_mentions(target, c, file_path)]
    if len(by_path) > 1:
        raise AmbiguousFilenameError(file_path, len(by_path), matched_on="path")

    if by_path:
        container, matched_on = by_path[0], "path"
    else:
        basename = file_path.rsplit("/", 1)[-1]
        by_name = [c for c in containers if container_mentions(target, c, basename)]
        if len(by_name) > 1:
            raise AmbiguousFilenameError(file_path, len(by_name))
        if not by_name:
            return None
        container, matched_on = by_name[0], "basename"

    found = find_line_by_attribute(target, container, line_number)
    if found:
        node, attribute = found
        return PlacementResult(
            anchor=node,
            confidence_tier=ConfidenceTier.UNIQUE_TEXT_MATCH,
            matched_by=f"text:{matched_on}+attribute:{attribute}",
        )

    cell = find_line_by_text(target, container, line_number)
    if cell is not None:
        return PlacementResult(
            anchor=cell,
            confidence_tier=ConfidenceTier.UNIQUE_TEXT_MATCH,
            matched_by=f"text:{matched_on}+line-text",
        )
    return None


DEFAULT_MATCHERS: Tuple[Matcher, ...] = (
    match_line_id,
    match_line_attribute,
    match_unique_text,
)


class PlacementResolver:
    """Run the matcher cascade for a coordinate. Never mutates the target."""

    def __init__(self, matchers: Optional[Sequence[Matcher]] = None):
        self.matchers: Tuple[Matcher, ...] = (
            tuple(matchers) if matchers is not None else DEFAULT_MATCHERS
        )

    def resolve(
        self, target: RenderTarget, file_path: str, line_number: int
    ) -> Optional[PlacementResult]:
        """
        Resolve the anchor for a validated coordinate.

        Returns:
            Optional[PlacementResult]: First matcher hit, or None when every
            tier failed

        Raises:
            AmbiguousFilenameError: Propagated from a matcher; the cascade stops
            RenderTargetGoneError: If the target was torn down during the search
        """
        for matcher in self.matchers:
            result = matcher(target, file_path, line_number)
            if result is not None:
                logger.debug(
                    f"Placed {file_path}:{line_number} via {result.confidence_tier.value} "
                    f"({result.matched_by})"
                )
                return result

        logger.debug(f"No placement tier matched {file_path}:{line_number}")
        return None
