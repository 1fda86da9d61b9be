"""
HTML render target backed by lxml.

Wraps a snapshot of a rendered merge-request diff page. Queries walk the lxml
tree; the only mutation is inserting suggestion fragments after line rows.
Queries and node text never include those fragments, so a suggestion's own
description or code cannot be read back as page content.
Loading a new document or detaching the target notifies subscribers, which is
what the readiness wait listens for.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Pattern,
    Tuple,
)

from lxml import etree
from lxml import html as lxml_html

from injector.core.exceptions import RenderTargetGoneError
from injector.core.logging_config import get_logger
from injector.render.target import PATH_ATTRIBUTES, Node, TextQuery, Unsubscribe

logger = get_logger(__name__)

CONTAINER_CLASSES = frozenset({"file-holder", "diff-file", "js-diff-file", "file"})
ROW_CLASSES = frozenset({"line_holder", "diff-grid-row", "diff-line"})

SUGGESTION_AREA_CLASS = "suggestion-area"
SUGGESTION_ROW_CLASS = "suggestion-row"
SUGGESTION_CLASSES = frozenset({SUGGESTION_AREA_CLASS, SUGGESTION_ROW_CLASS})


def _classes(element: Any) -> set:
    return set((element.get("class") or "").split())


def _is_suggestion(element: Any) -> bool:
    return bool(_classes(element) & SUGGESTION_CLASSES)


def _page_children(element: Any) -> List[Any]:
    """Child elements, leaving out comments and inserted suggestion fragments."""
    return [
        child
        for child in element
        if isinstance(child.tag, str) and not _is_suggestion(child)
    ]


def _page_elements(start: Any) -> Iterator[Any]:
    """``start`` and its descendants in document order, outside suggestion fragments."""
    stack = [start]
    while stack:
        element = stack.pop()
        yield element
        stack.extend(reversed(_page_children(element)))


def _page_text(element: Any) -> str:
    parts = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str) and not _is_suggestion(child):
            parts.append(_page_text(child))
        parts.append(child.tail or "")
    return "".join(parts)


def _collect_innermost(
    element: Any, matches: Callable[[Any, str], bool], matched: List[Any]
) -> Tuple[str, bool]:
    """
    Post-order walk appending the innermost matching elements to ``matched``.

    Each element's text is built once from its children's. Matches never nest,
    so post-order appends them in document order.

    Returns:
        Tuple[str, bool]: The element's page text and whether anything in its
        subtree matched
    """
    parts = [element.text or ""]
    subtree_matched = False
    for child in element:
        if isinstance(child.tag, str) and not _is_suggestion(child):
            text, child_matched = _collect_innermost(child, matches, matched)
            parts.append(text)
            subtree_matched = subtree_matched or child_matched
        parts.append(child.tail or "")

    text = "".join(parts)
    if not subtree_matched and matches(element, text):
        matched.append(element)
        subtree_matched = True
    return text, subtree_matched


class HtmlRenderTarget:
    """RenderTarget over an lxml.html document."""

    def __init__(self, document: Optional[str] = None):
        self._root = None
        self._attached = True
        self._listeners: List[Callable[[], None]] = []
        if document:
            self._root = lxml_html.document_fromstring(document)

    @classmethod
    def from_string(cls, document: str) -> "HtmlRenderTarget":
        return cls(document)

    # Lifecycle

    def load(self, document: str) -> None:
        """Replace the rendered document, as a host re-render would."""
        self._root = lxml_html.document_fromstring(document)
        self._attached = True
        self._notify()

    def detach(self) -> None:
        """Tear the view down; every later operation raises RenderTargetGoneError."""
        self._attached = False
        self._root = None
        logger.info("Render target detached")
        self._notify()

    def is_attached(self) -> bool:
        return self._attached

    def is_ready(self) -> bool:
        return self._attached and self._root is not None and bool(self.file_containers())

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _current_root(self):
        if not self._attached:
            raise RenderTargetGoneError()
        return self._root

    def _elements(self, within: Optional[Node]) -> Iterator[Any]:
        root = self._current_root()
        if root is None:
            return iter(())
        return _page_elements(root if within is None else within)

    # Queries

    def find_by_id_pattern(
        self, pattern: Pattern[str], within: Optional[Node] = None
    ) -> List[Node]:
        return [
            element
            for element in self._elements(within)
            if element.get("id") and pattern.search(element.get("id"))
        ]

    def find_by_attribute(
        self, name: str, value: Optional[str] = None, within: Optional[Node] = None
    ) -> List[Node]:
        return [
            element
            for element in self._elements(within)
            if element.get(name) is not None
            and (value is None or element.get(name) == value)
        ]

    def find_by_text(self, query: TextQuery, within: Optional[Node] = None) -> List[Node]:
        if isinstance(query, str):

            def matches(element: Any, text: str) -> bool:
                return query in text or any(
                    query in attr_value for attr_value in element.attrib.values()
                )

        else:

            def matches(element: Any, text: str) -> bool:
                return query.fullmatch(text.strip()) is not None

        root = self._current_root()
        if root is None:
            return []
        matched: List[Any] = []
        _collect_innermost(root if within is None else within, matches, matched)
        return matched

    def get_attribute(self, node: Node, name: str) -> Optional[str]:
        return node.get(name)

    def get_attributes(self, node: Node) -> Dict[str, str]:
        return dict(node.attrib)

    def get_text(self, node: Node) -> str:
        return _page_text(node)

    def file_containers(self) -> List[Node]:
        containers: List[Any] = []
        seen = set()
        for element in self._elements(None):
            if not self._is_container(element):
                continue
            if any(ancestor in seen for ancestor in element.iterancestors()):
                continue
            seen.add(element)
            containers.append(element)
        return containers

    def container_of(self, node: Node) -> Optional[Node]:
        outermost = None
        for element in self._self_and_ancestors(node):
            if self._is_container(element):
                outermost = element
        return outermost

    def row_of(self, node: Node) -> Optional[Node]:
        for element in self._self_and_ancestors(node):
            if element.tag == "tr" or _classes(element) & ROW_CLASSES:
                return element
        return None

    def cells_of(self, row: Node) -> List[Node]:
        return _page_children(row)

    def suggestion_fragments(self) -> List[Node]:
        """Inserted suggestion areas, in document order."""
        root = self._current_root()
        if root is None:
            return []
        return [
            element
            for element in root.iter(etree.Element)
            if SUGGESTION_AREA_CLASS in _classes(element)
        ]

    @staticmethod
    def _self_and_ancestors(node: Node) -> Iterable[Any]:
        yield node
        yield from node.iterancestors()

    @staticmethod
    def _is_container(element: Any) -> bool:
        if any(element.get(name) is not None for name in PATH_ATTRIBUTES):
            return True
        return bool(_classes(element) & CONTAINER_CLASSES)

    # Mutation

    def insert_after(self, anchor: Node, fragment: Any) -> Node:
        root = self._current_root()
        if root is None or anchor.getroottree().getroot() is not root:
            raise RenderTargetGoneError("anchor belongs to a previous render")

        row = self.row_of(anchor)
        if row is None:
            row = anchor
        element = self._build_fragment(fragment)

        if row.tag == "tr":
            wrapper = lxml_html.Element("tr", {"class": SUGGESTION_ROW_CLASS})
            span = len(row.findall("td")) + len(row.findall("th"))
            cell = etree.SubElement(wrapper, "td", {"colspan": str(max(span, 1))})
            cell.append(element)
            element = wrapper

        # Earlier suggestions for the same row stay above later ones
        position = row
        following = position.getnext()
        while following is not None and _is_suggestion(following):
            position = following
            following = position.getnext()
        position.addnext(element)
        logger.debug(f"Inserted suggestion after <{row.tag}> row")

        self._notify()
        return element

    @staticmethod
    def _build_fragment(fragment: Any) -> Any:
        area = lxml_html.Element("div", {"class": SUGGESTION_AREA_CLASS})
        box = etree.SubElement(area, "div", {"class": "code-suggestion"})

        if fragment.description:
            description = etree.SubElement(
                box, "div", {"class": "suggestion-description"}
            )
            description.text = fragment.description

        code = etree.SubElement(box, "pre", {"class": "suggestion-code"})
        code.text = fragment.code

        details = etree.SubElement(box, "details")
        summary = etree.SubElement(details, "summary")
        summary.text = fragment.block_label
        block = etree.SubElement(details, "pre", {"class": "suggestion-block"})
        block.text = fragment.suggestion_block
        return area

    def to_html(self) -> str:
        root = self._current_root()
        if root is None:
            return ""
        return lxml_html.tostring(root, encoding="unicode")
