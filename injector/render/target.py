"""
Render target contract.

The rendered diff view is an external structure with no stable schema. The
injection core talks to it only through this narrow interface, so placement
logic can run against any implementation, including in-memory fakes.
"""

from typing import Any, Callable, Dict, List, Optional, Pattern, Protocol, Union

# Opaque handle to a node of the rendered view
Node = Any

TextQuery = Union[str, Pattern[str]]

Unsubscribe = Callable[[], None]

# Attributes a view may use to label a file section with its full path
PATH_ATTRIBUTES = ("data-path", "data-file-path", "data-tagsearch-path")


class RenderTarget(Protocol):
    """Read queries plus a single write operation over a rendered diff view.

    Every query scoped with ``within`` also considers ``within`` itself.
    Queries and text never include suggestions inserted by ``insert_after``.
    """

    def find_by_id_pattern(
        self, pattern: Pattern[str], within: Optional[Node] = None
    ) -> List[Node]:
        """Nodes whose id matches ``pattern`` (``re.search``), in document order."""
        ...

    def find_by_attribute(
        self, name: str, value: Optional[str] = None, within: Optional[Node] = None
    ) -> List[Node]:
        """Nodes carrying attribute ``name`` (with exactly ``value`` when given)."""
        ...

    def find_by_text(self, query: TextQuery, within: Optional[Node] = None) -> List[Node]:
        """
        Innermost nodes whose text matches.

        A string matches when it is contained in the node's text or in one of
        its attribute values; a compiled pattern must match the node's whole
        stripped text.
        """
        ...

    def insert_after(self, anchor: Node, fragment: Any) -> Node:
        """Insert a rendered suggestion right after the row holding ``anchor``."""
        ...

    def get_attribute(self, node: Node, name: str) -> Optional[str]:
        ...

    def get_attributes(self, node: Node) -> Dict[str, str]:
        ...

    def get_text(self, node: Node) -> str:
        ...

    def file_containers(self) -> List[Node]:
        """Outermost nodes that each hold one file's section of the diff."""
        ...

    def container_of(self, node: Node) -> Optional[Node]:
        """The outermost file container holding ``node``, if any."""
        ...

    def row_of(self, node: Node) -> Optional[Node]:
        """The line row or block containing ``node``, if the view has rows."""
        ...

    def cells_of(self, row: Node) -> List[Node]:
        """The row's cells, left to right."""
        ...

    def is_ready(self) -> bool:
        ...

    def is_attached(self) -> bool:
        ...

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        """Call ``callback`` on structural changes until unsubscribed."""
        ...
