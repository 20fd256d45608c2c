"""Flatten a heading tree into graph records for the force layout."""

from dataclasses import dataclass

from heading_outline.parser import HeadingNode


@dataclass(frozen=True)
class GraphNode:
    """Render record for one heading.

    Attributes:
        id: Heading id from the parse that produced this graph
        text: Heading text
        level: Heading level (0 for the root)
        line: Buffer line of the heading
        index: Position in the node list (and in the simulation arrays)
    """

    id: str
    text: str
    level: int
    line: int
    index: int

    @property
    def is_root(self) -> bool:
        return self.level == 0


@dataclass(frozen=True)
class GraphLink:
    """Parent to child edge, by node index."""

    source: int
    target: int


def flatten(tree: HeadingNode) -> tuple[list[GraphNode], list[GraphLink]]:
    """Flatten a heading tree depth-first.

    Emits one node per heading (root first, at index 0) and one link per
    parent-child edge, so the links always form a spanning tree of the
    nodes.

    Args:
        tree: Root of the heading tree

    Returns:
        Tuple of (nodes, links)
    """
    nodes: list[GraphNode] = []
    links: list[GraphLink] = []

    def traverse(node: HeadingNode) -> int:
        index = len(nodes)
        nodes.append(
            GraphNode(id=node.id, text=node.text, level=node.level, line=node.line, index=index)
        )
        for child in node.children:
            child_index = traverse(child)
            links.append(GraphLink(source=index, target=child_index))
        return index

    traverse(tree)
    return nodes, links
