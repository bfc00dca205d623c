"""Blank line normalization around section bodies."""

from md_outline.nodes import ContentNode, Section


def is_blank(node: ContentNode) -> bool:
    return not node.text.strip() and not node.children


def strip_surrounding_blanks(nodes: list[ContentNode]) -> list[ContentNode]:
    """Drop blank nodes from both ends of a node sequence."""
    start = 0
    end = len(nodes)
    while start < end and is_blank(nodes[start]):
        start += 1
    while end > start and is_blank(nodes[end - 1]):
        end -= 1
    return nodes[start:end]


def add_surrounding_blanks(nodes: list[ContentNode]) -> list[ContentNode]:
    """Surround nodes with one blank node on each side.

    An empty sequence becomes a single blank node, so a heading with no
    body is still followed by exactly one blank line.
    """
    if not nodes:
        return [ContentNode.from_text("")]
    return [ContentNode.from_text(""), *nodes, ContentNode.from_text("")]


def normalize_newlines(nodes: list[ContentNode]) -> list[ContentNode]:
    """Leave exactly one blank node at each end of a node sequence.

    Idempotent: normalizing an already normalized sequence changes nothing.
    """
    return add_surrounding_blanks(strip_surrounding_blanks(nodes))


def normalize_newlines_recursively(root: Section) -> None:
    """Normalize the body of every section below root (root's own body is kept)."""
    for child in root.children:
        child.content.children = normalize_newlines(child.content.children)
        normalize_newlines_recursively(child)


def add_newline_to_section(section: Section) -> None:
    """Make sure the text right before a new trailing heading ends with a blank line.

    Looks at the body of the last sub-section, or of section itself when it
    has none, and appends a blank node if its last node is not blank.
    """
    last_section = section.children[-1] if section.children else section
    nodes = last_section.content.children
    if nodes and nodes[-1].text.strip():
        last_section.content.append_child(ContentNode.from_text(""))
