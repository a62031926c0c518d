# -*- coding: utf-8 -*-
"""
Document tree model shared by every normalization stage.

A Tree is a document fragment holding an ordered list of sibling nodes.
Nodes are either Element or Text; every node keeps a back-reference to its
parent so the mutation helpers can splice without searching the document.

Traversal helpers snapshot child lists before iterating, so stages may
insert or remove siblings while walking.
"""
import logging
from dataclasses import dataclass, field
from html import escape
from typing import Iterator, Union

from .errors import ParserUnavailableError

try:
    import bs4
except ImportError:  # pragma: no cover - exercised only without the dependency
    bs4 = None

logger = logging.getLogger(__name__)

NBSP = "\u00a0"

# Whitespace introduced by markup layout (never includes NBSP)
LAYOUT_WHITESPACE = " \t\n\r\f"

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

BLOCK_TAGS = HEADING_TAGS | frozenset({
    "p", "div", "ul", "ol", "li", "dl", "dt", "dd",
    "blockquote", "pre", "hr",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
    "section", "article", "aside", "header", "footer", "nav", "main",
    "figure", "figcaption", "address",
})

INLINE_TAGS = frozenset({
    "a", "em", "i", "strong", "b", "span", "code", "sup", "sub",
    "small", "mark", "del", "ins", "u", "s", "abbr", "cite", "q",
    "samp", "var", "kbd", "font", "img", "br",
})

VOID_TAGS = frozenset({
    "br", "hr", "img", "input", "meta", "link", "area", "base",
    "col", "embed", "source", "track", "wbr",
})

# Containers dropped (or skipped on output) when they hold no text
PRUNABLE_TAGS = HEADING_TAGS | frozenset({
    "p", "em", "i", "strong", "b", "span", "sup", "sub", "code", "a",
})


class _ChildList:
    """Child-list management shared by Tree and Element."""

    children: list

    def append(self, node: "Node") -> "Node":
        detach(node)
        node.parent = self
        self.children.append(node)
        return node

    def insert(self, index: int, node: "Node") -> "Node":
        detach(node)
        node.parent = self
        self.children.insert(index, node)
        return node

    def extend(self, nodes) -> None:
        for node in list(nodes):
            self.append(node)

    def index(self, node: "Node") -> int:
        for position, child in enumerate(self.children):
            if child is node:
                return position
        raise ValueError("node is not a child of this container")

    def set_children(self, nodes) -> None:
        """Replace the whole child list."""
        nodes = list(nodes)
        for child in self.children:
            child.parent = None
        self.children = []
        self.extend(nodes)

    @property
    def element_children(self) -> list["Element"]:
        return [child for child in self.children if isinstance(child, Element)]


@dataclass(eq=False)
class Text:
    """Character data."""

    content: str
    parent: "Element | Tree | None" = field(default=None, repr=False)


@dataclass(eq=False)
class Element(_ChildList):
    """Markup element with ordered attributes and children."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    parent: "Element | Tree | None" = field(default=None, repr=False)

    def __post_init__(self):
        nodes, self.children = self.children, []
        self.extend(nodes)


@dataclass(eq=False)
class Tree(_ChildList):
    """Document fragment: top-level siblings without an implicit root."""

    children: list["Node"] = field(default_factory=list)

    def __post_init__(self):
        nodes, self.children = self.children, []
        self.extend(nodes)

    def clone(self) -> "Tree":
        return Tree([clone(child) for child in self.children])


Node = Union[Element, Text]
Container = Union[Element, Tree]


# =============================================================================
# Classification
# =============================================================================


def is_element(node, *tags: str) -> bool:
    return isinstance(node, Element) and (not tags or node.tag in tags)


def is_block(node) -> bool:
    return isinstance(node, Element) and node.tag in BLOCK_TAGS


def is_inline(node) -> bool:
    return isinstance(node, Element) and node.tag in INLINE_TAGS


def is_void(node) -> bool:
    return isinstance(node, Element) and node.tag in VOID_TAGS


def is_heading(node) -> bool:
    return isinstance(node, Element) and node.tag in HEADING_TAGS


def is_whitespace_text(node) -> bool:
    """True for text nodes holding nothing but whitespace (NBSP included)."""
    return isinstance(node, Text) and not node.content.strip()


def is_spacing_paragraph(node) -> bool:
    """A paragraph whose sole content is one non-breaking space."""
    if not is_element(node, "p") or len(node.children) != 1:
        return False
    only = node.children[0]
    return isinstance(only, Text) and only.content == NBSP


def make_spacing_paragraph() -> Element:
    return Element("p", children=[Text(NBSP)])


def is_empty_container(node) -> bool:
    """
    True for prunable elements that render nothing.

    Spacing paragraphs and elements holding a void descendant (an image,
    a line break) are never empty.
    """
    if not is_element(node) or node.tag not in PRUNABLE_TAGS:
        return False
    if is_spacing_paragraph(node):
        return False
    if any(element.tag in VOID_TAGS for element in walk(node)):
        return False
    return not text_content(node).strip()


# =============================================================================
# Traversal & navigation
# =============================================================================


def walk(root: Container) -> Iterator[Element]:
    """Depth-first pre-order over elements, safe under sibling mutation."""
    for child in list(root.children):
        if isinstance(child, Element):
            yield child
            yield from walk(child)


def find_all(root: Container, *tags: str) -> list[Element]:
    """Static, document-ordered list of descendant elements."""
    return [element for element in walk(root) if not tags or element.tag in tags]


def iter_text(node) -> Iterator[Text]:
    """Text descendants in document order."""
    if isinstance(node, Text):
        yield node
        return
    for child in list(node.children):
        yield from iter_text(child)


def text_content(node) -> str:
    if isinstance(node, Text):
        return node.content
    return "".join(text_content(child) for child in node.children)


def _siblings_after(node: Node) -> list[Node]:
    parent = node.parent
    if parent is None:
        return []
    return parent.children[parent.index(node) + 1:]


def _siblings_before(node: Node) -> list[Node]:
    parent = node.parent
    if parent is None:
        return []
    return list(reversed(parent.children[:parent.index(node)]))


def next_sibling(node: Node) -> Node | None:
    following = _siblings_after(node)
    return following[0] if following else None


def previous_sibling(node: Node) -> Node | None:
    preceding = _siblings_before(node)
    return preceding[0] if preceding else None


def next_element_sibling(node: Node) -> Element | None:
    for sibling in _siblings_after(node):
        if isinstance(sibling, Element):
            return sibling
    return None


def previous_element_sibling(node: Node) -> Element | None:
    for sibling in _siblings_before(node):
        if isinstance(sibling, Element):
            return sibling
    return None


def previous_significant_sibling(node: Node) -> Node | None:
    """Nearest preceding sibling that is not whitespace-only text."""
    for sibling in _siblings_before(node):
        if not is_whitespace_text(sibling):
            return sibling
    return None


def ancestors(node: Node) -> Iterator[Element]:
    parent = node.parent
    while isinstance(parent, Element):
        yield parent
        parent = parent.parent


def has_ancestor(node: Node, *tags: str) -> bool:
    return any(ancestor.tag in tags for ancestor in ancestors(node))


# =============================================================================
# Mutation
# =============================================================================


def detach(node: Node) -> Node:
    """Remove node from its parent (no-op when already detached)."""
    parent = node.parent
    if parent is not None:
        del parent.children[parent.index(node)]
        node.parent = None
    return node


def insert_before(reference: Node, node: Node) -> Node:
    detach(node)
    parent = reference.parent
    return parent.insert(parent.index(reference), node)


def insert_after(reference: Node, node: Node) -> Node:
    detach(node)
    parent = reference.parent
    return parent.insert(parent.index(reference) + 1, node)


def replace_with(node: Node, *replacements: Node) -> None:
    parent = node.parent
    position = parent.index(node)
    detach(node)
    for offset, replacement in enumerate(replacements):
        parent.insert(position + offset, replacement)


def unwrap(element: Element) -> list[Node]:
    """Splice the children of element into its position; returns them."""
    moved = list(element.children)
    replace_with(element, *moved)
    return moved


def wrap_children(element: Element, tag: str) -> Element:
    """Move every child of element into a new single child wrapper."""
    wrapper = Element(tag)
    wrapper.extend(element.children)
    element.append(wrapper)
    return wrapper


def clone(node: Node) -> Node:
    if isinstance(node, Text):
        return Text(node.content)
    return Element(
        node.tag,
        dict(node.attributes),
        [clone(child) for child in node.children],
    )


def merge_text_nodes(root: Container) -> None:
    """Join adjacent text siblings and drop empty ones, recursively."""
    merged = []
    for child in root.children:
        if isinstance(child, Text):
            if not child.content:
                child.parent = None
                continue
            if merged and isinstance(merged[-1], Text):
                merged[-1].content += child.content
                child.parent = None
                continue
        else:
            merge_text_nodes(child)
        merged.append(child)
    root.children = merged


# =============================================================================
# Layout whitespace
# =============================================================================


def _is_layout_parent(parent) -> bool:
    if isinstance(parent, Tree):
        return True
    return is_block(parent) and parent.tag != "pre"


def significant_text(node: Text) -> str:
    """
    Return the content of a text node without its layout whitespace.

    Inside the fragment root and block parents (except pre), whitespace
    facing a block sibling is insignificant, and so is whitespace at the
    parent boundary when the parent holds block children. The parser drops
    it and the formatter never emits it.
    """
    content = node.content
    parent = node.parent
    if parent is None or not _is_layout_parent(parent):
        return content
    siblings = parent.children
    position = parent.index(node)
    previous = siblings[position - 1] if position > 0 else None
    following = siblings[position + 1] if position + 1 < len(siblings) else None
    has_block = any(is_block(sibling) for sibling in siblings)
    if is_block(previous) or (previous is None and has_block):
        content = content.lstrip(LAYOUT_WHITESPACE)
    if is_block(following) or (following is None and has_block):
        content = content.rstrip(LAYOUT_WHITESPACE)
    return content


def normalize_whitespace(root: Container) -> None:
    for child in list(root.children):
        if isinstance(child, Text):
            content = significant_text(child)
            if content:
                child.content = content
            else:
                detach(child)
        else:
            normalize_whitespace(child)


# =============================================================================
# Parse / serialize
# =============================================================================


def _attribute_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def _convert(source) -> Node | None:
    if isinstance(source, bs4.element.Tag):
        element = Element(
            source.name.lower(),
            {name.lower(): _attribute_value(value) for name, value in source.attrs.items()},
        )
        for child in source.children:
            node = _convert(child)
            if node is not None:
                element.append(node)
        return element
    skipped = (
        bs4.element.Comment,
        bs4.element.Declaration,
        bs4.element.Doctype,
        bs4.element.CData,
        bs4.element.ProcessingInstruction,
    )
    if isinstance(source, skipped):
        return None
    if isinstance(source, bs4.element.NavigableString):
        return Text(str(source))
    return None


def parser_available() -> bool:
    return bs4 is not None


def parse(markup: str) -> Tree:
    """
    Parse markup into a Tree.

    Malformed input yields a best-effort tree. When the document carries a
    body element only its content is kept; comments and declarations are
    discarded.
    """
    if bs4 is None:
        raise ParserUnavailableError("beautifulsoup4 is not installed")

    soup = bs4.BeautifulSoup(markup or "", "html.parser", multi_valued_attributes=None)
    source = soup.body or soup

    tree = Tree()
    for child in source.children:
        node = _convert(child)
        if node is not None:
            tree.append(node)

    normalize_whitespace(tree)
    logger.debug(f"Parsed {len(tree.children)} top-level nodes")
    return tree


def escape_text(content: str) -> str:
    return (
        content.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace(NBSP, "&nbsp;")
    )


def start_tag(element: Element) -> str:
    attributes = "".join(
        f' {name}="{escape(value, quote=True)}"'
        for name, value in element.attributes.items()
    )
    return f"<{element.tag}{attributes}>"


def end_tag(element: Element) -> str:
    return f"</{element.tag}>"


def serialize(node) -> str:
    """Raw (non-indented) markup for a tree or node."""
    if isinstance(node, Text):
        return escape_text(node.content)
    inner = "".join(serialize(child) for child in node.children)
    if isinstance(node, Tree):
        return inner
    if node.tag in VOID_TAGS:
        return start_tag(node)
    return f"{start_tag(node)}{inner}{end_tag(node)}"
