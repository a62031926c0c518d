# -*- coding: utf-8 -*-
"""
Formatter: render a tree as indented, human-readable markup.

Block elements open a new line indented by two spaces per depth; inline
elements never break a line. Layout whitespace follows the same rule the
parser uses to discard it, so formatted output parses back to the tree it
came from.
"""
import re

from .tree import (
    Element,
    Text,
    Tree,
    end_tag,
    escape_text,
    is_block,
    is_empty_container,
    is_spacing_paragraph,
    is_void,
    significant_text,
    start_tag,
)

INDENT = "  "
SPACING_TOKEN = "<p>&nbsp;</p>"


def _renders(node) -> bool:
    return not is_empty_container(node)


def _has_block_children(element: Element) -> bool:
    return any(is_block(child) and _renders(child) for child in element.children)


def _only_paragraph_blocks(element: Element) -> bool:
    blocks = [child for child in element.children if is_block(child) and _renders(child)]
    return bool(blocks) and all(child.tag == "p" for child in blocks)


def _format_flat(node) -> str:
    """Render a node and its whole subtree on the current line."""
    if isinstance(node, Text):
        return escape_text(significant_text(node))
    if is_spacing_paragraph(node):
        return SPACING_TOKEN
    if is_void(node):
        return start_tag(node)
    inner = "".join(_format_flat(child) for child in node.children if _renders(child))
    return f"{start_tag(node)}{inner}{end_tag(node)}"


def _format_children(container, depth: int, inside_li: bool) -> str:
    """
    Render the children of a multi-line container.

    Blocks go on their own line at the given depth. A run of inline content
    continues the current line, or opens a new one when it follows a block.
    """
    indent = INDENT * depth
    parts = []
    after_block = isinstance(container, Tree)

    for child in container.children:
        if not _renders(child):
            continue
        if is_block(child):
            parts.append(_format_block(child, depth, inside_li))
            after_block = True
            continue

        rendered = _format_flat(child)
        if not rendered:
            continue
        if after_block:
            parts.append(f"\n{indent}")
            after_block = False
        parts.append(rendered)

    return "".join(parts)


def _format_block(element: Element, depth: int, inside_li: bool) -> str:
    indent = INDENT * depth

    if is_spacing_paragraph(element):
        return f"\n{indent}{SPACING_TOKEN}"
    if is_void(element):
        return f"\n{indent}{start_tag(element)}"

    single_line = (
        not _has_block_children(element)
        or element.tag == "pre"
        or (element.tag == "p" and inside_li)
        or (element.tag == "li" and _only_paragraph_blocks(element))
    )
    if single_line:
        return f"\n{indent}{_format_flat(element)}"

    inner = _format_children(element, depth + 1, inside_li or element.tag == "li")
    return f"\n{indent}{start_tag(element)}{inner}\n{indent}{end_tag(element)}"


def tidy(text: str) -> str:
    """Strip trailing spaces and collapse runs of blank lines."""
    lines = [line.rstrip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def format_tree(tree: Tree) -> str:
    """
    Render tree as indented markup.

    Args:
        tree: Document fragment

    Returns:
        Markup text with one block element per line
    """
    return tidy(_format_children(tree, 0, inside_li=False))
