# -*- coding: utf-8 -*-
"""
Structural cleaner: fix nesting and line-break residue left by pasting.

Runs after the sanitizer. List items get special treatment: paragraphs
inside them are unwrapped, line breaks are dropped and strong/em nesting
is made canonical (em outside, strong inside).
"""
import logging

from .tree import (
    HEADING_TAGS,
    Element,
    Tree,
    detach,
    find_all,
    has_ancestor,
    is_block,
    is_element,
    is_empty_container,
    is_heading,
    is_whitespace_text,
    iter_text,
    next_sibling,
    unwrap,
)

logger = logging.getLogger(__name__)


def _unwrap_list_paragraph(paragraph: Element) -> list:
    """Unwrap a p inside a list item, dropping its line breaks."""
    for child in list(paragraph.children):
        if is_element(child, "br") or is_whitespace_text(child):
            detach(child)
    return unwrap(paragraph)


def _clean_node(node, parent, inside_li: bool) -> None:
    if not isinstance(node, Element):
        return

    if node.tag == "br" and (inside_li or is_block(parent)):
        detach(node)
        return

    if node.tag == "p" and inside_li:
        for moved in _unwrap_list_paragraph(node):
            _clean_node(moved, parent, inside_li)
        return

    _clean_element(node, inside_li)


def _clean_element(element: Element, inside_li: bool) -> None:
    inside_li = inside_li or element.tag == "li"

    for child in list(element.children):
        if child.parent is element:
            _clean_node(child, element, inside_li)

    # Nesting fixes see the final child list of this subtree; headings keep
    # the strong wrapper they get from the heading transforms
    if inside_li and not (is_heading(element) or has_ancestor(element, *HEADING_TAGS)):
        normalize_strong_em(element)
        merge_adjacent_em(element)


def normalize_strong_em(element: Element) -> None:
    """
    Rewrite strong > em into the canonical em > strong.

    Content following the inner em inside the original strong ends up
    after the new strong, inside the new em. Leading whitespace before the
    em is dropped; any other leading content leaves the strong untouched.
    """
    for child in list(element.children):
        if not is_element(child, "strong"):
            continue

        meaningful = [node for node in child.children if not is_whitespace_text(node)]
        if not meaningful or not is_element(meaningful[0], "em"):
            continue

        inner_em = meaningful[0]
        trailing = child.children[child.index(inner_em) + 1:]

        new_strong = Element("strong")
        new_strong.extend(inner_em.children)
        new_em = Element("em", children=[new_strong])
        new_em.extend(trailing)

        position = element.index(child)
        detach(child)
        element.insert(position, new_em)

        normalize_strong_em(new_strong)


def merge_adjacent_em(element: Element) -> None:
    """Merge directly adjacent em siblings until none remain."""
    merged = True
    while merged:
        merged = False
        for child in list(element.children):
            following = next_sibling(child) if child.parent is element else None
            if is_element(child, "em") and is_element(following, "em"):
                child.extend(following.children)
                detach(following)
                merged = True
                break


def remove_br_after_blocks(container) -> None:
    """Remove runs of br siblings that directly follow a block element."""
    for child in list(container.children):
        if not isinstance(child, Element) or child.parent is not container:
            continue
        if is_block(child):
            following = next_sibling(child)
            while is_element(following, "br"):
                detach(following)
                following = next_sibling(child)
        remove_br_after_blocks(child)


def trim_anchor_whitespace(tree: Tree) -> None:
    """Strip leading and trailing whitespace inside links; runs after pruning."""
    for anchor in find_all(tree, "a"):
        texts = list(iter_text(anchor))
        if not texts:
            continue

        first, last = texts[0], texts[-1]
        first.content = first.content.lstrip()
        last.content = last.content.rstrip()
        for text in (first, last):
            if not text.content:
                detach(text)


def prune_empty_containers(container) -> None:
    """Remove prunable elements left without text, children first."""
    for child in list(container.children):
        if isinstance(child, Element):
            prune_empty_containers(child)
            if is_empty_container(child):
                detach(child)


def clean(tree: Tree) -> Tree:
    """
    Apply structural clean-up to a sanitized tree.

    Args:
        tree: Sanitized document fragment (mutated in place)

    Returns:
        The same tree
    """
    for node in list(tree.children):
        if node.parent is tree:
            _clean_node(node, tree, inside_li=False)

    remove_br_after_blocks(tree)
    prune_empty_containers(tree)
    trim_anchor_whitespace(tree)

    logger.debug("Structural clean-up completed")
    return tree
