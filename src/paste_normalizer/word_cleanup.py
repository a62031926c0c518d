# -*- coding: utf-8 -*-
"""
Word-processor cleanup applied before sanitization.

Pasted Office and Google Docs markup carries namespaced attributes,
mso-* styles, font tags, image placeholders and deeply nested spans. This
stage strips that residue while keeping the style properties the
sanitizer turns into emphasis.
"""
import logging

from .sanitizer import parse_style
from .tree import (
    LAYOUT_WHITESPACE,
    Element,
    Text,
    Tree,
    detach,
    find_all,
    is_block,
    is_element,
    is_whitespace_text,
    iter_text,
    next_sibling,
    previous_sibling,
    text_content,
    unwrap,
)

logger = logging.getLogger(__name__)

IMAGE_TAG_MARKERS = ("imagedata", "shape", "bindata", "picture")

OFFICE_ATTRIBUTE_PREFIXES = ("o:", "v:", "w:", "xmlns", "xml:")

REDUNDANT_STYLE_DEFAULTS = {
    "font-variant-numeric": "normal",
    "font-variant-east-asian": "normal",
    "font-variant-alternates": "normal",
    "font-variant-position": "normal",
    "font-variant-emoji": "normal",
    "font-variant": "normal",
    "vertical-align": "baseline",
    "background-color": "transparent",
    "font-weight": ("400", "normal"),
    "font-style": "normal",
    "text-decoration": "none",
    "text-decoration-line": "none",
}

FONT_SIZES = {1: "0.6em", 2: "0.8em", 3: "1em", 4: "1.2em", 5: "1.5em", 6: "2em"}

# Characters after which a following link needs a separating space
_WORD_END_PUNCTUATION = ".,;:!?"


def _is_image_element(element: Element) -> bool:
    if element.tag in ("img", "pict"):
        return True
    if any(marker in element.tag for marker in IMAGE_TAG_MARKERS):
        return True
    if "image" in element.attributes.get("class", "").lower():
        return True
    return "background-image" in element.attributes.get("style", "").lower()


def remove_images(tree: Tree) -> None:
    """Drop images and image placeholders, then anchors left empty."""
    for element in find_all(tree):
        if _is_image_element(element):
            detach(element)

    for anchor in find_all(tree, "a"):
        if (
                not text_content(anchor).strip()
                and not anchor.element_children
                and not anchor.attributes.get("href")
        ):
            detach(anchor)


def clean_style(style: str) -> str:
    """Remove mso-* properties and redundant default values."""
    kept = []
    for name, value in parse_style(style).items():
        if name.startswith("mso") or "mso-" in name:
            continue
        default = REDUNDANT_STYLE_DEFAULTS.get(name)
        defaults = default if isinstance(default, tuple) else (default,)
        if value.lower() in defaults:
            continue
        kept.append(f"{name}: {value}")
    return "; ".join(kept)


def _is_office_attribute(name: str, value: str) -> bool:
    if name.startswith(OFFICE_ATTRIBUTE_PREFIXES):
        return True
    if name == "class" and ("Mso" in value or "mso-" in value):
        return True
    return name == "lang" and value == "EN-US"


def clean_attributes(tree: Tree) -> None:
    for element in find_all(tree):
        cleaned = {}
        for name, value in element.attributes.items():
            if _is_office_attribute(name, value):
                continue
            if name == "style":
                value = clean_style(value)
                if not value:
                    continue
            cleaned[name] = value
        element.attributes = cleaned


def convert_font_tags(tree: Tree) -> None:
    for font in find_all(tree, "font"):
        styles = []
        if font.attributes.get("color"):
            styles.append(f"color: {font.attributes['color']}")
        if font.attributes.get("face"):
            styles.append(f"font-family: {font.attributes['face']}")
        size = font.attributes.get("size", "").strip()
        if size.isdigit():
            styles.append(f"font-size: {FONT_SIZES.get(max(1, int(size)), '1em')}")
        if font.attributes.get("style"):
            styles.append(font.attributes["style"])

        font.tag = "span"
        font.attributes = {"style": "; ".join(styles)} if styles else {}


def remove_empty_wrappers(tree: Tree) -> None:
    for element in reversed(find_all(tree, "span", "div")):
        if not element.element_children and not text_content(element).strip(LAYOUT_WHITESPACE):
            detach(element)


def _merge_styles(outer: str, inner: str) -> str:
    merged = parse_style(outer)
    merged.update(parse_style(inner))
    return "; ".join(f"{name}: {value}" for name, value in merged.items())


def flatten_nested_spans(tree: Tree) -> None:
    """Fold a span into its parent span when it is the parent's only content."""
    for span in reversed(find_all(tree, "span")):
        parent = span.parent
        if not is_element(parent, "span"):
            continue
        significant = [child for child in parent.children if not is_whitespace_text(child)]
        if significant != [span]:
            continue
        style = _merge_styles(parent.attributes.get("style", ""), span.attributes.get("style", ""))
        if style:
            parent.attributes["style"] = style
        unwrap(span)


def merge_adjacent_spans(root) -> None:
    """Merge sibling spans carrying identical attributes."""
    for child in list(root.children):
        if not isinstance(child, Element) or child.parent is not root:
            continue
        following = next_sibling(child)
        while (
                is_element(child, "span")
                and is_element(following, "span")
                and following.attributes == child.attributes
        ):
            child.extend(following.children)
            detach(following)
            following = next_sibling(child)
        merge_adjacent_spans(child)


def unwrap_plain_spans(tree: Tree) -> None:
    for span in find_all(tree, "span"):
        if not span.attributes:
            unwrap(span)


def _needs_space(text: str) -> bool:
    if not text or text[-1].isspace():
        return False
    return text[-1].isalnum() or text[-1] in _WORD_END_PUNCTUATION


def _previous_content_sibling(node):
    """Nearest preceding sibling, looking past line breaks the cleaner may drop."""
    previous = previous_sibling(node)
    while is_element(previous, "br"):
        previous = previous_sibling(previous)
    return previous


def space_before_links(tree: Tree) -> None:
    """Keep words from running into a following link."""
    for anchor in find_all(tree, "a"):
        previous = _previous_content_sibling(anchor)
        if isinstance(previous, Text):
            if _needs_space(previous.content):
                previous.content += " "
        elif isinstance(previous, Element) and not is_block(previous):
            texts = list(iter_text(previous))
            if texts and _needs_space(texts[-1].content):
                texts[-1].content += " "


def cleanup_word_markup(tree: Tree, include_images: bool = False) -> Tree:
    """
    Strip word-processor residue from a parsed tree.

    Args:
        tree: Parsed document fragment (mutated in place)
        include_images: Keep images and image placeholders

    Returns:
        The same tree
    """
    if not include_images:
        remove_images(tree)
    clean_attributes(tree)
    convert_font_tags(tree)
    remove_empty_wrappers(tree)
    flatten_nested_spans(tree)
    merge_adjacent_spans(tree)
    unwrap_plain_spans(tree)
    space_before_links(tree)

    logger.debug("Word markup cleanup completed")
    return tree
