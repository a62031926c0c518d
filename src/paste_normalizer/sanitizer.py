# -*- coding: utf-8 -*-
"""
Sanitizer: reduce an arbitrary tree to the semantic allow-list.

Presentational styling (italic, bold, superscript, subscript) found on
elements is converted into semantic wrappers before the styling is thrown
away. Attributes are reduced to a per-tag allow-list and URLs are checked
against a safe scheme list.
"""
import logging
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from .tree import (
    Element,
    NBSP,
    Tree,
    detach,
    is_whitespace_text,
    replace_with,
    unwrap,
)

logger = logging.getLogger(__name__)

ALLOWED_TAGS = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "br", "hr",
    "ul", "ol", "li",
    "em", "i", "strong", "b", "sup", "sub",
    "a", "img",
    "blockquote", "pre", "code",
    "table", "thead", "tbody", "tr", "th", "td",
})

ALLOWED_ATTRIBUTES = {
    "a": ("href",),
    "img": ("src", "alt"),
}

URL_ATTRIBUTES = frozenset({"href", "src"})

SAFE_SCHEMES = frozenset({"http", "https", "mailto"})

# Non-content elements removed together with everything inside them
DROPPED_TAGS = frozenset({
    "script", "style", "noscript", "template",
    "head", "title", "meta", "link",
    "iframe", "object", "embed", "xml",
})

# Tags that already express a presentation hint
BOLD_TAGS = frozenset({"strong", "b"})
ITALIC_TAGS = frozenset({"em", "i"})

SUPERSCRIPT_VALUES = ("super", "35%", "0.6")
SUBSCRIPT_VALUES = ("sub", "-35%", "-0.6")

_DASH_CHARS = re.compile("[\u2011-\u2015]")
_WHITESPACE_RUN = re.compile(r"\s+")
_DASH_RUN = re.compile(r"-{2,}")
_DASH_AROUND_SLASH = re.compile(r"-*/-*")
_FONT_WEIGHT = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class PresentationHints:
    """Presentation semantics carried by an element's inline style."""

    italic: bool = False
    bold: bool = False
    superscript: bool = False
    subscript: bool = False

    def __bool__(self) -> bool:
        return self.italic or self.bold or self.superscript or self.subscript


def parse_style(style: str | None) -> dict[str, str]:
    """Parse an inline style attribute into lowercased property names."""
    properties = {}
    if not style:
        return properties
    for declaration in style.split(";"):
        parts = declaration.split(":")
        if len(parts) != 2:
            continue
        name, value = parts[0].strip().lower(), parts[1].strip()
        if name:
            properties[name] = value
    return properties


def detect_hints(attributes: dict[str, str]) -> PresentationHints:
    """Read presentation hints from the style attribute; malformed means none."""
    styles = parse_style(attributes.get("style"))

    font_style = styles.get("font-style", "").lower()
    italic = "italic" in font_style

    font_weight = styles.get("font-weight", "").lower()
    weight_match = _FONT_WEIGHT.match(font_weight)
    bold = font_weight == "bold" or bool(weight_match and int(weight_match.group(1)) >= 700)

    vertical_align = styles.get("vertical-align", "").lower()
    # Negative offsets must be tested before their positive counterparts
    subscript = any(value in vertical_align for value in SUBSCRIPT_VALUES)
    superscript = not subscript and any(value in vertical_align for value in SUPERSCRIPT_VALUES)

    return PresentationHints(italic=italic, bold=bold, superscript=superscript, subscript=subscript)


def build_wrappers(children: list, hints: PresentationHints) -> Element | None:
    """
    Wrap children in semantic elements for the given hints.

    Nesting order from the outside in is sup/sub, strong, em. Returns the
    outermost wrapper, or None when no hint applies.
    """
    tags = []
    if hints.superscript:
        tags.append("sup")
    elif hints.subscript:
        tags.append("sub")
    if hints.bold:
        tags.append("strong")
    if hints.italic:
        tags.append("em")
    if not tags:
        return None

    outermost = Element(tags[0])
    innermost = outermost
    for tag in tags[1:]:
        innermost = innermost.append(Element(tag))
    innermost.extend(children)
    return outermost


def clean_url(url: str) -> str:
    """
    Normalize dash-like characters and whitespace in a URL path.

    Typographic dashes and spaces become plain hyphens, repeated hyphens
    collapse and hyphens touching a slash are dropped. The query and
    fragment are left alone.
    """
    url = url.strip()
    parts = urlsplit(url)
    decoded = unquote(parts.path)

    cleaned = _DASH_CHARS.sub("-", decoded)
    cleaned = cleaned.replace(NBSP, " ")
    cleaned = _WHITESPACE_RUN.sub("-", cleaned)
    cleaned = _DASH_RUN.sub("-", cleaned)
    cleaned = _DASH_AROUND_SLASH.sub("/", cleaned)

    if cleaned == decoded:
        return url

    path = "/".join(quote(segment, safe="@:!$&'()*+,;=-._~") for segment in cleaned.split("/"))
    return urlunsplit(parts._replace(path=path))


def is_safe_url(url: str) -> bool:
    url = url.strip()
    if url.startswith(("/", "#")):
        return True
    scheme = urlsplit(url).scheme.lower()
    return scheme in SAFE_SCHEMES


def sanitize_attributes(element: Element, clean_urls: bool = True) -> None:
    allowed = ALLOWED_ATTRIBUTES.get(element.tag, ())
    kept = {}
    for name, value in element.attributes.items():
        if name not in allowed:
            continue
        if name in URL_ATTRIBUTES:
            try:
                if clean_urls:
                    value = clean_url(value)
                if not is_safe_url(value):
                    continue
            except ValueError:
                logger.debug(f"Dropping malformed {name} on <{element.tag}>")
                continue
        kept[name] = value
    element.attributes = kept


def _sanitize_children(container, clean_urls: bool) -> None:
    for node in list(container.children):
        if not isinstance(node, Element):
            continue

        if node.tag in DROPPED_TAGS:
            detach(node)
            continue

        if node.tag not in ALLOWED_TAGS:
            _sanitize_children(node, clean_urls)
            wrapper = build_wrappers(node.children, detect_hints(node.attributes))
            if wrapper is not None:
                replace_with(node, wrapper)
            else:
                unwrap(node)
            continue

        hints = detect_hints(node.attributes)
        hints = PresentationHints(
            italic=hints.italic and node.tag not in ITALIC_TAGS,
            bold=hints.bold and node.tag not in BOLD_TAGS,
        )
        if hints and node.children:
            node.append(build_wrappers(node.children, hints))

        sanitize_attributes(node, clean_urls)
        _sanitize_children(node, clean_urls)


def unwrap_single_wrapper(tree: Tree) -> None:
    """
    Unwrap a lone top-level element that carries no meaning of its own.

    After the children pass every remaining element is allow-listed, so
    inside sanitize it finds nothing to do. Called on a raw tree it peels
    one disallowed wrapper such as a div or span.
    """
    significant = [child for child in tree.children if not is_whitespace_text(child)]
    if len(significant) != 1 or not isinstance(significant[0], Element):
        return
    wrapper = significant[0]
    if wrapper.tag not in ALLOWED_TAGS:
        unwrap(wrapper)


def sanitize(tree: Tree, clean_urls: bool = True) -> Tree:
    """
    Reduce tree to allow-listed tags and attributes.

    Args:
        tree: Parsed document fragment (mutated in place)
        clean_urls: Normalize dashes and whitespace in href/src paths

    Returns:
        The same tree
    """
    _sanitize_children(tree, clean_urls)
    unwrap_single_wrapper(tree)
    return tree
