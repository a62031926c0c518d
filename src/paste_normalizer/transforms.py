# -*- coding: utf-8 -*-
"""
Mode transforms applied to a cleaned tree.

Each transform is a plain function taking and returning a Tree. A missing
pattern is a silent no-op. Transforms are registered in TRANSFORMS and
run in the order of the Transform enum:

1. Heading strong - wrap heading content in a single strong
2. Key takeaways - de-italicize the key takeaways block, end heading with a colon
3. Stray heading removal - drop an h1 right after the key takeaways list
4. Link attributes - target=_blank and rel=noopener noreferrer
5. Heading list conversion - ol of strong>heading items becomes numbered headings
6. Spacing - spacing paragraphs between sections
7. List colon normalization - one space after "Label:" in list items
8. Sources normalization - canonical "Sources:" label and italic source items
9. Relative links - absolute hrefs become path-only (opt-in)
"""
import logging
from typing import Callable
from urllib.parse import urlsplit, urlunsplit

from .modes import ModeProfile, Transform
from .tree import (
    HEADING_TAGS,
    Element,
    Text,
    Tree,
    clone,
    detach,
    find_all,
    has_ancestor,
    insert_after,
    insert_before,
    is_element,
    is_heading,
    is_inline,
    is_spacing_paragraph,
    is_whitespace_text,
    iter_text,
    make_spacing_paragraph,
    next_element_sibling,
    next_sibling,
    previous_element_sibling,
    previous_significant_sibling,
    replace_with,
    text_content,
    unwrap,
    wrap_children,
)

logger = logging.getLogger(__name__)

KEY_TAKEAWAYS_PHRASE = "key takeaways"
FAQ_PHRASES = ("frequently asked questions", "faq")
READ_MORE_PHRASES = ("read also:", "read more:", "see more:")
SOURCES_LABELS = ("sources", "sources:")
REL_TOKENS = ("noopener", "noreferrer")

# Parents (besides the fragment root) that may receive a spacing paragraph
SPACING_PARENTS = frozenset({"blockquote", "td", "th"})


def _normalized_text(node) -> str:
    return text_content(node).strip().lower()


def _has_stray_text(element: Element) -> bool:
    return any(
        isinstance(child, Text) and not is_whitespace_text(child)
        for child in element.children
    )


def _next_sibling_with_tag(node, tag: str) -> Element | None:
    sibling = next_element_sibling(node)
    while sibling is not None and sibling.tag != tag:
        sibling = next_element_sibling(sibling)
    return sibling


def _unwrap_all(root: Element, tag: str) -> None:
    for element in find_all(root, tag):
        unwrap(element)


def find_key_takeaways(tree: Tree) -> tuple[Element | None, Element | None]:
    """Return the key takeaways h2 and the ul that follows it."""
    for heading in find_all(tree, "h2"):
        if KEY_TAKEAWAYS_PHRASE in text_content(heading).lower():
            return heading, _next_sibling_with_tag(heading, "ul")
    return None, None


# =============================================================================
# 1. Heading strong
# =============================================================================


def wrap_headings_in_strong(tree: Tree) -> Tree:
    for heading in find_all(tree, *HEADING_TAGS):
        significant = [child for child in heading.children if not is_whitespace_text(child)]
        if not significant:
            continue
        if len(significant) == 1 and is_element(significant[0], "strong"):
            continue
        wrap_children(heading, "strong")
    return tree


# =============================================================================
# 2. Key takeaways
# =============================================================================


def de_italicize_key_takeaways(tree: Tree) -> Tree:
    """
    Remove italics from the key takeaways heading and its list.

    The heading also gets a trailing colon. The colon is appended to the
    last non-blank text of the heading, which sits inside its strong when
    headings were already wrapped.
    """
    heading, items = find_key_takeaways(tree)
    if heading is None:
        return tree

    _unwrap_all(heading, "em")
    if items is not None:
        _unwrap_all(items, "em")

    if not text_content(heading).strip().endswith(":"):
        texts = [text for text in iter_text(heading) if text.content.strip()]
        if texts:
            texts[-1].content = texts[-1].content.rstrip() + ":"

    return tree


# =============================================================================
# 3. Stray heading removal
# =============================================================================


def remove_stray_heading(tree: Tree) -> Tree:
    _, items = find_key_takeaways(tree)
    if items is None:
        return tree

    following = next_element_sibling(items)
    if is_element(following, "h1"):
        logger.debug("Removing stray h1 after key takeaways")
        detach(following)
    return tree


# =============================================================================
# 4. Link attributes
# =============================================================================


def add_link_attributes(tree: Tree) -> Tree:
    for anchor in find_all(tree, "a"):
        if "href" not in anchor.attributes:
            continue

        anchor.attributes.setdefault("target", "_blank")

        tokens = anchor.attributes.get("rel", "").split()
        present = {token.lower() for token in tokens}
        tokens.extend(token for token in REL_TOKENS if token not in present)
        anchor.attributes["rel"] = " ".join(tokens)
    return tree


# =============================================================================
# 5. Heading list conversion
# =============================================================================


def heading_of_item(item: Element) -> Element | None:
    """Heading wrapped as li > strong > heading, or None for any other shape."""
    if _has_stray_text(item):
        return None
    elements = item.element_children
    if len(elements) != 1 or elements[0].tag != "strong":
        return None

    strong = elements[0]
    if _has_stray_text(strong):
        return None
    headings = [child for child in strong.element_children if is_heading(child)]
    return headings[0] if len(headings) == 1 else None


def is_heading_list(node) -> bool:
    if not is_element(node, "ol"):
        return False
    elements = node.element_children
    if not elements or _has_stray_text(node):
        return False
    return all(
        element.tag == "li" and heading_of_item(element) is not None
        for element in elements
    )


def _skip_spacing(sibling, step) -> Element | None:
    while sibling is not None and (
            is_spacing_paragraph(sibling)
            or (is_element(sibling, "p") and not text_content(sibling).strip())
    ):
        sibling = step(sibling)
    return sibling


def has_adjacent_heading_list(ol: Element) -> bool:
    following = _skip_spacing(next_element_sibling(ol), next_element_sibling)
    preceding = _skip_spacing(previous_element_sibling(ol), previous_element_sibling)
    return is_heading_list(following) or is_heading_list(preceding)


def section_key(ol: Element, tree: Tree) -> Element | None:
    """Nearest preceding top-level h2; None past an h1 or below the top level."""
    if ol.parent is not tree:
        return None
    sibling = previous_element_sibling(ol)
    while sibling is not None:
        if sibling.tag == "h1":
            return None
        if sibling.tag == "h2":
            return sibling
        sibling = previous_element_sibling(sibling)
    return None


def _prefix_number(heading: Element, number: int) -> None:
    target = next(
        (child for child in heading.children if is_element(child, "strong")),
        heading,
    )
    prefix = f"{number}. "
    first = target.children[0] if target.children else None
    if isinstance(first, Text):
        first.content = prefix + first.content.lstrip()
    else:
        target.insert(0, Text(prefix))


def convert_heading_lists(tree: Tree) -> Tree:
    """
    Replace each standalone heading list with numbered headings.

    Numbering restarts for every top-level h2 section and keeps running
    across lists that share a section.
    """
    candidates = [
        ol for ol in find_all(tree, "ol")
        if is_heading_list(ol) and not has_adjacent_heading_list(ol)
    ]

    counters: dict[Element | None, int] = {}
    for ol in candidates:
        key = section_key(ol, tree)
        headings = []
        for item in ol.element_children:
            counters[key] = counters.get(key, 0) + 1
            heading = clone(heading_of_item(item))
            _prefix_number(heading, counters[key])
            headings.append(heading)
        replace_with(ol, *headings)

    if candidates:
        logger.debug(f"Converted {len(candidates)} heading lists")
    return tree


# =============================================================================
# 6. Spacing
# =============================================================================


def _has_spacing_before(node) -> bool:
    if is_spacing_paragraph(previous_element_sibling(node)):
        return True
    return is_spacing_paragraph(previous_significant_sibling(node))


def _accepts_spacing(node) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if isinstance(parent, Element) and parent.tag not in SPACING_PARENTS:
        return False
    return not has_ancestor(node, "li")


def _insert_spacing_before(node) -> None:
    if _accepts_spacing(node) and not _has_spacing_before(node):
        insert_before(node, make_spacing_paragraph())


def _content_paragraphs(tree: Tree) -> list[tuple[Element, str]]:
    return [
        (paragraph, _normalized_text(paragraph))
        for paragraph in find_all(tree, "p")
        if not is_spacing_paragraph(paragraph)
    ]


def _space_labelled_paragraphs(tree: Tree) -> None:
    for paragraph, text in _content_paragraphs(tree):
        if "alt image text:" in text:
            _insert_spacing_before(paragraph)

    for paragraph, text in _content_paragraphs(tree):
        if text.startswith("disclaimer:"):
            _insert_spacing_before(paragraph)

    for paragraph, text in _content_paragraphs(tree):
        if not (text.startswith("sources:") or text == "sources"):
            continue
        previous = previous_element_sibling(paragraph)
        if is_element(previous, "p") and not is_spacing_paragraph(previous):
            _insert_spacing_before(paragraph)

    for paragraph, text in _content_paragraphs(tree):
        if any(phrase in text for phrase in READ_MORE_PHRASES):
            _insert_spacing_before(paragraph)


def _space_headings(tree: Tree) -> None:
    found_faq = False
    first_faq_question = False

    for heading in find_all(tree, *HEADING_TAGS):
        text = _normalized_text(heading)
        if KEY_TAKEAWAYS_PHRASE in text:
            continue

        if any(phrase in text for phrase in FAQ_PHRASES):
            found_faq = True
            first_faq_question = True

        # The first FAQ question sits right under its section heading
        if found_faq and first_faq_question and heading.tag == "h3":
            first_faq_question = False
            continue

        _insert_spacing_before(heading)


def _space_after_key_takeaways(tree: Tree) -> None:
    _, items = find_key_takeaways(tree)
    if items is None or not _accepts_spacing(items):
        return

    following = next_element_sibling(items)
    if is_spacing_paragraph(following):
        return
    sibling = next_sibling(items)
    while is_whitespace_text(sibling):
        sibling = next_sibling(sibling)
    if is_spacing_paragraph(sibling):
        return

    insert_after(items, make_spacing_paragraph())


def add_spacing(tree: Tree) -> Tree:
    _space_labelled_paragraphs(tree)
    _space_headings(tree)
    _space_after_key_takeaways(tree)
    return tree


# =============================================================================
# 7. List colon normalization
# =============================================================================


def _strip_trailing_whitespace(element: Element) -> None:
    for text in reversed(list(iter_text(element))):
        if not text.content.strip():
            detach(text)
            continue
        text.content = text.content.rstrip()
        return


def _ensure_space_after(strong: Element, item: Element) -> None:
    anchor = strong
    while (
            next_sibling(anchor) is None
            and anchor.parent is not item
            and is_inline(anchor.parent)
    ):
        anchor = anchor.parent

    following = next_sibling(anchor)
    if isinstance(following, Text):
        remainder = following.content.lstrip()
        following.content = f" {remainder}"
    else:
        insert_after(anchor, Text(" "))


def normalize_list_colons(tree: Tree) -> Tree:
    """Ensure "Label:" in list items is followed by exactly one space."""
    seen = set()
    for item in find_all(tree, "li"):
        for strong in find_all(item, "strong"):
            if id(strong) in seen:
                continue
            seen.add(id(strong))

            if not text_content(strong).strip().endswith(":"):
                continue
            _strip_trailing_whitespace(strong)
            _ensure_space_after(strong, item)
    return tree


# =============================================================================
# 8. Sources normalization
# =============================================================================


def _is_lone_em(item: Element) -> bool:
    elements = item.element_children
    return len(elements) == 1 and elements[0].tag == "em" and not _has_stray_text(item)


def normalize_sources(tree: Tree) -> Tree:
    for paragraph in find_all(tree, "p"):
        if _normalized_text(paragraph) not in SOURCES_LABELS:
            continue

        label = Element("em", children=[Text("Sources:")])
        paragraph.set_children([Element("strong", children=[label])])

        sources = _next_sibling_with_tag(paragraph, "ol")
        if sources is None:
            continue
        for item in sources.element_children:
            if item.tag == "li" and item.children and not _is_lone_em(item):
                wrap_children(item, "em")
    return tree


# =============================================================================
# 9. Relative links
# =============================================================================


def relativize_link(href: str) -> str:
    """Reduce a fully-qualified URL to path, query and fragment."""
    if "://" not in href or href.startswith(("/", "./", "../")):
        return href
    try:
        parts = urlsplit(href)
    except ValueError:
        return href
    if not parts.scheme or not parts.netloc:
        return href
    return urlunsplit(("", "", parts.path or "/", parts.query, parts.fragment))


def relativize_links(tree: Tree) -> Tree:
    for anchor in find_all(tree, "a"):
        href = anchor.attributes.get("href")
        if href:
            anchor.attributes["href"] = relativize_link(href)
    return tree


# =============================================================================
# Registry
# =============================================================================

TRANSFORMS: dict[Transform, Callable[[Tree], Tree]] = {
    Transform.HEADING_STRONG: wrap_headings_in_strong,
    Transform.KEY_TAKEAWAYS: de_italicize_key_takeaways,
    Transform.STRAY_HEADING_REMOVAL: remove_stray_heading,
    Transform.LINK_ATTRIBUTES: add_link_attributes,
    Transform.HEADING_LIST_CONVERSION: convert_heading_lists,
    Transform.SPACING: add_spacing,
    Transform.LIST_COLON_NORMALIZATION: normalize_list_colons,
    Transform.SOURCES_NORMALIZATION: normalize_sources,
    Transform.RELATIVE_LINKS: relativize_links,
}

StageRunner = Callable[[str, Callable[[Tree], Tree], Tree], Tree]


def _run_directly(_name: str, func: Callable[[Tree], Tree], tree: Tree) -> Tree:
    return func(tree)


def apply_transforms(
        tree: Tree,
        profile: ModeProfile,
        run_stage: StageRunner | None = None,
) -> Tree:
    """
    Run the transforms enabled by profile, in fixed order.

    Args:
        tree: Cleaned document fragment
        profile: Resolved mode profile
        run_stage: Optional wrapper invoked as run_stage(name, func, tree)

    Returns:
        The transformed tree
    """
    run_stage = run_stage or _run_directly
    for transform in profile.ordered:
        tree = run_stage(transform.value, TRANSFORMS[transform], tree)
    return tree
