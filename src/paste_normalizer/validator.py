# -*- coding: utf-8 -*-
"""
Output validator: check that normalized markup honours its mode.

Each enabled transform has a postcondition that can be verified on the
formatted output. The validator parses the output again and reports one
CheckResult per feature.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from .config import settings
from .modes import ModeProfile, Transform
from .sanitizer import ALLOWED_ATTRIBUTES, ALLOWED_TAGS
from .transforms import (
    KEY_TAKEAWAYS_PHRASE,
    REL_TOKENS,
    SOURCES_LABELS,
    find_key_takeaways,
    has_adjacent_heading_list,
    is_heading_list,
)
from .tree import (
    HEADING_TAGS,
    Text,
    Tree,
    find_all,
    has_ancestor,
    is_element,
    is_spacing_paragraph,
    is_whitespace_text,
    next_element_sibling,
    next_sibling,
    parse,
    text_content,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one feature check."""

    feature: str
    passed: bool
    message: str
    details: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    """All checks run against one output."""

    mode: str
    results: list[CheckResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def success_rate(self) -> float:
        return round(100.0 * self.passed / self.total, 1) if self.total else 100.0

    def summary(self) -> str:
        lines = [
            f"=== VALIDATION REPORT ({self.mode.upper()}) ===",
            f"Total: {self.total}  Passed: {self.passed}  Failed: {self.failed}",
            "",
        ]
        for result in self.results:
            status = "PASS" if result.passed else "FAIL"
            lines.append(f"  {status} - {result.feature}: {result.message}")
            if result.details and not result.passed:
                lines.append(f"    Details: {'; '.join(result.details)}")
        return "\n".join(lines)


def _label(element) -> str:
    return text_content(element).strip()[:60]


def check_basic_structure(tree: Tree) -> CheckResult:
    elements = find_all(tree)
    if not elements:
        return CheckResult("basic_structure", False, "Output is empty or has no elements")

    problems = [f"<{el.tag}>" for el in elements if el.tag not in ALLOWED_TAGS]
    for element in elements:
        allowed = ALLOWED_ATTRIBUTES.get(element.tag, ())
        if element.tag == "a":
            allowed += ("target", "rel")
        problems.extend(
            f"<{element.tag} {name}>" for name in element.attributes if name not in allowed
        )
    if problems:
        return CheckResult("basic_structure", False, "Disallowed markup present", problems)
    return CheckResult("basic_structure", True, "Structure is valid")


def check_heading_strong(tree: Tree) -> CheckResult:
    missing = []
    for heading in find_all(tree, *HEADING_TAGS):
        significant = [child for child in heading.children if not is_whitespace_text(child)]
        if significant and not (len(significant) == 1 and is_element(significant[0], "strong")):
            missing.append(_label(heading))
    if missing:
        return CheckResult("heading_strong", False, f"{len(missing)} headings lack a strong wrapper", missing)
    return CheckResult("heading_strong", True, "All headings are wrapped in strong")


def check_key_takeaways(tree: Tree) -> CheckResult:
    heading, items = find_key_takeaways(tree)
    if heading is None:
        return CheckResult("key_takeaways", True, "No key takeaways section")

    problems = []
    if not text_content(heading).strip().endswith(":"):
        problems.append("heading does not end with a colon")
    if find_all(heading, "em"):
        problems.append("heading contains em")
    if items is not None and find_all(items, "em"):
        problems.append("list contains em")
    if problems:
        return CheckResult("key_takeaways", False, "Key takeaways not normalized", problems)
    return CheckResult("key_takeaways", True, "Key takeaways normalized")


def check_stray_heading(tree: Tree) -> CheckResult:
    _, items = find_key_takeaways(tree)
    if items is not None and is_element(next_element_sibling(items), "h1"):
        return CheckResult("stray_heading_removal", False, "An h1 follows the key takeaways list")
    return CheckResult("stray_heading_removal", True, "No stray h1 after key takeaways")


def check_link_attributes(tree: Tree) -> CheckResult:
    problems = []
    for anchor in find_all(tree, "a"):
        if "href" not in anchor.attributes:
            continue
        rel = set(anchor.attributes.get("rel", "").lower().split())
        if anchor.attributes.get("target") != "_blank" or not rel.issuperset(REL_TOKENS):
            problems.append(anchor.attributes["href"])
    if problems:
        return CheckResult("link_attributes", False, f"{len(problems)} links lack target/rel", problems)
    return CheckResult("link_attributes", True, "All links carry target and rel")


def check_heading_lists(tree: Tree) -> CheckResult:
    remaining = [
        _label(ol) for ol in find_all(tree, "ol")
        if is_heading_list(ol) and not has_adjacent_heading_list(ol)
    ]
    if remaining:
        return CheckResult("heading_list_conversion", False, "Unconverted heading lists remain", remaining)
    return CheckResult("heading_list_conversion", True, "No convertible heading lists remain")


def check_spacing(tree: Tree) -> CheckResult:
    problems = []
    for paragraph in find_all(tree, "p"):
        if is_spacing_paragraph(paragraph) and is_spacing_paragraph(next_element_sibling(paragraph)):
            problems.append("consecutive spacing paragraphs")
            break

    _, items = find_key_takeaways(tree)
    if items is not None and items.parent is tree:
        if not is_spacing_paragraph(next_element_sibling(items)):
            problems.append("no spacing after key takeaways list")

    for heading in tree.element_children:
        if heading.tag not in HEADING_TAGS or heading.tag == "h3":
            continue
        if KEY_TAKEAWAYS_PHRASE in text_content(heading).lower():
            continue
        previous = heading.parent.children[:heading.parent.index(heading)]
        elements = [node for node in previous if not is_whitespace_text(node)]
        if elements and not is_spacing_paragraph(elements[-1]):
            problems.append(f"no spacing before {heading.tag} '{_label(heading)}'")

    if problems:
        return CheckResult("spacing", False, "Spacing rules not satisfied", problems)
    return CheckResult("spacing", True, "Spacing rules satisfied")


def check_list_colons(tree: Tree) -> CheckResult:
    problems = []
    for strong in find_all(tree, "strong"):
        if not has_ancestor(strong, "li"):
            continue
        label = text_content(strong)
        if not label.strip().endswith(":"):
            continue
        following = next_sibling(strong)
        if label != label.rstrip():
            problems.append(f"whitespace inside '{label.strip()}'")
        elif isinstance(following, Text) and following.content.startswith("  "):
            problems.append(f"multiple spaces after '{label.strip()}'")
        elif isinstance(following, Text) and not following.content.startswith(" "):
            problems.append(f"no space after '{label.strip()}'")
    if problems:
        return CheckResult("list_colon_normalization", False, "List labels not normalized", problems)
    return CheckResult("list_colon_normalization", True, "List labels normalized")


def check_sources(tree: Tree) -> CheckResult:
    problems = []
    for paragraph in find_all(tree, "p"):
        if text_content(paragraph).strip().lower() not in SOURCES_LABELS:
            continue
        strong = paragraph.element_children
        if not (
                len(strong) == 1 and strong[0].tag == "strong"
                and [child.tag for child in strong[0].element_children] == ["em"]
                and text_content(paragraph) == "Sources:"
        ):
            problems.append("sources label is not <strong><em>Sources:</em></strong>")
    if problems:
        return CheckResult("sources_normalization", False, "Sources section not normalized", problems)
    return CheckResult("sources_normalization", True, "Sources section normalized")


def check_relative_links(tree: Tree) -> CheckResult:
    absolute = [
        anchor.attributes["href"] for anchor in find_all(tree, "a")
        if "://" in anchor.attributes.get("href", "")
    ]
    if absolute:
        return CheckResult("relative_links", False, f"{len(absolute)} absolute links remain", absolute)
    return CheckResult("relative_links", True, "All links are relative")


CHECKS: dict[Transform, Callable[[Tree], CheckResult]] = {
    Transform.HEADING_STRONG: check_heading_strong,
    Transform.KEY_TAKEAWAYS: check_key_takeaways,
    Transform.STRAY_HEADING_REMOVAL: check_stray_heading,
    Transform.LINK_ATTRIBUTES: check_link_attributes,
    Transform.HEADING_LIST_CONVERSION: check_heading_lists,
    Transform.SPACING: check_spacing,
    Transform.LIST_COLON_NORMALIZATION: check_list_colons,
    Transform.SOURCES_NORMALIZATION: check_sources,
    Transform.RELATIVE_LINKS: check_relative_links,
}


def validate(
        html: str,
        mode: str | None = None,
        overrides: Mapping[str | Transform, bool] | None = None,
) -> ValidationReport:
    """
    Check normalized markup against the features of its mode.

    Args:
        html: Formatted pipeline output
        mode: Mode the output was produced with
        overrides: Overrides the output was produced with

    Returns:
        ValidationReport with one result per enabled feature plus structure
    """
    profile = ModeProfile.resolve(mode or settings.DEFAULT_MODE, overrides)
    tree = parse(html)

    report = ValidationReport(mode=profile.name)
    report.results.append(check_basic_structure(tree))
    for transform in profile.ordered:
        report.results.append(CHECKS[transform](tree))

    logger.info(
        f"Validation finished: {report.passed}/{report.total} passed",
        extra={"mode": profile.name},
    )
    return report
