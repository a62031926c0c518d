# -*- coding: utf-8 -*-
"""
Tests for the mode transforms.
"""
from unittest.mock import MagicMock

from paste_normalizer.modes import ModeProfile, Transform
from paste_normalizer.transforms import (
    add_link_attributes,
    add_spacing,
    apply_transforms,
    convert_heading_lists,
    de_italicize_key_takeaways,
    find_key_takeaways,
    is_heading_list,
    normalize_list_colons,
    normalize_sources,
    relativize_link,
    relativize_links,
    remove_stray_heading,
    wrap_headings_in_strong,
)
from paste_normalizer.tree import find_all, is_spacing_paragraph, parse, serialize, text_content


def tags(tree) -> list[str]:
    return ["spacing" if is_spacing_paragraph(child) else child.tag for child in tree.children]


class TestHeadingStrong:
    """Tests for wrap_headings_in_strong."""

    def test_wraps_heading_content(self):
        """Should wrap all heading content in one strong."""
        tree = wrap_headings_in_strong(parse("<h2>A <em>b</em></h2>"))

        assert serialize(tree) == "<h2><strong>A <em>b</em></strong></h2>"

    def test_already_wrapped(self):
        """Should not add a second strong."""
        tree = wrap_headings_in_strong(parse("<h3><strong>A</strong></h3>"))

        assert serialize(tree) == "<h3><strong>A</strong></h3>"

    def test_partial_strong_is_wrapped(self):
        """Should wrap headings where strong covers only part of the text."""
        tree = wrap_headings_in_strong(parse("<h3><strong>A</strong> b</h3>"))

        assert serialize(tree) == "<h3><strong><strong>A</strong> b</strong></h3>"


class TestKeyTakeaways:
    """Tests for the key takeaways transforms."""

    def test_find_key_takeaways(self):
        """Should locate the h2 and its following list."""
        tree = parse("<h2>Key takeaways</h2><p>x</p><ul><li>a</li></ul>")

        heading, items = find_key_takeaways(tree)

        assert heading.tag == "h2"
        assert items.tag == "ul"

    def test_de_italicizes_and_adds_colon(self):
        """Should remove em from the block and end the heading with a colon."""
        tree = parse("<h2><em>Key takeaways</em></h2><ul><li><em>a</em></li></ul>")

        de_italicize_key_takeaways(tree)

        assert serialize(tree) == "<h2>Key takeaways:</h2><ul><li>a</li></ul>"

    def test_colon_lands_inside_strong(self):
        """Should append the colon to the last text of the heading."""
        tree = parse("<h2><strong>Key Takeaways </strong></h2>")

        de_italicize_key_takeaways(tree)

        assert serialize(tree) == "<h2><strong>Key Takeaways:</strong></h2>"

    def test_existing_colon_kept(self):
        """Should not add a second colon."""
        tree = parse("<h2>Key Takeaways:</h2>")

        de_italicize_key_takeaways(tree)

        assert text_content(tree) == "Key Takeaways:"

    def test_removes_stray_h1(self):
        """Should remove an h1 right after the key takeaways list."""
        tree = parse("<h2>Key Takeaways</h2><ul><li>a</li></ul><h1>Title</h1><p>x</p>")

        remove_stray_heading(tree)

        assert tags(tree) == ["h2", "ul", "p"]

    def test_keeps_h1_elsewhere(self):
        """Should keep an h1 that does not follow the list."""
        tree = parse("<h2>Key Takeaways</h2><ul><li>a</li></ul><p>x</p><h1>Title</h1>")

        remove_stray_heading(tree)

        assert tags(tree) == ["h2", "ul", "p", "h1"]


class TestLinkAttributes:
    """Tests for add_link_attributes."""

    def test_adds_target_and_rel(self):
        """Should open links in a new tab without referrer."""
        tree = add_link_attributes(parse('<p><a href="/x">x</a></p>'))

        anchor = find_all(tree, "a")[0]
        assert anchor.attributes == {"href": "/x", "target": "_blank", "rel": "noopener noreferrer"}

    def test_keeps_existing_rel_tokens(self):
        """Should merge rel tokens without duplicates."""
        tree = parse('<p><a href="/x" rel="nofollow noopener">x</a></p>')

        add_link_attributes(add_link_attributes(tree))

        assert find_all(tree, "a")[0].attributes["rel"] == "nofollow noopener noreferrer"

    def test_skips_anchors_without_href(self):
        """Should leave name-only anchors alone."""
        tree = add_link_attributes(parse('<p><a name="top">x</a></p>'))

        assert find_all(tree, "a")[0].attributes == {"name": "top"}


class TestHeadingListConversion:
    """Tests for convert_heading_lists."""

    def test_detects_heading_list(self):
        """Should accept only li > strong > heading lists."""
        assert is_heading_list(parse("<ol><li><strong><h3>A</h3></strong></li></ol>").children[0])
        assert not is_heading_list(parse("<ol><li><h3>A</h3></li></ol>").children[0])
        assert not is_heading_list(parse("<ol><li><strong><h3>A</h3></strong> x</li></ol>").children[0])
        assert not is_heading_list(parse("<ul><li><strong><h3>A</h3></strong></li></ul>").children[0])

    def test_converts_to_numbered_headings(self, heading_list_html):
        """Should replace the list with numbered headings."""
        tree = convert_heading_lists(parse(heading_list_html))

        assert serialize(tree) == "<h2>Section</h2><h3>1. One</h3><h3>2. Two</h3>"

    def test_number_goes_inside_strong(self):
        """Should prefix the number inside the heading's strong."""
        tree = parse("<ol><li><strong><h3><strong>One</strong></h3></strong></li></ol>")

        convert_heading_lists(tree)

        assert serialize(tree) == "<h3><strong>1. One</strong></h3>"

    def test_numbering_restarts_per_section(self):
        """Should restart numbering at every h2."""
        tree = parse(
            "<h2>A</h2><ol><li><strong><h3>One</h3></strong></li></ol>"
            "<h2>B</h2><ol><li><strong><h3>Two</h3></strong></li></ol>"
        )

        convert_heading_lists(tree)

        assert [text_content(h) for h in find_all(tree, "h3")] == ["1. One", "1. Two"]

    def test_numbering_continues_within_section(self):
        """Should keep counting across lists in the same section."""
        tree = parse(
            "<h2>A</h2><ol><li><strong><h3>One</h3></strong></li></ol>"
            "<p>Between</p><ol><li><strong><h3>Two</h3></strong></li></ol>"
        )

        convert_heading_lists(tree)

        assert [text_content(h) for h in find_all(tree, "h3")] == ["1. One", "2. Two"]

    def test_adjacent_heading_lists_skipped(self):
        """Should leave pairs of adjacent heading lists alone."""
        markup = (
            "<ol><li><strong><h3>One</h3></strong></li></ol>"
            "<p>&nbsp;</p>"
            "<ol><li><strong><h3>Two</h3></strong></li></ol>"
        )
        tree = convert_heading_lists(parse(markup))

        assert tags(tree) == ["ol", "spacing", "ol"]


class TestSpacing:
    """Tests for add_spacing."""

    def test_spacing_before_headings(self):
        """Should insert a spacing paragraph before each heading."""
        tree = add_spacing(parse("<p>Intro</p><h2>Next</h2><p>x</p>"))

        assert tags(tree) == ["p", "spacing", "h2", "p"]

    def test_spacing_is_not_duplicated(self):
        """Should not insert spacing twice."""
        tree = add_spacing(add_spacing(parse("<p>Intro</p><h2>Next</h2>")))

        assert tags(tree) == ["p", "spacing", "h2"]

    def test_first_faq_question_not_spaced(self):
        """Should keep the first FAQ question tight under its heading."""
        tree = add_spacing(parse("<p>x</p><h2>FAQ</h2><h3>Q1</h3><p>a</p><h3>Q2</h3><p>b</p>"))

        assert tags(tree) == ["p", "spacing", "h2", "h3", "p", "spacing", "h3", "p"]

    def test_key_takeaways_block(self):
        """Should skip the key takeaways heading and space after its list."""
        tree = add_spacing(parse("<h2>Key Takeaways</h2><ul><li>a</li></ul><p>x</p>"))

        assert tags(tree) == ["h2", "ul", "spacing", "p"]

    def test_labelled_paragraphs(self):
        """Should space disclaimer, read-more and sources paragraphs."""
        tree = add_spacing(parse(
            "<p>Body</p><p>Disclaimer: y</p><p>Read more: z</p><p>Sources:</p><ol><li>s</li></ol>"
        ))

        assert tags(tree) == ["p", "spacing", "p", "spacing", "p", "spacing", "p", "ol"]

    def test_no_spacing_inside_list_items(self):
        """Should not insert spacing below list items."""
        tree = add_spacing(parse("<ul><li>a<h3>Nested</h3></li></ul>"))

        assert not any(is_spacing_paragraph(p) for p in find_all(tree, "p"))


class TestListColons:
    """Tests for normalize_list_colons."""

    def test_adds_missing_space(self):
        """Should put one space after the label."""
        tree = normalize_list_colons(parse("<ul><li><strong>Label:</strong>text</li></ul>"))

        assert serialize(tree) == "<ul><li><strong>Label:</strong> text</li></ul>"

    def test_moves_space_out_of_label(self):
        """Should move trailing label whitespace after the strong and collapse runs."""
        tree = normalize_list_colons(parse("<ul><li><strong>Label: </strong>   text</li></ul>"))

        assert serialize(tree) == "<ul><li><strong>Label:</strong> text</li></ul>"

    def test_ignores_labels_without_colon(self):
        """Should leave strong text without a trailing colon alone."""
        markup = "<ul><li><strong>Label</strong>text</li></ul>"

        assert serialize(normalize_list_colons(parse(markup))) == markup

    def test_ignores_paragraphs(self):
        """Should only touch list items."""
        markup = "<p><strong>Label:</strong>text</p>"

        assert serialize(normalize_list_colons(parse(markup))) == markup

    def test_label_inside_em(self):
        """Should place the space after the enclosing inline element."""
        tree = normalize_list_colons(parse("<ul><li><em><strong>A:</strong></em>text</li></ul>"))

        assert serialize(tree) == "<ul><li><em><strong>A:</strong></em> text</li></ul>"


class TestSources:
    """Tests for normalize_sources."""

    def test_normalizes_label_and_items(self, sources_html):
        """Should rewrite the label and italicize source items."""
        tree = normalize_sources(parse(sources_html))

        assert serialize(tree) == (
            "<p>Intro</p><p><strong><em>Sources:</em></strong></p>"
            "<ol><li><em>One</em></li><li><em>Two</em></li></ol>"
        )

    def test_label_without_list(self):
        """Should rewrite the label even without a following list."""
        tree = normalize_sources(parse("<p><b>sources:</b></p>"))

        assert serialize(tree) == "<p><strong><em>Sources:</em></strong></p>"


class TestRelativeLinks:
    """Tests for relativize_link."""

    def test_strips_scheme_and_host(self):
        """Should keep path, query and fragment."""
        assert relativize_link("https://example.com/a/b?q=1#f") == "/a/b?q=1#f"

    def test_bare_host_becomes_root(self):
        """Should map a bare host to the root path."""
        assert relativize_link("https://example.com") == "/"

    def test_relative_and_mailto_untouched(self):
        """Should leave relative and mailto links alone."""
        assert relativize_link("/already") == "/already"
        assert relativize_link("mailto:a@example.com") == "mailto:a@example.com"

    def test_rewrites_anchors(self):
        """Should rewrite every anchor href."""
        tree = relativize_links(parse('<p><a href="http://example.com/x">x</a></p>'))

        assert find_all(tree, "a")[0].attributes["href"] == "/x"


class TestApplyTransforms:
    """Tests for apply_transforms."""

    def test_runs_enabled_transforms_in_order(self):
        """Should invoke the stage runner once per enabled transform, in order."""
        run_stage = MagicMock(side_effect=lambda name, func, tree: func(tree))
        profile = ModeProfile.resolve("commerce")

        apply_transforms(parse("<h2>x</h2>"), profile, run_stage=run_stage)

        names = [call.args[0] for call in run_stage.call_args_list]
        assert names == [t.value for t in profile.ordered]

    def test_runs_directly_without_runner(self):
        """Should apply transforms directly when no runner is given."""
        profile = ModeProfile.resolve("plain", {Transform.HEADING_STRONG: True})

        tree = apply_transforms(parse("<h2>x</h2>"), profile)

        assert serialize(tree) == "<h2><strong>x</strong></h2>"
