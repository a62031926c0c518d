# -*- coding: utf-8 -*-
"""
Tests for the document tree model.
"""
from paste_normalizer.tree import (
    NBSP,
    Element,
    Text,
    Tree,
    find_all,
    is_empty_container,
    is_spacing_paragraph,
    make_spacing_paragraph,
    merge_text_nodes,
    next_element_sibling,
    parse,
    previous_significant_sibling,
    replace_with,
    serialize,
    text_content,
    unwrap,
    wrap_children,
)


class TestParse:
    """Tests for parse."""

    def test_parses_fragment(self):
        """Should return top-level siblings without an implicit root."""
        tree = parse("<p>One</p><p>Two</p>")

        assert [child.tag for child in tree.children] == ["p", "p"]
        assert text_content(tree) == "OneTwo"

    def test_keeps_only_body_content(self):
        """Should discard head content when a body is present."""
        tree = parse("<html><head><title>T</title></head><body><p>x</p></body></html>")

        assert [child.tag for child in tree.children] == ["p"]

    def test_drops_comments_and_doctype(self):
        """Should skip comments and declarations."""
        tree = parse("<!DOCTYPE html><!-- note --><p>x</p>")

        assert len(tree.children) == 1
        assert "note" not in text_content(tree)

    def test_drops_layout_whitespace_between_blocks(self):
        """Should drop indentation between block elements."""
        tree = parse("<ul>\n  <li>One</li>\n  <li>Two</li>\n</ul>")

        ul = tree.children[0]
        assert len(ul.children) == 2
        assert all(isinstance(child, Element) for child in ul.children)

    def test_keeps_inline_whitespace(self):
        """Should keep spaces between inline siblings."""
        tree = parse("<p><strong>A</strong> <em>B</em></p>")

        assert text_content(tree) == "A B"

    def test_keeps_non_breaking_space(self):
        """Should never strip a non-breaking space."""
        tree = parse("<p>&nbsp;</p>")

        assert is_spacing_paragraph(tree.children[0])

    def test_lowercases_tags_and_attributes(self):
        """Should normalize tag and attribute names."""
        tree = parse('<P><A HREF="/x">x</A></P>')

        anchor = find_all(tree, "a")[0]
        assert anchor.attributes == {"href": "/x"}

    def test_tolerates_malformed_markup(self):
        """Should produce a best-effort tree for unclosed tags."""
        tree = parse("<p><strong>open")

        assert text_content(tree) == "open"

    def test_sets_parent_references(self):
        """Should link every node to its parent."""
        tree = parse("<p><em>x</em></p>")

        paragraph = tree.children[0]
        em = paragraph.children[0]
        assert paragraph.parent is tree
        assert em.parent is paragraph
        assert em.children[0].parent is em


class TestMutation:
    """Tests for mutation helpers."""

    def test_unwrap_splices_children(self):
        """Should move children into the element's position."""
        tree = parse("<p>a<span>b<em>c</em></span>d</p>")
        span = find_all(tree, "span")[0]

        moved = unwrap(span)

        assert len(moved) == 2
        assert serialize(tree) == "<p>ab<em>c</em>d</p>"

    def test_wrap_children(self):
        """Should move all children into a single wrapper."""
        tree = parse("<h2>A <em>b</em></h2>")
        heading = tree.children[0]

        wrapper = wrap_children(heading, "strong")

        assert heading.children == [wrapper]
        assert serialize(tree) == "<h2><strong>A <em>b</em></strong></h2>"

    def test_replace_with_many(self):
        """Should replace one node by several, in order."""
        tree = parse("<p>x</p><ol><li>a</li></ol><p>y</p>")
        ol = tree.children[1]

        replace_with(ol, Element("h3", children=[Text("1")]), Element("h3", children=[Text("2")]))

        assert [child.tag for child in tree.children] == ["p", "h3", "h3", "p"]

    def test_append_moves_node(self):
        """Should detach a node from its old parent when appended elsewhere."""
        tree = parse("<p><em>x</em></p><p></p>")
        em = find_all(tree, "em")[0]
        target = tree.children[1]

        target.append(em)

        assert tree.children[0].children == []
        assert em.parent is target

    def test_clone_is_independent(self):
        """Should deep-copy a tree."""
        tree = parse("<p><em>x</em></p>")

        copy = tree.clone()
        find_all(copy, "em")[0].children[0].content = "changed"

        assert text_content(tree) == "x"
        assert text_content(copy) == "changed"

    def test_merge_text_nodes(self):
        """Should join adjacent text siblings and drop empty ones."""
        paragraph = Element("p", children=[Text("a"), Text(""), Text("b"), Element("br"), Text("c")])
        tree = Tree([paragraph])

        merge_text_nodes(tree)

        assert [type(child).__name__ for child in paragraph.children] == ["Text", "Element", "Text"]
        assert paragraph.children[0].content == "ab"


class TestNavigation:
    """Tests for sibling navigation."""

    def test_next_element_sibling_skips_text(self):
        """Should skip text siblings."""
        tree = parse("<p><em>a</em> text <strong>b</strong></p>")
        em = find_all(tree, "em")[0]

        assert next_element_sibling(em).tag == "strong"

    def test_previous_significant_sibling_skips_whitespace(self):
        """Should skip whitespace-only text."""
        tree = parse("<p><em>a</em> <strong>b</strong></p>")
        strong = find_all(tree, "strong")[0]

        assert previous_significant_sibling(strong).tag == "em"


class TestPredicates:
    """Tests for node predicates."""

    def test_spacing_paragraph(self):
        """Should recognize a paragraph holding a single NBSP."""
        assert is_spacing_paragraph(make_spacing_paragraph())
        assert not is_spacing_paragraph(Element("p", children=[Text(" ")]))
        assert not is_spacing_paragraph(Element("p", children=[Text(NBSP + NBSP)]))

    def test_empty_container(self):
        """Should treat textless inline and paragraph elements as empty."""
        assert is_empty_container(Element("strong", children=[Text("  ")]))
        assert is_empty_container(Element("p"))
        assert not is_empty_container(Element("p", children=[Element("br")]))
        assert not is_empty_container(make_spacing_paragraph())
        assert not is_empty_container(Element("ul"))


class TestSerialize:
    """Tests for serialize."""

    def test_escapes_text_and_attributes(self):
        """Should escape markup characters."""
        tree = Tree([
            Element("a", {"href": '/x?a=1&b="2"'}, [Text("a < b & c")]),
        ])

        assert serialize(tree) == '<a href="/x?a=1&amp;b=&quot;2&quot;">a &lt; b &amp; c</a>'

    def test_renders_nbsp_entity(self):
        """Should render non-breaking spaces as an entity."""
        assert serialize(Tree([make_spacing_paragraph()])) == "<p>&nbsp;</p>"

    def test_void_elements_have_no_end_tag(self):
        """Should not close void elements."""
        assert serialize(parse("<p>a<br>b</p>")) == "<p>a<br>b</p>"
