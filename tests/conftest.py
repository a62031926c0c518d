# -*- coding: utf-8 -*-
"""
Pytest configuration and fixtures.
"""
import pytest
from fastapi.testclient import TestClient

from paste_normalizer.api import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def key_takeaways_html():
    """Key takeaways block followed by a stray title."""
    return (
        "<h2>Key Takeaways</h2>"
        "<ul><li><em><strong>A: </strong>text</em></li></ul>"
        "<h1>Title</h1>"
    )


@pytest.fixture
def heading_list_html():
    """Ordered list of wrapped headings under a section heading."""
    return (
        "<h2>Section</h2>"
        "<ol>"
        "<li><strong><h3>One</h3></strong></li>"
        "<li><strong><h3>Two</h3></strong></li>"
        "</ol>"
    )


@pytest.fixture
def sources_html():
    """Sources label followed by its list."""
    return "<p>Intro</p><p>Sources</p><ol><li>One</li><li><em>Two</em></li></ol>"


@pytest.fixture
def word_html():
    """Markup as pasted from a word processor."""
    return (
        '<html xmlns:o="urn:schemas-microsoft-com:office:office"><head>'
        "<style>p.MsoNormal { margin: 0 }</style></head><body>"
        '<p class="MsoNormal" lang="EN-US">'
        '<span style="mso-bidi-font-weight: normal; font-weight: bold">Bold</span>'
        ' and <span style="font-style: italic">italic</span><o:p></o:p></p>'
        '<p class="MsoNormal"><span><span>Plain</span></span></p>'
        "</body></html>"
    )


@pytest.fixture
def article_html(key_takeaways_html, heading_list_html, sources_html):
    """A full article mixing every recognized pattern."""
    return (
        key_takeaways_html
        + "<p>Read more: <a href=\"https://example.com/more\">here</a></p>"
        + heading_list_html
        + "<ul><li><strong>Price:</strong>   10 EUR</li></ul>"
        + "<h2>FAQ</h2><h3>Why?</h3><p>Because.</p><h3>How?</h3><p>Like this.</p>"
        + sources_html
    )
