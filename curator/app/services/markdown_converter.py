from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

from curator.app.models.content_contracts import ContentMarkdown

NON_CONTENT_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "nav",
    "footer",
    "header",
    "aside",
    "iframe",
    "noscript",
)

LOGGER = logging.getLogger("curator.content")

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


def _build_converter() -> MarkdownConverter:
    return MarkdownConverter(
        heading_style=ATX,
        bullets="-",
        code_language="",
        escape_underscores=False,
    )


def strip_non_content(fragment: str) -> BeautifulSoup:
    soup = BeautifulSoup(fragment, "html.parser")
    for node in soup.find_all(list(NON_CONTENT_TAGS)):
        node.decompose()
    return soup


def convert_to_markdown(fragment: str) -> ContentMarkdown:
    """Convert an HTML fragment to markdown with ATX headings and fenced code.

    markdownify walks the tree recursively; pathologically nested pages fall
    back to the fragment's plain text instead of failing.
    """
    soup = strip_non_content(fragment)
    try:
        markdown = _build_converter().convert_soup(soup)
    except RecursionError:
        LOGGER.warning("markdown conversion exceeded nesting limit; using plain text")
        markdown = soup.get_text("\n\n", strip=True)
    markdown = _EXCESS_BLANK_LINES.sub("\n\n", markdown)
    return ContentMarkdown(markdown=markdown.strip())
