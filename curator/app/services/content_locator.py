from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

LocatorHeuristic = Literal["article", "main", "class_keyword", "id_keyword", "body", "document"]

CONTENT_CLASS_KEYWORDS: tuple[str, ...] = (
    "post-content",
    "article-content",
    "entry-content",
    "content-body",
    "story-body",
)
CONTENT_ID_KEYWORDS: tuple[str, ...] = ("content", "article", "post", "main")

_TAG_NAME_BOUNDARY = r"(?=[\s/>])"


@dataclass(frozen=True)
class LocatedContent:
    fragment: str
    heuristic: LocatorHeuristic


# Tag bodies never span `<` or `>`, which keeps scans linear on unterminated markup.
_ANY_TAG = re.compile(rf"<(/?)([a-z][a-z0-9]*){_TAG_NAME_BOUNDARY}[^<>]*>", re.IGNORECASE)


def _tag_opening_pattern(tag_name: str) -> re.Pattern[str]:
    return re.compile(rf"<{tag_name}{_TAG_NAME_BOUNDARY}[^<>]*>", re.IGNORECASE)


def _attribute_opening_pattern(attribute: str, keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(
        rf"<[a-z][a-z0-9]*{_TAG_NAME_BOUNDARY}[^<>]*?(?<![\w-]){attribute}\s*=\s*"
        rf"(?:\"[^\"<>]*(?:{alternatives})[^\"<>]*\"|'[^'<>]*(?:{alternatives})[^'<>]*')"
        rf"[^<>]*>",
        re.IGNORECASE,
    )


_ARTICLE_OPENING = _tag_opening_pattern("article")
_MAIN_OPENING = _tag_opening_pattern("main")
_BODY_OPENING = _tag_opening_pattern("body")
_CLASS_KEYWORD_OPENING = _attribute_opening_pattern("class", CONTENT_CLASS_KEYWORDS)
_ID_KEYWORD_OPENING = _attribute_opening_pattern("id", CONTENT_ID_KEYWORDS)


def _first_element(html: str, opening: re.Pattern[str]) -> str | None:
    """Return the first opening match together with its balanced closing tag."""
    candidates = list(opening.finditer(html))
    if not candidates:
        return None
    close_ends = _pair_elements(html, candidates[0].start())
    for match in candidates:
        if match.group(0).endswith("/>"):
            return match.group(0)
        end = close_ends.get(match.start())
        if end is not None:
            return html[match.start() : end]
    return None


def _pair_elements(html: str, start: int) -> dict[int, int]:
    """Map each opening tag offset to the end offset of its same-name closing tag."""
    open_offsets: dict[str, list[int]] = {}
    close_ends: dict[int, int] = {}
    for token in _ANY_TAG.finditer(html, start):
        name = token.group(2).lower()
        if token.group(1):
            pending = open_offsets.get(name)
            if pending:
                close_ends[pending.pop()] = token.end()
        elif not token.group(0).endswith("/>"):
            open_offsets.setdefault(name, []).append(token.start())
    return close_ends


# Ordered by confidence: explicit semantic markup, then naming conventions,
# then the page body. The first heuristic with any match wins regardless of
# where in the document a lower-ranked candidate appears.
_HEURISTICS: tuple[tuple[LocatorHeuristic, Callable[[str], str | None]], ...] = (
    ("article", lambda html: _first_element(html, _ARTICLE_OPENING)),
    ("main", lambda html: _first_element(html, _MAIN_OPENING)),
    ("class_keyword", lambda html: _first_element(html, _CLASS_KEYWORD_OPENING)),
    ("id_keyword", lambda html: _first_element(html, _ID_KEYWORD_OPENING)),
    ("body", lambda html: _first_element(html, _BODY_OPENING)),
)


def locate_with_heuristic(html: str) -> LocatedContent:
    for name, heuristic in _HEURISTICS:
        fragment = heuristic(html)
        if fragment is not None:
            return LocatedContent(fragment=fragment, heuristic=name)
    return LocatedContent(fragment=html, heuristic="document")


def locate_main_content(html: str) -> str:
    return locate_with_heuristic(html).fragment
