from __future__ import annotations

import time

import pytest

from curator.app.services.content_locator import locate_main_content, locate_with_heuristic


def test_article_wins_over_earlier_main() -> None:
    html = "<main><p>X</p></main><article><p>Y</p></article>"

    located = locate_with_heuristic(html)

    assert located.heuristic == "article"
    assert located.fragment == "<article><p>Y</p></article>"


def test_main_used_when_no_article() -> None:
    html = '<body><nav>menu</nav><main class="wrap"><p>Body</p></main></body>'

    assert locate_main_content(html) == '<main class="wrap"><p>Body</p></main>'


def test_first_article_is_selected() -> None:
    html = "<article>first</article><article>second</article>"

    assert locate_main_content(html) == "<article>first</article>"


def test_class_keyword_balances_nested_divs() -> None:
    html = (
        "<body><div class='sidebar'>ads</div>"
        '<div class="entry-content big"><div><p>One</p></div><p>Two</p></div>'
        "<div>footer</div></body>"
    )

    located = locate_with_heuristic(html)

    assert located.heuristic == "class_keyword"
    assert located.fragment == (
        '<div class="entry-content big"><div><p>One</p></div><p>Two</p></div>'
    )


@pytest.mark.parametrize(
    "keyword",
    ["post-content", "article-content", "entry-content", "content-body", "story-body"],
)
def test_every_class_keyword_is_recognized(keyword: str) -> None:
    html = f'<body><section class="x {keyword}"><p>Text</p></section></body>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "class_keyword"
    assert located.fragment == f'<section class="x {keyword}"><p>Text</p></section>'


def test_class_keyword_outranks_id_keyword() -> None:
    html = '<div id="main-content">A</div><div class="story-body">B</div>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "class_keyword"
    assert located.fragment == '<div class="story-body">B</div>'


@pytest.mark.parametrize("value", ["content", "article-42", "post", "main-column"])
def test_id_keyword_is_matched(value: str) -> None:
    html = f'<body><div id="{value}"><p>Hi</p></div></body>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "id_keyword"
    assert located.fragment == f'<div id="{value}"><p>Hi</p></div>'


def test_data_attributes_do_not_count_as_class() -> None:
    html = '<body><div data-class="post-content">no</div><p>yes</p></body>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "body"


def test_body_fallback() -> None:
    html = '<html><head><title>t</title></head><body class="page"><p>Plain</p></body></html>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "body"
    assert located.fragment == '<body class="page"><p>Plain</p></body>'


def test_whole_document_when_nothing_matches() -> None:
    html = "<p>Just a fragment</p>"

    located = locate_with_heuristic(html)

    assert located.heuristic == "document"
    assert located.fragment == html


def test_unclosed_candidate_is_skipped() -> None:
    html = "<article><p>never closed</p><body><p>fine</p></body>"

    located = locate_with_heuristic(html)

    assert located.heuristic == "body"
    assert located.fragment == "<body><p>fine</p></body>"


def test_tag_name_prefix_is_not_confused() -> None:
    html = "<articles>nope</articles><body>ok</body>"

    assert locate_with_heuristic(html).heuristic == "body"


def test_matching_is_case_insensitive() -> None:
    html = "<HTML><BODY><ARTICLE><P>Loud</P></ARTICLE></BODY></HTML>"

    assert locate_main_content(html) == "<ARTICLE><P>Loud</P></ARTICLE>"


@pytest.mark.parametrize(
    "html",
    [
        "<a " * 20000,
        "<div class='post-content' " * 5000,
        "<article>" * 20000,
        "<div id=\"content\">" * 10000 + "</div>",
    ],
)
def test_malformed_markup_is_located_in_linear_time(html: str) -> None:
    started = time.perf_counter()

    located = locate_with_heuristic(html)

    assert time.perf_counter() - started < 2.0
    assert located.fragment


def test_innermost_closed_candidate_is_found_after_unclosed_ones() -> None:
    html = '<div class="post-content"><div class="post-content"><p>Inner</p></div>'

    located = locate_with_heuristic(html)

    assert located.heuristic == "class_keyword"
    assert located.fragment == '<div class="post-content"><p>Inner</p></div>'
