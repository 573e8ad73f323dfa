import asyncio

import httpx
import pytest

from conftest import mock_client
from html_samples import kimi_page
from scholar_mcp import qa
from scholar_mcp.models import KimiQA, Source


def test_only_adjacent_answers_are_paired() -> None:
    html = kimi_page(
        '<p class="faq-q">What problem does it solve?</p>',
        '<div class="faq-a">Issue resolution.</div>',
        '<p class="faq-q">Which datasets?</p>',
        '<p class="note">not an answer</p>',
    )
    assert qa.parse_kimi_html(html) == [KimiQA(question="What problem does it solve?", answer="Issue resolution.")]


def test_pairs_keep_document_order() -> None:
    html = kimi_page(
        '<p class="faq-q">Q1</p><div class="faq-a">A1</div>',
        '<p class="faq-q">Q2</p><div class="faq-a">A2</div>',
        '<p class="faq-q">Q3</p><div class="faq-a">A3</div>',
    )
    assert [(p.question, p.answer) for p in qa.parse_kimi_html(html)] == [("Q1", "A1"), ("Q2", "A2"), ("Q3", "A3")]


def test_empty_sides_are_dropped() -> None:
    html = kimi_page(
        '<p class="faq-q">   </p><div class="faq-a">orphan answer</div>',
        '<p class="faq-q">No answer text</p><div class="faq-a">  </div>',
    )
    assert qa.parse_kimi_html(html) == []


def test_answer_whitespace_before_newlines_is_collapsed() -> None:
    html = kimi_page('<p class="faq-q">  Q  </p><div class="faq-a">\n  Line one   \n  Line two  \n</div>')
    pair = qa.parse_kimi_html(html)[0]
    assert pair.question == "Q"
    assert pair.answer == "Line one\n  Line two"


def test_nested_answer_markup() -> None:
    html = kimi_page('<p class="faq-q">Q</p><div class="faq-a"><p>First</p>\n<ul><li>point</li></ul></div>')
    assert qa.parse_kimi_html(html)[0].answer == "First\npoint"


@pytest.mark.parametrize("html", ["", "<html></html>", kimi_page()])
def test_no_faq_section(html: str) -> None:
    assert qa.parse_kimi_html(html) == []


def test_fetch_requests_kimi_page() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, text=kimi_page('<p class="faq-q">Q</p><div class="faq-a">A</div>'))

    async def run():
        async with mock_client(handler) as client:
            return await qa.fetch_kimi_analysis(Source.VENUE, "ICLR.2024/abc", client=client)

    pairs = asyncio.run(run())
    assert pairs == [KimiQA(question="Q", answer="A")]
    assert seen[0].path == "/venue/kimi"
    assert seen[0].params["paper"] == "ICLR.2024/abc"


@pytest.mark.parametrize("source", [Source.ARXIV_API, Source.DBLP])
def test_api_sources_have_no_kimi_page(source: Source) -> None:
    with pytest.raises(ValueError):
        asyncio.run(qa.fetch_kimi_analysis(source, "x", client=mock_client(lambda r: httpx.Response(200))))
