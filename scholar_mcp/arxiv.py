# scholar_mcp/arxiv.py -- arXiv Atom API source

import logging
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup, Tag

from . import config
from .extract import clean_text, first_of, parse_count
from .fetch import fetch_text
from .models import Paper, SearchRequest, SearchResult, Source
from .query import arxiv_detail_params, arxiv_search_params

logger = logging.getLogger(__name__)

_VERSION_SUFFIX = re.compile(r"v\d+$")


def arxiv_id_from_url(url: str) -> str:
    """'http://arxiv.org/abs/2101.00001v2' -> '2101.00001' (old-style ids keep their archive)."""
    tail = url.strip().split("/abs/", 1)[-1] if "/abs/" in url else url.strip().rsplit("/", 1)[-1]
    return _VERSION_SUFFIX.sub("", tail)


def abs_to_pdf(url: Optional[str]) -> Optional[str]:
    if url and "/abs/" in url:
        return url.replace("/abs/", "/pdf/", 1)
    return None


def _text(node: Optional[Tag]) -> Optional[str]:
    if node is None:
        return None
    value = node.get_text().strip()
    return value or None


def _link(entry: Tag, **attrs) -> Optional[str]:
    node = entry.find("link", attrs=attrs)
    return node.get("href") if node is not None else None


def parse_entry(entry: Tag) -> Paper:
    raw_id = _text(entry.find("id")) or ""
    landing = first_of(lambda: _link(entry, rel="alternate"), lambda: raw_id)
    published = _text(entry.find("published"))

    return Paper(
        id=arxiv_id_from_url(raw_id) if raw_id else "",
        source=Source.ARXIV_API,
        title=clean_text(_text(entry.find("title"))),
        authors=tuple(
            name for name in (clean_text(_text(a.find("name"))) for a in entry.find_all("author")) if name
        ),
        abstract=clean_text(_text(entry.find("summary"))),
        published=published,
        updated=_text(entry.find("updated")),
        categories=tuple(c.get("term") for c in entry.find_all("category") if c.get("term")),
        year=first_of(lambda: int(published[:4])),
        doi=_text(entry.find("doi")),
        journal=_text(entry.find("journal_ref")),
        url=landing,
        pdf_url=first_of(lambda: _link(entry, title="pdf"), lambda: abs_to_pdf(landing)),
    )


def parse_feed(xml: str, query: str) -> SearchResult:
    soup = BeautifulSoup(xml or "", "xml")
    papers = tuple(parse_entry(e) for e in soup.find_all("entry"))
    total = first_of(
        lambda: parse_count(soup.find("totalResults").get_text()),
        lambda: len(papers),
    )
    return SearchResult(source=Source.ARXIV_API, query=query, total=max(total or 0, 0), papers=papers)


async def search(client: httpx.AsyncClient, request: SearchRequest) -> SearchResult:
    xml = await fetch_text(
        client, config.ARXIV_API_URL, params=arxiv_search_params(request), timeout=config.API_TIMEOUT
    )
    result = parse_feed(xml, request.query)
    logger.info("arXiv API: %r -> %d papers (total=%d)", request.query, len(result.papers), result.total)
    return result


async def lookup(client: httpx.AsyncClient, paper_id: str) -> SearchResult:
    xml = await fetch_text(
        client, config.ARXIV_API_URL, params=arxiv_detail_params(paper_id), timeout=config.API_TIMEOUT
    )
    return parse_feed(xml, paper_id)
