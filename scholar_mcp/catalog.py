# scholar_mcp/catalog.py -- Cool Papers listing extractor
#
# The listing has no published schema. Every field is located by CSS
# selector and read independently; a missing fragment resolves to a
# fallback value ("" / [] / 0 / None), never to an exception.

import logging
from typing import Iterable, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from . import config
from .extract import clean_text, first_of, parse_count, parse_int
from .fetch import fetch_text
from .models import PaperSummary, SearchRequest, SearchResult, Source
from .query import catalog_detail_url, catalog_search_url

logger = logging.getLogger(__name__)

PANEL_SELECTOR = "div.papers div.panel.paper"


def split_keywords(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(k.strip() for k in value.split(",") if k.strip())


def absolute_url(href: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith("http"):
        return href
    if href.startswith("//"):
        return "https:" + href
    base = (base_url or config.COOL_PAPERS_BASE_URL).rstrip("/")
    return f"{base}{href}" if href.startswith("/") else f"{base}/{href}"


def paper_id_from_url(url: str) -> str:
    """Identifier from a detail URL, e.g. https://papers.cool/arxiv/2412.21139."""
    path = urlparse(url).path.rstrip("/")
    return path.rsplit("/", 1)[-1] if path else ""


def _texts(nodes: Iterable[Tag]) -> tuple[str, ...]:
    return tuple(t for t in (clean_text(n.get_text()) for n in nodes) if t)


def _attr(node: Optional[Tag], name: str) -> Optional[str]:
    if node is None:
        return None
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value


# =========================================================================
# PANEL
# =========================================================================


def _external_link(panel: Tag) -> Optional[str]:
    for anchor in panel.select("h2.title a"):
        href = (anchor.get("href") or "").strip()
        if href.startswith("http"):
            return href
    return None


def parse_paper_panel(source: Source, panel: Tag, base_url: Optional[str] = None) -> PaperSummary:
    """Build one PaperSummary from a div.panel.paper node."""
    title_link = panel.select_one("a.title-link")
    detail_url = absolute_url(_attr(title_link, "href"), base_url) or ""

    pdf_anchor = panel.select_one("a.title-pdf")
    kimi_sup = panel.select_one("a.title-kimi sup")
    summary = panel.select_one("p.summary")
    date_node = panel.select_one("p.metainfo.date span.date-data")

    return PaperSummary(
        id=(_attr(panel, "id") or "").strip(),
        source=source,
        rank=first_of(lambda: parse_int(panel.select_one("span.index").get_text())) or 0,
        title=clean_text(title_link.get_text()) if title_link is not None else "",
        detail_url=detail_url,
        external_url=first_of(lambda: _external_link(panel), lambda: detail_url) or "",
        pdf_url=absolute_url(_attr(pdf_anchor, "data"), base_url),
        pdf_stars=first_of(lambda: parse_int(pdf_anchor.select_one("sup").get_text())),
        kimi_stars=parse_int(kimi_sup.get_text()) if kimi_sup is not None else None,
        authors=_texts(panel.select("p.metainfo.authors a.author")),
        abstract=clean_text(summary.get_text()) if summary is not None else "",
        subjects=_texts(panel.select("p.metainfo.subjects a")),
        publish_time=first_of(lambda: clean_text(date_node.get_text())),
        related_keywords=split_keywords(_attr(panel, "keywords")),
    )


# =========================================================================
# PAGE
# =========================================================================


def parse_search_html(
    source: Source, query: str, html: str, base_url: Optional[str] = None
) -> SearchResult:
    """Parse a listing page (search results or a single-paper view)."""
    soup = BeautifulSoup(html or "", "html.parser")
    panels = soup.select(PANEL_SELECTOR)
    papers = tuple(parse_paper_panel(source, panel, base_url) for panel in panels)

    total = first_of(
        lambda: parse_count(soup.select_one("p.info").get_text()),
        lambda: len(papers),
    )
    logger.debug("parsed %d panels from %s listing (total=%s)", len(papers), source.value, total)
    return SearchResult(source=source, query=query, total=max(total or 0, 0), papers=papers)


# =========================================================================
# FETCH + PARSE
# =========================================================================


async def search(client: httpx.AsyncClient, request: SearchRequest) -> SearchResult:
    html = await fetch_text(client, catalog_search_url(request), timeout=None)
    result = parse_search_html(request.source, request.query, html)
    logger.info(
        "Cool Papers %s: %r -> %d papers (total=%d)",
        request.source.value, request.query, len(result.papers), result.total,
    )
    return result


async def lookup(client: httpx.AsyncClient, source: Source, paper_id: str) -> SearchResult:
    html = await fetch_text(client, catalog_detail_url(source, paper_id), timeout=None)
    return parse_search_html(source, paper_id, html)
