# scholar_mcp/dblp.py -- DBLP JSON API source

import logging
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup, Tag

from . import config
from .extract import clean_text, first_of, parse_count
from .fetch import fetch_json, fetch_text
from .models import Paper, SearchRequest, SearchResult, Source
from .query import dblp_record_url, dblp_search_params

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list:
    """DBLP collapses one-element lists into the bare element."""
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _first_str(value: Any) -> Optional[str]:
    for item in _as_list(value):
        if isinstance(item, dict):
            item = item.get("text")
        if isinstance(item, str) and item.strip():
            return item.strip()
    return None


def _author_names(info: dict) -> tuple[str, ...]:
    raw = (info.get("authors") or {}).get("author")
    names = []
    for author in _as_list(raw):
        name = author.get("text") if isinstance(author, dict) else author
        if name:
            names.append(clean_text(str(name)))
    return tuple(n for n in names if n)


def dblp_key(url: Optional[str]) -> Optional[str]:
    """'https://dblp.org/rec/conf/nips/VaswaniSPUJGKP17' -> 'conf/nips/VaswaniSPUJGKP17'."""
    if not url:
        return None
    parts = url.split("/")
    if "rec" not in parts:
        return None
    key = "/".join(parts[parts.index("rec") + 1:])
    return key or None


def infer_pdf_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if ".pdf" in url:
        return url
    if "arxiv.org" in url and "/abs/" in url:
        return url.replace("/abs/", "/pdf/", 1) + ".pdf"
    return None


def parse_hit(hit: dict) -> Paper:
    info = hit.get("info") if isinstance(hit.get("info"), dict) else {}
    year = first_of(lambda: int(info["year"]))

    return Paper(
        id=first_of(lambda: dblp_key(info.get("url")), lambda: str(hit["@id"])) or "",
        source=Source.DBLP,
        title=clean_text(_first_str(info.get("title"))),
        authors=_author_names(info),
        published=f"{year}-01-01" if year is not None else None,
        year=year,
        journal=first_of(lambda: _first_str(info.get("journal")), lambda: _first_str(info.get("venue"))),
        booktitle=_first_str(info.get("booktitle")),
        doi=_first_str(info.get("doi")),
        url=info.get("url"),
        pdf_url=first_of(lambda: _first_str(info.get("ee")), lambda: infer_pdf_url(info.get("url"))),
    )


def parse_payload(data: Any, query: str) -> SearchResult:
    result = data.get("result") if isinstance(data, dict) else None
    hits_block = (result or {}).get("hits") or {}
    papers = tuple(parse_hit(h) for h in _as_list(hits_block.get("hit")) if isinstance(h, dict))
    total = first_of(
        lambda: parse_count(str(hits_block["@total"])),
        lambda: len(papers),
    )
    return SearchResult(source=Source.DBLP, query=query, total=max(total or 0, 0), papers=papers)


async def search(client: httpx.AsyncClient, request: SearchRequest) -> SearchResult:
    data = await fetch_json(
        client, config.DBLP_API_URL, params=dblp_search_params(request), timeout=config.API_TIMEOUT
    )
    result = parse_payload(data, request.query)
    logger.info("DBLP: %r -> %d papers (total=%d)", request.query, len(result.papers), result.total)
    return result


# =========================================================================
# SINGLE RECORD (XML export)
# =========================================================================


def doi_from_links(links: list[str]) -> Optional[str]:
    for link in links:
        if "doi.org/" in link:
            return link.split("doi.org/", 1)[1] or None
    return None


def _node_text(node: Tag, name: str) -> Optional[str]:
    child = node.find(name)
    if child is None:
        return None
    return clean_text(child.get_text()) or None


def parse_record(node: Tag, base_url: Optional[str] = None) -> Paper:
    """One <article>/<inproceedings>/... element of a record export."""
    key = (node.get("key") or "").strip()
    links = [t for t in (clean_text(e.get_text()) for e in node.find_all("ee")) if t]
    landing = f"{(base_url or config.DBLP_RECORD_URL).rstrip('/')}/{key}" if key else None
    year = first_of(lambda: int(_node_text(node, "year")))

    return Paper(
        id=key,
        source=Source.DBLP,
        title=_node_text(node, "title") or "",
        authors=tuple(t for t in (clean_text(a.get_text()) for a in node.find_all("author")) if t),
        published=f"{year}-01-01" if year is not None else None,
        year=year,
        journal=_node_text(node, "journal"),
        booktitle=_node_text(node, "booktitle"),
        doi=doi_from_links(links),
        url=landing,
        pdf_url=first_of(lambda: links[0], lambda: infer_pdf_url(landing)),
    )


def parse_record_xml(xml: str, key: str) -> SearchResult:
    soup = BeautifulSoup(xml or "", "xml")
    root = soup.find("dblp")
    nodes = root.find_all(recursive=False) if root is not None else []
    papers = tuple(parse_record(n) for n in nodes)
    return SearchResult(source=Source.DBLP, query=key, total=len(papers), papers=papers)


async def lookup(client: httpx.AsyncClient, key: str) -> SearchResult:
    xml = await fetch_text(client, dblp_record_url(key), timeout=config.API_TIMEOUT)
    return parse_record_xml(xml, key)
