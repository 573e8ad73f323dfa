# scholar_mcp/search.py -- Source dispatch and detail resolution
#
# Source is a closed enum; adding a source means adding a member and a row
# in each table below.

import logging
from typing import Awaitable, Callable, Optional

import httpx

from . import arxiv, catalog, dblp
from .errors import NotFoundError
from .fetch import get_client
from .models import Record, SearchRequest, SearchResult, Source

logger = logging.getLogger(__name__)

Searcher = Callable[[httpx.AsyncClient, SearchRequest], Awaitable[SearchResult]]
Lookup = Callable[[httpx.AsyncClient, Source, str], Awaitable[SearchResult]]


async def _arxiv_lookup(client: httpx.AsyncClient, source: Source, paper_id: str) -> SearchResult:
    return await arxiv.lookup(client, paper_id)


async def _dblp_lookup(client: httpx.AsyncClient, source: Source, paper_id: str) -> SearchResult:
    # paper_id is the record key, e.g. conf/nips/VaswaniSPUJGKP17
    return await dblp.lookup(client, paper_id)


_SEARCHERS: dict[Source, Searcher] = {
    Source.ARXIV: catalog.search,
    Source.VENUE: catalog.search,
    Source.ARXIV_API: arxiv.search,
    Source.DBLP: dblp.search,
}

_LOOKUPS: dict[Source, Lookup] = {
    Source.ARXIV: catalog.lookup,
    Source.VENUE: catalog.lookup,
    Source.ARXIV_API: _arxiv_lookup,
    Source.DBLP: _dblp_lookup,
}


async def search_papers(
    request: SearchRequest, client: Optional[httpx.AsyncClient] = None
) -> SearchResult:
    """Query Builder -> Document Fetcher -> Record Extractor for one source."""
    client = client or await get_client()
    return await _SEARCHERS[request.source](client, request)


def select_by_id(result: SearchResult, paper_id: str) -> Record:
    for paper in result.papers:
        if paper.id == paper_id:
            return paper
    raise NotFoundError(result.source.value, paper_id)


async def fetch_paper_detail(
    source: Source, paper_id: str, client: Optional[httpx.AsyncClient] = None
) -> Record:
    """Fetch the single-paper view and return the record whose id matches.

    Raises NotFoundError when the page parses but the id is not in it;
    TransportError from the fetch propagates unchanged.
    """
    client = client or await get_client()
    result = await _LOOKUPS[source](client, source, paper_id)
    paper = select_by_id(result, paper_id)
    logger.debug("resolved %s/%s from %d candidates", source.value, paper_id, len(result.papers))
    return paper
