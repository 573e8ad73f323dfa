# scholar_mcp/query.py -- Request targets for every source
#
# The builder trusts its input: bounds are enforced at the tool boundary.
# Optional fields that are None are left out so server defaults apply.

from typing import Optional
from urllib.parse import quote, urlencode

from . import config
from .models import SearchRequest, Source

# arXiv sortBy values, indexed by the catalog's sort flag
_ARXIV_SORT_BY = {0: "submittedDate", 1: "relevance", 2: "lastUpdatedDate"}


def catalog_search_url(request: SearchRequest, base_url: Optional[str] = None) -> str:
    base = (base_url or config.COOL_PAPERS_BASE_URL).rstrip("/")
    params = {"query": request.query}
    if request.max_results is not None:
        params["show"] = str(request.max_results)
    if request.skip is not None:
        params["skip"] = str(request.skip)
    if request.sort is not None:
        params["sort"] = str(request.sort)
    return f"{base}/{request.source.value}/search?{urlencode(params)}"


def catalog_detail_url(source: Source, paper_id: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.COOL_PAPERS_BASE_URL).rstrip("/")
    return f"{base}/{source.value}/{paper_id}"


def kimi_url(source: Source, paper_id: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.COOL_PAPERS_BASE_URL).rstrip("/")
    return f"{base}/{source.value}/kimi?paper={quote(paper_id, safe='')}"


def arxiv_search_params(request: SearchRequest) -> dict:
    """Params for export.arxiv.org/api/query."""
    search_query = request.query
    if request.author:
        search_query += f" au:{request.author}"
    if request.category:
        search_query += f" cat:{request.category}"
    if request.start_date or request.end_date:
        bounds = [d for d in (request.start_date, request.end_date) if d]
        search_query += f" submittedDate:[{' TO '.join(bounds)}]"

    return {
        "search_query": search_query,
        "start": str(request.skip or 0),
        "max_results": str(request.max_results or 10),
        "sortBy": _ARXIV_SORT_BY.get(request.sort if request.sort is not None else 0, "submittedDate"),
        "sortOrder": "descending",
    }


def arxiv_detail_params(paper_id: str) -> dict:
    return {"id_list": paper_id, "max_results": "1"}


def dblp_search_params(request: SearchRequest) -> dict:
    """Params for dblp.org/search/publ/api."""
    q = request.query
    if request.author:
        q += f" author:{request.author}"
    if request.year:
        q += f" year:{request.year}"
    return {
        "q": q.strip(),
        "format": "json",
        "h": str(request.max_results or 10),
        "f": str(request.skip or 0),
    }


def dblp_record_url(key: str, base_url: Optional[str] = None) -> str:
    """XML export of one DBLP record, e.g. .../rec/conf/nips/VaswaniSPUJGKP17.xml."""
    base = (base_url or config.DBLP_RECORD_URL).rstrip("/")
    return f"{base}/{key.strip('/')}.xml"
