#!/usr/bin/env python3
# scholar_mcp/server.py -- Scholar MCP Server
#
# Search, download and Kimi FAQ lookup for Cool Papers (arXiv and venue
# listings), plus keyword search over the arXiv and DBLP APIs.
#
# Tools:
#   - search_papers:          search one source, sanitized summaries
#   - download_single_paper:  resolve one paper by id and stream its PDF
#   - download_batch_papers:  search, then download every hit (failures reported)
#   - kimi_analysis:          Kimi FAQ question/answer pairs for one paper
#
# Every tool returns a JSON string. Failures come back as
# {"ok": false, "error": ..., "error_type": ...}, never as an exception.

import json
import logging
import sys
from typing import Annotated, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from . import config, download, qa, search
from .models import PaperSummary, Record, SearchRequest, SearchResult, Source, to_dict

log = logging.getLogger("scholar_mcp")

# =========================================================================
# MCP SERVER
# =========================================================================

mcp = FastMCP(
    "scholar",
    host=config.MCP_HTTP_HOST,
    port=config.MCP_HTTP_PORT,
)

SourceArg = Annotated[
    Source,
    Field(description="arxiv / venue (Cool Papers listings), arxiv-api (arXiv API), dblp (DBLP API)"),
]
MaxResults = Annotated[
    Optional[int],
    Field(ge=1, le=100, description="Page size; 3 for precise targeting, 10-20 for general use"),
]
Skip = Annotated[Optional[int], Field(ge=0, description="Number of results to skip")]
Sort = Annotated[Optional[int], Field(ge=0, le=2, description="0=newest first, 1=most reading stars")]

# Catalog-only fields that callers do not need.
_PRIVATE_FIELDS = ("detail_url", "pdf_stars", "kimi_stars")


def _resolve_log_level(val: Optional[str]) -> int:
    if not val:
        return logging.INFO
    v = val.strip()
    if v.isdigit():
        return int(v)
    return getattr(logging, v.upper(), logging.INFO)


def setup_logging() -> None:
    # stdout carries the stdio transport; logs go to stderr.
    logging.basicConfig(
        level=_resolve_log_level(config.LOG_LEVEL),
        format=config.LOG_FORMAT,
        stream=sys.stderr,
    )


# =========================================================================
# PAYLOAD HELPERS
# =========================================================================


def public_paper(paper: Record) -> dict:
    out = to_dict(paper)
    if isinstance(paper, PaperSummary):
        for key in _PRIVATE_FIELDS:
            out.pop(key, None)
    return out


def public_search(result: SearchResult) -> dict:
    return {
        "source": result.source.value,
        "query": result.query,
        "total": result.total,
        "papers": [public_paper(p) for p in result.papers],
    }


def _paper_id(value: str) -> str:
    paper_id = value.strip()
    if not paper_id:
        raise ValueError("paper_id must not be blank")
    return paper_id


def _error(e: Exception, tool: str) -> str:
    log.error("%s failed: %s: %s", tool, type(e).__name__, e)
    return json.dumps({"ok": False, "error": str(e) or type(e).__name__, "error_type": type(e).__name__})


# =========================================================================
# TOOLS
# =========================================================================


@mcp.tool()
async def search_papers(
    query: Annotated[str, Field(min_length=1, description="Search keywords")],
    source: SourceArg = Source.ARXIV,
    max_results: MaxResults = None,
    skip: Skip = None,
    sort: Sort = None,
    author: Annotated[Optional[str], Field(description="Author filter (arxiv-api, dblp)")] = None,
    category: Annotated[Optional[str], Field(description="arXiv category, e.g. cs.CL (arxiv-api)")] = None,
    start_date: Annotated[Optional[str], Field(description="Submitted after, YYYYMMDDHHMM (arxiv-api)")] = None,
    end_date: Annotated[Optional[str], Field(description="Submitted before, YYYYMMDDHHMM (arxiv-api)")] = None,
    year: Annotated[Optional[str], Field(description="Publication year (dblp)")] = None,
) -> str:
    """
    Search papers and return sanitized summaries with PDF links.

    Returns: JSON with source, query, total and papers
    """
    log.info("search: %r source=%s show=%s skip=%s sort=%s", query, source, max_results, skip, sort)
    try:
        request = SearchRequest(
            source=Source(source),
            query=query,
            max_results=max_results,
            skip=skip,
            sort=sort,
            author=author,
            category=category,
            start_date=start_date,
            end_date=end_date,
            year=year,
        )
        result = await search.search_papers(request)
        return json.dumps(public_search(result))
    except Exception as e:
        return _error(e, "search_papers")


@mcp.tool()
async def download_single_paper(
    source: SourceArg,
    paper_id: Annotated[str, Field(min_length=1, description="Paper identifier, e.g. 2412.21139")],
    download_folder: Annotated[str, Field(min_length=1, description="Folder the PDF is saved to")],
    filename: Annotated[Optional[str], Field(description="Optional filename override")] = None,
) -> str:
    """
    Download one PDF by explicit paper id.

    Returns: JSON with mode, and download {paper, pdf_url, file_path, file_size}
    """
    log.info("download: %s/%s -> %s", source, paper_id, download_folder)
    try:
        paper_id = _paper_id(paper_id)
        paper = await search.fetch_paper_detail(Source(source), paper_id)
        result = await download.download_paper(download_folder, paper=paper, filename=filename)
        return json.dumps({
            "mode": "single",
            "download": {
                "paper": public_paper(paper),
                "pdf_url": result.pdf_url,
                "file_path": result.file_path,
                "file_size": result.file_size,
            },
        })
    except Exception as e:
        return _error(e, "download_single_paper")


@mcp.tool()
async def download_batch_papers(
    source: SourceArg,
    query: Annotated[str, Field(min_length=1, description="Keyword query selecting the papers")],
    download_folder: Annotated[str, Field(min_length=1, description="Folder the PDFs are saved to")],
    max_results: MaxResults = None,
    skip: Skip = None,
    sort: Sort = None,
    concurrency: Annotated[
        int, Field(ge=1, le=config.BATCH_CONCURRENCY_MAX, description="Parallel downloads (1 = sequential)")
    ] = 1,
) -> str:
    """
    Search, then download the PDF of every result. One failed paper does not
    stop the others; it is listed under failures with the reason.

    Returns: JSON with mode, search report (with params), successes and failures
    """
    log.info("batch_download: %r source=%s -> %s", query, source, download_folder)
    try:
        request = SearchRequest(
            source=Source(source), query=query.strip(), max_results=max_results, skip=skip, sort=sort
        )
        batch = await download.download_batch(request, download_folder, concurrency=concurrency)
        report = public_search(batch.search)
        report["params"] = batch.params
        return json.dumps({
            "mode": "batch",
            "search": report,
            "successes": [
                {
                    "paper": public_paper(s.paper),
                    "pdf_url": s.pdf_url,
                    "file_path": s.file_path,
                    "file_size": s.file_size,
                }
                for s in batch.successes
            ],
            "failures": [{"paper": public_paper(f.paper), "error": f.error} for f in batch.failures],
        })
    except Exception as e:
        return _error(e, "download_batch_papers")


@mcp.tool()
async def kimi_analysis(
    source: SourceArg,
    paper_id: Annotated[str, Field(min_length=1, description="Paper identifier")],
) -> str:
    """
    Kimi FAQ question/answer pairs for a Cool Papers paper (arxiv or venue).

    Returns: JSON with source, paper_id and faqs [{question, answer}]
    """
    log.info("kimi: %s/%s", source, paper_id)
    try:
        paper_id = _paper_id(paper_id)
        pairs = await qa.fetch_kimi_analysis(Source(source), paper_id)
        return json.dumps({
            "source": Source(source).value,
            "paper_id": paper_id,
            "faqs": [to_dict(p) for p in pairs],
        })
    except Exception as e:
        return _error(e, "kimi_analysis")


# =========================================================================
# SERVER STARTUP
# =========================================================================


def main() -> None:
    setup_logging()
    log.info("Starting Scholar MCP Server (mode=%s)", config.MODE)
    log.info("  Catalog: %s  API timeout: %ss", config.COOL_PAPERS_BASE_URL, config.API_TIMEOUT)
    if config.MODE == "http":
        mcp.run(transport="streamable-http")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
