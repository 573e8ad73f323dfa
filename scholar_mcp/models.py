# scholar_mcp/models.py -- Typed records shared by extractors and downloads

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional, Union


class Source(str, Enum):
    """Closed set of remote sources. Each member selects one builder/extractor pair."""

    ARXIV = "arxiv"          # Cool Papers, arXiv listing (HTML)
    VENUE = "venue"          # Cool Papers, venue listing (HTML)
    ARXIV_API = "arxiv-api"  # export.arxiv.org Atom feed
    DBLP = "dblp"            # dblp.org JSON search

    @property
    def is_catalog(self) -> bool:
        return self in (Source.ARXIV, Source.VENUE)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PaperSummary:
    """One panel of a Cool Papers listing."""

    id: str
    source: Source
    rank: int = 0
    title: str = ""
    detail_url: str = ""
    external_url: str = ""
    pdf_url: Optional[str] = None
    pdf_stars: Optional[int] = None
    kimi_stars: Optional[int] = None
    authors: tuple[str, ...] = ()
    abstract: str = ""
    subjects: tuple[str, ...] = ()
    publish_time: Optional[str] = None
    related_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class Paper:
    """One entry of the arXiv or DBLP API."""

    id: str
    source: Source
    title: str = ""
    authors: tuple[str, ...] = ()
    abstract: str = ""
    published: Optional[str] = None
    updated: Optional[str] = None
    categories: tuple[str, ...] = ()
    year: Optional[int] = None
    doi: Optional[str] = None
    journal: Optional[str] = None
    booktitle: Optional[str] = None
    url: Optional[str] = None
    pdf_url: Optional[str] = None


Record = Union[PaperSummary, Paper]


@dataclass(frozen=True)
class SearchRequest:
    source: Source
    query: str
    max_results: Optional[int] = None
    skip: Optional[int] = None
    sort: Optional[int] = None
    # API-source filters; ignored by the HTML catalog.
    author: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    year: Optional[str] = None

    def pagination(self) -> dict:
        return {"max_results": self.max_results, "skip": self.skip, "sort": self.sort}


@dataclass(frozen=True)
class SearchResult:
    source: Source
    query: str
    total: int
    papers: tuple[Record, ...] = ()


@dataclass(frozen=True)
class DownloadResult:
    pdf_url: str
    file_path: str
    file_size: int


@dataclass(frozen=True)
class DownloadSuccess:
    paper: Record
    pdf_url: str
    file_path: str
    file_size: int


@dataclass(frozen=True)
class DownloadFailure:
    paper: Record
    error: str


@dataclass(frozen=True)
class BatchDownloadResult:
    search: SearchResult
    params: dict
    successes: tuple[DownloadSuccess, ...] = ()
    failures: tuple[DownloadFailure, ...] = ()


@dataclass(frozen=True)
class KimiQA:
    question: str
    answer: str


def to_dict(obj) -> dict:
    """Plain-dict view of a record, lists instead of tuples, for JSON output."""
    return _listify(asdict(obj))


def _listify(value):
    if isinstance(value, dict):
        return {k: _listify(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_listify(v) for v in value]
    if isinstance(value, Source):
        return value.value
    return value
