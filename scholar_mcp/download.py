# scholar_mcp/download.py -- PDF download pipeline
#
# Single item: resolve -> check pdf_url -> mkdir -> stream to disk.
# Batch: search, then one single-item download per record. A failing item
# becomes a DownloadFailure; it never aborts the batch.

import asyncio
import logging
import re
from pathlib import Path
from typing import AsyncIterator, Optional, Union

import httpx

from . import config
from .errors import FileSystemError, NoPdfError
from .fetch import get_client, transport_errors
from .models import (
    BatchDownloadResult,
    DownloadFailure,
    DownloadResult,
    DownloadSuccess,
    Record,
    SearchRequest,
    Source,
)
from .search import fetch_paper_detail, search_papers

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9\-_]")


def safe_filename(paper_id: str, override: Optional[str] = None) -> str:
    """Override if given (trimmed), else the id with unsafe characters replaced."""
    if override and override.strip():
        return override.strip()
    return f"{_UNSAFE.sub('_', paper_id) or 'paper'}.pdf"


def unique_filename(name: str, taken: set) -> str:
    """name, or name with -2, -3, ... before the suffix when already taken.

    Comparison is case-insensitive so names stay distinct on
    case-insensitive filesystems. The chosen name is added to taken.
    """
    path = Path(name)
    candidate, n = name, 1
    while candidate.lower() in taken:
        n += 1
        candidate = f"{path.stem}-{n}{path.suffix}"
    taken.add(candidate.lower())
    return candidate


def ensure_dir(path: Union[str, Path]) -> Path:
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Cannot create download folder {path}: {e}", path=str(path)) from e
    return path


class CountingStream:
    """Pass chunks through unchanged while keeping a running byte total."""

    def __init__(self, chunks: AsyncIterator[bytes]):
        self._chunks = chunks
        self.bytes_read = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        chunk = await self._chunks.__anext__()
        self.bytes_read += len(chunk)
        return chunk


def _discard(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
    except OSError as e:
        logger.warning("Could not remove partial file %s: %s", path, e)


async def stream_to_file(
    client: httpx.AsyncClient,
    url: str,
    path: Path,
    timeout: Optional[float] = config.DOWNLOAD_TIMEOUT,
    chunk_size: int = config.DOWNLOAD_CHUNK_SIZE,
) -> int:
    """Stream url into path without holding the body in memory.

    The body goes to "<name>.part" first and replaces path only once the
    transfer has finished, so an existing file at path is untouched by a
    failed attempt. Returns the number of bytes received. The .part file is
    removed on any failure, cancellation included.
    """
    part = path.with_name(path.name + ".part")
    try:
        with transport_errors(url):
            async with client.stream("GET", url, timeout=timeout) as r:
                r.raise_for_status()
                counter = CountingStream(r.aiter_bytes(chunk_size))
                try:
                    with open(part, "wb") as fh:
                        async for chunk in counter:
                            fh.write(chunk)
                except OSError as e:
                    raise FileSystemError(f"Cannot write {part}: {e}", path=str(path)) from e
        try:
            part.replace(path)
        except OSError as e:
            raise FileSystemError(f"Cannot move {part} to {path}: {e}", path=str(path)) from e
    except BaseException:
        _discard(part)
        raise
    return counter.bytes_read


async def download_paper(
    download_dir: Union[str, Path],
    source: Optional[Source] = None,
    paper_id: Optional[str] = None,
    paper: Optional[Record] = None,
    filename: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> DownloadResult:
    """Download one paper's PDF into download_dir.

    Pass either a resolved record (paper=) or source + paper_id to resolve
    it first. Raises NotFoundError, NoPdfError, TransportError or
    FileSystemError.
    """
    client = client or await get_client()
    if paper is None:
        if source is None or not paper_id:
            raise ValueError("download_paper needs a paper or a source and paper_id")
        paper = await fetch_paper_detail(source, paper_id, client=client)

    if not paper.pdf_url:
        raise NoPdfError(paper.id)

    target_dir = ensure_dir(download_dir)
    file_path = (target_dir / safe_filename(paper.id, filename)).resolve()

    logger.info("Downloading %s from %s", paper.id, paper.pdf_url)
    size = await stream_to_file(client, paper.pdf_url, file_path)
    logger.info("Downloaded %d bytes -> %s", size, file_path.name)
    return DownloadResult(pdf_url=paper.pdf_url, file_path=str(file_path), file_size=size)


async def download_batch(
    request: SearchRequest,
    download_dir: Union[str, Path],
    concurrency: int = 1,
    client: Optional[httpx.AsyncClient] = None,
) -> BatchDownloadResult:
    """Search, then download every hit. Per-item errors go to failures.

    concurrency=1 (default) processes records strictly one at a time; a
    larger value bounds a worker pool. Output order follows the search
    order either way.
    """
    client = client or await get_client()
    result = await search_papers(request, client=client)
    total = len(result.papers)
    logger.info("batch_download: %d candidates for %r", total, request.query)

    # Ids may be empty or sanitise to the same name; every item gets its own file.
    taken: set = set()
    filenames = [unique_filename(safe_filename(p.id), taken) for p in result.papers]

    sem = asyncio.Semaphore(max(1, concurrency))

    async def dl_one(paper: Record, filename: str) -> Union[DownloadSuccess, DownloadFailure]:
        async with sem:
            try:
                outcome = await download_paper(download_dir, paper=paper, filename=filename, client=client)
            except Exception as e:
                logger.warning("  %s failed: %s", paper.id or "(no id)", e)
                return DownloadFailure(paper=paper, error=str(e) or type(e).__name__)
            return DownloadSuccess(
                paper=paper,
                pdf_url=outcome.pdf_url,
                file_path=outcome.file_path,
                file_size=outcome.file_size,
            )

    if concurrency <= 1:
        outcomes = [await dl_one(p, f) for p, f in zip(result.papers, filenames)]
    else:
        outcomes = await asyncio.gather(*(dl_one(p, f) for p, f in zip(result.papers, filenames)))

    successes = tuple(o for o in outcomes if isinstance(o, DownloadSuccess))
    failures = tuple(o for o in outcomes if isinstance(o, DownloadFailure))
    logger.info("batch_download complete: %d/%d downloaded, %d failed", len(successes), total, len(failures))
    return BatchDownloadResult(
        search=result,
        params=request.pagination(),
        successes=successes,
        failures=failures,
    )
