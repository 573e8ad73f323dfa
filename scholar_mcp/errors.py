# scholar_mcp/errors.py -- Error taxonomy
#
# Extraction anomalies are never errors; these cover network, lookup and
# filesystem failures only.

from typing import Optional


class ScholarError(Exception):
    """Base class for every failure raised by scholar_mcp."""


class TransportError(ScholarError):
    """Network or HTTP failure. Never retried."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class TransportTimeoutError(TransportError):
    """An API-source request exceeded its fixed time bound."""


class NotFoundError(ScholarError):
    """The identifier is absent from a successfully parsed result set."""

    def __init__(self, source: str, paper_id: str):
        super().__init__(f"Paper {paper_id} not found on {source}")
        self.source = source
        self.paper_id = paper_id


class NoPdfError(ScholarError):
    """The record was resolved but carries no PDF reference."""

    def __init__(self, paper_id: str):
        super().__init__(f"Paper {paper_id} does not provide a PDF link")
        self.paper_id = paper_id


class FileSystemError(ScholarError):
    """Destination directory or file could not be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
