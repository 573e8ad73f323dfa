# scholar_mcp/config.py -- Environment configuration
#
# Everything is read once at import time. Override with environment
# variables; no config file is consulted.

import os
from typing import Optional


def _get_float(env_var: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    if value.strip().lower() in ("none", "off"):
        return None
    try:
        return float(value)
    except ValueError:
        return default


def _get_int(env_var: str, default: int) -> int:
    value = os.getenv(env_var)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# =========================================================================
# REMOTE ENDPOINTS
# =========================================================================

COOL_PAPERS_BASE_URL = os.getenv("COOL_PAPERS_BASE_URL", "https://papers.cool").rstrip("/")
ARXIV_API_URL = os.getenv("ARXIV_API_URL", "http://export.arxiv.org/api/query")
DBLP_API_URL = os.getenv("DBLP_API_URL", "https://dblp.org/search/publ/api")
# Single records are served at {DBLP_RECORD_URL}/{key}.xml
DBLP_RECORD_URL = os.getenv("DBLP_RECORD_URL", "https://dblp.org/rec").rstrip("/")

USER_AGENT = os.getenv(
    "SCHOLAR_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
)

# =========================================================================
# TIMEOUTS (seconds)
# =========================================================================

# Catalog page fetches run without a timeout; API sources are bounded.
API_TIMEOUT = _get_float("API_TIMEOUT", 15.0)
# httpx applies this per read, not to the whole transfer.
DOWNLOAD_TIMEOUT = _get_float("DOWNLOAD_TIMEOUT", 90.0)

# =========================================================================
# DOWNLOADS
# =========================================================================

DOWNLOAD_CHUNK_SIZE = _get_int("DOWNLOAD_CHUNK_SIZE", 64 * 1024)
BATCH_CONCURRENCY_MAX = 8

# =========================================================================
# SERVER
# =========================================================================

MCP_HTTP_HOST = os.getenv("MCP_HTTP_HOST", "0.0.0.0")
MCP_HTTP_PORT = _get_int("MCP_HTTP_PORT", 9006)
MODE = os.getenv("MODE", "stdio").lower()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s [scholar] %(levelname)s %(name)s: %(message)s")
