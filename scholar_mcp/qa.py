# scholar_mcp/qa.py -- Kimi FAQ extractor
#
# Questions and answers are sibling elements with no shared id, so a
# question is paired only with the element directly after it.

import logging
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup, Tag

from .fetch import fetch_text, get_client
from .models import KimiQA, Source
from .query import kimi_url

logger = logging.getLogger(__name__)

_SPACE_BEFORE_NEWLINE = re.compile(r"\s+\n")


def _answer_for(question: Tag) -> Optional[Tag]:
    sibling = question.find_next_sibling()
    if sibling is not None and sibling.name == "div" and "faq-a" in (sibling.get("class") or []):
        return sibling
    return None


def parse_kimi_html(html: str) -> list[KimiQA]:
    """Ordered question/answer pairs; pairs with an empty side are dropped."""
    soup = BeautifulSoup(html or "", "html.parser")
    pairs = []
    for q in soup.select("p.faq-q"):
        answer_node = _answer_for(q)
        if answer_node is None:
            continue
        question = q.get_text().strip()
        answer = _SPACE_BEFORE_NEWLINE.sub("\n", answer_node.get_text().strip())
        if question and answer:
            pairs.append(KimiQA(question=question, answer=answer))
    return pairs


async def fetch_kimi_analysis(
    source: Source, paper_id: str, client: Optional[httpx.AsyncClient] = None
) -> list[KimiQA]:
    if not source.is_catalog:
        raise ValueError(f"Kimi analysis is only available for catalog sources, not {source.value}")
    client = client or await get_client()
    html = await fetch_text(client, kimi_url(source, paper_id), timeout=None)
    pairs = parse_kimi_html(html)
    logger.info("kimi: %s/%s -> %d pairs", source.value, paper_id, len(pairs))
    return pairs
