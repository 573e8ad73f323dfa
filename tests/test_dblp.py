import asyncio

import httpx
import pytest

from conftest import mock_client
from scholar_mcp import dblp
from scholar_mcp.errors import TransportError
from scholar_mcp.models import SearchRequest, Source


def _hit(**info) -> dict:
    return {"@score": "1", "@id": "12345", "info": info, "url": "URL#12345"}


def _payload(*hits, total="2") -> dict:
    hits_block = {"@total": total, "@computed": "2", "@sent": str(len(hits)), "@first": "0"}
    if hits:
        hits_block["hit"] = list(hits)
    return {"result": {"query": "q", "status": {"@code": "200"}, "hits": hits_block}}


def test_parse_payload_maps_fields() -> None:
    data = _payload(_hit(
        authors={"author": [{"@pid": "1", "text": "Ashish Vaswani"}, {"@pid": "2", "text": "Noam Shazeer"}]},
        title="Attention is All\n you Need.",
        venue="NIPS",
        booktitle="NIPS",
        year="2017",
        doi="10.5555/3295222",
        ee="https://proceedings.neurips.cc/paper/2017/hash/3f5ee243.pdf",
        url="https://dblp.org/rec/conf/nips/VaswaniSPUJGKP17",
    ), total="77")
    result = dblp.parse_payload(data, "attention")

    assert result.source is Source.DBLP
    assert result.total == 77
    p = result.papers[0]
    assert p.id == "conf/nips/VaswaniSPUJGKP17"
    assert p.title == "Attention is All you Need."
    assert p.authors == ("Ashish Vaswani", "Noam Shazeer")
    assert p.year == 2017
    assert p.published == "2017-01-01"
    assert p.journal == "NIPS"
    assert p.booktitle == "NIPS"
    assert p.doi == "10.5555/3295222"
    assert p.pdf_url == "https://proceedings.neurips.cc/paper/2017/hash/3f5ee243.pdf"


def test_single_author_object_is_normalized_to_list() -> None:
    data = _payload(_hit(authors={"author": {"@pid": "1", "text": "Solo Author"}}, title="T"))
    assert dblp.parse_payload(data, "q").papers[0].authors == ("Solo Author",)


def test_plain_string_authors() -> None:
    data = _payload(_hit(authors={"author": ["A One", "B Two"]}, title="T"))
    assert dblp.parse_payload(data, "q").papers[0].authors == ("A One", "B Two")


def test_missing_authors_is_empty() -> None:
    assert dblp.parse_payload(_payload(_hit(title="T")), "q").papers[0].authors == ()


def test_id_falls_back_to_hit_id() -> None:
    p = dblp.parse_payload(_payload(_hit(title="T", url="https://example.org/paper")), "q").papers[0]
    assert p.id == "12345"


def test_pdf_url_fallback_chain() -> None:
    ee_list = _hit(title="T", ee=["https://doi.org/10.1/x", "https://arxiv.org/abs/1706.03762"])
    arxiv_url = _hit(title="T", url="https://arxiv.org/abs/1706.03762")
    pdf_url = _hit(title="T", url="https://example.org/paper.pdf")
    nothing = _hit(title="T", url="https://dblp.org/rec/journals/x/Y20")
    papers = dblp.parse_payload(_payload(ee_list, arxiv_url, pdf_url, nothing), "q").papers

    assert papers[0].pdf_url == "https://doi.org/10.1/x"
    assert papers[1].pdf_url == "https://arxiv.org/pdf/1706.03762.pdf"
    assert papers[2].pdf_url == "https://example.org/paper.pdf"
    assert papers[3].pdf_url is None


def test_journal_preferred_over_venue() -> None:
    p = dblp.parse_payload(_payload(_hit(title="T", journal="JMLR", venue=["JMLR", "Other"])), "q").papers[0]
    assert p.journal == "JMLR"


def test_year_not_numeric() -> None:
    p = dblp.parse_payload(_payload(_hit(title="T", year="n/a")), "q").papers[0]
    assert p.year is None
    assert p.published is None


def test_total_falls_back_to_hit_count() -> None:
    data = _payload(_hit(title="A"), _hit(title="B"))
    del data["result"]["hits"]["@total"]
    assert dblp.parse_payload(data, "q").total == 2


def test_malformed_payloads_do_not_raise() -> None:
    for data in (None, [], {}, {"result": None}, {"result": {"hits": {"hit": "junk"}}}):
        result = dblp.parse_payload(data, "q")
        assert result.papers == ()
        assert result.total == 0


def test_single_hit_object() -> None:
    data = {"result": {"hits": {"@total": "1", "hit": _hit(title="Only")}}}
    assert [p.title for p in dblp.parse_payload(data, "q").papers] == ["Only"]


def test_search_requests_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["format"] == "json"
        assert request.url.params["q"] == "attention author:Vaswani"
        return httpx.Response(200, json=_payload(_hit(title="T", url="https://dblp.org/rec/a/b")))

    async def run():
        async with mock_client(handler) as client:
            return await dblp.search(client, SearchRequest(source=Source.DBLP, query="attention", author="Vaswani"))

    result = asyncio.run(run())
    assert [p.id for p in result.papers] == ["a/b"]


RECORD_XML = """<?xml version="1.0" encoding="US-ASCII"?>
<dblp>
<article key="journals/corr/VaswaniSPUJGKP17" mdate="2023-01-01">
<author pid="1">Ashish Vaswani</author>
<author pid="2">Noam
  Shazeer</author>
<title>Attention Is <i>All</i> You Need.</title>
<journal>CoRR</journal>
<volume>abs/1706.03762</volume>
<year>2017</year>
<ee type="oa">https://arxiv.org/abs/1706.03762</ee>
<ee>https://doi.org/10.48550/arXiv.1706.03762</ee>
<url>db/journals/corr/corr1706.html#VaswaniSPUJGKP17</url>
</article>
</dblp>"""


def test_parse_record_xml_maps_fields() -> None:
    result = dblp.parse_record_xml(RECORD_XML, "journals/corr/VaswaniSPUJGKP17")
    assert result.total == 1
    p = result.papers[0]
    assert p.id == "journals/corr/VaswaniSPUJGKP17"
    assert p.source is Source.DBLP
    assert p.title == "Attention Is All You Need."
    assert p.authors == ("Ashish Vaswani", "Noam Shazeer")
    assert p.journal == "CoRR"
    assert p.booktitle is None
    assert p.year == 2017
    assert p.published == "2017-01-01"
    assert p.doi == "10.48550/arXiv.1706.03762"
    assert p.url == "https://dblp.org/rec/journals/corr/VaswaniSPUJGKP17"
    assert p.pdf_url == "https://arxiv.org/abs/1706.03762"


def test_parse_record_without_links() -> None:
    xml = '<dblp><inproceedings key="conf/x/Y20"><title>T</title><booktitle>X</booktitle></inproceedings></dblp>'
    p = dblp.parse_record_xml(xml, "conf/x/Y20").papers[0]
    assert p.booktitle == "X"
    assert p.pdf_url is None
    assert p.doi is None
    assert p.year is None


@pytest.mark.parametrize("xml", ["", "<dblp/>", "<html>not xml</html>"])
def test_parse_record_xml_without_record(xml: str) -> None:
    result = dblp.parse_record_xml(xml, "k")
    assert result.papers == ()
    assert result.total == 0


def test_lookup_requests_record_export() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=RECORD_XML)

    async def run():
        async with mock_client(handler) as client:
            return await dblp.lookup(client, "journals/corr/VaswaniSPUJGKP17")

    result = asyncio.run(run())
    assert seen == ["https://dblp.org/rec/journals/corr/VaswaniSPUJGKP17.xml"]
    assert result.papers[0].id == "journals/corr/VaswaniSPUJGKP17"


def test_lookup_unknown_key_is_transport_error() -> None:
    async def run():
        async with mock_client(lambda request: httpx.Response(404)) as client:
            await dblp.lookup(client, "conf/x/Missing")

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(run())
    assert excinfo.value.status_code == 404


def test_api_records_have_empty_abstract() -> None:
    assert dblp.parse_payload(_payload(_hit(title="T")), "q").papers[0].abstract == ""
    assert dblp.parse_record_xml(RECORD_XML, "k").papers[0].abstract == ""
