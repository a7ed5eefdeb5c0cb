"""Tests for provider adapters, using httpx mock transports."""

import json

import httpx
import pytest

from sanctions_screening.config import Settings
from sanctions_screening.exceptions import SourceError
from sanctions_screening.models import EntityQuery, EntityType, RiskLevel
from sanctions_screening.services import SanctionsScreener
from sanctions_screening.sources import (
    EUSanctionsSource,
    MoovWatchmanSource,
    OFACApiSource,
    StaticListSource,
    UKSanctionsSource,
    UNSanctionsSource,
    build_sources,
    provider_status,
)


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def query():
    return EntityQuery(name="John Smith", entity_type=EntityType.INDIVIDUAL, country="US")


@pytest.mark.asyncio
async def test_ofac_parses_scored_results(query):
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"results": [
            {
                "id": "1",
                "name": "Jon Smith",
                "type": "INDIVIDUAL",
                "matchScore": 0.91,
                "aliases": ["Johnny Smith"],
                "dateOfBirth": "1970-02-02",
            },
            {"id": "2", "type": "INDIVIDUAL"},
            {"id": "3", "name": "Bad Score", "matchScore": 91},
        ]})

    async with mock_client(handler) as client:
        source = OFACApiSource("https://ofac.example/search", client, api_key="secret")
        candidates = await source.screen(query)

    assert seen["params"] == {"name": "John Smith", "type": "INDIVIDUAL"}
    assert seen["auth"] == "Bearer secret"
    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.source_id == "ofac"
    assert candidate.source_score == 0.91
    assert candidate.jurisdiction == "US"
    assert candidate.aliases == {"Johnny Smith"}
    assert candidate.date_of_birth == "1970-02-02"


@pytest.mark.asyncio
async def test_ofac_http_error_raises_source_error(query):
    async with mock_client(lambda request: httpx.Response(503)) as client:
        source = OFACApiSource("https://ofac.example/search", client)
        with pytest.raises(SourceError, match="HTTP 503"):
            await source.screen(query)


@pytest.mark.asyncio
async def test_ofac_invalid_json_raises_source_error(query):
    async with mock_client(lambda request: httpx.Response(200, text="<html>")) as client:
        source = OFACApiSource("https://ofac.example/search", client)
        with pytest.raises(SourceError):
            await source.screen(query)


@pytest.mark.asyncio
async def test_transport_failure_raises_source_error(query):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        source = OFACApiSource("https://ofac.example/search", client)
        with pytest.raises(SourceError):
            await source.screen(query)


@pytest.mark.asyncio
async def test_moov_posts_query_with_basic_auth(query):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization", "")
        return httpx.Response(200, json={"matches": [
            {"name": "John Smith", "type": "INDIVIDUAL", "jurisdiction": "US", "score": 0.97},
        ]})

    async with mock_client(handler) as client:
        source = MoovWatchmanSource("https://moov.example/watchman/", client, "pub", "priv")
        candidates = await source.screen(query)

    assert seen["method"] == "POST"
    assert seen["url"] == "https://moov.example/watchman/search"
    assert seen["body"]["name"] == "John Smith"
    assert seen["body"]["country"] == "US"
    assert seen["auth"].startswith("Basic ")
    assert [c.source_score for c in candidates] == [0.97]
    assert candidates[0].source_id == "moov"


@pytest.mark.asyncio
async def test_uk_feed_scores_name_and_alias_hits(query):
    payload = {"Results": [
        {"Id": "UK1", "Name": "Jon Smith", "Type": "INDIVIDUAL", "Aliases": ["J Smith"]},
        {"Id": "UK2", "Name": "Someone Else", "Type": "INDIVIDUAL"},
        {"Id": "UK3", "Name": "Unknown Alias Match", "Aliases": ["John Smith"]},
        {"Id": "UK4", "Name": None},
    ]}

    async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
        source = UKSanctionsSource("https://uk.example/list.json", client)
        candidates = await source.screen(query)

    scores = {c.name: c.source_score for c in candidates}
    assert set(scores) == {"Jon Smith", "Unknown Alias Match"}
    assert scores["Jon Smith"] == pytest.approx(8 / 9)
    assert scores["Unknown Alias Match"] == 1.0
    assert all(c.jurisdiction == "UK" for c in candidates)


@pytest.mark.asyncio
async def test_alias_hit_on_feed_becomes_finding(query):
    payload = {"Results": [
        {"Id": "UK7", "Name": "Ivan Petrov", "Type": "INDIVIDUAL", "Aliases": ["John Smith"]},
    ]}

    async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
        screener = SanctionsScreener([UKSanctionsSource("https://uk.example/list.json", client)])
        result = await screener.screen(query)

    assert result.source_outcomes["uk"].match_count == 1
    assert [f.representative_name for f in result.findings] == ["Ivan Petrov"]
    assert result.findings[0].best_score == 1.0
    assert result.risk_level == RiskLevel.CRITICAL


EU_XML = b"""<?xml version="1.0"?>
<sanctions>
  <entity>
    <id>EU-1</id>
    <name>Jon Smith</name>
    <type>INDIVIDUAL</type>
    <alias>Johnny Smith</alias>
    <nationality>GB</nationality>
  </entity>
  <entity>
    <id>EU-2</id>
    <name>Acme Holdings</name>
    <type>CORPORATE</type>
  </entity>
  <entity>
    <id>EU-3</id>
  </entity>
</sanctions>
"""


@pytest.mark.asyncio
async def test_eu_xml_feed(query):
    async with mock_client(lambda request: httpx.Response(200, content=EU_XML)) as client:
        source = EUSanctionsSource("https://eu.example/list.xml", client)
        candidates = await source.screen(query)

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.name == "Jon Smith"
    assert candidate.jurisdiction == "EU"
    assert candidate.type == "INDIVIDUAL"
    assert candidate.aliases == {"Johnny Smith"}
    assert candidate.nationality == "GB"


UN_XML = b"""<?xml version="1.0"?>
<consolidatedList>
  <individual>
    <id>UN-1</id>
    <firstName>John</firstName>
    <lastName>Smith</lastName>
  </individual>
  <entity>
    <id>UN-2</id>
    <name>John Smith Trading</name>
  </entity>
</consolidatedList>
"""


@pytest.mark.asyncio
async def test_un_xml_feed(query):
    async with mock_client(lambda request: httpx.Response(200, content=UN_XML)) as client:
        source = UNSanctionsSource("https://un.example/list.xml", client)
        candidates = await source.screen(query)

    by_type = {c.type: c for c in candidates}
    assert by_type["INDIVIDUAL"].name == "John Smith"
    assert by_type["INDIVIDUAL"].jurisdiction == "Global"
    # "johnsmithtrading" vs "johnsmith" is too far apart to be a hit
    assert "CORPORATE" not in by_type


@pytest.mark.asyncio
async def test_malformed_xml_raises_source_error(query):
    async with mock_client(lambda request: httpx.Response(200, content=b"<sanctions><entity>")) as client:
        source = EUSanctionsSource("https://eu.example/list.xml", client)
        with pytest.raises(SourceError, match="invalid XML"):
            await source.screen(query)


@pytest.mark.asyncio
async def test_static_list_source_scores_entries(query):
    from sanctions_screening.sources import WatchlistEntry

    source = StaticListSource("local", [
        WatchlistEntry(id="1", name="John Smith", type="INDIVIDUAL", jurisdiction="US"),
        WatchlistEntry(id="2", name="Maria Garcia", type="INDIVIDUAL", jurisdiction="ES"),
    ])

    candidates = await source.screen(query)

    assert [c.name for c in candidates] == ["John Smith"]
    assert candidates[0].source_score == pytest.approx(1.0)


def test_build_sources_without_credentials_uses_demo_lists():
    client = httpx.AsyncClient()
    sources = build_sources(Settings(), client)
    assert [s.source_id for s in sources] == ["ofac-demo", "eu-demo", "un-demo"]


def test_build_sources_with_credentials():
    client = httpx.AsyncClient()
    settings = Settings(moov_public_key="pub", moov_private_key="priv", ofac_api_key="key")

    sources = build_sources(settings, client)

    assert [s.source_id for s in sources] == ["moov", "ofac", "eu", "un", "uk"]


def test_provider_status():
    status = provider_status(Settings(moov_public_key="pub", moov_private_key="priv", uk_sanctions_api_key="k"))

    assert status == {
        "moov": "configured",
        "ofac": "not_configured",
        "eu": "not_configured",
        "un": "not_configured",
        "uk": "configured",
    }
