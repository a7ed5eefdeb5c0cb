"""Watchlist provider adapters."""

from dataclasses import replace
from typing import Optional
import xml.etree.ElementTree as ET

from defusedxml import DefusedXmlException
import defusedxml.ElementTree as DefusedET
import httpx
import structlog

from ..exceptions import CandidateParseError, SourceError
from ..models import EntityQuery, MatchCandidate
from ..services.matching import DEFAULT_ADMISSION_THRESHOLD, best_name_similarity
from .base import HTTPSource

logger = structlog.get_logger()


# ============ Scored search APIs ============

class OFACApiSource(HTTPSource):
    """OFAC search API. Results carry the provider's own match score."""

    source_id = "ofac"

    async def screen(self, query: EntityQuery) -> list[MatchCandidate]:
        params = {
            "name": query.name,
            "type": query.entity_type.value
        }
        response = await self._get(self.endpoint, params=params)
        data = self._json(response)

        if not isinstance(data, dict):
            raise SourceError(self.source_id, "unexpected response shape")

        return self._parse_records(
            data.get("results"),
            keys={
                "source_score": "matchScore",
                "date_of_birth": "dateOfBirth",
            },
            defaults={"jurisdiction": "US"}
        )


class MoovWatchmanSource(HTTPSource):
    """Moov Watchman search, authenticated with a public/private key pair."""

    source_id = "moov"

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient,
        public_key: str,
        private_key: str
    ):
        super().__init__(endpoint, client)
        self.public_key = public_key
        self.private_key = private_key

    async def screen(self, query: EntityQuery) -> list[MatchCandidate]:
        payload = {
            "name": query.name,
            "address": query.address,
            "country": query.country,
            "dateOfBirth": query.date_of_birth,
            "nationality": query.nationality
        }
        response = await self._post(
            f"{self.endpoint.rstrip('/')}/search",
            json=payload,
            auth=(self.public_key, self.private_key)
        )
        data = self._json(response)

        if not isinstance(data, dict):
            raise SourceError(self.source_id, "unexpected response shape")

        return self._parse_records(
            data.get("matches"),
            keys={
                "source_score": "score",
                "date_of_birth": "dateOfBirth",
            }
        )


# ============ Full list feeds ============

class ListFeedSource(HTTPSource):
    """A source that publishes its whole list; hits are picked by name.

    Each entry is scored by its best name or alias similarity to the query.
    Entries above ``match_threshold`` are returned with that score attached
    as the source score, so an alias hit carries through to consolidation.
    """

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        match_threshold: float = DEFAULT_ADMISSION_THRESHOLD
    ):
        super().__init__(endpoint, client, api_key)
        self.match_threshold = match_threshold

    async def screen(self, query: EntityQuery) -> list[MatchCandidate]:
        response = await self._get(self.endpoint)
        candidates = []
        for candidate in self.parse_entries(response):
            score = best_name_similarity(query.name, candidate.name, candidate.aliases)
            if score > self.match_threshold:
                candidates.append(replace(candidate, source_score=score))
        return candidates

    def parse_entries(self, response: httpx.Response) -> list[MatchCandidate]:
        raise NotImplementedError

    def _parse_xml(self, response: httpx.Response) -> ET.Element:
        try:
            return DefusedET.fromstring(response.content)
        except (ET.ParseError, DefusedXmlException) as e:
            raise SourceError(self.source_id, f"invalid XML: {e}") from e

    def _element_candidate(self, element: ET.Element, name: str, **fields) -> Optional[MatchCandidate]:
        aliases = [
            alias.text.strip()
            for alias in element.iter("alias")
            if alias.text and alias.text.strip()
        ]
        try:
            return MatchCandidate(
                name=name,
                source_id=self.source_id,
                aliases=frozenset(aliases),
                date_of_birth=_text(element, "dateOfBirth"),
                nationality=_text(element, "nationality"),
                **fields
            )
        except CandidateParseError as e:
            logger.warning(
                "Skipping malformed candidate",
                source=self.source_id,
                id=_text(element, "id"),
                reason=str(e)
            )
            return None


def _text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


class UKSanctionsSource(ListFeedSource):
    """UK consolidated list (JSON)."""

    source_id = "uk"

    def parse_entries(self, response: httpx.Response) -> list[MatchCandidate]:
        data = self._json(response)
        if not isinstance(data, dict):
            raise SourceError(self.source_id, "unexpected response shape")

        return self._parse_records(
            data.get("Results"),
            keys={
                "name": "Name",
                "type": "Type",
                "aliases": "Aliases",
                "date_of_birth": "DateOfBirth",
                "nationality": "Nationality",
            },
            defaults={"jurisdiction": "UK"}
        )


class EUSanctionsSource(ListFeedSource):
    """EU financial sanctions list (XML)."""

    source_id = "eu"

    def parse_entries(self, response: httpx.Response) -> list[MatchCandidate]:
        root = self._parse_xml(response)

        candidates = []
        for entity in root.iter("entity"):
            candidate = self._element_candidate(
                entity,
                name=_text(entity, "name") or "",
                type=_text(entity, "type") or "",
                jurisdiction="EU"
            )
            if candidate is not None:
                candidates.append(candidate)
        return candidates


class UNSanctionsSource(ListFeedSource):
    """UN Security Council consolidated list (XML)."""

    source_id = "un"

    def parse_entries(self, response: httpx.Response) -> list[MatchCandidate]:
        root = self._parse_xml(response)

        candidates = []
        for individual in root.iter("individual"):
            name = " ".join(
                part for part in (_text(individual, "firstName"), _text(individual, "lastName"))
                if part
            )
            candidate = self._element_candidate(
                individual,
                name=name,
                type="INDIVIDUAL",
                jurisdiction="Global"
            )
            if candidate is not None:
                candidates.append(candidate)

        for entity in root.iter("entity"):
            candidate = self._element_candidate(
                entity,
                name=_text(entity, "name") or "",
                type="CORPORATE",
                jurisdiction="Global"
            )
            if candidate is not None:
                candidates.append(candidate)

        return candidates
