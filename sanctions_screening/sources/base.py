"""Source gateway contract and shared HTTP plumbing."""

from typing import Optional, Protocol, runtime_checkable

import httpx
import structlog

from ..exceptions import CandidateParseError, SourceError
from ..models import EntityQuery, MatchCandidate

logger = structlog.get_logger()


@runtime_checkable
class SourceGateway(Protocol):
    """A watchlist provider the screener can query."""

    source_id: str

    async def screen(self, query: EntityQuery) -> list[MatchCandidate]:
        ...


class HTTPSource:
    """Base for sources reached over HTTP.

    Subclasses implement ``screen`` using ``_get``/``_post`` and build
    candidates with ``_parse_records``.
    """

    source_id: str = ""

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
    ):
        self.endpoint = endpoint
        self.client = client
        self.api_key = api_key

    def _auth_headers(self) -> dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                self.source_id, f"HTTP {e.response.status_code} from {url}"
            ) from e
        except httpx.HTTPError as e:
            raise SourceError(self.source_id, f"request failed: {e!r}") from e
        return response

    async def _get(self, url: str, **kwargs) -> httpx.Response:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        return await self._request("GET", url, headers=headers, **kwargs)

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        return await self._request("POST", url, **kwargs)

    def _json(self, response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise SourceError(self.source_id, "response is not valid JSON") from e

    def _parse_records(self, records, **kwargs) -> list[MatchCandidate]:
        """Turn decoded records into candidates, skipping malformed ones."""
        if records is None:
            return []
        if not isinstance(records, list):
            raise SourceError(self.source_id, "expected a list of records")

        candidates = []
        for record in records:
            try:
                candidates.append(
                    MatchCandidate.from_mapping(record, self.source_id, **kwargs)
                )
            except CandidateParseError as e:
                logger.warning(
                    "Skipping malformed candidate",
                    source=self.source_id,
                    reason=str(e)
                )
        return candidates

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_id={self.source_id!r}, endpoint={self.endpoint!r})"
