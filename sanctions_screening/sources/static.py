"""In-memory watchlists, used when no provider is configured."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..models import EntityQuery, MatchCandidate
from ..services.matching import DEFAULT_ADMISSION_THRESHOLD, attribute_score


@dataclass(frozen=True)
class WatchlistEntry:
    """A listed party held in memory."""
    id: str
    name: str
    type: str
    jurisdiction: str
    aliases: tuple[str, ...] = ()
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None


class StaticListSource:
    """Screen against a fixed list of entries.

    Entries are scored on name, aliases and identifying attributes, and the
    score is attached to the candidate as the source's own score.
    """

    def __init__(
        self,
        source_id: str,
        entries: Sequence[WatchlistEntry],
        match_threshold: float = DEFAULT_ADMISSION_THRESHOLD
    ):
        self.source_id = source_id
        self.entries = list(entries)
        self.match_threshold = match_threshold

    async def screen(self, query: EntityQuery) -> list[MatchCandidate]:
        candidates = []
        for entry in self.entries:
            score = attribute_score(
                query,
                entry.name,
                entity_type=entry.type,
                jurisdiction=entry.jurisdiction,
                aliases=entry.aliases,
                date_of_birth=entry.date_of_birth,
                nationality=entry.nationality,
            )
            if score > self.match_threshold:
                candidates.append(MatchCandidate(
                    name=entry.name,
                    source_id=self.source_id,
                    type=entry.type,
                    jurisdiction=entry.jurisdiction,
                    source_score=score,
                    aliases=frozenset(entry.aliases),
                    date_of_birth=entry.date_of_birth,
                    nationality=entry.nationality,
                ))

        return sorted(candidates, key=lambda c: c.source_score, reverse=True)

    def __repr__(self) -> str:
        return f"StaticListSource(source_id={self.source_id!r}, entries={len(self.entries)})"


DEMO_WATCHLISTS: dict[str, list[WatchlistEntry]] = {
    "ofac-demo": [
        WatchlistEntry(
            id="ofac-001",
            name="John Doe",
            type="INDIVIDUAL",
            jurisdiction="US",
            aliases=("Johnny Doe", "J. Doe"),
            date_of_birth="1980-01-01",
            nationality="US",
        ),
        WatchlistEntry(
            id="ofac-002",
            name="XYZ Corporation",
            type="CORPORATE",
            jurisdiction="US",
            aliases=("XYZ Corp", "XYZ Inc"),
        ),
    ],
    "eu-demo": [
        WatchlistEntry(
            id="eu-001",
            name="Jane Smith",
            type="INDIVIDUAL",
            jurisdiction="EU",
            aliases=("J. Smith", "Jane S."),
            date_of_birth="1975-05-15",
            nationality="UK",
        ),
    ],
    "un-demo": [
        WatchlistEntry(
            id="un-001",
            name="ABC Trading Ltd",
            type="CORPORATE",
            jurisdiction="Global",
            aliases=("ABC Trading", "ABC Ltd"),
        ),
    ],
}


def demo_sources(match_threshold: float = DEFAULT_ADMISSION_THRESHOLD) -> list[StaticListSource]:
    return [
        StaticListSource(source_id, entries, match_threshold)
        for source_id, entries in DEMO_WATCHLISTS.items()
    ]
