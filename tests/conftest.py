"""
Pytest configuration and shared fixtures for sanctions screening tests.
"""

import asyncio

import pytest

from sanctions_screening.models import EntityQuery, EntityType, MatchCandidate


class FakeSource:
    """Source that returns fixed candidates, optionally after a delay."""

    def __init__(self, source_id, candidates=None, delay=0.0):
        self.source_id = source_id
        self.candidates = list(candidates or [])
        self.delay = delay
        self.calls = 0

    async def screen(self, query):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.candidates)


class FailingSource:
    """Source whose call always raises."""

    def __init__(self, source_id, error=None):
        self.source_id = source_id
        self.error = error or ConnectionError(f"{source_id} unreachable")

    async def screen(self, query):
        raise self.error


def make_candidate(name, source_id, score=None, type="INDIVIDUAL", jurisdiction="US", aliases=()):
    return MatchCandidate(
        name=name,
        source_id=source_id,
        type=type,
        jurisdiction=jurisdiction,
        source_score=score,
        aliases=frozenset(aliases),
    )


@pytest.fixture
def john_smith():
    return EntityQuery(name="John Smith", entity_type=EntityType.INDIVIDUAL)
