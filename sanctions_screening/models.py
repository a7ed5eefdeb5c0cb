"""Domain models for sanctions screening."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .exceptions import CandidateParseError


class RiskLevel(str, Enum):
    """Overall risk tier of a screening."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class EntityType(str, Enum):
    """Kind of entity being screened."""
    INDIVIDUAL = "INDIVIDUAL"
    CORPORATE = "CORPORATE"
    VESSEL = "VESSEL"
    AIRCRAFT = "AIRCRAFT"


class SourceStatus(str, Enum):
    """Terminal state of one source call."""
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


# ============ Input ============

@dataclass(frozen=True)
class EntityQuery:
    """Entity to screen. Created once per screening call."""
    name: str
    entity_type: EntityType = EntityType.INDIVIDUAL
    address: Optional[str] = None
    country: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None


# ============ Source output ============

def _optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise CandidateParseError(f"{field_name} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class MatchCandidate:
    """A single unconfirmed hit returned by one source."""
    name: str
    source_id: str
    type: str = ""
    jurisdiction: str = ""
    source_score: Optional[float] = None
    aliases: frozenset[str] = field(default_factory=frozenset)
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise CandidateParseError("candidate name is required")
        if not isinstance(self.source_id, str) or not self.source_id:
            raise CandidateParseError("candidate source_id is required")
        if not isinstance(self.type, str) or not isinstance(self.jurisdiction, str):
            raise CandidateParseError("candidate type and jurisdiction must be strings")

        if self.source_score is not None:
            if isinstance(self.source_score, bool) or not isinstance(self.source_score, (int, float)):
                raise CandidateParseError(f"source_score must be a number, got {self.source_score!r}")
            if not 0.0 <= self.source_score <= 1.0:
                raise CandidateParseError(f"source_score out of range: {self.source_score}")
            object.__setattr__(self, "source_score", float(self.source_score))

        if not isinstance(self.aliases, frozenset):
            if isinstance(self.aliases, str):
                raise CandidateParseError("aliases must be a collection of strings")
            object.__setattr__(self, "aliases", frozenset(self.aliases))
        if not all(isinstance(alias, str) for alias in self.aliases):
            raise CandidateParseError("aliases must be strings")

    @classmethod
    def from_mapping(
        cls,
        data: dict,
        source_id: str,
        *,
        keys: Optional[dict[str, str]] = None,
        defaults: Optional[dict[str, Any]] = None,
    ) -> "MatchCandidate":
        """Build a candidate from a decoded provider record.

        ``keys`` maps candidate fields to the provider's field names and
        ``defaults`` fills fields the provider leaves out. Raises
        CandidateParseError when a field cannot be used.
        """
        if not isinstance(data, dict):
            raise CandidateParseError(f"record must be an object, got {type(data).__name__}")

        keys = keys or {}
        defaults = defaults or {}

        def get(name: str) -> Any:
            value = data.get(keys.get(name, name))
            return defaults.get(name) if value is None else value

        aliases = get("aliases") or []
        if isinstance(aliases, str) or not isinstance(aliases, (list, tuple, set, frozenset)):
            raise CandidateParseError("aliases must be a list")
        if not all(isinstance(alias, str) for alias in aliases):
            raise CandidateParseError("aliases must be strings")

        return cls(
            name=get("name"),
            source_id=source_id,
            type=_optional_str(get("type"), "type") or "",
            jurisdiction=_optional_str(get("jurisdiction"), "jurisdiction") or "",
            source_score=get("source_score"),
            aliases=frozenset(aliases),
            date_of_birth=_optional_str(get("date_of_birth"), "date_of_birth"),
            nationality=_optional_str(get("nationality"), "nationality"),
        )


@dataclass(frozen=True)
class SourceOutcome:
    """How one source call ended."""
    status: SourceStatus
    match_count: int = 0
    error_detail: Optional[str] = None


# ============ Output ============

@dataclass(frozen=True)
class Finding:
    """Candidates from one or more sources merged into one entity."""
    identity_key: str
    best_score: float
    contributing_sources: frozenset[str]
    aliases: frozenset[str]
    representative_name: str


@dataclass(frozen=True)
class ScreeningResult:
    """Consolidated verdict for one screening call."""
    request_id: str
    entity_name: str
    matches_found: bool
    findings: tuple[Finding, ...]
    risk_level: RiskLevel
    recommendations: tuple[str, ...]
    source_outcomes: dict[str, SourceOutcome]
    timestamp: datetime
