"""Exceptions raised by the screening service."""


class ScreeningError(Exception):
    """Base class for screening errors."""


class InvalidQueryError(ScreeningError, ValueError):
    """The entity query cannot be screened (e.g. empty name)."""


class CandidateParseError(ScreeningError, ValueError):
    """A single candidate returned by a source is malformed."""


class SourceError(ScreeningError):
    """A source could not be queried or returned an unusable payload."""

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        super().__init__(f"{source_id}: {message}")
