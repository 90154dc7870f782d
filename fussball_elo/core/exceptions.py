"""
Error taxonomy for the rating pipeline.

Fatal errors (InputMissingError, ConfigInvalidError) abort a run before any
artifact is written. MalformedRecordError is raised per record and caught by
the pipeline, which skips the record and counts it. MergeAmbiguityWarning is
never raised; the merger collects instances of it.
"""
from typing import Optional


class FussballEloError(Exception):
    """Base class for all pipeline errors."""


class InputMissingError(FussballEloError):
    """A required source artifact cannot be located or read."""

    def __init__(self, path, reason: str = "not found"):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Required input {self.path}: {reason}")


class ConfigInvalidError(FussballEloError):
    """Engine or pipeline configuration is unusable."""


class MalformedRecordError(FussballEloError):
    """A single match record failed validation."""

    def __init__(self, message: str, record_id: Optional[int] = None):
        self.record_id = record_id
        prefix = f"Match {record_id}: " if record_id is not None else ""
        super().__init__(prefix + message)


class MergeAmbiguityWarning(UserWarning):
    """A dedup key matched more than one record inside the same source."""

    def __init__(self, source: str, key, kept_id: int, dropped_id: int):
        self.source = source
        self.key = key
        self.kept_id = kept_id
        self.dropped_id = dropped_id
        match_date, home, away = key
        super().__init__(
            f"{source} source has more than one record for {match_date} {home} vs {away}: "
            f"kept {kept_id}, dropped {dropped_id}"
        )
