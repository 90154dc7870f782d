"""
Data quality validation functions.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import math

import pandas as pd

from fussball_elo.config.settings import UNREALISTIC_GOALS
from fussball_elo.core.exceptions import MalformedRecordError
from fussball_elo.models.entities import MatchRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['id', 'date', 'league', 'homeTeam', 'awayTeam', 'homeGoals', 'awayGoals']


def _as_int(value: Any, name: str, record_id: Optional[int]) -> int:
    """Accept ints, integral floats and digit strings; anything else is malformed."""
    if isinstance(value, bool) or value is None:
        raise MalformedRecordError(f"{name} is not numeric: {value!r}", record_id)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        raise MalformedRecordError(f"{name} is not an integer: {value!r}", record_id)
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    raise MalformedRecordError(f"{name} is not numeric: {value!r}", record_id)


def parse_timestamp(value: Any, record_id: Optional[int] = None):
    """ISO-8601 date or datetime -> tz-aware UTC datetime."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecordError(f"date is missing or not a string: {value!r}", record_id)
    try:
        ts = pd.to_datetime(value.strip(), utc=True)
    except (ValueError, TypeError, OverflowError) as e:
        raise MalformedRecordError(f"unparseable date {value!r}: {e}", record_id) from e
    if pd.isna(ts):
        raise MalformedRecordError(f"unparseable date {value!r}", record_id)
    return ts.to_pydatetime()


def parse_match_record(raw: Dict[str, Any]) -> MatchRecord:
    """
    Validate one match-list entry and build a MatchRecord.

    Raises:
        MalformedRecordError: missing fields, bad date, negative or
            non-numeric goals, identical teams
    """
    if not isinstance(raw, dict):
        raise MalformedRecordError(f"record is not an object: {type(raw).__name__}")

    missing = [f for f in REQUIRED_FIELDS if raw.get(f) is None]
    record_id = raw.get('id') if isinstance(raw.get('id'), int) else None
    if missing:
        raise MalformedRecordError(f"missing fields {missing}", record_id)

    match_id = _as_int(raw['id'], 'id', None)
    timestamp = parse_timestamp(raw['date'], match_id)

    home_goals = _as_int(raw['homeGoals'], 'homeGoals', match_id)
    away_goals = _as_int(raw['awayGoals'], 'awayGoals', match_id)
    if home_goals < 0 or away_goals < 0:
        raise MalformedRecordError(f"negative score {home_goals}-{away_goals}", match_id)

    home_team = str(raw['homeTeam']).strip()
    away_team = str(raw['awayTeam']).strip()
    if not home_team or not away_team:
        raise MalformedRecordError("empty team name", match_id)
    if home_team == away_team:
        raise MalformedRecordError(f"home and away team are both {home_team}", match_id)

    matchday = raw.get('matchday')
    matchday = _as_int(matchday, 'matchday', match_id) if matchday is not None else None

    return MatchRecord(
        id=match_id,
        timestamp=timestamp,
        league=str(raw['league']),
        season=str(raw.get('season', '')),
        home_team=home_team,
        away_team=away_team,
        home_goals=home_goals,
        away_goals=away_goals,
        matchday=matchday,
    )


def matches_to_frame(matches: Sequence[MatchRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [{
            'match_id': m.id,
            'match_time_utc': m.timestamp,
            'league_id': m.league,
            'home_team': m.home_team,
            'away_team': m.away_team,
            'home_team_score': m.home_goals,
            'away_team_score': m.away_goals,
        } for m in matches],
        columns=['match_id', 'match_time_utc', 'league_id', 'home_team', 'away_team',
                 'home_team_score', 'away_team_score'],
    )


def validate_match_data(matches_df: pd.DataFrame) -> Tuple[bool, List[str]]:
    """
    Validate match data quality.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues = []

    required_cols = ['match_id', 'home_team', 'away_team',
                     'home_team_score', 'away_team_score', 'league_id']

    for col in required_cols:
        if col not in matches_df.columns:
            issues.append(f"Missing required column: {col}")

    if issues:
        return False, issues

    if len(matches_df) == 0:
        return True, []

    # Check for duplicate match_ids
    duplicates = matches_df['match_id'].duplicated().sum()
    if duplicates > 0:
        issues.append(f"Found {duplicates} duplicate match_ids")

    # Check for invalid scores (negative)
    invalid_scores = (
        (matches_df['home_team_score'] < 0) |
        (matches_df['away_team_score'] < 0)
    ).sum()

    if invalid_scores > 0:
        issues.append(f"Found {invalid_scores} matches with negative scores")

    # Check for unrealistic scores
    unrealistic = (
        (matches_df['home_team_score'] > UNREALISTIC_GOALS) |
        (matches_df['away_team_score'] > UNREALISTIC_GOALS)
    ).sum()

    if unrealistic > 0:
        logger.warning(f"Found {unrealistic} matches with unusually high scores (>{UNREALISTIC_GOALS})")

    # Chronological order
    if not matches_df['match_time_utc'].is_monotonic_increasing:
        issues.append("Matches are not in chronological order")

    is_valid = len(issues) == 0

    return is_valid, issues
