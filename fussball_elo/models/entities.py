"""
Core entity models for matches, team rating state and registry entries.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Any

from fussball_elo.config.elo_config import EloConfig

DedupKey = Tuple[date, str, str]


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC string with a 'Z' suffix."""
    return ts.strftime('%Y-%m-%dT%H:%M:%SZ')


@dataclass(frozen=True)
class MatchRecord:
    """One finished fixture. Timestamps are tz-aware UTC."""
    id: int
    timestamp: datetime
    league: str
    season: str
    home_team: str
    away_team: str
    home_goals: int
    away_goals: int
    matchday: Optional[int] = None

    @property
    def match_date(self) -> date:
        return self.timestamp.date()

    @property
    def dedup_key(self) -> DedupKey:
        return (self.match_date, self.home_team, self.away_team)

    @property
    def outcome(self) -> str:
        """'H' (home win), 'D' (draw), 'A' (away win)"""
        if self.home_goals > self.away_goals:
            return 'H'
        if self.home_goals < self.away_goals:
            return 'A'
        return 'D'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': format_timestamp(self.timestamp),
            'league': self.league,
            'season': self.season,
            'homeTeam': self.home_team,
            'awayTeam': self.away_team,
            'homeGoals': self.home_goals,
            'awayGoals': self.away_goals,
            'matchday': self.matchday if self.matchday is not None else 0,
        }


@dataclass(frozen=True)
class RatingObservation:
    """A point-in-time rating record."""
    date: date
    rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'rating': self.rating}


@dataclass
class TeamRatingState:
    """Rating state of one team for the duration of a run."""
    team: str
    league: str
    initial_rating: float
    rating: float
    matches: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    last_updated: Optional[datetime] = None
    rating_history: List[RatingObservation] = field(default_factory=list)

    @classmethod
    def create(cls, team: str, league: str, config: EloConfig) -> 'TeamRatingState':
        """New team, starting at its league baseline or the global initial rating."""
        start = config.baseline_for(league)
        return cls(team=team, league=league, initial_rating=start, rating=start)

    def record_match(self, new_rating: float, result: str, played_at: datetime):
        """Apply a match result: result is 'W', 'D' or 'L' from this team's side."""
        self.rating = new_rating
        self.matches += 1
        if result == 'W':
            self.wins += 1
        elif result == 'D':
            self.draws += 1
        else:
            self.losses += 1
        self.last_updated = played_at
        self.rating_history.append(RatingObservation(played_at.date(), new_rating))

    def record_regression(self, new_rating: float, on: date):
        self.rating = new_rating
        self.rating_history.append(RatingObservation(on, new_rating))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'team': self.team,
            'rating': self.rating,
            'matches': self.matches,
            'wins': self.wins,
            'draws': self.draws,
            'losses': self.losses,
            'lastUpdated': format_timestamp(self.last_updated) if self.last_updated else '',
            'ratingHistory': [obs.to_dict() for obs in self.rating_history],
        }


@dataclass
class RegistryEntry:
    league: str
    country: str
    matches_played: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'league': self.league, 'country': self.country, 'matchesPlayed': self.matches_played}


@dataclass(frozen=True)
class MatchUpdate:
    """Result of one rating calculation."""
    match_id: int
    home_team: str
    away_team: str
    home_before: float
    away_before: float
    expected_home: float
    actual_home: float
    margin_multiplier: float
    k_factor_used: float
    home_change: float
    away_change: float

    @property
    def home_after(self) -> float:
        return self.home_before + self.home_change

    @property
    def away_after(self) -> float:
        return self.away_before + self.away_change


@dataclass(frozen=True)
class RegressionEvent:
    """A detected season break and the mean-regression pass it triggered."""
    boundary_date: date
    gap_days: int
    teams_regressed: int
