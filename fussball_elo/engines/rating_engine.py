"""
Core rating engine implementing the sequential Elo fold.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
import math
import logging

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.config.settings import ELO_RATING_SCALE
from fussball_elo.core.exceptions import MalformedRecordError
from fussball_elo.engines.history import HistoryAccumulator
from fussball_elo.engines.season_boundary import SeasonBoundaryDetector
from fussball_elo.models.entities import (
    MatchRecord, MatchUpdate, RegressionEvent, TeamRatingState
)

logger = logging.getLogger(__name__)

RESULT_CODES = {
    'H': ('W', 'L'),
    'D': ('D', 'D'),
    'A': ('L', 'W'),
}


class RatingEngine:
    """
    Calculates rating updates match by match.

    Key features:
    - Home advantage inside the expectation only
    - Goal-margin multiplier (optional)
    - Per-league K multipliers and baselines
    - Season-break regression toward the baseline

    IMPORTANT: Matches must be fed in chronological order. Ratings depend on
    every earlier match, so the fold is strictly sequential.
    """

    def __init__(self, config: EloConfig):
        self.config = config.validate()
        self.rating_scale = ELO_RATING_SCALE
        self.teams: Dict[str, TeamRatingState] = {}
        self.detector = SeasonBoundaryDetector(config)
        self.regression_events: List[RegressionEvent] = []
        self.matches_processed = 0
        self._last_timestamp: Optional[datetime] = None

    # =========================================================================
    # CORE ELO CALCULATIONS
    # =========================================================================

    def expected_result(self, home_rating: float, away_rating: float) -> float:
        """
        Expected score of the home side (0-1), home advantage included.
        """
        exponent = (away_rating - home_rating - self.config.home_advantage) / self.rating_scale
        return 1.0 / (1.0 + math.pow(10.0, exponent))

    def actual_result(self, home_goals: int, away_goals: int) -> Tuple[float, float]:
        """Win=1, Draw=0.5, Loss=0 for (home, away)."""
        if home_goals > away_goals:
            return 1.0, 0.0
        if home_goals < away_goals:
            return 0.0, 1.0
        return 0.5, 0.5

    def margin_multiplier(self, home_goals: int, away_goals: int) -> float:
        """G = 1 + ln(|goal difference| + 1) when goal-margin scaling is on."""
        if not self.config.goal_margin_factor:
            return 1.0
        return 1.0 + math.log(abs(home_goals - away_goals) + 1)

    def effective_k_factor(self, league: str) -> float:
        return self.config.k_factor * self.config.k_multiplier(league)

    def compute_update(self, match: MatchRecord, home_rating: float, away_rating: float) -> MatchUpdate:
        """Rating change for both sides, without touching state."""
        expected_home = self.expected_result(home_rating, away_rating)
        actual_home, _ = self.actual_result(match.home_goals, match.away_goals)
        g = self.margin_multiplier(match.home_goals, match.away_goals)
        k = self.effective_k_factor(match.league)

        home_change = k * g * (actual_home - expected_home)

        return MatchUpdate(
            match_id=match.id,
            home_team=match.home_team,
            away_team=match.away_team,
            home_before=home_rating,
            away_before=away_rating,
            expected_home=expected_home,
            actual_home=actual_home,
            margin_multiplier=g,
            k_factor_used=k,
            home_change=home_change,
            away_change=-home_change,
        )

    # =========================================================================
    # FOLD
    # =========================================================================

    def get_or_create_team(self, team: str, league: str) -> TeamRatingState:
        state = self.teams.get(team)
        if state is None:
            state = TeamRatingState.create(team, league, self.config)
            self.teams[team] = state
        return state

    def process_match(self, match: MatchRecord) -> MatchUpdate:
        """
        Fold one match into the ratings.

        Raises MalformedRecordError (state untouched) for a match against itself
        or a match older than the previous one.
        """
        if match.home_team == match.away_team:
            raise MalformedRecordError(f"home and away team are both {match.home_team}", match.id)

        if self._last_timestamp is not None and match.timestamp < self._last_timestamp:
            raise MalformedRecordError(
                f"out of chronological order ({match.timestamp} before {self._last_timestamp})",
                match.id
            )
        self._last_timestamp = match.timestamp

        # Season break is applied to teams known before this match
        gap = self.detector.check(match.match_date)
        if gap is not None:
            event = self.detector.apply_regression(self.teams, match.match_date, gap)
            self.regression_events.append(event)

        home = self.get_or_create_team(match.home_team, match.league)
        away = self.get_or_create_team(match.away_team, match.league)

        update = self.compute_update(match, home.rating, away.rating)

        home_result, away_result = RESULT_CODES[match.outcome]
        home.record_match(update.home_after, home_result, match.timestamp)
        away.record_match(update.away_after, away_result, match.timestamp)

        self.matches_processed += 1
        return update

    def process(self, matches: Iterable[MatchRecord]) -> List[MatchUpdate]:
        """Fold a whole sorted sequence. Malformed matches propagate."""
        return [self.process_match(match) for match in matches]

    # =========================================================================
    # RESULTS
    # =========================================================================

    def history(self) -> HistoryAccumulator:
        return HistoryAccumulator(self.teams)

    def ranked_teams(self) -> List[TeamRatingState]:
        """Teams by rating descending; equal ratings keep first-appearance order."""
        return sorted(self.teams.values(), key=lambda s: s.rating, reverse=True)

    def get_all_ratings(self) -> Dict[str, float]:
        return {name: state.rating for name, state in self.teams.items()}
