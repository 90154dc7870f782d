"""
Season break detection and regression toward the mean.
"""
from datetime import date
from typing import Dict, Optional
import logging

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.models.entities import TeamRatingState, RegressionEvent

logger = logging.getLogger(__name__)


def regress_rating(rating: float, target: float, fraction: float) -> float:
    """Pull a rating a fraction of the way toward its target."""
    return rating + fraction * (target - rating)


class SeasonBoundaryDetector:
    """
    Watches the gap between consecutive matches of the fold.

    A gap of at least `season_gap_days` calendar days marks a season break.
    The break is attached to the date of the match that follows it.
    """

    def __init__(self, config: EloConfig):
        self.config = config
        self.threshold_days = config.season_gap_days
        self.previous_date: Optional[date] = None

    def check(self, match_date: date) -> Optional[int]:
        """
        Advance to the next match date.

        Returns:
            The gap in days when it crosses the threshold, otherwise None.
        """
        previous = self.previous_date
        self.previous_date = match_date

        if previous is None:
            return None

        gap = (match_date - previous).days
        if gap >= self.threshold_days:
            return gap
        return None

    def apply_regression(self, teams: Dict[str, TeamRatingState],
                         boundary_date: date, gap_days: int) -> RegressionEvent:
        """
        Regress every known team once, in first-appearance order.

        Each regressed team gets one history entry dated at the boundary.
        Nothing changes when no regression fraction is configured.
        """
        if not self.config.regression_enabled:
            logger.info(f"Season break of {gap_days} days before {boundary_date} (regression disabled)")
            return RegressionEvent(boundary_date, gap_days, 0)

        fraction = float(self.config.season_regression)
        for state in teams.values():
            target = self.config.baseline_for(state.league)
            state.record_regression(regress_rating(state.rating, target, fraction), boundary_date)

        logger.info(
            f"Season break of {gap_days} days before {boundary_date}: "
            f"regressed {len(teams)} teams by {fraction:.2f}"
        )
        return RegressionEvent(boundary_date, gap_days, len(teams))
