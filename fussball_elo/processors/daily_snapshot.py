"""
Dense daily rating series reconstructed from sparse match observations.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
import logging

import pandas as pd

from fussball_elo.config.settings import SNAPSHOT_WINDOW
from fussball_elo.engines.history import HistoryAccumulator

logger = logging.getLogger(__name__)

DailySeries = List[Tuple[date, float]]

WINDOWS = ('team', 'global')


class DailySnapshotBuilder:
    """
    Forward-fills each team's history over every calendar day of its window.

    Windows:
    - 'team': the team's own first to last observed date
    - 'global': first to last date observed across all teams; days before a
      team's first observation carry its initialization rating

    The last observation of a day wins.
    """

    def __init__(self, window: str = SNAPSHOT_WINDOW):
        if window not in WINDOWS:
            raise ValueError(f"Unknown snapshot window: {window}")
        self.window = window

    def build(self, history: HistoryAccumulator,
              team_order: Optional[Iterable[str]] = None) -> Dict[str, DailySeries]:
        """
        Args:
            history: Per-team observations from the rating fold
            team_order: Output key order (defaults to the history's order)
        """
        teams = list(team_order) if team_order is not None else list(history)

        global_start, global_end = self._global_bounds(history)
        snapshots: Dict[str, DailySeries] = {}

        for team in teams:
            observations = history[team]
            if not observations:
                snapshots[team] = []
                continue

            if self.window == 'global':
                start, end = global_start, global_end
            else:
                start, end = observations[0].date, observations[-1].date

            snapshots[team] = self._forward_fill(
                observations, start, end, history.initial_rating(team)
            )

        logger.info(f"Built daily snapshots for {len(snapshots)} teams ({self.window} window)")
        return snapshots

    @staticmethod
    def _global_bounds(history: HistoryAccumulator) -> Tuple[Optional[date], Optional[date]]:
        firsts = [obs[0].date for obs in history.values() if obs]
        lasts = [obs[-1].date for obs in history.values() if obs]
        if not firsts:
            return None, None
        return min(firsts), max(lasts)

    @staticmethod
    def _forward_fill(observations, start: date, end: date, carried: float) -> DailySeries:
        series: DailySeries = []
        cursor = 0
        current = carried

        for day in pd.date_range(start=start, end=end, freq='D'):
            day = day.date()
            while cursor < len(observations) and observations[cursor].date <= day:
                current = observations[cursor].rating
                cursor += 1
            series.append((day, current))

        return series


def snapshots_to_dict(snapshots: Dict[str, DailySeries]) -> Dict[str, list]:
    """JSON shape: team -> [{date, rating}, ...]"""
    return {
        team: [{'date': day.isoformat(), 'rating': rating} for day, rating in series]
        for team, series in snapshots.items()
    }
