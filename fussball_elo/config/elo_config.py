"""
Engine configuration: one parameterized Elo variant per run.
"""
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Any
import json
import math
import logging

from fussball_elo.config.settings import (
    ELO_BASE_RATING, ELO_K_FACTOR, ELO_HOME_ADVANTAGE,
    ELO_GOAL_MARGIN_FACTOR, SEASON_GAP_DAYS, REVERSION_RATE
)
from fussball_elo.core.exceptions import ConfigInvalidError, InputMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EloConfig:
    """
    Parameters for the rating engine.

    league_strength multiplies the base K-factor per league code.
    league_baseline is both the initial rating of a team first seen in that
    league and the target it regresses toward at season breaks.
    """
    initial_rating: float = ELO_BASE_RATING
    k_factor: float = ELO_K_FACTOR
    home_advantage: float = ELO_HOME_ADVANTAGE
    goal_margin_factor: bool = ELO_GOAL_MARGIN_FACTOR
    league_strength: Optional[Dict[str, float]] = None
    league_baseline: Optional[Dict[str, float]] = None
    season_regression: Optional[float] = REVERSION_RATE
    season_gap_days: int = SEASON_GAP_DAYS

    def validate(self) -> 'EloConfig':
        """Raise ConfigInvalidError for unusable parameters, return self otherwise."""
        for name in ('initial_rating', 'k_factor', 'home_advantage'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                raise ConfigInvalidError(f"{name} must be a finite number, got {value!r}")

        if self.k_factor <= 0:
            raise ConfigInvalidError(f"k_factor must be > 0, got {self.k_factor}")

        if not isinstance(self.goal_margin_factor, bool):
            raise ConfigInvalidError(f"goal_margin_factor must be true or false, got {self.goal_margin_factor!r}")

        if self.season_regression is not None:
            f = self.season_regression
            if not isinstance(f, (int, float)) or isinstance(f, bool) or not (0.0 <= f < 1.0):
                raise ConfigInvalidError(f"season_regression must be in [0, 1), got {f!r}")

        if not isinstance(self.season_gap_days, int) or self.season_gap_days <= 0:
            raise ConfigInvalidError(f"season_gap_days must be a positive integer, got {self.season_gap_days!r}")

        for name in ('league_strength', 'league_baseline'):
            table = getattr(self, name)
            if table is None:
                continue
            if not isinstance(table, dict):
                raise ConfigInvalidError(f"{name} must be a mapping of league code to number")
            for league, value in table.items():
                if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                    raise ConfigInvalidError(f"{name}[{league}] must be a finite number, got {value!r}")
                if name == 'league_strength' and value <= 0:
                    raise ConfigInvalidError(f"league_strength[{league}] must be > 0, got {value}")

        return self

    @property
    def regression_enabled(self) -> bool:
        return bool(self.season_regression)

    def k_multiplier(self, league: str) -> float:
        """Per-league K multiplier, 1.0 when the table is absent or the league is not listed."""
        if self.league_strength and league in self.league_strength:
            return float(self.league_strength[league])
        return 1.0

    def baseline_for(self, league: Optional[str]) -> float:
        """Initialization and regression target for a league."""
        if self.league_baseline and league in self.league_baseline:
            return float(self.league_baseline[league])
        return float(self.initial_rating)

    def with_overrides(self, **overrides) -> 'EloConfig':
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    # =========================================================================
    # SERIALISATION (camelCase schema of the ratings file)
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EloConfig':
        if not isinstance(data, dict):
            raise ConfigInvalidError("Engine configuration must be a JSON object")

        known = {
            'initialRating', 'kFactor', 'homeAdvantage', 'goalMarginFactor',
            'leagueStrength', 'leagueBaseline', 'seasonRegression', 'seasonGapDays'
        }
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

        defaults = cls()
        config = cls(
            initial_rating=data.get('initialRating', defaults.initial_rating),
            k_factor=data.get('kFactor', defaults.k_factor),
            home_advantage=data.get('homeAdvantage', defaults.home_advantage),
            goal_margin_factor=data.get('goalMarginFactor', defaults.goal_margin_factor),
            league_strength=data.get('leagueStrength'),
            league_baseline=data.get('leagueBaseline'),
            season_regression=data.get('seasonRegression', defaults.season_regression),
            season_gap_days=data.get('seasonGapDays', defaults.season_gap_days),
        )
        return config.validate()

    @classmethod
    def from_file(cls, path) -> 'EloConfig':
        path = Path(path)
        if not path.exists():
            raise InputMissingError(path)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise ConfigInvalidError(f"Config file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'initialRating': self.initial_rating,
            'kFactor': self.k_factor,
            'homeAdvantage': self.home_advantage,
            'goalMarginFactor': self.goal_margin_factor,
        }
        if self.league_strength is not None:
            out['leagueStrength'] = dict(self.league_strength)
        if self.league_baseline is not None:
            out['leagueBaseline'] = dict(self.league_baseline)
        if self.season_regression is not None:
            out['seasonRegression'] = self.season_regression
        out['seasonGapDays'] = self.season_gap_days
        return out
