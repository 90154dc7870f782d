"""
Compares the engine's final ranking with an external reference ranking.
Calibration only: never touches engine state.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np
from scipy import stats

from fussball_elo.config.settings import TOP_N_OVERLAP

logger = logging.getLogger(__name__)

RankedPairs = List[Tuple[str, float]]


@dataclass
class ComparisonRow:
    """One reference team and where the engine put it."""
    team: str
    reference_rank: int                       # position in the full reference
    reference_rating: float
    reference_local_rank: Optional[int] = None  # among the matched subset
    engine_name: Optional[str] = None
    engine_rating: Optional[float] = None
    engine_rank: Optional[int] = None         # among the matched subset
    engine_global_rank: Optional[int] = None  # among all engine teams

    @property
    def matched(self) -> bool:
        return self.engine_rank is not None

    @property
    def rank_diff(self) -> Optional[int]:
        if self.engine_rank is None:
            return None
        return self.engine_rank - self.reference_rank


@dataclass
class ValidationResult:
    rows: List[ComparisonRow] = field(default_factory=list)
    reference_size: int = 0
    spearman: float = 0.0
    mean_abs_rank_error: float = 0.0
    top_n: int = TOP_N_OVERLAP
    top_n_overlap: int = 0

    @property
    def matched_count(self) -> int:
        return sum(1 for row in self.rows if row.matched)

    def local_ranks(self) -> Dict[str, int]:
        return {row.team: row.engine_rank for row in self.rows if row.matched}


@dataclass
class RunComparison:
    previous: ValidationResult
    current: ValidationResult

    @property
    def spearman_change(self) -> float:
        return self.current.spearman - self.previous.spearman

    def rank_changes(self) -> Dict[str, Tuple[Optional[int], Optional[int]]]:
        """Reference team -> (previous local rank, current local rank)"""
        old = self.previous.local_ranks()
        new = self.current.local_ranks()
        return {row.team: (old.get(row.team), new.get(row.team)) for row in self.current.rows}


def position_ranks(values: Sequence[float]) -> List[int]:
    """
    1-based rank by descending value; equal values are ranked by position.

    Ties are NOT averaged. This is an accepted approximation of the
    statistical rank.
    """
    order = sorted(range(len(values)), key=lambda i: values[i], reverse=True)
    ranks = [0] * len(values)
    for position, index in enumerate(order):
        ranks[index] = position + 1
    return ranks


def spearman_correlation(x_ranks: Sequence[int], y_ranks: Sequence[int]) -> float:
    """Spearman rho of two rankings; 0.0 when fewer than two items."""
    if len(x_ranks) < 2:
        return 0.0
    rho = stats.spearmanr(x_ranks, y_ranks)[0]
    return float(rho)


class CorrelationValidator:
    """
    Matches engine teams to reference teams via an alias table
    (engine name -> reference name), re-ranks both sides over the matched
    subset and reports agreement.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None, top_n: int = TOP_N_OVERLAP):
        self.aliases = aliases or {}
        self.top_n = top_n

    def _engine_lookup(self, engine_teams: RankedPairs) -> Dict[str, Tuple[str, float, int]]:
        """Reference name -> (engine name, rating, global rank). First engine team wins."""
        ratings = [rating for _, rating in engine_teams]
        global_ranks = position_ranks(ratings)

        lookup: Dict[str, Tuple[str, float, int]] = {}
        for (name, rating), rank in zip(engine_teams, global_ranks):
            key = self.aliases.get(name, name)
            if key in lookup:
                logger.warning(f"Engine teams {lookup[key][0]} and {name} both map to {key}")
                continue
            lookup[key] = (name, rating, rank)
        return lookup

    def validate(self, engine_teams: RankedPairs, reference: RankedPairs) -> ValidationResult:
        """
        Args:
            engine_teams: (team, rating) pairs from the ratings file
            reference: (name, rating) pairs ordered best first
        """
        lookup = self._engine_lookup(engine_teams)

        rows = [
            ComparisonRow(team=name, reference_rank=position + 1, reference_rating=rating)
            for position, (name, rating) in enumerate(reference)
        ]

        matched = []
        for row in rows:
            found = lookup.get(row.team)
            if found is None:
                continue
            row.engine_name, row.engine_rating, row.engine_global_rank = found
            matched.append(row)

        # Re-rank both sides among the matched teams; the reference keeps its own rank too
        engine_local = position_ranks([row.engine_rating for row in matched])
        for local_ref_rank, (row, local_engine_rank) in enumerate(zip(matched, engine_local), start=1):
            row.reference_local_rank = local_ref_rank
            row.engine_rank = local_engine_rank

        result = ValidationResult(rows=rows, reference_size=len(reference), top_n=self.top_n)
        if matched:
            local_ref_ranks = [row.reference_local_rank for row in matched]
            ref_ranks = [row.reference_rank for row in matched]
            result.spearman = spearman_correlation(engine_local, local_ref_ranks)
            result.mean_abs_rank_error = float(np.mean(np.abs(np.array(engine_local) - np.array(ref_ranks))))
            result.top_n_overlap = sum(
                1 for row in matched if row.engine_rank <= self.top_n and row.reference_rank <= self.top_n
            )

        logger.info(
            f"Matched {result.matched_count}/{result.reference_size} reference teams: "
            f"spearman={result.spearman:.4f}, mean abs rank error={result.mean_abs_rank_error:.2f}"
        )
        return result

    def compare_runs(self, previous_teams: RankedPairs, current_teams: RankedPairs,
                     reference: RankedPairs) -> RunComparison:
        """Before/after agreement of two ratings files with the same reference."""
        return RunComparison(
            previous=self.validate(previous_teams, reference),
            current=self.validate(current_teams, reference),
        )
