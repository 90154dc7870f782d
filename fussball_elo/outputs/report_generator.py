"""
Generate human-readable reports from the rating artifacts.
"""

import pandas as pd
from typing import Any, Dict, Optional
import logging

from fussball_elo.calculators.correlation_validator import RunComparison, ValidationResult
from fussball_elo.config.league_mappings import get_league_label

logger = logging.getLogger(__name__)


class ReportGenerator:
    """
    Generate reports and summaries from a ratings file and team registry.
    """

    def __init__(self, ratings: Dict[str, Any], registry: Optional[Dict[str, Any]] = None):
        self.ratings = ratings
        self.registry = registry or {}

    def _teams_frame(self) -> pd.DataFrame:
        rows = []
        for team in self.ratings.get('teams', []):
            entry = self.registry.get(team['team'], {})
            rows.append({
                'team': team['team'],
                'league': entry.get('league', '?'),
                'rating': team['rating'],
                'wins': team['wins'],
                'draws': team['draws'],
                'losses': team['losses'],
                'matches': team['matches'],
            })
        return pd.DataFrame(rows, columns=['team', 'league', 'rating', 'wins', 'draws',
                                           'losses', 'matches'])

    def generate_rankings_report(self, top_n: int = 50) -> str:
        """
        Rankings table plus average rating per league.

        Returns: Formatted text report
        """
        df = self._teams_frame()

        if len(df) == 0:
            return "No team ratings available"

        report = []
        report.append("=" * 80)
        report.append(f"TEAM RATINGS - {self.ratings.get('matchesProcessed', 0)} matches, "
                      f"computed {self.ratings.get('computedAt', '?')}")
        report.append("=" * 80)
        report.append("")

        report.append(f"TOP {min(top_n, len(df))} TEAMS:")
        report.append("-" * 80)
        report.append(f"{'Rank':<6} {'Team':<28} {'League':<8} {'Rating':<10} {'W-D-L':<12}")
        report.append("-" * 80)

        for i, row in df.head(top_n).iterrows():
            rank = i + 1
            team = row['team'][:26]
            record = f"{row['wins']}-{row['draws']}-{row['losses']}"
            report.append(f"{rank:<6} {team:<28} {row['league']:<8} {row['rating']:<10.1f} {record:<12}")

        report.append("")

        # League breakdown
        report.append("LEAGUE AVERAGES:")
        report.append("-" * 60)

        league_stats = (
            df.groupby('league', sort=False)['rating']
            .agg(['mean', 'count'])
            .sort_values('mean', ascending=False, kind='mergesort')
        )
        for league, stats in league_stats.iterrows():
            report.append(
                f"{get_league_label(league):<20} {stats['mean']:.1f} ({int(stats['count'])} teams)"
            )

        report.append("")
        report.append("=" * 80)

        return "\n".join(report)

    @staticmethod
    def generate_validation_report(result: ValidationResult,
                                   comparison: Optional[RunComparison] = None) -> str:
        """Engine ranking against the reference ranking."""
        report = []
        report.append("=" * 80)
        report.append("RANKING VALIDATION")
        report.append("=" * 80)
        report.append(f"{'Ref':<5} {'Engine':<8} {'Team':<28} {'Ref rating':<12} {'Rating':<10} {'Diff':<6}")
        report.append("-" * 80)

        for row in result.rows:
            if not row.matched:
                continue
            report.append(
                f"{row.reference_rank:<5} {row.engine_rank:<8} {row.team[:26]:<28} "
                f"{row.reference_rating:<12.0f} {row.engine_rating:<10.1f} {row.rank_diff:+d}"
            )

        unmatched = [row.team for row in result.rows if not row.matched]
        if unmatched:
            report.append("")
            report.append(f"Not found in ratings ({len(unmatched)}): {', '.join(unmatched[:20])}")

        report.append("")
        report.append("SUMMARY:")
        report.append("-" * 60)
        report.append(f"Matched teams:          {result.matched_count}/{result.reference_size}")
        report.append(f"Spearman correlation:   {result.spearman:.4f}")
        report.append(f"Mean abs rank error:    {result.mean_abs_rank_error:.2f}")
        report.append(f"Top {result.top_n} overlap:         {result.top_n_overlap}/{result.top_n}")

        if comparison is not None:
            report.append("")
            report.append("COMPARISON WITH PREVIOUS RUN:")
            report.append("-" * 60)
            report.append(f"Previous spearman:      {comparison.previous.spearman:.4f}")
            report.append(f"Current spearman:       {comparison.current.spearman:.4f}")
            report.append(f"Change:                 {comparison.spearman_change:+.4f}")

        report.append("=" * 80)
        return "\n".join(report)

    @staticmethod
    def generate_run_summary(summary) -> str:
        lines = [
            f"Matches loaded:      {summary.matches_loaded}",
            f"Matches merged:      {summary.matches_merged}",
            f"Matches processed:   {summary.matches_processed}",
            f"Records skipped:     {summary.records_skipped}",
            f"Merge warnings:      {summary.merge_warnings}",
            f"Season breaks:       {summary.season_breaks}",
            f"Duration:            {summary.duration_seconds:.1f}s",
        ]
        return "\n".join(lines)
