"""
Main processing pipeline: merge, registry, rating fold and daily snapshots.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence
import logging

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.config.league_mappings import LEAGUE_COUNTRY
from fussball_elo.config.settings import LOG_INTERVAL, SNAPSHOT_WINDOW
from fussball_elo.core.data_loader import MatchDataLoader
from fussball_elo.core.exceptions import ConfigInvalidError, MalformedRecordError
from fussball_elo.engines.history import HistoryAccumulator
from fussball_elo.engines.rating_engine import RatingEngine
from fussball_elo.models.entities import MatchRecord, RegistryEntry, TeamRatingState
from fussball_elo.processors.daily_snapshot import DailySnapshotBuilder
from fussball_elo.processors.registry_builder import RegistryBuilder
from fussball_elo.processors.source_merger import SourceMerger
from fussball_elo.utils.validators import matches_to_frame, validate_match_data

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for the processing pipeline."""
    snapshot_window: str = SNAPSHOT_WINDOW
    strict_leagues: bool = False  # Every league must be listed in the league tables
    log_interval: int = LOG_INTERVAL  # Log progress every N matches


@dataclass
class RunSummary:
    """Statistics and recoverable issues of one pipeline run."""
    matches_loaded: int = 0
    matches_merged: int = 0
    matches_processed: int = 0
    records_skipped: int = 0
    merge_warnings: int = 0
    season_breaks: int = 0

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    issues: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


@dataclass
class PipelineResult:
    matches: List[MatchRecord]
    teams: List[TeamRatingState]  # ranked, rating descending
    history: HistoryAccumulator
    snapshots: Dict[str, List]
    registry: Dict[str, RegistryEntry]
    summary: RunSummary
    engine: RatingEngine


class RatingPipeline:
    """
    Orchestrates one batch run.

    Handles:
    - Configuration checks (fatal)
    - Source merging and the team registry
    - The sequential rating fold, skipping malformed matches
    - History and daily snapshot reconstruction
    """

    def __init__(self, elo_config: EloConfig, config: Optional[PipelineConfig] = None):
        self.elo_config = elo_config
        self.config = config or PipelineConfig()

        self.merger = SourceMerger()
        self.registry_builder = RegistryBuilder()
        self.snapshot_builder = DailySnapshotBuilder(self.config.snapshot_window)

    def _check_leagues(self, matches: Sequence[MatchRecord]):
        """
        Strict mode: a league must appear in every configured league table,
        or in the built-in league list when no table is configured.
        """
        tables = {
            name: table for name, table in (
                ('leagueStrength', self.elo_config.league_strength),
                ('leagueBaseline', self.elo_config.league_baseline),
            ) if table is not None
        }
        if not tables:
            tables = {'known leagues': LEAGUE_COUNTRY}

        leagues = list(dict.fromkeys(m.league for m in matches))
        for name, table in tables.items():
            missing = [league for league in leagues if league not in table]
            if missing:
                raise ConfigInvalidError(f"Leagues {missing} are not listed in {name}")

    def run(self, broad: Sequence[MatchRecord], precise: Sequence[MatchRecord],
            load_issues: Optional[List[str]] = None) -> PipelineResult:
        summary = RunSummary(start_time=datetime.now())
        summary.matches_loaded = len(broad) + len(precise)
        if load_issues:
            summary.records_skipped += len(load_issues)
            summary.issues.extend(load_issues)

        self.elo_config.validate()
        if self.config.strict_leagues:
            self._check_leagues(list(broad) + list(precise))

        merged = self.merger.merge(broad, precise)
        summary.matches_merged = len(merged.matches)
        summary.merge_warnings = len(merged.warnings)
        summary.issues.extend(str(w) for w in merged.warnings)

        is_valid, data_issues = validate_match_data(matches_to_frame(merged.matches))
        if not is_valid:
            for issue in data_issues:
                logger.warning(f"Data quality: {issue}")

        registry = self.registry_builder.build(merged.matches)

        engine = RatingEngine(self.elo_config)
        total = len(merged.matches)
        logger.info(f"Starting rating fold over {total} matches")

        for i, match in enumerate(merged.matches, start=1):
            try:
                engine.process_match(match)
            except MalformedRecordError as e:
                logger.warning(f"Skipping match: {e}")
                summary.records_skipped += 1
                summary.issues.append(str(e))

            if i % self.config.log_interval == 0:
                logger.info(f"Progress: {i}/{total} matches ({len(engine.teams)} teams)")

        summary.matches_processed = engine.matches_processed
        summary.season_breaks = len(engine.regression_events)

        history = engine.history()
        ranked = engine.ranked_teams()
        snapshots = self.snapshot_builder.build(history, team_order=[s.team for s in ranked])

        summary.end_time = datetime.now()
        logger.info(
            f"Pipeline complete: {summary.matches_processed} matches, {len(ranked)} teams, "
            f"{summary.records_skipped} skipped, {summary.season_breaks} season breaks "
            f"in {summary.duration_seconds:.1f}s"
        )

        return PipelineResult(
            matches=merged.matches,
            teams=ranked,
            history=history,
            snapshots=snapshots,
            registry=registry,
            summary=summary,
            engine=engine,
        )

    def run_files(self, broad_path, precise_path) -> PipelineResult:
        """Load both match lists (fatal if either is missing), then run."""
        broad, precise = MatchDataLoader().load_sources(broad_path, precise_path)
        return self.run(broad.records, precise.records, broad.skipped + precise.skipped)
