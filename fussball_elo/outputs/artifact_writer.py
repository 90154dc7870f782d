"""
Builds and writes the three JSON artifacts of a run.

Payloads are assembled in memory first. Files are only written once every
payload exists, each through a temporary file in the target directory that
is then renamed over the final path.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging
import os
import tempfile

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.config.settings import DAILY_FILE, RATINGS_FILE, REGISTRY_FILE
from fussball_elo.core.exceptions import InputMissingError
from fussball_elo.models.entities import RegistryEntry, TeamRatingState, format_timestamp
from fussball_elo.processors.daily_snapshot import DailySeries, snapshots_to_dict

logger = logging.getLogger(__name__)


def build_ratings_payload(config: EloConfig, teams: Sequence[TeamRatingState],
                          matches_processed: int,
                          computed_at: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Ratings file payload. Teams must already be ranked (rating descending).
    """
    computed_at = computed_at or datetime.now(timezone.utc)
    return {
        'config': config.to_dict(),
        'computedAt': format_timestamp(computed_at),
        'matchesProcessed': matches_processed,
        'teams': [state.to_dict() for state in teams],
    }


def build_registry_payload(registry: Dict[str, RegistryEntry]) -> Dict[str, Any]:
    return {team: entry.to_dict() for team, entry in registry.items()}


def build_daily_payload(snapshots: Dict[str, DailySeries]) -> Dict[str, Any]:
    return snapshots_to_dict(snapshots)


def _write_temp_json(payload: Any, path: Path) -> str:
    """Serialise into a temporary file beside `path`; returns the temp file name."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write('\n')
    except BaseException:
        os.remove(tmp_name)
        raise
    return tmp_name


class ArtifactWriter:
    """Writes ratings, daily snapshots and registry into one output directory."""

    def __init__(self, output_dir, ratings_file: str = RATINGS_FILE,
                 daily_file: str = DAILY_FILE, registry_file: str = REGISTRY_FILE):
        self.output_dir = Path(output_dir)
        self.ratings_path = self.output_dir / ratings_file
        self.daily_path = self.output_dir / daily_file
        self.registry_path = self.output_dir / registry_file

    def write(self, ratings: Dict[str, Any], daily: Dict[str, Any],
              registry: Dict[str, Any]) -> List[Path]:
        """
        All three payloads are serialised before any artifact is replaced, so a
        failed write leaves the previous set of files untouched.
        """
        targets = ((ratings, self.ratings_path),
                   (daily, self.daily_path),
                   (registry, self.registry_path))

        staged: List[Tuple[str, Path]] = []
        try:
            for payload, path in targets:
                staged.append((_write_temp_json(payload, path), path))
        except BaseException:
            for tmp_name, _ in staged:
                os.remove(tmp_name)
            raise

        written = []
        for tmp_name, path in staged:
            os.replace(tmp_name, path)
            written.append(path)
            logger.info(f"Wrote {path}")
        return written

    def read_ratings(self) -> Dict[str, Any]:
        return read_ratings_file(self.ratings_path)

    def read_registry(self) -> Dict[str, Any]:
        if not self.registry_path.exists():
            return {}
        return json.loads(self.registry_path.read_text(encoding='utf-8'))


def read_ratings_file(path) -> Dict[str, Any]:
    """Load a ratings artifact written by a previous run."""
    path = Path(path)
    if not path.exists():
        raise InputMissingError(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise InputMissingError(path, f"not valid JSON ({e})") from e
    if not isinstance(data, dict) or not isinstance(data.get('teams'), list):
        raise InputMissingError(path, "not a ratings file (no 'teams' array)")
    return data


def ranked_pairs(ratings: Dict[str, Any]):
    """(team, rating) pairs from a loaded ratings file, in file order."""
    return [(t['team'], float(t['rating'])) for t in ratings['teams']]
