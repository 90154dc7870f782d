"""
Loads match lists and raw source dumps into MatchRecords.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any
import json
import logging
import re

import pandas as pd

from fussball_elo.config.league_mappings import (
    league_from_csv_division, season_label_from_code
)
from fussball_elo.config.settings import CSV_ENCODING, CSV_ID_BASE, CSV_KICKOFF_TIME
from fussball_elo.core.exceptions import (
    ConfigInvalidError, InputMissingError, MalformedRecordError
)
from fussball_elo.models.entities import MatchRecord
from fussball_elo.utils.validators import parse_match_record

logger = logging.getLogger(__name__)

CSV_FILE_PATTERN = re.compile(r'^(?P<division>[A-Z]+\d*)_(?P<season>\d{4})\.csv$')
API_FILE_PATTERN = re.compile(r'^(?P<league>[A-Z]+\d*)_(?P<year>\d{4})\.json$')


@dataclass
class LoadResult:
    """Records parsed from one source plus the ones that were skipped."""
    source: str
    records: List[MatchRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise InputMissingError(path)
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError) as e:
        raise InputMissingError(path, f"unreadable ({e})") from e
    except json.JSONDecodeError as e:
        raise InputMissingError(path, f"not valid JSON ({e})") from e


def load_alias_table(path) -> Dict[str, str]:
    """Name alias table: a flat JSON object of source name -> canonical name."""
    data = _read_json(Path(path))
    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise ConfigInvalidError(f"Alias table {path} must be a JSON object of strings")
    return data


class MatchDataLoader:
    """Load and validate match lists for the rating pipeline."""

    def parse_records(self, source: str, raw_records: List[Any]) -> LoadResult:
        result = LoadResult(source=source)

        for raw in raw_records:
            try:
                result.records.append(parse_match_record(raw))
            except MalformedRecordError as e:
                logger.warning(f"Skipping {source} record: {e}")
                result.skipped.append(f"{source}: {e}")

        logger.info(f"Loaded {len(result.records)} {source} matches ({result.skipped_count} skipped)")
        return result

    def load_match_list(self, path, source: str) -> LoadResult:
        """
        Read a match-list JSON array.

        Raises:
            InputMissingError: file missing, unreadable, or not an array
        """
        path = Path(path)
        data = _read_json(path)
        if not isinstance(data, list):
            raise InputMissingError(path, "expected a JSON array of matches")
        return self.parse_records(source, data)

    def load_sources(self, broad_path, precise_path) -> Tuple[LoadResult, LoadResult]:
        """Read both sources concurrently; both are fully loaded before returning."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            broad_future = executor.submit(self.load_match_list, broad_path, 'broad')
            precise_future = executor.submit(self.load_match_list, precise_path, 'precise')
            return broad_future.result(), precise_future.result()


# =============================================================================
# RAW SOURCE PARSERS
# =============================================================================

def _clean_header(name: str) -> str:
    # UTF-8 byte order mark, as seen through a latin-1 decode
    return name.replace('ï»¿', '').lstrip('\ufeff').strip()


def _cell(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ''


def parse_csv_date(value: Any) -> Optional[datetime]:
    """
    football-data.co.uk dates: DD/MM/YY or DD/MM/YYYY, stamped at 15:00 UTC.
    Two digit years above 50 are 19xx.
    """
    if not isinstance(value, str):
        return None
    parts = value.strip().split('/')
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    day, month, year = (int(p) for p in parts)
    if len(parts[2]) == 2:
        year += 1900 if year > 50 else 2000
    if not (1 <= day <= 31 and 1 <= month <= 12) or year < 1900:
        return None

    hour, minute, second = (int(p) for p in CSV_KICKOFF_TIME.split(':'))
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return None


def _is_score(value) -> bool:
    """Non-negative whole number of goals."""
    return not pd.isna(value) and value >= 0 and float(value).is_integer()


def parse_football_data_csv(path, division: str, season_code: str,
                            aliases: Optional[Dict[str, str]] = None,
                            id_start: int = CSV_ID_BASE) -> Tuple[List[MatchRecord], int]:
    """
    Parse one football-data.co.uk season CSV (e.g. E0_2324.csv).

    Returns:
        Tuple of (records, skipped_row_count)
    """
    aliases = aliases or {}
    league = league_from_csv_division(division) or division
    season = season_label_from_code(season_code)

    df = pd.read_csv(path, encoding=CSV_ENCODING, dtype=str, keep_default_na=False)
    df.columns = [_clean_header(c) for c in df.columns]

    missing = [c for c in ('Date', 'HomeTeam', 'AwayTeam', 'FTHG', 'FTAG') if c not in df.columns]
    if missing:
        logger.warning(f"{path}: missing columns {missing}, file skipped")
        return [], len(df)

    home_goals = pd.to_numeric(df['FTHG'], errors='coerce')
    away_goals = pd.to_numeric(df['FTAG'], errors='coerce')

    records = []
    skipped = 0
    next_id = id_start

    for i, row in df.iterrows():
        home = _cell(row['HomeTeam'])
        away = _cell(row['AwayTeam'])
        timestamp = parse_csv_date(row['Date'])

        if not home or not away or timestamp is None \
                or not _is_score(home_goals[i]) or not _is_score(away_goals[i]):
            skipped += 1
            continue

        records.append(MatchRecord(
            id=next_id,
            timestamp=timestamp,
            league=league,
            season=season,
            home_team=aliases.get(home, home),
            away_team=aliases.get(away, away),
            home_goals=int(home_goals[i]),
            away_goals=int(away_goals[i]),
            matchday=0,
        ))
        next_id += 1

    logger.info(f"Parsed {len(records)} matches from {Path(path).name} ({skipped} rows skipped)")
    return records, skipped


def parse_football_data_api(raw: Dict[str, Any], league: str, season_year: int) -> List[MatchRecord]:
    """Parse a football-data.org v4 competition matches response."""
    records = []
    for m in raw.get('matches') or []:
        full_time = (m.get('score') or {}).get('fullTime') or {}
        if full_time.get('home') is None or full_time.get('away') is None:
            continue
        try:
            records.append(parse_match_record({
                'id': m.get('id'),
                'date': m.get('utcDate'),
                'league': league,
                'season': f"{season_year}-{season_year + 1}",
                'homeTeam': (m.get('homeTeam') or {}).get('name'),
                'awayTeam': (m.get('awayTeam') or {}).get('name'),
                'homeGoals': full_time['home'],
                'awayGoals': full_time['away'],
                'matchday': m.get('matchday'),
            }))
        except MalformedRecordError as e:
            logger.warning(f"Skipping API match for {league} {season_year}: {e}")
    return records


def import_csv_directory(input_dir, aliases: Optional[Dict[str, str]] = None) -> List[MatchRecord]:
    """Parse every <DIV>_<SEASON>.csv in a directory, ids assigned in season order."""
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise InputMissingError(input_dir, "not a directory")

    files = []
    for path in input_dir.iterdir():
        found = CSV_FILE_PATTERN.match(path.name)
        if found:
            files.append((found['season'], found['division'], path))

    # Season codes like '9900' sort before '0001' by their label
    files.sort(key=lambda f: (season_label_from_code(f[0]), f[1]))

    all_records: List[MatchRecord] = []
    next_id = CSV_ID_BASE
    for season_code, division, path in files:
        records, _ = parse_football_data_csv(path, division, season_code, aliases, next_id)
        all_records.extend(records)
        next_id += len(records)

    all_records.sort(key=lambda m: (m.timestamp, m.id))
    logger.info(f"Imported {len(all_records)} matches from {len(files)} CSV files")
    return all_records


def import_api_directory(input_dir) -> List[MatchRecord]:
    """Parse every <LEAGUE>_<YEAR>.json football-data.org dump in a directory."""
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise InputMissingError(input_dir, "not a directory")

    all_records: List[MatchRecord] = []
    for path in sorted(input_dir.iterdir()):
        found = API_FILE_PATTERN.match(path.name)
        if not found:
            continue
        all_records.extend(parse_football_data_api(_read_json(path), found['league'], int(found['year'])))

    all_records.sort(key=lambda m: (m.timestamp, m.id))
    logger.info(f"Imported {len(all_records)} matches from API dumps in {input_dir}")
    return all_records


def save_match_list(matches: List[MatchRecord], path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([m.to_dict() for m in matches], indent=2, ensure_ascii=False),
                    encoding='utf-8')
    logger.info(f"Saved {len(matches)} matches to {path}")
    return path
