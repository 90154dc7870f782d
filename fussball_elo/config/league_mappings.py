"""
League classifications: codes, labels, countries and raw-source code mappings.
"""

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY = 'UNK'

# Competition code -> display name
LEAGUE_LABELS: Dict[str, str] = {
    'PL': 'Premier League',
    'PD': 'La Liga',
    'BL1': 'Bundesliga',
    'SA': 'Serie A',
    'FL1': 'Ligue 1',
    'ELC': 'Championship',
    'DED': 'Eredivisie',
    'PPL': 'Primeira Liga',
}

# Competition code -> country code
LEAGUE_COUNTRY: Dict[str, str] = {
    'PL': 'ENG',
    'PD': 'ESP',
    'BL1': 'GER',
    'SA': 'ITA',
    'FL1': 'FRA',
    'ELC': 'ENG',
    'DED': 'NED',
    'PPL': 'POR',
}

# football-data.co.uk division codes -> competition code
CSV_DIVISIONS: Dict[str, str] = {
    'E0': 'PL',
    'SP1': 'PD',
    'D1': 'BL1',
    'I1': 'SA',
    'F1': 'FL1',
    'E1': 'ELC',
    'N1': 'DED',
    'P1': 'PPL',
}


def get_country(league: str) -> str:
    """Country code for a league, 'UNK' when the league is not mapped."""
    return LEAGUE_COUNTRY.get(league, UNKNOWN_COUNTRY)


def get_league_label(league: str) -> str:
    return LEAGUE_LABELS.get(league, league)


def league_from_csv_division(division: str) -> Optional[str]:
    """Map a football-data.co.uk division code (e.g. 'SP1') to a competition code."""
    league = CSV_DIVISIONS.get(division)
    if league is None:
        logger.warning(f"Unknown CSV division code: {division}")
    return league


def season_label_from_code(season_code: str) -> str:
    """
    Convert a four digit season code to a label.

    '2324' -> '2023-2024', '9900' -> '1999-2000'
    """
    if len(season_code) != 4 or not season_code.isdigit():
        return season_code

    start = int(season_code[:2])
    start_year = 1900 + start if start > 50 else 2000 + start
    return f"{start_year}-{start_year + 1}"
