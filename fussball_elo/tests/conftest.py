"""
Shared fixtures for the rating pipeline tests.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.models.entities import MatchRecord


def utc(year, month, day, hour=15, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_match(match_id, when, home, away, home_goals, away_goals, league='PL', season='2023-2024'):
    return MatchRecord(
        id=match_id,
        timestamp=when,
        league=league,
        season=season,
        home_team=home,
        away_team=away,
        home_goals=home_goals,
        away_goals=away_goals,
    )


def raw_match(match_id, date, home, away, home_goals, away_goals, league='PL', season='2023-2024'):
    return {
        'id': match_id,
        'date': date,
        'league': league,
        'season': season,
        'homeTeam': home,
        'awayTeam': away,
        'homeGoals': home_goals,
        'awayGoals': away_goals,
        'matchday': 1,
    }


@pytest.fixture
def default_config():
    return EloConfig(initial_rating=1500.0, k_factor=32.0, home_advantage=75.0, goal_margin_factor=True)


@pytest.fixture
def season_matches():
    """Two short seasons separated by a summer break."""
    start = utc(2023, 8, 12)
    first = [
        make_match(1, start, 'Arsenal', 'Chelsea', 2, 0),
        make_match(2, start + timedelta(days=1), 'Liverpool', 'Everton', 1, 1),
        make_match(3, start + timedelta(days=7), 'Chelsea', 'Liverpool', 0, 3),
        make_match(4, start + timedelta(days=8), 'Everton', 'Arsenal', 2, 1),
    ]
    restart = start + timedelta(days=120)
    second = [
        make_match(5, restart, 'Arsenal', 'Liverpool', 1, 0, season='2024-2025'),
        make_match(6, restart + timedelta(days=3), 'Everton', 'Chelsea', 0, 0, season='2024-2025'),
    ]
    return first + second


@pytest.fixture
def match_files(tmp_path):
    """Broad and precise match lists on disk, overlapping on one fixture."""
    broad = [
        raw_match(1000000, '2024-04-20T15:00:00Z', 'Arsenal', 'Chelsea', 2, 1),
        raw_match(1000001, '2024-05-01T15:00:00Z', 'Team A', 'Team B', 1, 0),
        raw_match(1000002, '2024-05-04T15:00:00Z', 'Chelsea', 'Team A', 0, 0),
    ]
    precise = [
        raw_match(501, '2024-05-01T19:45:00Z', 'Team A', 'Team B', 1, 0),
        raw_match(502, '2024-05-11T16:30:00Z', 'Team B', 'Arsenal', 1, 3),
    ]
    broad_path = tmp_path / 'broad.json'
    precise_path = tmp_path / 'precise.json'
    broad_path.write_text(json.dumps(broad), encoding='utf-8')
    precise_path.write_text(json.dumps(precise), encoding='utf-8')
    return broad_path, precise_path
