from datetime import date, timedelta

import pytest

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.engines.rating_engine import RatingEngine
from fussball_elo.engines.season_boundary import SeasonBoundaryDetector, regress_rating
from fussball_elo.models.entities import TeamRatingState
from fussball_elo.tests.conftest import make_match, utc


def _teams(config, ratings):
    teams = {}
    for name, rating in ratings.items():
        state = TeamRatingState.create(name, 'SA', config)
        state.rating = rating
        teams[name] = state
    return teams


def test_regression_pulls_toward_league_baseline():
    config = EloConfig(league_baseline={'SA': 1500}, season_regression=0.15)
    teams = _teams(config, {'Inter': 1600, 'Roma': 1500, 'Lecce': 1400})

    event = SeasonBoundaryDetector(config).apply_regression(teams, date(2024, 8, 17), 84)

    assert teams['Inter'].rating == pytest.approx(1585)
    assert teams['Roma'].rating == pytest.approx(1500)
    assert teams['Lecce'].rating == pytest.approx(1415)
    assert event.teams_regressed == 3


@pytest.mark.parametrize('fraction', [0.0, 0.1, 0.33, 0.9])
def test_regression_contracts_distance(fraction):
    for old in (1720.5, 1500.0, 1288.25):
        new = regress_rating(old, 1500.0, fraction)
        assert abs(new - 1500.0) == pytest.approx((1 - fraction) * abs(old - 1500.0))


def test_regression_adds_history_entry_at_boundary():
    config = EloConfig(season_regression=0.5)
    teams = _teams(config, {'Inter': 1600})
    boundary = date(2024, 8, 17)

    SeasonBoundaryDetector(config).apply_regression(teams, boundary, 90)

    assert teams['Inter'].rating_history[-1].date == boundary
    assert teams['Inter'].rating_history[-1].rating == pytest.approx(1550)
    assert teams['Inter'].matches == 0


def test_gap_threshold_is_inclusive():
    detector = SeasonBoundaryDetector(EloConfig(season_gap_days=60))
    start = date(2024, 1, 1)
    assert detector.check(start) is None
    assert detector.check(start + timedelta(days=59)) is None
    assert detector.check(start + timedelta(days=59 + 60)) == 60


def test_disabled_regression_leaves_ratings():
    config = EloConfig()
    teams = _teams(config, {'Inter': 1600})
    event = SeasonBoundaryDetector(config).apply_regression(teams, date(2024, 8, 17), 90)

    assert teams['Inter'].rating == 1600
    assert teams['Inter'].rating_history == []
    assert event.teams_regressed == 0


def test_engine_regresses_only_known_teams(season_matches):
    config = EloConfig(season_regression=0.25)
    matches = list(season_matches) + [
        make_match(7, season_matches[-1].timestamp + timedelta(days=100), 'Newcomer', 'Arsenal', 1, 1)
    ]
    engine = RatingEngine(config)
    engine.process(matches)

    assert len(engine.regression_events) == 2
    first_break = engine.regression_events[0]
    assert first_break.boundary_date == season_matches[4].match_date
    assert first_break.teams_regressed == 4

    newcomer = engine.teams['Newcomer']
    assert newcomer.initial_rating == 1500
    assert len(newcomer.rating_history) == 1


def test_regression_does_not_touch_last_updated():
    config = EloConfig(season_regression=0.5)
    engine = RatingEngine(config)
    engine.process_match(make_match(1, utc(2023, 5, 1), 'A', 'B', 3, 0))
    engine.process_match(make_match(2, utc(2023, 9, 1), 'C', 'D', 0, 0))

    assert engine.teams['A'].last_updated == utc(2023, 5, 1)
    assert engine.teams['A'].rating_history[-1].date == date(2023, 9, 1)
