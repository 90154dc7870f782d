from datetime import date, timedelta

import pytest

from fussball_elo.engines.rating_engine import RatingEngine
from fussball_elo.processors.daily_snapshot import DailySnapshotBuilder, snapshots_to_dict
from fussball_elo.tests.conftest import make_match, utc


@pytest.fixture
def history(season_matches, default_config):
    engine = RatingEngine(default_config)
    engine.process(season_matches)
    return engine.history()


def test_one_entry_per_day_without_gaps(history):
    snapshots = DailySnapshotBuilder('team').build(history)

    for team, series in snapshots.items():
        days = [d for d, _ in series]
        assert days[0] == history[team][0].date
        assert days[-1] == history[team][-1].date
        assert len(days) == len(set(days))
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


def test_values_carry_forward(history):
    series = dict(DailySnapshotBuilder().build(history)['Arsenal'])
    first = history['Arsenal'][0]
    second = history['Arsenal'][1]

    assert series[first.date] == first.rating
    assert series[first.date + timedelta(days=3)] == first.rating
    assert series[second.date] == second.rating


def test_global_window_covers_all_dates(history):
    snapshots = DailySnapshotBuilder('global').build(history)
    lengths = {len(series) for series in snapshots.values()}
    assert len(lengths) == 1

    everton = snapshots['Everton']
    assert everton[0][0] == date(2023, 8, 12)
    # Everton's first match is a day later; the opening day carries the initial rating
    assert everton[0][1] == 1500.0


def test_last_observation_of_a_day_wins(default_config):
    engine = RatingEngine(default_config)
    day = utc(2024, 4, 6, 12)
    engine.process_match(make_match(1, day, 'A', 'B', 1, 0))
    engine.process_match(make_match(2, day + timedelta(hours=5), 'C', 'A', 4, 0))

    series = DailySnapshotBuilder().build(engine.history())['A']
    assert series == [(day.date(), engine.teams['A'].rating)]


def test_unknown_window_rejected():
    with pytest.raises(ValueError):
        DailySnapshotBuilder('weekly')


def test_dict_shape(history):
    payload = snapshots_to_dict(DailySnapshotBuilder().build(history))
    assert payload['Arsenal'][0] == {'date': '2023-08-12', 'rating': history['Arsenal'][0].rating}
