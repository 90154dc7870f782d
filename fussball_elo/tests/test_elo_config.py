import json

import pytest

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.core.exceptions import ConfigInvalidError, InputMissingError


def test_defaults():
    config = EloConfig()
    assert (config.initial_rating, config.k_factor, config.home_advantage) == (1500.0, 32.0, 75.0)
    assert config.goal_margin_factor is True
    assert not config.regression_enabled


@pytest.mark.parametrize('overrides', [
    {'k_factor': 0},
    {'k_factor': -5},
    {'season_regression': 1.0},
    {'season_regression': -0.1},
    {'season_gap_days': 0},
    {'league_strength': {'PL': 0}},
    {'initial_rating': float('nan')},
    {'goal_margin_factor': 'false'},
])
def test_invalid_configs_rejected(overrides):
    with pytest.raises(ConfigInvalidError):
        EloConfig(**overrides).validate()


def test_from_dict_reads_camel_case():
    config = EloConfig.from_dict({
        'initialRating': 1400,
        'kFactor': 20,
        'homeAdvantage': 60,
        'goalMarginFactor': False,
        'leagueStrength': {'PL': 1.2},
        'leagueBaseline': {'PL': 1550},
        'seasonRegression': 0.2,
    })
    assert config.k_multiplier('PL') == 1.2
    assert config.baseline_for('PL') == 1550
    assert config.baseline_for('SA') == 1400
    assert config.season_gap_days == 60


@pytest.mark.parametrize('value', ['false', 0, None])
def test_goal_margin_flag_must_be_boolean(value):
    with pytest.raises(ConfigInvalidError, match='goal_margin_factor'):
        EloConfig.from_dict({'goalMarginFactor': value})


def test_to_dict_omits_unset_tables():
    echoed = EloConfig().to_dict()
    assert echoed == {
        'initialRating': 1500.0,
        'kFactor': 32.0,
        'homeAdvantage': 75.0,
        'goalMarginFactor': True,
        'seasonGapDays': 60,
    }


def test_from_file(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'kFactor': 40}), encoding='utf-8')
    assert EloConfig.from_file(path).k_factor == 40

    with pytest.raises(InputMissingError):
        EloConfig.from_file(tmp_path / 'missing.json')

    path.write_text('{kFactor: 40', encoding='utf-8')
    with pytest.raises(ConfigInvalidError):
        EloConfig.from_file(path)


def test_overrides_skip_none():
    config = EloConfig().with_overrides(k_factor=None, home_advantage=0.0)
    assert config.k_factor == 32.0
    assert config.home_advantage == 0.0
