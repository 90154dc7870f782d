import json

import pytest

from fussball_elo.config.elo_config import EloConfig
from fussball_elo.core.exceptions import ConfigInvalidError, InputMissingError
from fussball_elo.main import main
from fussball_elo.outputs.artifact_writer import ArtifactWriter, build_ratings_payload
from fussball_elo.processors.pipeline import PipelineConfig, RatingPipeline
from fussball_elo.tests.conftest import make_match, utc


def test_pipeline_merges_and_folds(match_files, default_config):
    result = RatingPipeline(default_config).run_files(*match_files)

    assert [m.id for m in result.matches] == [1000000, 501, 1000002, 502]
    assert result.summary.matches_loaded == 5
    assert result.summary.matches_processed == 4
    assert result.summary.records_skipped == 0
    assert set(result.registry) == {'Arsenal', 'Chelsea', 'Team A', 'Team B'}
    assert [s.rating for s in result.teams] == sorted((s.rating for s in result.teams), reverse=True)
    assert set(result.snapshots) == set(result.registry)


def test_pipeline_skips_malformed_and_continues(default_config):
    broad = [
        make_match(1, utc(2024, 1, 1), 'A', 'B', 1, 0),
        make_match(2, utc(2024, 1, 2), 'C', 'C', 1, 0),
        make_match(3, utc(2024, 1, 3), 'B', 'C', 2, 2),
    ]
    result = RatingPipeline(default_config).run(broad, [])

    assert result.summary.matches_processed == 2
    assert result.summary.records_skipped == 1
    assert 'Match 2' in result.summary.issues[0]


def test_empty_input_gives_empty_outputs(default_config):
    result = RatingPipeline(default_config).run([], [])
    assert result.teams == []
    assert result.snapshots == {}
    assert result.registry == {}


def test_strict_leagues_rejects_unlisted_league():
    config = EloConfig(league_strength={'PL': 1.0})
    matches = [make_match(1, utc(2024, 1, 1), 'A', 'B', 1, 0, league='BL1')]
    with pytest.raises(ConfigInvalidError):
        RatingPipeline(config, PipelineConfig(strict_leagues=True)).run(matches, [])


def test_invalid_config_is_fatal():
    with pytest.raises(ConfigInvalidError):
        RatingPipeline(EloConfig(k_factor=0)).run([], [])


def test_failed_write_keeps_previous_artifact_set(tmp_path):
    writer = ArtifactWriter(tmp_path)
    writer.write({'run': 1}, {'run': 1}, {'run': 1})

    with pytest.raises(TypeError):
        writer.write({'run': 2}, {'bad': object()}, {'run': 2})

    names = ['msi_daily.json', 'msi_ratings.json', 'teams_registry.json']
    assert sorted(p.name for p in tmp_path.iterdir()) == names
    for name in names:
        assert json.loads((tmp_path / name).read_text(encoding='utf-8')) == {'run': 1}


def test_ratings_payload_order(default_config):
    payload = build_ratings_payload(default_config, [], 0, utc(2024, 6, 1, 12))
    assert list(payload) == ['config', 'computedAt', 'matchesProcessed', 'teams']
    assert payload['computedAt'] == '2024-06-01T12:00:00Z'


def _compute(match_files, out_dir, *extra):
    broad, precise = match_files
    return main(['compute', '--broad', str(broad), '--precise', str(precise),
                 '--out-dir', str(out_dir), '--computed-at', '2024-06-01T00:00:00Z', *extra])


def test_cli_compute_writes_artifacts(match_files, tmp_path, capsys):
    out_dir = tmp_path / 'out'
    assert _compute(match_files, out_dir) == 0

    ratings = json.loads((out_dir / 'msi_ratings.json').read_text(encoding='utf-8'))
    registry = json.loads((out_dir / 'teams_registry.json').read_text(encoding='utf-8'))
    daily = json.loads((out_dir / 'msi_daily.json').read_text(encoding='utf-8'))

    assert ratings['matchesProcessed'] == 4
    assert ratings['computedAt'] == '2024-06-01T00:00:00Z'
    assert ratings['config']['kFactor'] == 32.0
    assert registry['Team A'] == {'league': 'PL', 'country': 'ENG', 'matchesPlayed': 2}
    assert set(daily) == set(registry)
    assert 'Matches processed:   4' in capsys.readouterr().out


def test_cli_output_is_byte_identical_across_runs(match_files, tmp_path):
    assert _compute(match_files, tmp_path / 'one') == 0
    assert _compute(match_files, tmp_path / 'two') == 0

    for name in ('msi_ratings.json', 'msi_daily.json', 'teams_registry.json'):
        assert (tmp_path / 'one' / name).read_bytes() == (tmp_path / 'two' / name).read_bytes()


def test_cli_missing_input_exits_without_artifacts(match_files, tmp_path):
    out_dir = tmp_path / 'out'
    code = main(['compute', '--broad', str(tmp_path / 'missing.json'),
                 '--precise', str(match_files[1]), '--out-dir', str(out_dir)])
    assert code == 1
    assert not out_dir.exists()


def test_cli_report_and_validate(match_files, tmp_path, capsys):
    out_dir = tmp_path / 'out'
    _compute(match_files, out_dir)
    capsys.readouterr()

    assert main(['report', '--out-dir', str(out_dir), '--top', '3']) == 0
    report = capsys.readouterr().out
    assert 'TOP 3 TEAMS' in report
    assert 'Premier League' in report

    reference = tmp_path / 'reference.json'
    reference.write_text(json.dumps({'Arsenal': 2000, 'Chelsea': 1800, 'Team A': 1500}), encoding='utf-8')
    assert main(['validate', '--reference', str(reference), '--format', 'rating-map-json',
                 '--out-dir', str(out_dir)]) == 0
    assert 'Matched teams:          3/3' in capsys.readouterr().out


def test_cli_unknown_reference_missing(match_files, tmp_path):
    out_dir = tmp_path / 'out'
    _compute(match_files, out_dir)
    assert main(['validate', '--reference', str(tmp_path / 'none.csv'), '--format', 'clubelo-csv',
                 '--out-dir', str(out_dir)]) == 1


def test_read_ratings_requires_file(tmp_path):
    with pytest.raises(InputMissingError):
        ArtifactWriter(tmp_path).read_ratings()
