from datetime import timedelta

from fussball_elo.processors.registry_builder import RegistryBuilder
from fussball_elo.processors.source_merger import SourceMerger
from fussball_elo.tests.conftest import make_match, utc


def test_precise_record_replaces_broad_duplicate():
    broad = [make_match(1000001, utc(2024, 5, 1, 15, 0), 'Team A', 'Team B', 2, 1)]
    precise = [make_match(77, utc(2024, 5, 1, 19, 45), 'Team A', 'Team B', 2, 1)]

    result = SourceMerger().merge(broad, precise)

    assert [m.id for m in result.matches] == [77]
    assert result.broad_dropped == 1
    assert result.precise_kept == 1


def test_reversed_fixture_is_not_a_duplicate():
    broad = [make_match(1, utc(2024, 5, 1), 'Team B', 'Team A', 0, 0)]
    precise = [make_match(2, utc(2024, 5, 1), 'Team A', 'Team B', 1, 0)]
    assert len(SourceMerger().merge(broad, precise).matches) == 2


def test_merge_with_self_equals_merge_with_empty(season_matches):
    merger = SourceMerger()
    with_self = merger.merge(season_matches, season_matches).matches
    alone = merger.merge(season_matches, []).matches
    assert with_self == alone
    assert merger.merge([], season_matches).matches == alone


def test_duplicate_inside_one_source_warns_and_keeps_first():
    day = utc(2024, 2, 3)
    broad = [
        make_match(10, day, 'A', 'B', 1, 0),
        make_match(11, day + timedelta(hours=1), 'A', 'B', 3, 3),
    ]
    result = SourceMerger().merge(broad, [])

    assert [m.id for m in result.matches] == [10]
    assert len(result.warnings) == 1
    assert result.warnings[0].kept_id == 10
    assert result.warnings[0].dropped_id == 11


def test_output_is_chronological_with_id_tiebreak():
    t = utc(2024, 3, 1)
    broad = [make_match(9, t, 'C', 'D', 0, 0), make_match(3, t + timedelta(days=2), 'E', 'F', 1, 1)]
    precise = [make_match(5, t, 'A', 'B', 1, 0), make_match(1, t + timedelta(days=1), 'G', 'H', 0, 2)]

    result = SourceMerger().merge(broad, precise)
    assert [m.id for m in result.matches] == [5, 9, 1, 3]


def test_empty_sources_give_empty_result():
    result = SourceMerger().merge([], [])
    assert result.matches == []
    assert result.warnings == []


def test_registry_counts_appearances_and_first_league():
    matches = [
        make_match(1, utc(2024, 1, 1), 'Arsenal', 'Chelsea', 1, 0),
        make_match(2, utc(2024, 1, 8), 'Arsenal', 'Bayern', 1, 1, league='BL1'),
        make_match(3, utc(2024, 1, 9), 'Ajax', 'PSV', 1, 1, league='XYZ'),
    ]
    registry = RegistryBuilder().build(matches)

    assert registry['Arsenal'].league == 'PL'
    assert registry['Arsenal'].country == 'ENG'
    assert registry['Arsenal'].matches_played == 2
    assert registry['Bayern'].country == 'GER'
    assert registry['Ajax'].country == 'UNK'
    assert registry['Chelsea'].to_dict() == {'league': 'PL', 'country': 'ENG', 'matchesPlayed': 1}
