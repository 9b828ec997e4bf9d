"""Tests for player/statistics import helpers."""
import json

import pytest

from backend.app import db
from backend.models import Player, PlayerStatistic, Ranking
from backend.services.ranking_importer import (
    import_rankings_file,
    import_rankings_payload,
    normalize_statistics_payload,
)


def _payload():
    return {'players': [
        {
            'id': 'p-1', 'name': 'Marta', 'category': 'P1',
            'statistics': {
                'matches_played': 10, 'matches_won': 8, 'matches_lost': 2,
                'total_points': 120, 'tournaments_played': 2, 'tournaments_won': 1,
            },
        },
        {
            'id': 'p-2', 'name': 'Iker', 'category': 'p4',
            'statistics': {
                'matches_played': 4, 'matches_won': 1, 'matches_lost': 3,
                'total_points': 30, 'win_rate': 25, 'average_score': 7.5,
            },
        },
        {'id': 'p-3', 'name': 'Sol', 'category': 'P2'},
    ]}


def test_import_creates_then_updates(app):
    first = import_rankings_payload(_payload(), commit=True)
    assert first['players_created'] == 3
    assert first['players_updated'] == 0
    assert first['statistics_written'] == 2

    changed = _payload()
    changed['players'][0]['name'] = 'Marta R.'
    second = import_rankings_payload(changed, commit=True)
    assert second['players_created'] == 0
    assert second['players_updated'] == 3

    assert db.session.get(Player, 'p-1').name == 'Marta R.'
    assert Player.query.count() == 3
    assert PlayerStatistic.query.count() == 2


def test_import_maps_legacy_category_and_derives_rates(app):
    import_rankings_payload(_payload(), commit=True)

    assert db.session.get(Player, 'p-2').category == 'P3'
    derived = PlayerStatistic.query.filter_by(player_id='p-1').first()
    assert derived.win_rate == pytest.approx(80.0)
    assert derived.average_score == pytest.approx(12.0)
    explicit = PlayerStatistic.query.filter_by(player_id='p-2').first()
    assert explicit.win_rate == 25


def test_import_rejects_invalid_items_without_writing(app):
    payload = [
        {'id': 'ok', 'category': 'P1'},
        {'id': '', 'category': 'P1'},
        {'id': 'bad-cat', 'category': 'Z'},
        {'id': 'bad-stats', 'category': 'P2', 'statistics': {
            'matches_played': 2, 'matches_won': 3, 'matches_lost': 0,
        }},
        'not-an-object',
    ]
    with pytest.raises(ValueError) as exc:
        import_rankings_payload(payload, commit=True)

    message = str(exc.value)
    assert 'id is required' in message
    assert "unsupported category 'Z'" in message
    assert 'cannot exceed matches_played' in message
    assert 'item #5' in message
    assert Player.query.count() == 0


def test_import_with_recalculate_ranks_players(app):
    result = import_rankings_payload(_payload(), commit=True, recalculate=True)
    assert result['rankings_computed'] == 2

    rows = Ranking.query.order_by(Ranking.global_position.asc()).all()
    assert [row.player_id for row in rows] == ['p-1', 'p-2']
    assert rows[1].category == 'P3'


def test_import_file(app, tmp_path):
    path = tmp_path / 'players.json'
    path.write_text(json.dumps(_payload()), encoding='utf-8')
    result = import_rankings_file(path, commit=True)
    assert result['players_created'] == 3

    with pytest.raises(FileNotFoundError):
        import_rankings_file(tmp_path / 'missing.json')


def test_normalize_statistics_payload_rejects_negative_and_out_of_range():
    _, errors = normalize_statistics_payload({'matches_played': -1})
    assert errors == ['matches_played must be a non-negative integer.']

    _, errors = normalize_statistics_payload({'matches_played': 1, 'win_rate': 140})
    assert errors == ['win_rate must be between 0 and 100.']

    stats, errors = normalize_statistics_payload({})
    assert errors == []
    assert stats['win_rate'] == 0.0
    assert stats['average_score'] == 0.0


def test_ranking_retry_during_import_keeps_imported_players(app, monkeypatch):
    from sqlalchemy.exc import IntegrityError
    from backend.services.ranking_sources import SqlRankingStore

    original = SqlRankingStore.upsert
    calls = []

    def flaky_upsert(self, result):
        calls.append(result.player_id)
        if len(calls) == 1:
            raise IntegrityError('INSERT INTO ranking', {}, Exception('UNIQUE constraint failed'))
        return original(self, result)

    monkeypatch.setattr(SqlRankingStore, 'upsert', flaky_upsert)
    payload = {'players': [{
        'id': 'amy', 'name': 'Amy', 'category': 'P2',
        'statistics': {'matches_played': 6, 'matches_won': 4, 'matches_lost': 2,
                       'total_points': 60},
    }]}
    result = import_rankings_payload(payload, commit=True, recalculate=True)
    db.session.remove()

    assert calls == ['amy', 'amy']
    assert result['players_created'] == 1
    assert result['rankings_computed'] == 1
    assert Player.query.count() == 1
    assert PlayerStatistic.query.filter_by(player_id='amy').count() == 1
    rows = Ranking.query.all()
    assert [(row.player_id, row.global_position, row.category) for row in rows] == [('amy', 1, 'P2')]
