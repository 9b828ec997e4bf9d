"""Tests for ranking writes and the SQL player catalog."""
import pytest
from sqlalchemy.exc import IntegrityError

from backend.app import db
from backend.errors import InvalidArgumentError
from backend.models import PlayerStatistic, Ranking
from backend.services.ranking_service import compute_all_rankings, compute_player_ranking
from backend.services.ranking_sources import SqlPlayerCatalog, SqlRankingStore


def fail_first_upsert(monkeypatch):
    """Make the first SqlRankingStore.upsert call hit a unique-constraint error."""
    original = SqlRankingStore.upsert
    calls = []

    def flaky_upsert(self, result):
        calls.append(result.player_id)
        if len(calls) == 1:
            raise IntegrityError(
                'INSERT INTO ranking', {},
                Exception('UNIQUE constraint failed: ranking.player_id'),
            )
        return original(self, result)

    monkeypatch.setattr(SqlRankingStore, 'upsert', flaky_upsert)
    return calls


def test_unique_conflict_is_retried_as_update(app, example_players, monkeypatch):
    compute_all_rankings()
    stats = PlayerStatistic.query.filter_by(player_id='alice').first()
    stats.tournaments_won = 3
    db.session.commit()

    calls = fail_first_upsert(monkeypatch)
    result = compute_player_ranking('alice')

    assert calls == ['alice', 'alice']
    rows = Ranking.query.filter_by(player_id='alice').all()
    assert len(rows) == 1
    assert rows[0].global_position == 1
    assert rows[0].previous_global_position == 2
    assert rows[0].position_change == 1
    assert rows[0].score == pytest.approx(result.score)
    assert Ranking.query.count() == 3


def test_repeated_unique_conflict_is_raised(app, example_players, monkeypatch):
    def always_conflicts(self, result):
        raise IntegrityError('INSERT INTO ranking', {}, Exception('UNIQUE constraint failed'))

    monkeypatch.setattr(SqlRankingStore, 'upsert', always_conflicts)
    with pytest.raises(IntegrityError):
        compute_all_rankings()
    assert Ranking.query.count() == 0


def test_players_by_category_maps_legacy_levels(app, add_player):
    add_player('ana', 'P1')
    add_player('ben', 'P3')
    add_player('cris', 'P4')
    add_player('dani', 'P5')

    catalog = SqlPlayerCatalog()
    assert [ref.id for ref in catalog.get_players_by_category('p3')] == ['ben', 'cris', 'dani']
    assert all(ref.category == 'P3' for ref in catalog.get_players_by_category('P3'))
    assert [ref.id for ref in catalog.get_players_by_category('P5')] == ['ben', 'cris', 'dani']
    assert [ref.id for ref in catalog.get_players_by_category('P1')] == ['ana']
    assert catalog.get_players_by_category('P2') == []


def test_players_by_unknown_category_is_invalid(app, add_player):
    add_player('ana', 'P1')
    with pytest.raises(InvalidArgumentError):
        SqlPlayerCatalog().get_players_by_category('Z9')
    with pytest.raises(InvalidArgumentError):
        SqlPlayerCatalog().get_players_by_category('')
