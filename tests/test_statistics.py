"""Tests for the player statistics endpoint and its missing-row policy."""
import json

import pytest

from backend.services.player_statistics import get_player_statistics


def test_returns_stored_statistics(client, example_players):
    res = client.get('/api/statistics/players/carla')
    assert res.status_code == 200
    stats = json.loads(res.data)['statistics']
    assert stats['matches_won'] == 9
    assert stats['win_rate'] == 75.0
    assert stats['placeholder'] is False


def test_missing_statistics_fail_policy(client, add_player):
    add_player('dana', 'P1')
    res = client.get('/api/statistics/players/dana')
    assert res.status_code == 404
    assert 'Statistics not found' in json.loads(res.data)['error']


def test_missing_statistics_zero_policy_is_tagged(app, client, add_player):
    add_player('dana', 'P1')
    app.config['STATISTICS_ON_MISSING'] = 'zero'

    res = client.get('/api/statistics/players/dana')
    assert res.status_code == 200
    stats = json.loads(res.data)['statistics']
    assert stats['placeholder'] is True
    assert stats['matches_played'] == 0
    assert stats['win_rate'] == 0


def test_unknown_player_is_not_found_under_either_policy(app, client):
    for policy in ('fail', 'zero'):
        app.config['STATISTICS_ON_MISSING'] = policy
        res = client.get('/api/statistics/players/ghost')
        assert res.status_code == 404
        assert json.loads(res.data)['error'] == 'Player not found'


def test_explicit_policy_overrides_config(app, add_player):
    add_player('dana', 'P1')
    snapshot = get_player_statistics('dana', on_missing='zero')
    assert snapshot.placeholder is True

    with pytest.raises(ValueError):
        get_player_statistics('dana', on_missing='guess')


def test_store_errors_are_not_masked(app, add_player):
    add_player('dana', 'P1')

    class BrokenSource:
        def get_statistics(self, player_id):
            raise RuntimeError('database unavailable')

    with pytest.raises(RuntimeError):
        get_player_statistics('dana', on_missing='zero', statistics=BrokenSource())
