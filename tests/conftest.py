import pytest
from backend.app import create_app, db


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_player(app):
    """Create a player (and statistics when counters are given); returns the id."""
    from backend.models import Player, PlayerStatistic

    def _add(player_id, category='P3', name=None, **stats):
        db.session.add(Player(id=player_id, name=name or player_id.title(), category=category))
        if stats:
            db.session.add(PlayerStatistic(player_id=player_id, **stats))
        db.session.commit()
        return player_id

    return _add


@pytest.fixture
def example_players(add_player):
    """Three players: two in P3, one stronger player in P2."""
    add_player('alice', 'P3', win_rate=70.0, average_score=12.0, tournaments_won=1,
               matches_won=7, matches_played=10, matches_lost=3, tournaments_played=2)
    add_player('bruno', 'P3', win_rate=50.0, average_score=10.0, tournaments_won=0,
               matches_won=4, matches_played=8, matches_lost=4, tournaments_played=1)
    add_player('carla', 'P2', win_rate=75.0, average_score=12.5, tournaments_won=2,
               matches_won=9, matches_played=12, matches_lost=3, tournaments_played=3)
    return ['alice', 'bruno', 'carla']
