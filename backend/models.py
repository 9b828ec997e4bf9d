import uuid
from backend.app import db
from backend.time_utils import utcnow_naive, isoformat_or_none


def _new_id():
    return str(uuid.uuid4())


class Player(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(120), default='')
    category = db.Column(db.String(20), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'category': self.category,
            'created_at': isoformat_or_none(self.created_at),
        }


class PlayerStatistic(db.Model):
    """Aggregate counters per player, maintained by the match workflow."""
    __tablename__ = 'player_statistic'

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.String(36), db.ForeignKey('player.id'),
                          unique=True, nullable=False)
    matches_played = db.Column(db.Integer, default=0, nullable=False)
    matches_won = db.Column(db.Integer, default=0, nullable=False)
    matches_lost = db.Column(db.Integer, default=0, nullable=False)
    total_points = db.Column(db.Float, default=0.0, nullable=False)
    average_score = db.Column(db.Float, default=0.0, nullable=False)
    tournaments_played = db.Column(db.Integer, default=0, nullable=False)
    tournaments_won = db.Column(db.Integer, default=0, nullable=False)
    win_rate = db.Column(db.Float, default=0.0, nullable=False)
    last_updated = db.Column(db.DateTime, default=lambda: utcnow_naive())
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive(),
                           onupdate=lambda: utcnow_naive())

    player = db.relationship('Player', backref=db.backref('statistic', uselist=False))


class Match(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    tournament_id = db.Column(db.String(36), nullable=True)
    home_player_one_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=True)
    home_player_two_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=True)
    away_player_one_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=True)
    away_player_two_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=True)
    home_score = db.Column(db.Integer, nullable=True)
    away_score = db.Column(db.Integer, nullable=True)
    # pending, in_progress, completed, cancelled
    status = db.Column(db.String(20), default='pending', nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def player_ids(self):
        """Distinct participant ids, home side first."""
        ids = []
        for player_id in (
            self.home_player_one_id, self.home_player_two_id,
            self.away_player_one_id, self.away_player_two_id,
        ):
            if player_id and player_id not in ids:
                ids.append(player_id)
        return ids


class Ranking(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.String(36), db.ForeignKey('player.id'),
                          unique=True, nullable=False)
    score = db.Column(db.Float, default=0.0, nullable=False)
    global_position = db.Column(db.Integer, nullable=False, index=True)
    category_position = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(20), nullable=False, index=True)
    previous_global_position = db.Column(db.Integer, nullable=True)
    position_change = db.Column(db.Integer, default=0, nullable=False)
    last_calculated = db.Column(db.DateTime, default=lambda: utcnow_naive())
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def apply_result(self, result):
        """Overwrite every computed field from a RankingResult."""
        self.player_id = result.player_id
        self.score = result.score
        self.global_position = result.global_position
        self.category_position = result.category_position
        self.category = result.category
        self.previous_global_position = result.previous_global_position
        self.position_change = result.position_change
        self.last_calculated = result.calculated_at
        self.updated_at = result.calculated_at

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'score': self.score,
            'global_position': self.global_position,
            'category_position': self.category_position,
            'category': self.category,
            'previous_global_position': self.previous_global_position,
            'position_change': self.position_change,
            'last_calculated': isoformat_or_none(self.last_calculated),
            'created_at': isoformat_or_none(self.created_at),
            'updated_at': isoformat_or_none(self.updated_at),
        }
