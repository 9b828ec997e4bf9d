"""SQLAlchemy-backed statistics source, player catalog and ranking store."""
import logging

from backend.app import db
from backend.errors import InvalidArgumentError, NotFoundError
from backend.models import Player, PlayerStatistic, Ranking
from backend.services.categories import normalize_category
from backend.services.ranking_engine import PlayerRef
from backend.services.scoring import StatisticsSnapshot

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    'score': Ranking.score,
    'global_position': Ranking.global_position,
    'category_position': Ranking.category_position,
}


class SqlStatisticsSource:

    def get_statistics(self, player_id):
        row = PlayerStatistic.query.filter_by(player_id=player_id).first()
        if row is None:
            raise NotFoundError('Statistics not found for this player')
        return StatisticsSnapshot.from_model(row)

    def get_all_statistics(self):
        rows = PlayerStatistic.query.order_by(PlayerStatistic.player_id.asc()).all()
        return [StatisticsSnapshot.from_model(row) for row in rows]


class SqlPlayerCatalog:
    """Players whose stored category cannot be mapped are treated as absent."""

    def _to_ref(self, player):
        category = normalize_category(player.category)
        if not category:
            logger.warning('Player %s has unsupported category %r', player.id, player.category)
            return None
        return PlayerRef(id=player.id, category=category, name=player.name or '')

    def get_player(self, player_id):
        player = db.session.get(Player, player_id)
        ref = self._to_ref(player) if player else None
        if ref is None:
            raise NotFoundError('Player not found')
        return ref

    def get_players(self, player_ids):
        """Map id -> PlayerRef for the ids that resolve; missing ids are left out."""
        ids = list(set(player_ids))
        if not ids:
            return {}
        refs = {}
        for player in Player.query.filter(Player.id.in_(ids)).all():
            ref = self._to_ref(player)
            if ref is not None:
                refs[ref.id] = ref
        return refs

    def get_all_players(self):
        refs = (self._to_ref(player) for player in Player.query.order_by(Player.id.asc()).all())
        return [ref for ref in refs if ref is not None]

    def get_players_by_category(self, category):
        canonical = normalize_category(category)
        if not canonical:
            raise InvalidArgumentError('Invalid player category')
        return [ref for ref in self.get_all_players() if ref.category == canonical]


class SqlRankingStore:

    def get_by_player_id(self, player_id):
        return Ranking.query.filter_by(player_id=player_id).first()

    def get_all_by_player(self):
        return {row.player_id: row for row in Ranking.query.all()}

    def _filtered(self, category=None):
        query = Ranking.query
        if category:
            query = query.filter(Ranking.category == category)
        return query

    def get_all(self, category=None, sort_by='global_position', sort_order='asc',
                limit=None, offset=0):
        column = _SORT_COLUMNS[sort_by]
        ordering = [column.desc() if sort_order == 'desc' else column.asc()]
        if sort_by == 'score':
            ordering.append(Ranking.global_position.asc())
        ordering.append(Ranking.player_id.asc())

        query = self._filtered(category).order_by(*ordering)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, category=None):
        return self._filtered(category).count()

    def upsert(self, result):
        """Replace the player's ranking row with a computed result.

        All fields are written on the same row in the caller's transaction.
        """
        row = Ranking.query.filter_by(player_id=result.player_id).with_for_update().first()
        if row is None:
            row = Ranking(player_id=result.player_id, created_at=result.calculated_at)
            db.session.add(row)
        row.apply_result(result)
        return row
