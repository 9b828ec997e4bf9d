"""Paginated, sorted, category-filtered leaderboard views."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app, has_app_context

from backend.errors import InvalidArgumentError, NotFoundError
from backend.services.categories import normalize_category
from backend.services.ranking_engine import PlayerRef
from backend.services.ranking_sources import SqlPlayerCatalog, SqlRankingStore

logger = logging.getLogger(__name__)

GLOBAL_SORT_FIELDS = ('score', 'global_position')
CATEGORY_SORT_FIELDS = ('score', 'category_position')
SORT_ORDERS = ('asc', 'desc')

# Field names used by older API clients.
_SORT_ALIASES = {
    'rankingPoints': 'score',
    'ranking_points': 'score',
    'globalPosition': 'global_position',
    'categoryPosition': 'category_position',
}


@dataclass(frozen=True)
class RankingWithPlayer:
    ranking: object
    player: Optional[PlayerRef] = None

    def to_dict(self):
        data = self.ranking.to_dict()
        data['player'] = self.player.to_dict() if self.player else None
        return data


@dataclass(frozen=True)
class RankingPage:
    rankings: List[RankingWithPlayer]
    total: int
    limit: int
    offset: int
    category: Optional[str] = None
    missing_player_ids: List[str] = field(default_factory=list)

    @property
    def has_more(self):
        return self.offset + len(self.rankings) < self.total

    def to_dict(self):
        return {
            'rankings': [row.to_dict() for row in self.rankings],
            'pagination': {
                'total': self.total,
                'limit': self.limit,
                'offset': self.offset,
                'has_more': self.has_more,
            },
            'category': self.category,
            'missing_player_ids': list(self.missing_player_ids),
        }


def _config_value(key, default):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def _parse_int(value, name):
    if isinstance(value, bool):
        raise InvalidArgumentError(f'{name} must be an integer')
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidArgumentError(f'{name} must be an integer') from None


def parse_pagination(limit=None, offset=None):
    """Validate limit/offset; returns (limit, offset)."""
    if limit is None or limit == '':
        limit = _config_value('RANKING_DEFAULT_LIMIT', 10)
    if offset is None or offset == '':
        offset = 0
    limit = _parse_int(limit, 'limit')
    offset = _parse_int(offset, 'offset')

    if limit <= 0:
        raise InvalidArgumentError('limit must be a positive integer')
    max_limit = _config_value('RANKING_MAX_LIMIT', 100)
    if max_limit and limit > max_limit:
        raise InvalidArgumentError(f'limit must not exceed {max_limit}')
    if offset < 0:
        raise InvalidArgumentError('offset must be a non-negative integer')
    return limit, offset


def resolve_sort(sort_by=None, sort_order=None, category=None):
    """Validate the sort field/order for a global or category view."""
    allowed = CATEGORY_SORT_FIELDS if category else GLOBAL_SORT_FIELDS
    field_name = str(sort_by or '').strip()
    field_name = _SORT_ALIASES.get(field_name, field_name)
    if not field_name:
        field_name = 'category_position' if category else 'global_position'
    if field_name not in allowed:
        raise InvalidArgumentError(f'sort_by must be one of: {", ".join(allowed)}')

    order = str(sort_order or 'asc').strip().lower()
    if order not in SORT_ORDERS:
        raise InvalidArgumentError('sort_order must be asc or desc')
    return field_name, order


def _join_players(rows, catalog):
    players = catalog.get_players(row.player_id for row in rows)
    joined = [RankingWithPlayer(ranking=row, player=players.get(row.player_id)) for row in rows]
    missing = [row.player_id for row in rows if row.player_id not in players]
    if missing:
        logger.warning('Data integrity: rankings without a player record: %s', ', '.join(missing))
    return joined, missing


def list_rankings(category=None, limit=None, offset=None, sort_by=None, sort_order=None,
                  store=None, catalog=None):
    """Return one page of rankings, optionally restricted to a category.

    Rows whose player record cannot be found are still returned with
    ``player`` set to None and their ids listed in ``missing_player_ids``.
    """
    store = store or SqlRankingStore()
    catalog = catalog or SqlPlayerCatalog()

    canonical = None
    if category is not None and str(category).strip():
        canonical = normalize_category(category)
        if not canonical:
            raise InvalidArgumentError('Invalid player category')

    limit, offset = parse_pagination(limit, offset)
    field_name, order = resolve_sort(sort_by, sort_order, canonical)

    total = store.count(category=canonical)
    rows = store.get_all(
        category=canonical,
        sort_by=field_name,
        sort_order=order,
        limit=limit,
        offset=offset,
    )
    joined, missing = _join_players(rows, catalog)
    return RankingPage(
        rankings=joined,
        total=total,
        limit=limit,
        offset=offset,
        category=canonical,
        missing_player_ids=missing,
    )


def get_player_ranking(player_id, store=None, catalog=None):
    store = store or SqlRankingStore()
    catalog = catalog or SqlPlayerCatalog()

    row = store.get_by_player_id(player_id)
    if row is None:
        raise NotFoundError('Ranking not found for this player')
    joined, _ = _join_players([row], catalog)
    return joined[0]
