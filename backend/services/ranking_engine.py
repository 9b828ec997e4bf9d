"""
Ranking computation over an in-memory population.

Players are ordered by descending ranking score; equal scores are ordered by
player id ascending so repeated runs over the same input give the same
positions. Global positions are dense 1..N over every player that has both
statistics and a catalog entry, and category positions are dense 1..M within
each category, taken from the same sorted order.

The population is sorted once (``rank_population``) and the result can be
shared by any number of ``compute_one`` calls.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from backend.errors import NotFoundError
from backend.services.scoring import ranking_score
from backend.time_utils import utcnow_naive, isoformat_or_none

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerRef:
    id: str
    category: str
    name: str = ''

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'category': self.category}


@dataclass(frozen=True)
class RankedEntry:
    player_id: str
    score: float
    category: str
    global_position: int
    category_position: int


@dataclass(frozen=True)
class RankingResult:
    player_id: str
    score: float
    global_position: int
    category_position: int
    category: str
    previous_global_position: Optional[int]
    position_change: int
    calculated_at: object

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'score': self.score,
            'global_position': self.global_position,
            'category_position': self.category_position,
            'category': self.category,
            'previous_global_position': self.previous_global_position,
            'position_change': self.position_change,
            'last_calculated': isoformat_or_none(self.calculated_at),
        }


class RankedPopulation:
    """Sorted population plus the ids that had statistics but no catalog entry."""

    def __init__(self, entries, orphan_ids=()):
        self.entries = list(entries)
        self.orphan_ids = frozenset(orphan_ids)
        self._by_player = {entry.player_id: entry for entry in self.entries}

    def __len__(self):
        return len(self.entries)

    def __contains__(self, player_id):
        return player_id in self._by_player

    def get(self, player_id):
        return self._by_player.get(player_id)

    def in_category(self, category):
        return [entry for entry in self.entries if entry.category == category]


def _index_statistics(statistics):
    by_player = {}
    for stats in statistics or ():
        if stats.player_id in by_player:
            logger.warning('Duplicate statistics snapshot for player %s; using the last one',
                           stats.player_id)
        by_player[stats.player_id] = stats
    return by_player


def _index_players(catalog):
    if isinstance(catalog, dict):
        return catalog
    return {player.id: player for player in catalog or ()}


def _index_previous(previous_rankings):
    if not previous_rankings:
        return {}
    if isinstance(previous_rankings, dict):
        return previous_rankings
    return {ranking.player_id: ranking for ranking in previous_rankings}


def rank_population(statistics, catalog):
    """Score and sort every player once; assign global and category positions."""
    stats_by_player = _index_statistics(statistics)
    players = _index_players(catalog)

    scored = []
    orphan_ids = []
    for player_id, stats in stats_by_player.items():
        player = players.get(player_id)
        if player is None:
            orphan_ids.append(player_id)
            continue
        scored.append((player_id, ranking_score(stats), player.category))

    if orphan_ids:
        logger.warning(
            'Data integrity: %d statistics rows reference players missing from the catalog: %s',
            len(orphan_ids), ', '.join(sorted(orphan_ids)),
        )

    scored.sort(key=lambda item: (-item[1], item[0]))

    category_counts = {}
    entries = []
    for global_position, (player_id, score, category) in enumerate(scored, 1):
        category_counts[category] = category_counts.get(category, 0) + 1
        entries.append(RankedEntry(
            player_id=player_id,
            score=score,
            category=category,
            global_position=global_position,
            category_position=category_counts[category],
        ))
    return RankedPopulation(entries, orphan_ids)


def _build_result(entry, previous, calculated_at):
    previous_position = getattr(previous, 'global_position', None) if previous is not None else None
    if previous_position is None:
        position_change = 0
    else:
        position_change = previous_position - entry.global_position
    return RankingResult(
        player_id=entry.player_id,
        score=entry.score,
        global_position=entry.global_position,
        category_position=entry.category_position,
        category=entry.category,
        previous_global_position=previous_position,
        position_change=position_change,
        calculated_at=calculated_at,
    )


def compute_one(player_id, statistics=None, catalog=None, previous=None,
                population=None, now=None):
    """Compute one player's ranking.

    Args:
        player_id: Target player.
        statistics: Snapshots for the whole population (ignored when
            ``population`` is given).
        catalog: PlayerRef mapping or iterable (ignored when ``population``
            is given).
        previous: The player's previous ranking (anything with a
            ``global_position``), or None on first computation.
        population: A RankedPopulation already sorted for this pass.
        now: Timestamp stamped on the result.

    Raises:
        NotFoundError: the player has no statistics, or is not in the catalog.
    """
    if population is None:
        population = rank_population(statistics, catalog)

    entry = population.get(player_id)
    if entry is None:
        if player_id in population.orphan_ids:
            raise NotFoundError('Player not found')
        raise NotFoundError('Statistics not found for this player')
    return _build_result(entry, previous, now or utcnow_naive())


def compute_all(statistics, catalog, previous_rankings=None, now=None):
    """Compute rankings for the whole population in one sort pass.

    Players with statistics but no catalog entry are skipped, not failed.
    Results are returned in global position order.
    """
    population = rank_population(statistics, catalog)
    previous_by_player = _index_previous(previous_rankings)
    calculated_at = now or utcnow_naive()
    return [
        _build_result(entry, previous_by_player.get(entry.player_id), calculated_at)
        for entry in population.entries
    ]
