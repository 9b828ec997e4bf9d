"""Recalculate rankings from stored statistics and write them back."""
import logging

from sqlalchemy.exc import IntegrityError

from backend.app import db
from backend.errors import InvalidArgumentError, NotFoundError
from backend.models import Match
from backend.services.ranking_engine import compute_all, compute_one, rank_population
from backend.services.ranking_sources import (
    SqlPlayerCatalog,
    SqlRankingStore,
    SqlStatisticsSource,
)
from backend.time_utils import utcnow_naive

logger = logging.getLogger(__name__)

_PERSIST_ATTEMPTS = 2


def _persist(store, results, commit=True):
    # Each attempt runs in a savepoint so a failed batch leaves the caller's
    # pending rows alone. A concurrent first-time insert for the same player
    # trips the unique player_id constraint; the retry finds that row and
    # overwrites it.
    try:
        for attempt in range(_PERSIST_ATTEMPTS):
            try:
                with db.session.begin_nested():
                    rows = [store.upsert(result) for result in results]
                break
            except IntegrityError:
                if attempt + 1 >= _PERSIST_ATTEMPTS:
                    raise
                logger.info('Ranking row created concurrently; retrying write for %d players',
                            len(results))
        if commit:
            db.session.commit()
    except Exception:
        # Without commit the caller owns the transaction and decides.
        if commit:
            db.session.rollback()
        raise
    return rows


def compute_player_ranking(player_id, statistics=None, catalog=None, store=None, commit=True):
    """Recompute and store one player's ranking. Returns the RankingResult."""
    statistics = statistics or SqlStatisticsSource()
    catalog = catalog or SqlPlayerCatalog()
    store = store or SqlRankingStore()

    snapshots = statistics.get_all_statistics()
    players = catalog.get_all_players()
    previous = store.get_by_player_id(player_id)

    result = compute_one(player_id, snapshots, players, previous=previous)
    _persist(store, [result], commit=commit)
    logger.info('Ranking for player %s: global #%d, %s #%d (change %+d)',
                player_id, result.global_position, result.category,
                result.category_position, result.position_change)
    return result


def compute_all_rankings(statistics=None, catalog=None, store=None, commit=True):
    """Recompute the full leaderboard in one pass. Returns results by position."""
    statistics = statistics or SqlStatisticsSource()
    catalog = catalog or SqlPlayerCatalog()
    store = store or SqlRankingStore()

    snapshots = statistics.get_all_statistics()
    players = catalog.get_all_players()
    previous = store.get_all_by_player()

    results = compute_all(snapshots, players, previous)
    _persist(store, results, commit=commit)
    logger.info('Recalculated %d rankings', len(results))
    return results


def update_rankings_after_match(match_id, statistics=None, catalog=None, store=None, commit=True):
    """Recompute rankings for every participant of a completed match."""
    match = db.session.get(Match, match_id)
    if not match:
        raise NotFoundError('Match not found')
    if match.status != 'completed':
        raise InvalidArgumentError('Cannot update rankings for a match that is not completed')

    statistics = statistics or SqlStatisticsSource()
    catalog = catalog or SqlPlayerCatalog()
    store = store or SqlRankingStore()

    population = rank_population(statistics.get_all_statistics(), catalog.get_all_players())
    now = utcnow_naive()
    results = []
    for player_id in match.player_ids():
        try:
            results.append(compute_one(
                player_id,
                previous=store.get_by_player_id(player_id),
                population=population,
                now=now,
            ))
        except NotFoundError as exc:
            logger.warning('Skipping ranking update for player %s after match %s: %s',
                           player_id, match_id, exc.message)

    _persist(store, results, commit=commit)
    return {
        'match_id': match_id,
        'players_updated': [result.player_id for result in results],
    }
