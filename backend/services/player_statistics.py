"""Read access to a player's statistics with a configurable missing-row policy."""
import logging

from flask import current_app, has_app_context

from backend.errors import NotFoundError
from backend.services.ranking_sources import SqlPlayerCatalog, SqlStatisticsSource
from backend.services.scoring import StatisticsSnapshot

logger = logging.getLogger(__name__)

ON_MISSING_POLICIES = ('fail', 'zero')


def _missing_policy(on_missing):
    policy = on_missing
    if policy is None and has_app_context():
        policy = current_app.config.get('STATISTICS_ON_MISSING')
    policy = str(policy or 'fail').strip().lower()
    if policy not in ON_MISSING_POLICIES:
        raise ValueError(f'STATISTICS_ON_MISSING must be one of: {", ".join(ON_MISSING_POLICIES)}')
    return policy


def get_player_statistics(player_id, on_missing=None, statistics=None, catalog=None):
    """Return the player's StatisticsSnapshot.

    Under the ``zero`` policy a player without a statistics row gets an
    all-zero snapshot tagged ``placeholder=True``; under ``fail`` the absence
    raises NotFoundError. Only absence is covered: store errors propagate.
    """
    statistics = statistics or SqlStatisticsSource()
    catalog = catalog or SqlPlayerCatalog()
    policy = _missing_policy(on_missing)

    catalog.get_player(player_id)
    try:
        return statistics.get_statistics(player_id)
    except NotFoundError:
        if policy != 'zero':
            raise
        logger.info('No statistics for player %s; returning placeholder zeros', player_id)
        return StatisticsSnapshot.empty(player_id)
