"""Import/upsert players and their statistics from JSON payloads."""

import json
from pathlib import Path

from backend.app import db
from backend.models import Player, PlayerStatistic
from backend.services.categories import normalize_category
from backend.services.ranking_service import compute_all_rankings
from backend.time_utils import utcnow_naive

_ID_MAX_LEN = 36
_NAME_MAX_LEN = 120
_INT_STAT_FIELDS = (
    'matches_played', 'matches_won', 'matches_lost',
    'tournaments_played', 'tournaments_won',
)
_FLOAT_STAT_FIELDS = ('total_points', 'average_score', 'win_rate')


def _clean_text(value, max_len):
    if value is None:
        return ''
    text = str(value).strip()
    return text[:max_len]


def _parse_number(value, cast):
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        return None


def normalize_statistics_payload(raw_stats):
    """Return normalized statistics counters and validation errors."""
    if not isinstance(raw_stats, dict):
        return {}, ['statistics must be an object.']

    errors = []
    stats = {}
    for field in _INT_STAT_FIELDS:
        parsed = _parse_number(raw_stats.get(field, 0), int)
        if parsed is None or parsed < 0:
            errors.append(f'{field} must be a non-negative integer.')
            continue
        stats[field] = parsed
    for field in _FLOAT_STAT_FIELDS:
        if field not in raw_stats:
            continue
        parsed = _parse_number(raw_stats.get(field), float)
        if parsed is None or parsed < 0:
            errors.append(f'{field} must be a non-negative number.')
            continue
        stats[field] = parsed
    if errors:
        return stats, errors

    played = stats['matches_played']
    if stats['matches_won'] + stats['matches_lost'] > played:
        errors.append('matches_won + matches_lost cannot exceed matches_played.')
    if stats['tournaments_won'] > stats['tournaments_played']:
        errors.append('tournaments_won cannot exceed tournaments_played.')
    if stats.get('win_rate', 0) > 100:
        errors.append('win_rate must be between 0 and 100.')

    stats.setdefault('total_points', 0.0)
    if 'win_rate' not in stats:
        stats['win_rate'] = (stats['matches_won'] / played) * 100 if played else 0.0
    if 'average_score' not in stats:
        stats['average_score'] = stats['total_points'] / played if played else 0.0
    return stats, errors


def normalize_player_payload(raw_data):
    """Return normalized player payload and validation errors."""
    if not isinstance(raw_data, dict):
        return {}, ['expected object.']

    errors = []
    player_id = _clean_text(raw_data.get('id'), _ID_MAX_LEN + 1)
    if not player_id:
        errors.append('id is required.')
    elif len(player_id) > _ID_MAX_LEN:
        errors.append(f'id must be at most {_ID_MAX_LEN} characters.')

    category = normalize_category(raw_data.get('category'))
    if not category:
        errors.append(f'unsupported category {raw_data.get("category")!r}.')

    data = {
        'id': player_id,
        'name': _clean_text(raw_data.get('name'), _NAME_MAX_LEN),
        'category': category,
        'statistics': None,
    }
    if raw_data.get('statistics') is not None:
        stats, stat_errors = normalize_statistics_payload(raw_data['statistics'])
        errors.extend(stat_errors)
        data['statistics'] = stats
    return data, errors


def _upsert_player(data, counts):
    player = db.session.get(Player, data['id'])
    created = player is None
    if created:
        player = Player(id=data['id'])
        db.session.add(player)
    player.name = data['name']
    player.category = data['category']

    if data['statistics'] is not None:
        row = PlayerStatistic.query.filter_by(player_id=data['id']).first()
        if row is None:
            row = PlayerStatistic(player_id=data['id'])
            db.session.add(row)
        for field, value in data['statistics'].items():
            setattr(row, field, value)
        row.last_updated = utcnow_naive()
        counts['statistics_written'] += 1

    counts['players_created' if created else 'players_updated'] += 1


def import_rankings_payload(payload, commit=True, recalculate=False):
    """Validate and upsert players/statistics. Returns import stats."""
    if isinstance(payload, dict):
        payload = payload.get('players')
    if not isinstance(payload, list):
        raise ValueError('Payload must be a list of players or an object with a "players" list.')

    normalized = []
    errors = []
    for idx, raw in enumerate(payload):
        data, item_errors = normalize_player_payload(raw)
        if item_errors:
            title = data.get('id') or f'item #{idx + 1}'
            errors.append(f'{title}: {" ".join(item_errors)}')
            continue
        normalized.append(data)

    if errors:
        raise ValueError('Invalid player payload:\n- ' + '\n- '.join(errors))

    deduped = {}
    duplicate_input_count = 0
    for item in normalized:
        if item['id'] in deduped:
            duplicate_input_count += 1
        deduped[item['id']] = item

    stats = {
        'players_created': 0,
        'players_updated': 0,
        'statistics_written': 0,
        'duplicate_input_count': duplicate_input_count,
        'rankings_computed': 0,
    }
    try:
        for item in deduped.values():
            _upsert_player(item, stats)
        db.session.flush()
        if recalculate:
            stats['rankings_computed'] = len(compute_all_rankings(commit=False))
        if commit:
            db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return stats


def import_rankings_file(path, commit=True, recalculate=False):
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f'Rankings data file not found: {file_path}')
    with file_path.open('r', encoding='utf-8') as handle:
        payload = json.load(handle)
    return import_rankings_payload(payload, commit=commit, recalculate=recalculate)
