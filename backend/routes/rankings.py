from flask import Blueprint, request, jsonify
from backend.services.ranking_queries import get_player_ranking, list_rankings
from backend.services.ranking_service import (
    compute_all_rankings,
    compute_player_ranking,
    update_rankings_after_match,
)

rankings_bp = Blueprint('rankings', __name__)


def _list_args():
    return {
        'limit': request.args.get('limit'),
        'offset': request.args.get('offset'),
        'sort_by': request.args.get('sort_by') or request.args.get('sortBy'),
        'sort_order': request.args.get('sort_order') or request.args.get('sortOrder'),
    }


@rankings_bp.route('', methods=['GET'])
def get_rankings():
    """Global leaderboard, optionally filtered with ?category=."""
    category = request.args.get('category') or request.args.get('playerLevel')
    page = list_rankings(category=category, **_list_args())
    return jsonify(page.to_dict())


@rankings_bp.route('/category/<category>', methods=['GET'])
def get_category_rankings(category):
    page = list_rankings(category=category, **_list_args())
    return jsonify(page.to_dict())


@rankings_bp.route('/players/<player_id>', methods=['GET'])
def get_ranking_for_player(player_id):
    row = get_player_ranking(player_id)
    return jsonify({'ranking': row.to_dict()})


@rankings_bp.route('/calculate', methods=['POST'])
def calculate_rankings():
    """Recalculate one player (body: {"player_id": ...}) or the whole leaderboard."""
    data = request.get_json(silent=True) or {}
    player_id = str(data.get('player_id') or data.get('playerId') or '').strip()

    if player_id:
        results = [compute_player_ranking(player_id)]
    else:
        results = compute_all_rankings()
    return jsonify({
        'updated_rankings': [result.to_dict() for result in results],
        'count': len(results),
    })


@rankings_bp.route('/match/<match_id>/update', methods=['POST'])
def update_after_match(match_id):
    return jsonify(update_rankings_after_match(match_id))
