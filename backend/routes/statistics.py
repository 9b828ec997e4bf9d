from flask import Blueprint, jsonify
from backend.services.player_statistics import get_player_statistics

statistics_bp = Blueprint('statistics', __name__)


@statistics_bp.route('/players/<player_id>', methods=['GET'])
def get_statistics_for_player(player_id):
    snapshot = get_player_statistics(player_id)
    return jsonify({'statistics': snapshot.to_dict()})
