#!/usr/bin/env python3
"""Entry point for the tournament rankings service."""
import logging
import os
from backend.app import create_app

config_name = os.environ.get('FLASK_ENV', 'development')
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
app = create_app(config_name)

# Recalculate on boot so a fresh database serves a complete leaderboard
if app.config.get('AUTO_RECALCULATE_RANKINGS'):
    with app.app_context():
        from backend.services.ranking_service import compute_all_rankings
        count = len(compute_all_rankings())
        if count:
            print(f"Recalculated {count} rankings")

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5001))
    print(f"Rankings service starting on http://localhost:{port}")
    app.run(host='0.0.0.0', port=port, debug=(config_name == 'development'))
