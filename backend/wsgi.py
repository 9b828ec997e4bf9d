"""WSGI entrypoint used by Gunicorn."""
import logging
import os

from backend.app import create_app
from backend.services.ranking_importer import import_rankings_file
from backend.services.ranking_service import compute_all_rankings

logger = logging.getLogger('backend.wsgi')

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

seed_file = str(os.environ.get('RANKINGS_SEED_FILE') or '').strip()
if seed_file:
    with app.app_context():
        try:
            result = import_rankings_file(seed_file, commit=True)
            logger.info(
                'Imported rankings seed %s: created=%s updated=%s',
                seed_file, result['players_created'], result['players_updated'],
            )
        except FileNotFoundError:
            logger.warning('Skipped rankings seed: %s not found', seed_file)

if app.config.get('AUTO_RECALCULATE_RANKINGS'):
    with app.app_context():
        results = compute_all_rankings()
        logger.info('Recalculated %d rankings at startup', len(results))
