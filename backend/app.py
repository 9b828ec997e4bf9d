import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from sqlalchemy import inspect, text
from backend.config import config

db = SQLAlchemy()


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL') or 'INFO').upper(), logging.INFO)
    logging.getLogger('backend').setLevel(level)
    app.logger.setLevel(level)


def _validate_ranking_config(app):
    categories = tuple(app.config.get('RANKING_CATEGORIES') or ())
    if not categories:
        raise RuntimeError('RANKING_CATEGORIES must list at least one category')
    for source, target in (app.config.get('RANKING_LEGACY_CATEGORIES') or {}).items():
        if target not in categories:
            raise RuntimeError(
                f'RANKING_LEGACY_CATEGORIES maps {source} to unknown category {target}'
            )
    if app.config.get('STATISTICS_ON_MISSING') not in {'fail', 'zero'}:
        raise RuntimeError('STATISTICS_ON_MISSING must be "fail" or "zero"')


def _run_lightweight_migrations():
    """Apply small schema updates for local/dev databases without Alembic."""
    inspector = inspect(db.engine)
    table_names = inspector.get_table_names()
    if 'ranking' not in table_names:
        return

    ranking_columns = {col['name'] for col in inspector.get_columns('ranking')}
    with db.engine.begin() as connection:
        if 'previous_global_position' not in ranking_columns:
            connection.execute(text(
                'ALTER TABLE ranking ADD COLUMN previous_global_position INTEGER'
            ))
        if 'position_change' not in ranking_columns:
            connection.execute(text(
                'ALTER TABLE ranking ADD COLUMN position_change INTEGER NOT NULL DEFAULT 0'
            ))
        connection.execute(text(
            'CREATE INDEX IF NOT EXISTS ix_ranking_category_position '
            'ON ranking (category, category_position)'
        ))
        if 'match' in table_names:
            connection.execute(text(
                'CREATE INDEX IF NOT EXISTS ix_match_status '
                'ON "match" (status)'
            ))


def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    _configure_logging(app)
    _validate_ranking_config(app)

    allowed_origins = _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    if str(config_name).strip().lower() == 'production':
        if not app.config.get('SQLALCHEMY_DATABASE_URI'):
            raise RuntimeError('DATABASE_URL must be set in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')

    db.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': allowed_origins}})

    from backend.errors import RankingError

    @app.errorhandler(RankingError)
    def _handle_ranking_error(error):
        return jsonify(error.to_dict()), error.status_code

    from backend.routes.rankings import rankings_bp
    from backend.routes.statistics import statistics_bp

    app.register_blueprint(rankings_bp, url_prefix='/api/rankings')
    app.register_blueprint(statistics_bp, url_prefix='/api/statistics')

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        from backend import models  # noqa: F401
        db.create_all()
        _run_lightweight_migrations()

    return app
