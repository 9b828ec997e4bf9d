import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _env_list(name, default):
    raw = os.environ.get(name)
    if raw is None:
        raw = default
    return tuple(item.strip().upper() for item in str(raw).split(',') if item.strip())


def _env_mapping(name, default):
    """Parse 'OLD:NEW,OLD2:NEW2' pairs into a dict."""
    raw = os.environ.get(name)
    if raw is None:
        raw = default
    mapping = {}
    for pair in str(raw).split(','):
        if ':' not in pair:
            continue
        source, target = pair.split(':', 1)
        source, target = source.strip().upper(), target.strip().upper()
        if source and target:
            mapping[source] = target
    return mapping


def _normalize_database_url(raw_url):
    if not raw_url:
        return raw_url
    if raw_url.startswith('postgres://'):
        return raw_url.replace('postgres://', 'postgresql://', 1)
    return raw_url


class BaseConfig:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').strip().upper()

    # Ordinal player levels, best first.
    RANKING_CATEGORIES = _env_list('RANKING_CATEGORIES', 'P1,P2,P3')
    RANKING_LEGACY_CATEGORIES = _env_mapping('RANKING_LEGACY_CATEGORIES', 'P4:P3,P5:P3')
    RANKING_DEFAULT_LIMIT = _env_int('RANKING_DEFAULT_LIMIT', 10)
    RANKING_MAX_LIMIT = _env_int('RANKING_MAX_LIMIT', 100)
    # 'fail' or 'zero'
    STATISTICS_ON_MISSING = os.environ.get('STATISTICS_ON_MISSING', 'fail').strip().lower()
    AUTO_RECALCULATE_RANKINGS = _env_bool('AUTO_RECALCULATE_RANKINGS', False)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(
        os.environ.get(
            'DATABASE_URL',
            'sqlite:///' + os.path.join(basedir, '..', 'rankings_dev.db')
        )
    )


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'DEBUG'
    RANKING_CATEGORIES = ('P1', 'P2', 'P3')
    RANKING_LEGACY_CATEGORIES = {'P4': 'P3', 'P5': 'P3'}
    RANKING_DEFAULT_LIMIT = 10
    RANKING_MAX_LIMIT = 100
    STATISTICS_ON_MISSING = 'fail'


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(os.environ.get('DATABASE_URL'))


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
