"""Player category (level) normalization."""

from flask import current_app, has_app_context

DEFAULT_CATEGORIES = ('P1', 'P2', 'P3')
DEFAULT_LEGACY_CATEGORIES = {'P4': 'P3', 'P5': 'P3'}


def configured_categories():
    if has_app_context():
        return tuple(current_app.config.get('RANKING_CATEGORIES') or DEFAULT_CATEGORIES)
    return DEFAULT_CATEGORIES


def configured_legacy_categories():
    if has_app_context():
        return dict(current_app.config.get('RANKING_LEGACY_CATEGORIES') or {})
    return dict(DEFAULT_LEGACY_CATEGORIES)


def normalize_category(value, categories=None, legacy=None):
    """Return the canonical category for a raw value, or '' if unsupported.

    Values are matched case-insensitively. Legacy levels that are no longer
    part of the configured set are mapped through ``legacy``; anything else
    is rejected rather than coerced to a default.
    """
    if categories is None:
        categories = configured_categories()
    if legacy is None:
        legacy = configured_legacy_categories()

    text = str(value or '').strip().upper()
    if not text:
        return ''
    if text in categories:
        return text
    mapped = legacy.get(text, '')
    if mapped in categories:
        return mapped
    return ''
