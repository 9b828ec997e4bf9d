"""CLI utility to import/upsert players and statistics, then rank them."""

import argparse
import json

from backend.app import create_app, db
from backend.services.ranking_importer import import_rankings_file
from backend.services.ranking_service import compute_all_rankings


def _build_parser():
    parser = argparse.ArgumentParser(
        description='Import players and statistics from a JSON file and upsert by player id.',
    )
    parser.add_argument(
        '--file',
        help='Path to a JSON payload: a list of players or {"players": [...]}.',
    )
    parser.add_argument(
        '--env',
        default='development',
        choices=['development', 'testing', 'production'],
        help='App config environment to use (default: development).',
    )
    parser.add_argument(
        '--recalculate',
        action='store_true',
        help='Recalculate the full leaderboard after importing.',
    )
    parser.add_argument(
        '--recalculate-only',
        action='store_true',
        help='Skip importing and only recalculate the leaderboard.',
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate and preview results without committing database changes.',
    )
    return parser


def main():
    args = _build_parser().parse_args()
    app = create_app(args.env)

    with app.app_context():
        if args.recalculate_only:
            results = compute_all_rankings(commit=not args.dry_run)
            result = {'rankings_computed': len(results)}
        elif not args.file:
            raise SystemExit('Provide --file (or use --recalculate-only).')
        else:
            result = import_rankings_file(
                args.file,
                commit=not args.dry_run,
                recalculate=args.recalculate,
            )

        if args.dry_run:
            db.session.rollback()
            result['dry_run'] = True
        print(json.dumps(result, indent=2))
        return 0


if __name__ == '__main__':
    raise SystemExit(main())
