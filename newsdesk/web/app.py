"""Flask surface for the ingestion trigger and the read-path helpers.

Page rendering lives elsewhere; these endpoints only expose the core:
manual ingestion, article lookup with view counting, and comment threads.
"""

import atexit
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, current_app, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from newsdesk.config import Settings, configure_logging
from newsdesk.engagement.comment_threads import build_comment_forest, count_comments, forest_to_dicts
from newsdesk.engagement.view_counter import ViewCounter
from newsdesk.errors import InvalidInput, StoreUnavailable
from newsdesk.ingestion.pipeline import IngestionPipeline, build_pipeline
from newsdesk.storage.base import NewsStore
from newsdesk.storage.postgres_repo import PostgresNewsStore
from newsdesk.web.cors_config import configure_cors

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "100 per hour"],
    storage_uri="memory://",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message, 'timestamp': _now()}), status


def _core() -> Dict[str, Any]:
    return current_app.extensions['newsdesk']


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[NewsStore] = None,
    pipeline: Optional[IngestionPipeline] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    store = store or PostgresNewsStore(settings.pg_dsn)
    pipeline = pipeline or build_pipeline(settings, store)

    app = Flask(__name__)
    app.json.sort_keys = False
    if config:
        app.config.update(config)
    configure_cors(app, settings.cors_origins)
    limiter.init_app(app)
    views = ViewCounter(store)
    atexit.register(views.shutdown, wait=False)
    app.extensions['newsdesk'] = {
        'settings': settings,
        'store': store,
        'pipeline': pipeline,
        'views': views,
    }

    @app.errorhandler(InvalidInput)
    def handle_invalid_input(e):
        return _error(str(e), 400)

    @app.errorhandler(StoreUnavailable)
    def handle_store_unavailable(e):
        logger.error(f"Store unavailable: {e}")
        return _error('Storage temporarily unavailable', 503)

    @app.route('/api/health')
    @limiter.exempt
    def health():
        return jsonify({'success': True, 'status': 'ok', 'timestamp': _now()})

    @app.route('/api/ingest', methods=['POST'])
    @limiter.limit("5 per minute")
    def ingest():
        """Run one ingestion cycle and return its summary."""
        timeout = request.args.get('timeout', None, type=float)
        if timeout is not None and not timeout > 0:
            return _error('timeout must be a positive number of seconds', 400)
        run = _core()['pipeline'].run(timeout=timeout)
        body = run.to_dict()
        if run.error:
            return jsonify({'success': False, 'data': body, 'error': run.error, 'timestamp': _now()}), 502
        message = f"Successfully created {run.accepted} new articles" if run.fetched else 'No new articles found'
        return jsonify({'success': True, 'message': message, 'data': body, 'timestamp': _now()})

    @app.route('/api/articles/<slug>')
    @limiter.limit("60 per minute")
    def get_article(slug):
        article = _core()['store'].get_article(slug)
        if article is None:
            return _error('Article not found', 404)
        _core()['views'].record_view_later(slug)
        return jsonify({'success': True, 'data': article, 'timestamp': _now()})

    @app.route('/api/articles/<slug>/views', methods=['POST'])
    @limiter.limit("60 per minute")
    def record_view(slug):
        counted = _core()['views'].record_view(slug)
        return jsonify({'success': True, 'counted': counted})

    @app.route('/api/articles/<slug>/comments')
    @limiter.limit("60 per minute")
    def get_comments(slug):
        store = _core()['store']
        article = store.get_article(slug)
        if article is None:
            return _error('Article not found', 404)
        forest = build_comment_forest(store.list_comments(article['id']))
        return jsonify({
            'success': True,
            'data': forest_to_dicts(forest),
            'count': count_comments(forest),
            'timestamp': _now(),
        })

    @app.route('/api/articles/<slug>/comments', methods=['POST'])
    @limiter.limit("10 per minute")
    def add_comment(slug):
        store = _core()['store']
        article = store.get_article(slug)
        if article is None:
            return _error('Article not found', 404)
        payload = request.get_json(silent=True) or {}
        parent_id = payload.get('parent_comment_id')
        try:
            parent_id = int(parent_id) if parent_id not in (None, '') else None
        except (TypeError, ValueError):
            return _error('parent_comment_id must be an integer', 400)
        comment = store.add_comment(
            article_id=article['id'],
            user_name=str(payload.get('user_name') or ''),
            comment_text=str(payload.get('comment_text') or ''),
            parent_comment_id=parent_id,
        )
        logger.info(f"New comment {comment.id} on {slug}")
        return jsonify({
            'success': True,
            'data': {
                'id': comment.id,
                'parent_comment_id': comment.parent_comment_id,
                'created_at': comment.created_at.isoformat() if comment.created_at else None,
            },
        }), 201

    return app


if __name__ == '__main__':
    _settings = Settings.from_env()
    configure_logging(_settings.log_level)
    create_app(_settings).run(host='0.0.0.0', port=5002)
