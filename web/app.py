"""Flask endpoints on the docs site side of latest-version revalidation."""

import hmac
import logging

from flask import Flask, current_app, jsonify, request

from docs_content.config import Settings
from docs_content.domain.constants import LATEST_VERSION_CACHE_TAG, REVALIDATE_PATH, REVALIDATE_SECRET_HEADER
from docs_content.domain.errors import DocsSourceError
from docs_content.source.client import DocsSourceClient
from docs_content.source.latest_cache import LatestVersionCache, service_tag
from docs_content.sync.revalidation import normalize_service_slug

logger = logging.getLogger(__name__)


def _is_authorized(settings: Settings) -> bool:
    secret = settings.revalidate_secret
    if not secret:
        return False
    return hmac.compare_digest(request.headers.get(REVALIDATE_SECRET_HEADER, ''), secret)


def _latest_cache() -> LatestVersionCache:
    cache = current_app.config.get('LATEST_VERSION_CACHE')
    if cache is None:
        client = DocsSourceClient(current_app.config['DOCS_SETTINGS'])
        cache = LatestVersionCache(client.get_latest_version)
        current_app.config['LATEST_VERSION_CACHE'] = cache
    return cache


def create_app(settings: Settings | None = None, cache: LatestVersionCache | None = None) -> Flask:
    """Build the app.

    Args:
        settings: Defaults to ``Settings.from_env()``.
        cache: Latest-version cache; built from a ``DocsSourceClient`` on
            first use when omitted.
    """
    app = Flask(__name__)
    app.config['DOCS_SETTINGS'] = settings or Settings.from_env()
    app.config['LATEST_VERSION_CACHE'] = cache

    @app.route(REVALIDATE_PATH, methods=['POST'])
    def revalidate_latest_version():
        """Drop cached latest versions for one service or for all."""
        if not _is_authorized(app.config['DOCS_SETTINGS']):
            return jsonify({'error': 'Unauthorized'}), 401

        body = request.get_json(silent=True)
        service = normalize_service_slug(body.get('service')) if isinstance(body, dict) else None
        cache = app.config.get('LATEST_VERSION_CACHE')

        if service:
            if cache is not None:
                cache.invalidate_tag(service_tag(service))
            return jsonify({'revalidated': True, 'scope': 'service', 'service': service})

        if cache is not None:
            cache.invalidate_tag(LATEST_VERSION_CACHE_TAG)
        return jsonify({'revalidated': True, 'scope': 'all'})

    @app.route('/api/services/<slug>/latest-version')
    def latest_version(slug):
        """Serve the cached latest version of a service."""
        if app.config.get('LATEST_VERSION_CACHE') is None and not app.config['DOCS_SETTINGS'].source_url:
            return jsonify({'error': 'Docs source is not configured'}), 503
        try:
            version = _latest_cache().get(slug)
        except DocsSourceError as e:
            logger.error('Latest version lookup failed for %s: %s', slug, e)
            return jsonify({'error': str(e)}), 502
        if version is None:
            return jsonify({'error': f'No version found for service {slug}'}), 404
        return jsonify(version)

    return app


app = create_app()


if __name__ == '__main__':
    app.run(debug=True, port=5000)
