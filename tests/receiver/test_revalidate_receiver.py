"""Tests for the revalidation receiver and latest-version endpoint."""

import pytest

from docs_content.config import Settings
from docs_content.domain.errors import DocsSourceError
from docs_content.source.latest_cache import LatestVersionCache
from web.app import create_app

SECRET_HEADER = {'x-revalidate-secret': 's3cret'}


class StubLoader:

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, slug):
        self.calls.append(slug)
        if self.error:
            raise self.error
        if slug == 'api':
            return {'id': 5, 'version': '1.0.0'}
        return None


@pytest.fixture
def loader():
    return StubLoader()


@pytest.fixture
def client(loader):
    app = create_app(Settings(revalidate_secret='s3cret'), LatestVersionCache(loader))
    app.config['TESTING'] = True
    return app.test_client()


class TestRevalidateEndpoint:

    def test_rejects_wrong_secret(self, client):
        response = client.post('/api/revalidate/latest-version', json={}, headers={'x-revalidate-secret': 'nope'})
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}

    def test_rejects_when_no_secret_configured(self):
        app = create_app(Settings(), LatestVersionCache(StubLoader()))
        response = app.test_client().post('/api/revalidate/latest-version', json={}, headers=SECRET_HEADER)
        assert response.status_code == 401

    def test_service_scope(self, client, loader):
        client.get('/api/services/api/latest-version')
        response = client.post('/api/revalidate/latest-version', json={'service': ' API '}, headers=SECRET_HEADER)
        assert response.get_json() == {'revalidated': True, 'scope': 'service', 'service': 'api'}
        client.get('/api/services/api/latest-version')
        assert loader.calls == ['api', 'api']

    def test_all_scope(self, client, loader):
        client.get('/api/services/api/latest-version')
        response = client.post('/api/revalidate/latest-version', json={}, headers=SECRET_HEADER)
        assert response.get_json() == {'revalidated': True, 'scope': 'all'}
        client.get('/api/services/api/latest-version')
        assert loader.calls == ['api', 'api']

    def test_invalid_body_means_all(self, client):
        response = client.post(
            '/api/revalidate/latest-version', data='not json', headers=SECRET_HEADER,
            content_type='application/json',
        )
        assert response.get_json()['scope'] == 'all'


class TestLatestVersionEndpoint:

    def test_serves_cached_version(self, client, loader):
        assert client.get('/api/services/api/latest-version').get_json() == {'id': 5, 'version': '1.0.0'}
        client.get('/api/services/API/latest-version')
        assert loader.calls == ['api']

    def test_unknown_service(self, client):
        assert client.get('/api/services/ghost/latest-version').status_code == 404

    def test_source_error(self):
        loader = StubLoader(error=DocsSourceError('Docs source request failed (500): down', status_code=500))
        app = create_app(Settings(), LatestVersionCache(loader))
        assert app.test_client().get('/api/services/api/latest-version').status_code == 502

    def test_unconfigured_source(self):
        app = create_app(Settings())
        assert app.test_client().get('/api/services/api/latest-version').status_code == 503
