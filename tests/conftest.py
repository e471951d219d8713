"""Shared test fixtures."""

import pytest

from docs_content.engine import DocsEngine
from docs_content.store.memory import InMemoryContentStore


# ── Sample Content ───────────────────────────────────────────────────────

SNAPSHOT = {
    'services': [
        {'id': 1, 'name': 'API', 'slug': 'api', 'latestVersion': None},
        {'id': 2, 'name': 'Web', 'slug': 'web', 'latestVersion': None},
    ],
    'docPages': [
        {'id': 10, 'service': 1, 'slug': 'intro', 'title': 'Introduction'},
        {'id': 11, 'service': 1, 'slug': 'guides/setup', 'title': 'Setup'},
        {'id': 12, 'service': 1, 'slug': 'reference', 'title': 'Reference'},
        {'id': 13, 'service': 1, 'slug': 'intro', 'title': 'Intro (copy)'},
        {'id': 20, 'service': 2, 'slug': 'home', 'title': 'Home'},
    ],
    'docPageGroups': [
        {'id': 30, 'service': 1, 'name': 'Getting Started', 'slug': 'getting-started'},
        {'id': 31, 'service': 2, 'name': 'Basics', 'slug': 'basics'},
    ],
}


def page_item(page, published=True, **extra):
    return {'blockType': 'pageItem', 'page': page, 'published': published, **extra}


def group_item(group, *rows):
    """Build a group item; rows are page ids or (page_id, published) pairs."""
    pages = []
    for row in rows:
        page, published = row if isinstance(row, tuple) else (row, True)
        pages.append({'page': page, 'published': published})
    return {'blockType': 'groupItem', 'group': group, 'pages': pages}


def version_data(version='1.0.0', service=1, nav=None, default='intro'):
    return {
        'service': service,
        'version': version,
        'defaultPageSlug': default,
        'navItems': nav if nav is not None else [page_item(10)],
    }


# ── Fakes ────────────────────────────────────────────────────────────────

class RecordingNotifier:
    """Revalidation notifier that records every call."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def notify(self, service_slug=None):
        self.calls.append(service_slug)
        if self.fail:
            raise RuntimeError('notifier down')


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = 'Reason'

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    """Stand-in for requests.Session that replays queued responses.

    ``get_handler`` receives (url, params) and returns a FakeResponse.
    """

    def __init__(self, get_handler=None, post_responses=None, post_error=None):
        self.get_handler = get_handler
        self.post_responses = list(post_responses or [])
        self.post_error = post_error
        self.gets = []
        self.posts = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.gets.append({'url': url, 'params': params or {}, 'headers': headers or {}})
        return self.get_handler(url, params or {})

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({'url': url, 'json': json, 'headers': headers or {}, 'timeout': timeout})
        if self.post_error is not None:
            raise self.post_error
        return self.post_responses.pop(0) if self.post_responses else FakeResponse(200, {})


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def store():
    return InMemoryContentStore(SNAPSHOT)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(store, notifier):
    return DocsEngine(store, notifier)
