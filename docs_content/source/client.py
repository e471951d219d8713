"""Read client for the CMS REST API, as used by the docs site.

Queries use the CMS list-query conventions (``where[field][equals]=value``,
``sort=-field``, ``depth``, ``limit``, ``page``) and return plain documents.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from docs_content.config import Settings
from docs_content.domain.constants import GROUPS, PAGES, SERVICES, VERSIONS
from docs_content.domain.enums import VersionStatus
from docs_content.domain.errors import DocsSourceError
from docs_content.domain.models import NavNode
from docs_content.domain.relations import get_relation_id
from docs_content.navigation.normalizer import (
    collect_group_ids,
    collect_page_ids,
    flatten_nav_rows,
    normalize_nav_items,
)
from docs_content.navigation.sidebar import build_sidebar
from docs_content.source.token_cache import TokenCache

logger = logging.getLogger(__name__)

LOGIN_PATH = '/api/users/login'


def _equals(field: str, value: Any) -> dict[str, str]:
    return {f'where[{field}][equals]': str(value)}


def _in(field: str, values: list) -> dict[str, str]:
    return {f'where[{field}][in]': ','.join(str(v) for v in values)}


class DocsSourceClient:
    """CMS API reader with a per-instance token cache.

    Args:
        settings: Base URL, optional login credentials, draft mode, token TTL.
        session: HTTP session; a new ``requests.Session`` by default.
        token_cache: Token holder; one with ``settings.token_ttl`` by default.
    """

    def __init__(
        self,
        settings: Settings,
        session: requests.Session | None = None,
        token_cache: TokenCache | None = None,
    ):
        if not settings.source_url:
            raise ValueError('DOCS_SOURCE_URL is not configured')
        self._settings = settings
        self._base_url = settings.source_url.rstrip('/')
        self._session = session or requests.Session()
        self._tokens = token_cache or TokenCache(settings.token_ttl)

    @property
    def include_drafts(self) -> bool:
        return self._settings.include_drafts

    # ── Transport ────────────────────────────────────────────────────────

    def _url(self, path: str) -> str:
        return f'{self._base_url}{path}'

    def _resolve_token(self) -> str | None:
        token = self._tokens.get()
        if token:
            return token
        auth = self._settings.source_auth
        if auth is None:
            return None

        response = self._session.post(self._url(LOGIN_PATH), json=auth, timeout=30)
        if not response.ok:
            raise DocsSourceError(
                f'Docs source login failed ({response.status_code}): {response.text or response.reason}',
                status_code=response.status_code,
            )
        token = (response.json() or {}).get('token')
        if not token:
            raise DocsSourceError('Docs source login did not return a token.')
        self._tokens.store(token)
        logger.debug('Obtained new docs source token')
        return token

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        headers = {'Content-Type': 'application/json'}
        token = self._resolve_token()
        if token:
            headers['Authorization'] = f'Bearer {token}'

        response = self._session.get(self._url(path), params=params, headers=headers, timeout=30)
        if response.status_code == 401 and token:
            self._tokens.invalidate()
        if not response.ok:
            raise DocsSourceError(
                f'Docs source request failed ({response.status_code}): {response.text or response.reason}',
                status_code=response.status_code,
            )
        return response.json()

    def _list(self, collection: str, params: dict[str, str]) -> list[dict]:
        return self._get(f'/api/{collection}', params).get('docs') or []

    def _fetch_all(self, collection: str, params: dict[str, str]) -> list[dict]:
        docs: list[dict] = []
        page = 1
        while True:
            data = self._get(f'/api/{collection}', {**params, 'page': str(page)})
            docs.extend(data.get('docs') or [])
            if not data.get('hasNextPage') or not data.get('nextPage'):
                return docs
            page = data['nextPage']

    def _status_filter(self) -> dict[str, str]:
        if self.include_drafts:
            return {}
        return _equals('status', VersionStatus.PUBLISHED.value)

    # ── Queries ──────────────────────────────────────────────────────────

    def get_services(self, depth: int = 1, limit: int = 100) -> list[dict]:
        return self._list(SERVICES, {'depth': str(depth), 'limit': str(limit), 'sort': 'name'})

    def get_service_by_slug(self, slug: str, depth: int = 1) -> dict | None:
        docs = self._list(SERVICES, {
            'depth': str(depth),
            'limit': '1',
            **_equals('slug', slug.strip().lower()),
        })
        return docs[0] if docs else None

    def get_versions(self, service_slug: str, limit: int = 100) -> list[dict]:
        """Versions of a service, newest first by semver key."""
        service = self.get_service_by_slug(service_slug, depth=0)
        if service is None:
            return []
        return self._list(VERSIONS, {
            'depth': '0',
            'limit': str(limit),
            'sort': '-versionKey',
            **_equals('service', service['id']),
            **self._status_filter(),
        })

    def get_version_by_id(self, version_id: int | str) -> dict | None:
        try:
            return self._get(f'/api/{VERSIONS}/{version_id}', {'depth': '0'})
        except DocsSourceError as e:
            if e.status_code == 404:
                return None
            raise

    def get_version(self, service_slug: str, version: str) -> dict | None:
        service = self.get_service_by_slug(service_slug, depth=0)
        if service is None:
            return None
        docs = self._list(VERSIONS, {
            'depth': '0',
            'limit': '1',
            **_equals('service', service['id']),
            **_equals('version', version),
            **self._status_filter(),
        })
        return docs[0] if docs else None

    def get_latest_version(self, service_slug: str) -> dict | None:
        """Latest version of a service.

        Reads the service's latest-version pointer unless drafts are
        included, in which case (or when the pointer is empty) the newest
        version by semver key is queried.
        """
        service = self.get_service_by_slug(service_slug, depth=1)
        if service is None:
            return None

        pointer = service.get('latestVersion')
        if not self.include_drafts and pointer:
            if isinstance(pointer, dict) and 'version' in pointer:
                return pointer
            return self.get_version_by_id(get_relation_id(pointer))

        docs = self._list(VERSIONS, {
            'depth': '0',
            'limit': '1',
            'sort': '-versionKey',
            **_equals('service', service['id']),
            **self._status_filter(),
        })
        return docs[0] if docs else None

    def get_version_nav(self, version: dict) -> list[NavNode]:
        """Sidebar nodes for a version, built from its flattened nav rows."""
        items = normalize_nav_items(version.get('navItems'))
        page_ids = collect_page_ids(items)
        group_ids = collect_group_ids(items)

        pages = self._fetch_all(PAGES, {'depth': '0', 'limit': '100', **_in('id', page_ids)}) if page_ids else []
        groups = self._fetch_all(GROUPS, {'depth': '0', 'limit': '100', **_in('id', group_ids)}) if group_ids else []

        return build_sidebar(
            flatten_nav_rows(items),
            {str(p['id']): p for p in pages},
            {str(g['id']): g for g in groups},
            include_drafts=self.include_drafts,
        )
