"""Docs site cache revalidation.

After a service's latest published version changes, the docs site is told to
drop its cached "latest version" data. The call is best effort: failures are
logged, never raised, and never retried.
"""

from __future__ import annotations

import logging
from typing import Protocol

import requests

from docs_content.config import Settings
from docs_content.domain.constants import REVALIDATE_SECRET_HEADER

logger = logging.getLogger(__name__)


class RevalidationNotifier(Protocol):
    """Port for latest-version cache invalidation."""

    def notify(self, service_slug: str | None = None) -> None:
        """Request revalidation for one service, or for all when None."""


def normalize_service_slug(value) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip().lower() or None


class HttpRevalidationNotifier:
    """Posts revalidation requests to the docs site with ``requests``.

    Does nothing when no endpoint URL or shared secret is configured.

    Args:
        settings: Source of the endpoint URL, secret, and timeout.
        session: HTTP session; a new ``requests.Session`` by default.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()

    def notify(self, service_slug: str | None = None) -> None:
        url = self._settings.resolve_revalidate_url()
        secret = self._settings.revalidate_secret
        if not url or not secret:
            logger.debug('Revalidation skipped: endpoint or secret not configured')
            return

        service = normalize_service_slug(service_slug)
        body = {'service': service} if service else {}

        try:
            response = self._session.post(
                url,
                json=body,
                headers={REVALIDATE_SECRET_HEADER: secret},
                timeout=self._settings.revalidate_timeout,
            )
        except requests.RequestException as e:
            logger.error('Docs latest-version revalidation request failed: %s', e)
            return

        if not 200 <= response.status_code < 300:
            logger.error(
                'Docs latest-version revalidation failed (%s): %s',
                response.status_code,
                response.text or response.reason,
            )
            return
        logger.debug('Revalidated latest version for %s', service or 'all services')
