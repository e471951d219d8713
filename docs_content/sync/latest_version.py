"""Keeps each service's latest-version pointer in sync.

The pointer caches the highest published version (by version key) so the
docs site can redirect unversioned URLs without querying every version.
"""

from __future__ import annotations

import logging

from docs_content.domain.constants import SERVICES, VERSIONS
from docs_content.domain.enums import VersionStatus
from docs_content.domain.relations import get_relation_id, same_id, same_nullable_id
from docs_content.store.base import ContentStore
from docs_content.sync.revalidation import RevalidationNotifier

logger = logging.getLogger(__name__)


class LatestVersionSynchronizer:
    """Recomputes and persists ``services.latestVersion``.

    Args:
        store: Content store holding services and versions.
        notifier: Revalidation port called after a pointer change.
    """

    def __init__(self, store: ContentStore, notifier: RevalidationNotifier | None = None):
        self._store = store
        self._notifier = notifier

    def resolve_latest_published_version_id(self, service_id: int | str) -> int | str | None:
        docs = self._store.find(
            VERSIONS,
            where={'service': service_id, 'status': VersionStatus.PUBLISHED.value},
            sort='-versionKey',
            limit=1,
        )
        return docs[0]['id'] if docs else None

    def sync_service(self, service_id: int | str | None) -> bool:
        """Update one service's pointer if it is stale.

        Returns:
            True when the pointer was written (and revalidation requested).
        """
        if service_id is None:
            return False
        service = self._store.find_by_id(SERVICES, service_id)
        if service is None:
            logger.debug('Latest-version sync skipped: service %s not found', service_id)
            return False

        current_id = get_relation_id(service.get('latestVersion'))
        latest_id = self.resolve_latest_published_version_id(service_id)
        if same_nullable_id(current_id, latest_id):
            return False

        self._store.update(SERVICES, service_id, {'latestVersion': latest_id})
        logger.info(
            'Service %s latest version changed: %s -> %s', service.get('slug'), current_id, latest_id
        )
        self._notify(service.get('slug'))
        return True

    def sync_services(
        self,
        current_service_id: int | str | None,
        previous_service_id: int | str | None = None,
    ) -> None:
        """Sync the current service, and the previous one if the version moved."""
        self.sync_service(current_service_id)
        if previous_service_id is not None and not same_id(previous_service_id, current_service_id):
            self.sync_service(previous_service_id)

    def _notify(self, service_slug: str | None) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(service_slug)
        except Exception:
            logger.exception('Revalidation notifier raised for service %s', service_slug)
