"""Write pipeline for the docs content model.

``DocsEngine`` wraps a content store the way collection hooks wrap a CMS:
every create/update/delete of a service, version, page, or group passes
through the integrity guard before it is persisted, and any change that can
move a service's published set is followed by a latest-version sync.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from docs_content.domain.constants import GROUPS, PAGES, SERVICES, VERSIONS
from docs_content.domain.errors import FieldError, NotFoundError, ValidationError
from docs_content.domain.field_validation import (
    slugify,
    validate_doc_path_slug,
    validate_required,
    validate_service_slug,
)
from docs_content.domain.relations import get_relation_id, same_id, unique_ids
from docs_content.integrity.guard import IntegrityGuard
from docs_content.store.base import ContentStore
from docs_content.sync.latest_version import LatestVersionSynchronizer
from docs_content.sync.revalidation import RevalidationNotifier

logger = logging.getLogger(__name__)


class DocsEngine:
    """Validating facade over a content store.

    Version writes sync the latest-version pointer after the version is
    persisted. A sync failure there propagates to the caller with the write
    already stored; rerun ``sync-latest`` to repair the pointer. Cascades from
    page and group writes log sync failures and carry on.

    Args:
        store: Content store to read from and persist to.
        notifier: Revalidation port used by the latest-version sync.
    """

    def __init__(self, store: ContentStore, notifier: RevalidationNotifier | None = None):
        self.store = store
        self.guard = IntegrityGuard(store)
        self.synchronizer = LatestVersionSynchronizer(store, notifier)

    def _get(self, collection: str, doc_id: int | str) -> dict:
        doc = self.store.find_by_id(collection, doc_id)
        if doc is None:
            raise NotFoundError(collection, doc_id)
        return doc

    def _require_service(self, data: dict[str, Any], collection: str) -> int | str:
        service_id = get_relation_id(data.get('service'))
        if service_id is None:
            raise ValidationError.single('service', 'Service is required.', collection=collection)
        if self.store.find_by_id(SERVICES, service_id) is None:
            raise ValidationError.single(
                'service', f'Service {service_id} could not be found.', collection=collection
            )
        return service_id

    # ── Services ─────────────────────────────────────────────────────────

    def create_service(self, data: dict[str, Any]) -> dict:
        doc = self._prepare_service(data, {})
        doc['latestVersion'] = None
        return self.store.create(SERVICES, doc)

    def update_service(self, service_id: int | str, data: dict[str, Any]) -> dict:
        original = self._get(SERVICES, service_id)
        return self.store.update(SERVICES, service_id, self._prepare_service(data, original))

    @staticmethod
    def _prepare_service(data: dict[str, Any], original: dict[str, Any]) -> dict[str, Any]:
        # The latest-version pointer is owned by the synchronizer
        doc = {k: v for k, v in data.items() if k != 'latestVersion'}
        merged = {**original, **doc}
        errors = []
        message = validate_required(merged.get('name'), 'Name')
        if message:
            errors.append(FieldError('name', message))
        slug = merged.get('slug')
        message = validate_service_slug(slug.strip().lower() if isinstance(slug, str) else slug)
        if message:
            errors.append(FieldError('slug', message))
        if errors:
            raise ValidationError(errors, collection=SERVICES)
        if 'slug' in doc:
            doc['slug'] = doc['slug'].strip().lower()
        return doc

    # ── Versions ─────────────────────────────────────────────────────────

    def create_version(self, data: dict[str, Any]) -> dict:
        self._require_service(data, VERSIONS)
        doc = self.store.create(VERSIONS, self.guard.prepare_version_write(data))
        self.synchronizer.sync_services(get_relation_id(doc.get('service')))
        return doc

    def update_version(self, version_id: int | str, data: dict[str, Any]) -> dict:
        original = self._get(VERSIONS, version_id)
        if 'service' in data:
            self._require_service(data, VERSIONS)
        prepared = self.guard.prepare_version_write(data, original)
        doc = self.store.update(VERSIONS, version_id, prepared)
        self.synchronizer.sync_services(
            get_relation_id(doc.get('service')),
            get_relation_id(original.get('service')),
        )
        return doc

    def delete_version(self, version_id: int | str) -> dict:
        doc = self.store.delete(VERSIONS, version_id)
        self.synchronizer.sync_services(get_relation_id(doc.get('service')))
        return doc

    # ── Pages ────────────────────────────────────────────────────────────

    def create_page(self, data: dict[str, Any]) -> dict:
        self._require_service(data, PAGES)
        self._validate_page_fields(data, require_all=True)
        return self.store.create(PAGES, data)

    def update_page(self, page_id: int | str, data: dict[str, Any]) -> dict:
        page = self._get(PAGES, page_id)
        if 'service' in data:
            self._require_service(data, PAGES)
        self._validate_page_fields(data, require_all=False)
        self.guard.enforce_page_update(page, data)
        doc = self.store.update(PAGES, page_id, data)
        if doc.get('slug') != page.get('slug'):
            self._sync_changed_versions(self.guard.refresh_versions_for_page(page_id))
        return doc

    def delete_page(self, page_id: int | str) -> dict:
        """Delete a page, then prune it from every version's nav."""
        page = self._get(PAGES, page_id)
        self.guard.enforce_page_delete(page)
        doc = self.store.delete(PAGES, page_id)
        self._sync_changed_versions(self.guard.prune_page_from_versions(page_id))
        return doc

    @staticmethod
    def _validate_page_fields(data: dict[str, Any], require_all: bool) -> None:
        errors = []
        if require_all or 'slug' in data:
            message = validate_doc_path_slug(data.get('slug'), 'Doc page slug')
            if message:
                errors.append(FieldError('slug', message))
        if require_all or 'title' in data:
            message = validate_required(data.get('title'), 'Title')
            if message:
                errors.append(FieldError('title', message))
        if errors:
            raise ValidationError(errors, collection=PAGES)

    # ── Groups ───────────────────────────────────────────────────────────

    def create_group(self, data: dict[str, Any]) -> dict:
        self._require_service(data, GROUPS)
        return self.store.create(GROUPS, self._prepare_group(data))

    def update_group(self, group_id: int | str, data: dict[str, Any]) -> dict:
        group = self._get(GROUPS, group_id)
        if 'service' in data:
            self._require_service(data, GROUPS)
            moved = not same_id(get_relation_id(data['service']), get_relation_id(group.get('service')))
            if moved and self.store.find_versions_referencing(group_id=group_id):
                raise ValidationError.single(
                    'service',
                    'This group is referenced by doc version navigation and cannot move to another service.',
                    collection=GROUPS,
                )
        return self.store.update(GROUPS, group_id, self._prepare_group(data, require_name='name' in data))

    def delete_group(self, group_id: int | str) -> dict:
        """Delete a group, then promote its rows to root items in every version."""
        doc = self.store.delete(GROUPS, group_id)
        self._sync_changed_versions(self.guard.promote_group_in_versions(group_id))
        return doc

    @staticmethod
    def _prepare_group(data: dict[str, Any], require_name: bool = True) -> dict[str, Any]:
        doc = dict(data)
        if require_name:
            message = validate_required(data.get('name'), 'Name')
            if message:
                raise ValidationError.single('name', message, collection=GROUPS)
            doc['slug'] = slugify(data['name'])
        return doc

    # ── Sync ─────────────────────────────────────────────────────────────

    def _sync_changed_versions(self, versions: Iterable[dict]) -> None:
        for service_id in unique_ids(v.get('service') for v in versions):
            try:
                self.synchronizer.sync_service(service_id)
            except Exception:
                logger.exception('Latest-version sync failed for service %s', service_id)
