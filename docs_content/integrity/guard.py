"""Integrity guard for version writes and page/group deletes.

Version writes run normalize → reference check → dedup → status →
default-slug guard, and the returned data carries every derived field
(``versionKey``, ``isPrerelease``, ``status``, ``navItems``, ``navWarnings``).

Page and group deletes cascade into every version that references them.
Cascades are best effort per version: a failure is logged and the loop moves
on, with no rollback of versions already updated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from docs_content.domain.constants import PAGES, VERSIONS
from docs_content.domain.enums import VersionStatus
from docs_content.domain.errors import FieldError, ValidationError
from docs_content.domain.field_validation import (
    normalize_default_page_slug,
    normalize_slug,
    validate_doc_path_slug,
)
from docs_content.domain.models import NavItem
from docs_content.domain.relations import get_relation_id, same_id
from docs_content.integrity.references import ReferenceChecker
from docs_content.navigation.cascade import promote_group, prune_page
from docs_content.navigation.dedup import dedupe_published_slugs, join_warnings
from docs_content.navigation.normalizer import flatten_nav_rows, normalize_nav_items, serialize_nav_items
from docs_content.navigation.status import derive_status, enforce_default_page_slug
from docs_content.semver import SemverError, build_version_key, parse_semver
from docs_content.store.base import ContentStore

logger = logging.getLogger(__name__)


@dataclass
class NavIntegrityResult:
    """Outcome of normalizing, checking, and deduplicating a nav tree."""

    items: list[NavItem]
    warnings: list[str]
    status: VersionStatus
    page_slug_by_id: dict[str, str]

    @property
    def nav_warnings(self) -> str | None:
        return join_warnings(self.warnings)

    def to_fields(self) -> dict[str, Any]:
        """Derived version fields in their persisted form."""
        return {
            'navItems': serialize_nav_items(self.items),
            'navWarnings': self.nav_warnings,
            'status': self.status.value,
        }


class IntegrityGuard:
    """Enforces navigation integrity against a content store.

    Args:
        store: Content store holding versions, pages, and groups.
    """

    def __init__(self, store: ContentStore) -> None:
        self._store = store
        self._references = ReferenceChecker(store)

    # ── Version Writes ───────────────────────────────────────────────────

    def enforce_nav_integrity(self, service_id: int | str, nav_items: Any) -> NavIntegrityResult:
        """Normalize, reference-check, and dedupe nav items for one service.

        Raises:
            ValidationError: On any missing or cross-service reference.
        """
        items = normalize_nav_items(nav_items)
        refs = self._references.check(service_id, items)
        slugs = refs.page_slug_by_id
        deduped = dedupe_published_slugs(items, slugs)
        return NavIntegrityResult(
            items=deduped.items,
            warnings=deduped.warnings,
            status=derive_status(deduped.items),
            page_slug_by_id=slugs,
        )

    def prepare_version_write(
        self,
        data: dict[str, Any],
        original: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate a version create/update and fill in derived fields.

        Args:
            data: Incoming fields (a full document on create, a patch on
                update). Client-supplied derived fields are overwritten.
            original: Stored document for updates, None for creates.

        Returns:
            ``data`` plus versionKey, isPrerelease, defaultPageSlug,
            navItems, navWarnings, and status, ready to persist.

        Raises:
            ValidationError: If any field or integrity rule fails. Field
                errors are reported together before nav checks run.
        """
        merged = {**(original or {}), **data}
        errors: list[FieldError] = []
        result = dict(data)

        service_id = get_relation_id(merged.get('service'))
        if service_id is None:
            errors.append(FieldError('service', 'Service is required.'))

        version = merged.get('version')
        if not isinstance(version, str) or not version.strip():
            errors.append(FieldError('version', 'Version is required.'))
        else:
            try:
                parsed = parse_semver(version)
            except SemverError as e:
                errors.append(FieldError('version', str(e)))
            else:
                result['version'] = version.strip()
                result['versionKey'] = build_version_key(parsed)
                result['isPrerelease'] = parsed.is_prerelease

        default_slug = merged.get('defaultPageSlug')
        if isinstance(default_slug, str) and default_slug.strip():
            default_slug = normalize_default_page_slug(default_slug)
        message = validate_doc_path_slug(default_slug, 'Default page slug')
        if message:
            errors.append(FieldError('defaultPageSlug', message))
        else:
            result['defaultPageSlug'] = default_slug

        if errors:
            raise ValidationError(errors, collection=VERSIONS)

        nav = self.enforce_nav_integrity(service_id, merged.get('navItems'))
        enforce_default_page_slug(nav.status, default_slug, nav.items, nav.page_slug_by_id)
        result.update(nav.to_fields())
        return result

    # ── Page Guards ──────────────────────────────────────────────────────

    def find_published_landing_versions(self, page: dict[str, Any]) -> list[dict]:
        """Published versions whose default landing page is this page.

        A version counts when the page has a published row in its nav and
        the page slug equals the version's default page slug.
        """
        slug = normalize_slug(page.get('slug'))
        if not slug:
            return []
        landing = []
        for version in self._store.find_versions_referencing(page_id=page['id']):
            if version.get('status') != VersionStatus.PUBLISHED.value:
                continue
            if normalize_slug(version.get('defaultPageSlug')) != slug:
                continue
            rows = flatten_nav_rows(normalize_nav_items(version.get('navItems')))
            if any(r.published and same_id(r.page_id, page['id']) for r in rows):
                landing.append(version)
        return landing

    def enforce_page_delete(self, page: dict[str, Any]) -> None:
        """Block deleting the published landing page of a published version."""
        landing = self.find_published_landing_versions(page)
        if landing:
            versions = ', '.join(str(v.get('version') or v['id']) for v in landing)
            raise ValidationError.single(
                'slug',
                f'Cannot delete the default page of published version(s) {versions}. '
                'Change defaultPageSlug first.',
                collection=PAGES,
            )

    def enforce_page_update(self, page: dict[str, Any], data: dict[str, Any]) -> None:
        """Block page edits that would break referencing versions.

        A referenced page cannot move to another service, and the landing
        page of a published version cannot change its slug.
        """
        next_service = get_relation_id(data.get('service', page.get('service')))
        if not same_id(next_service, get_relation_id(page.get('service'))):
            if self._store.find_versions_referencing(page_id=page['id']):
                raise ValidationError.single(
                    'service',
                    'This page is referenced by doc version navigation and cannot move to another service.',
                    collection=PAGES,
                )

        if 'slug' in data and normalize_slug(data['slug']) != normalize_slug(page.get('slug')):
            if self.find_published_landing_versions(page):
                raise ValidationError.single(
                    'slug',
                    'This page is the default page of a published version. '
                    'Change the version default page slug first.',
                    collection=PAGES,
                )

    # ── Cascades ─────────────────────────────────────────────────────────

    def prune_page_from_versions(self, page_id: int | str) -> list[dict]:
        """Remove a deleted page from every version's nav.

        Returns:
            The versions that were actually changed, as persisted.
        """
        return self._cascade(
            self._store.find_versions_referencing(page_id=page_id),
            lambda items: prune_page(items, page_id),
            f'page {page_id}',
        )

    def promote_group_in_versions(self, group_id: int | str) -> list[dict]:
        """Replace a deleted group's nav items with its rows, in place.

        Returns:
            The versions that were actually changed, as persisted.
        """
        return self._cascade(
            self._store.find_versions_referencing(group_id=group_id),
            lambda items: promote_group(items, group_id),
            f'group {group_id}',
        )

    def refresh_versions_for_page(self, page_id: int | str) -> list[dict]:
        """Re-run dedup and status for versions referencing a changed page."""
        changed = []
        for version in self._store.find_versions_referencing(page_id=page_id):
            try:
                items = normalize_nav_items(version.get('navItems'))
                updated = self._persist_if_changed(version, self._derived_fields(items))
            except Exception:
                logger.exception('Failed to refresh nav of version %s after page %s changed',
                                 version.get('id'), page_id)
                continue
            if updated is not None:
                changed.append(updated)
        return changed

    def _cascade(
        self,
        versions: list[dict],
        transform: Callable[[Any], list[NavItem]],
        label: str,
    ) -> list[dict]:
        changed = []
        for version in versions:
            try:
                items = transform(version.get('navItems'))
                updated = self._persist_if_changed(version, self._derived_fields(items))
            except Exception:
                logger.exception('Cascade for deleted %s failed on version %s', label, version.get('id'))
                continue
            if updated is not None:
                logger.info('Updated version %s nav after deleting %s', version['id'], label)
                changed.append(updated)
        return changed

    def _derived_fields(self, items: list[NavItem]) -> dict[str, Any]:
        refs = self._references.resolve(items)
        deduped = dedupe_published_slugs(items, refs.page_slug_by_id)
        return {
            'navItems': serialize_nav_items(deduped.items),
            'navWarnings': deduped.nav_warnings,
            'status': derive_status(deduped.items).value,
        }

    def _persist_if_changed(self, version: dict, fields: dict[str, Any]) -> dict | None:
        current = {
            'navItems': serialize_nav_items(normalize_nav_items(version.get('navItems'))),
            'navWarnings': version.get('navWarnings'),
            'status': version.get('status'),
        }
        if all(current[k] == v for k, v in fields.items()):
            return None
        return self._store.update(VERSIONS, version['id'], fields)
