"""Reference checks for version navigation.

Every page and group a version's nav points at must exist and belong to the
version's own service. The lookups built here are reused by the dedup and
default-slug steps, so the store is queried once per write.
"""

from dataclasses import dataclass, field
from typing import Any

from docs_content.domain.constants import GROUPS, PAGES, VERSIONS
from docs_content.domain.errors import FieldError, ValidationError
from docs_content.domain.models import GroupItem, NavItem, PageItem
from docs_content.domain.relations import get_relation_id, same_id
from docs_content.navigation.normalizer import collect_group_ids, collect_page_ids, flatten_nav_rows
from docs_content.store.base import ContentStore


@dataclass
class ResolvedReferences:
    """Documents referenced by one version's nav, keyed by string id."""

    pages_by_id: dict[str, dict[str, Any]] = field(default_factory=dict)
    groups_by_id: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def page_slug_by_id(self) -> dict[str, str]:
        return {
            pid: page['slug']
            for pid, page in self.pages_by_id.items()
            if isinstance(page.get('slug'), str) and page['slug']
        }


class ReferenceChecker:
    """Resolves nav references and rejects foreign or dangling ones.

    Args:
        store: Content store to look pages and groups up in.
    """

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def resolve(self, items: list[NavItem]) -> ResolvedReferences:
        """Load referenced pages and groups without validating them."""
        pages = self._store.find_by_ids(PAGES, collect_page_ids(items))
        groups = self._store.find_by_ids(GROUPS, collect_group_ids(items))
        return ResolvedReferences(
            pages_by_id={str(p['id']): p for p in pages},
            groups_by_id={str(g['id']): g for g in groups},
        )

    def check(self, service_id: int | str, items: list[NavItem]) -> ResolvedReferences:
        """Resolve references and verify they all belong to ``service_id``.

        Raises:
            ValidationError: Listing every missing, dangling, or cross-service
                reference, each scoped to its position in ``navItems``.
        """
        refs = self.resolve(items)
        errors = self._missing_reference_errors(items)

        for row in flatten_nav_rows(items):
            path = self._row_path(row.root_index, row.page_index)
            error = self._check_document(refs.pages_by_id, row.page_id, service_id, 'Page', path)
            if error:
                errors.append(error)

        for root_index, item in enumerate(items):
            if not isinstance(item, GroupItem):
                continue
            group_id = get_relation_id(item.group)
            if group_id is None:
                continue
            path = f'navItems.{root_index}.group'
            error = self._check_document(refs.groups_by_id, group_id, service_id, 'Group', path)
            if error:
                errors.append(error)

        if errors:
            raise ValidationError(errors, collection=VERSIONS)
        return refs

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _row_path(root_index: int, page_index: int | None) -> str:
        if page_index is None:
            return f'navItems.{root_index}.page'
        return f'navItems.{root_index}.pages.{page_index}.page'

    @staticmethod
    def _check_document(
        docs_by_id: dict[str, dict[str, Any]],
        doc_id: int | str,
        service_id: int | str,
        kind: str,
        path: str,
    ) -> FieldError | None:
        doc = docs_by_id.get(str(doc_id))
        if doc is None:
            return FieldError(path, f'{kind} {doc_id} could not be found.')
        if not same_id(get_relation_id(doc.get('service')), service_id):
            return FieldError(path, f'{kind} {doc_id} belongs to a different service than this version.')
        return None

    @staticmethod
    def _missing_reference_errors(items: list[NavItem]) -> list[FieldError]:
        errors = []
        for root_index, item in enumerate(items):
            if isinstance(item, PageItem):
                if get_relation_id(item.page) is None:
                    errors.append(FieldError(
                        f'navItems.{root_index}.page', 'Each page item must reference a page.'
                    ))
                continue
            if get_relation_id(item.group) is None:
                errors.append(FieldError(
                    f'navItems.{root_index}.group', 'Each group item must reference a group.'
                ))
            for page_index, row in enumerate(item.pages):
                if get_relation_id(row.page) is None:
                    errors.append(FieldError(
                        f'navItems.{root_index}.pages.{page_index}.page',
                        'Each group row must reference a page.',
                    ))
        return errors
