"""Content-store port consumed by the engine.

Abstracts the document store that owns services, versions, pages, and
groups, so the integrity and sync logic can run against the real CMS or an
in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable

from docs_content.domain.constants import VERSIONS
from docs_content.domain.relations import get_relation_id, same_id
from docs_content.navigation.cascade import references_group, references_page
from docs_content.navigation.normalizer import normalize_nav_items


class ContentStore(ABC):
    """Abstract document store with equality filters and field sorting."""

    @abstractmethod
    def find(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        sort: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """Return documents whose fields equal every ``where`` value.

        ``sort`` names a field, prefixed with ``-`` for descending order.
        """

    @abstractmethod
    def find_by_id(self, collection: str, doc_id: int | str) -> dict | None:
        """Return one document, or None if it does not exist."""

    @abstractmethod
    def create(self, collection: str, data: dict[str, Any]) -> dict:
        """Insert a document and return it with its assigned id."""

    @abstractmethod
    def update(self, collection: str, doc_id: int | str, data: dict[str, Any]) -> dict:
        """Merge ``data`` into a document. Raises NotFoundError if missing."""

    @abstractmethod
    def delete(self, collection: str, doc_id: int | str) -> dict:
        """Remove a document and return it. Raises NotFoundError if missing."""

    def find_by_ids(self, collection: str, ids: Iterable[int | str]) -> list[dict]:
        """Return the documents that exist among ``ids``, in id order."""
        docs = (self.find_by_id(collection, i) for i in ids)
        return [d for d in docs if d is not None]

    def find_versions_referencing(
        self,
        page_id: int | str | None = None,
        group_id: int | str | None = None,
    ) -> list[dict]:
        """Return versions whose nav items reference the page or group."""
        matches = []
        for doc in self.find(VERSIONS):
            items = normalize_nav_items(doc.get('navItems'))
            if page_id is not None and references_page(items, page_id):
                matches.append(doc)
            elif group_id is not None and references_group(items, group_id):
                matches.append(doc)
        return matches


def matches_where(doc: dict[str, Any], where: dict[str, Any] | None) -> bool:
    """Equality filter shared by store implementations.

    Relation fields match by id, so a populated relation equals its id.
    """
    for key, expected in (where or {}).items():
        actual = get_relation_id(doc.get(key))
        expected_id = get_relation_id(getattr(expected, 'value', expected))
        if actual is None and expected_id is None:
            continue
        if not same_id(actual, expected_id):
            return False
    return True


def sort_documents(docs: list[dict], sort: str | None) -> list[dict]:
    """Sort by one field; documents missing the field always come last."""
    if not sort:
        return docs
    descending = sort.startswith('-')
    key = sort.lstrip('-')
    present = [d for d in docs if d.get(key) is not None]
    missing = [d for d in docs if d.get(key) is None]
    present.sort(key=lambda d: d[key], reverse=descending)
    return present + missing
