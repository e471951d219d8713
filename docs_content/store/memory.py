"""In-memory content store.

Backs the test suite and the CLI. Documents are deep-copied on every read
and write so callers can never mutate stored state by accident.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from docs_content.domain.constants import COLLECTIONS
from docs_content.domain.errors import NotFoundError
from docs_content.store.base import ContentStore, matches_where, sort_documents


class InMemoryContentStore(ContentStore):
    """Dict-backed store with sequential integer ids."""

    def __init__(self, snapshot: dict[str, list[dict]] | None = None):
        self._docs: dict[str, dict[str, dict]] = {name: {} for name in COLLECTIONS}
        self._next_id = 1
        if snapshot:
            self.load(snapshot)

    # ── Snapshot I/O ─────────────────────────────────────────────────────

    def load(self, snapshot: dict[str, list[dict]]) -> None:
        """Insert documents from a ``{collection: [doc, ...]}`` mapping."""
        for collection, docs in snapshot.items():
            for doc in docs:
                self.create(collection, doc)

    def snapshot(self) -> dict[str, list[dict]]:
        return {
            name: [copy.deepcopy(d) for d in docs.values()]
            for name, docs in self._docs.items()
        }

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryContentStore:
        with open(path, encoding='utf-8') as f:
            return cls(json.load(f))

    def dump_json_file(self, path: str | Path) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.snapshot(), f, indent=2, ensure_ascii=False)
            f.write('\n')

    # ── ContentStore ─────────────────────────────────────────────────────

    def _collection(self, collection: str) -> dict[str, dict]:
        return self._docs.setdefault(collection, {})

    def find(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        sort: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        docs = [d for d in self._collection(collection).values() if matches_where(d, where)]
        docs = sort_documents(docs, sort)
        if limit is not None:
            docs = docs[:limit]
        return [copy.deepcopy(d) for d in docs]

    def find_by_id(self, collection: str, doc_id: int | str) -> dict | None:
        doc = self._collection(collection).get(str(doc_id))
        return copy.deepcopy(doc) if doc is not None else None

    def create(self, collection: str, data: dict[str, Any]) -> dict:
        doc = copy.deepcopy(data)
        if doc.get('id') is None:
            doc['id'] = self._next_id
        if isinstance(doc['id'], int):
            self._next_id = max(self._next_id, doc['id'] + 1)
        self._collection(collection)[str(doc['id'])] = doc
        return copy.deepcopy(doc)

    def update(self, collection: str, doc_id: int | str, data: dict[str, Any]) -> dict:
        docs = self._collection(collection)
        key = str(doc_id)
        if key not in docs:
            raise NotFoundError(collection, doc_id)
        patch = {k: v for k, v in copy.deepcopy(data).items() if k != 'id'}
        docs[key].update(patch)
        return copy.deepcopy(docs[key])

    def delete(self, collection: str, doc_id: int | str) -> dict:
        docs = self._collection(collection)
        key = str(doc_id)
        if key not in docs:
            raise NotFoundError(collection, doc_id)
        return docs.pop(key)
