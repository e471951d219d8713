"""Duplicate published slug demotion.

Two published rows that resolve to the same page slug would render two
pages at one URL. Rather than rejecting the write, every published row after
the first occurrence of a slug (in flatten order) is flipped to draft and a
warning is recorded.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from docs_content.domain.models import NavItem
from docs_content.navigation.normalizer import flatten_nav_rows, normalize_nav_items, set_row_published


def join_warnings(warnings: list[str]) -> str | None:
    """Warnings in their persisted form: one per line, or None."""
    return '\n'.join(warnings) if warnings else None


@dataclass
class DedupResult:
    """Items after demotion plus one warning per demoted row."""

    items: list[NavItem]
    warnings: list[str] = field(default_factory=list)

    @property
    def nav_warnings(self) -> str | None:
        return join_warnings(self.warnings)


def dedupe_published_slugs(items: Any, page_slug_by_id: Mapping[str, str]) -> DedupResult:
    """Demote duplicate published slugs, first occurrence wins.

    Args:
        items: Nav items (raw or normalized). Not mutated.
        page_slug_by_id: String page id → page slug. Rows whose page has
            no known slug are left untouched.

    Returns:
        DedupResult with a normalized copy of the items and the warnings.
    """
    next_items = normalize_nav_items(items)
    seen: set[str] = set()
    warnings: list[str] = []

    for row in flatten_nav_rows(next_items):
        if not row.published:
            continue
        slug = page_slug_by_id.get(str(row.page_id))
        if not slug:
            continue
        if slug not in seen:
            seen.add(slug)
            continue
        set_row_published(next_items, row, False)
        warnings.append(
            f'Duplicate published slug "{slug}" was auto-demoted to draft for page {row.page_id}.'
        )

    return DedupResult(items=next_items, warnings=warnings)
