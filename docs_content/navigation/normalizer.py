"""Normalization and flattening of version navigation trees.

Raw nav entries arrive loosely typed (from editors, migrations, or the
content store). ``normalize_nav_items`` coerces them into the ``PageItem`` /
``GroupItem`` union, and ``flatten_nav_rows`` produces the ordered row view
every other component reads. Nothing outside this module walks the nested
structure.
"""

from typing import Any

from docs_content.domain.constants import (
    BLOCK_TYPE_ALIASES,
    BLOCK_TYPE_KEYS,
    GROUP_ITEM,
    PAGE_ITEM,
)
from docs_content.domain.models import FlatNavRow, GroupItem, NavItem, PageItem, PageRow
from docs_content.domain.relations import get_relation_id, unique_ids


def _normalize_block_type(record: dict[str, Any]) -> str | None:
    for key in BLOCK_TYPE_KEYS:
        value = record.get(key)
        if value is not None:
            break
    else:
        return None
    if not isinstance(value, str):
        return None
    return BLOCK_TYPE_ALIASES.get(value.lower())


def _normalize_published(value: Any) -> bool:
    return value is not False


def _normalize_optional_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def _normalize_optional_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _normalize_page_row(value: Any) -> PageRow | None:
    if isinstance(value, PageRow):
        return PageRow(page=value.page, published=value.published is not False, id=value.id)
    if not isinstance(value, dict):
        return None
    return PageRow(
        page=value.get('page'),
        published=_normalize_published(value.get('published')),
        id=_normalize_optional_id(value.get('id')),
    )


def _normalize_page_rows(values: Any) -> list[PageRow]:
    if not isinstance(values, (list, tuple)):
        return []
    rows = (_normalize_page_row(v) for v in values)
    return [r for r in rows if r is not None]


def _normalize_entry(candidate: Any) -> NavItem | None:
    if isinstance(candidate, PageItem):
        return PageItem(
            page=candidate.page,
            published=candidate.published is not False,
            id=candidate.id,
            block_name=candidate.block_name,
        )
    if isinstance(candidate, GroupItem):
        return GroupItem(
            group=candidate.group,
            pages=_normalize_page_rows(candidate.pages),
            id=candidate.id,
            block_name=candidate.block_name,
        )
    if not isinstance(candidate, dict):
        return None

    block_type = _normalize_block_type(candidate)
    if block_type == PAGE_ITEM:
        return PageItem(
            page=candidate.get('page'),
            published=_normalize_published(candidate.get('published')),
            id=_normalize_optional_id(candidate.get('id')),
            block_name=_normalize_optional_string(candidate.get('blockName')),
        )
    if block_type == GROUP_ITEM:
        return GroupItem(
            group=candidate.get('group'),
            pages=_normalize_page_rows(candidate.get('pages')),
            id=_normalize_optional_id(candidate.get('id')),
            block_name=_normalize_optional_string(candidate.get('blockName')),
        )
    return None


def normalize_nav_items(value: Any) -> list[NavItem]:
    """Coerce raw nav entries into the canonical item union.

    Accepts dicts in the persisted shape (or with ``kind``/``type`` aliases)
    and already-normalized items. Unrecognized entries are dropped. The
    result never shares mutable state with the input.

    Args:
        value: A list of candidate nav entries; anything else yields [].

    Returns:
        Fresh list of PageItem/GroupItem instances in input order.
    """
    if not isinstance(value, (list, tuple)):
        return []
    items = (_normalize_entry(c) for c in value)
    return [item for item in items if item is not None]


def flatten_nav_rows(items: list[NavItem]) -> list[FlatNavRow]:
    """Flatten nav items into ordered page rows.

    Root order is preserved, and group rows keep their within-group order.
    Rows without a page reference are skipped.
    """
    rows: list[FlatNavRow] = []
    for root_index, item in enumerate(items):
        if isinstance(item, PageItem):
            page_id = get_relation_id(item.page)
            if page_id is None:
                continue
            rows.append(FlatNavRow(page_id, item.published, None, root_index, None))
        elif isinstance(item, GroupItem):
            group_id = get_relation_id(item.group)
            for page_index, row in enumerate(item.pages):
                page_id = get_relation_id(row.page)
                if page_id is None:
                    continue
                rows.append(FlatNavRow(page_id, row.published, group_id, root_index, page_index))
        else:
            raise TypeError(f'Unsupported nav item: {item!r}')
    return rows


def set_row_published(items: list[NavItem], row: FlatNavRow, published: bool) -> None:
    """Write a flattened row's published flag back into the nested items."""
    if row.root_index >= len(items):
        return
    target = items[row.root_index]
    if isinstance(target, PageItem):
        target.published = published
        return
    if row.page_index is None or row.page_index >= len(target.pages):
        return
    target.pages[row.page_index].published = published


def collect_page_ids(items: list[NavItem]) -> list[int | str]:
    """Distinct page ids referenced anywhere in the tree, in flatten order."""
    return unique_ids(row.page_id for row in flatten_nav_rows(items))


def collect_group_ids(items: list[NavItem]) -> list[int | str]:
    """Distinct group ids referenced by group items, in root order."""
    return unique_ids(item.group for item in items if isinstance(item, GroupItem))


# ── Serialization ────────────────────────────────────────────────────────

def _serialize_page_row(row: PageRow) -> dict[str, Any]:
    data: dict[str, Any] = {'page': get_relation_id(row.page), 'published': row.published}
    if row.id is not None:
        data['id'] = row.id
    return data


def serialize_nav_items(items: list[NavItem]) -> list[dict[str, Any]]:
    """Convert nav items back to the persisted camelCase shape.

    Populated relations are collapsed to their ids.
    """
    result: list[dict[str, Any]] = []
    for item in items:
        if isinstance(item, PageItem):
            data: dict[str, Any] = {
                'blockType': PAGE_ITEM,
                'page': get_relation_id(item.page),
                'published': item.published,
            }
        elif isinstance(item, GroupItem):
            data = {
                'blockType': GROUP_ITEM,
                'group': get_relation_id(item.group),
                'pages': [_serialize_page_row(r) for r in item.pages],
            }
        else:
            raise TypeError(f'Unsupported nav item: {item!r}')
        if item.id is not None:
            data['id'] = item.id
        if item.block_name:
            data['blockName'] = item.block_name
        result.append(data)
    return result
