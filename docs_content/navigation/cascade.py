"""Structural nav edits applied when a referenced page or group is deleted."""

from typing import Any

from docs_content.domain.models import GroupItem, NavItem, PageItem
from docs_content.domain.relations import get_relation_id, same_id
from docs_content.navigation.normalizer import collect_group_ids, flatten_nav_rows, normalize_nav_items


def prune_page(items: Any, page_id: int | str) -> list[NavItem]:
    """Remove every reference to a page.

    Root page items pointing at the page are dropped. Matching rows are
    removed from group items, and the group item itself is kept even when
    its rows run out.
    """
    result: list[NavItem] = []
    for item in normalize_nav_items(items):
        if isinstance(item, PageItem):
            if same_id(get_relation_id(item.page), page_id):
                continue
            result.append(item)
        else:
            item.pages = [
                row for row in item.pages
                if get_relation_id(row.page) is not None
                and not same_id(get_relation_id(row.page), page_id)
            ]
            result.append(item)
    return result


def promote_group(items: Any, group_id: int | str) -> list[NavItem]:
    """Replace each group item for a group with its rows as root page items.

    Promoted items keep their row's published flag and the group's original
    position, so no page is lost and flatten order is unchanged.
    """
    result: list[NavItem] = []
    for item in normalize_nav_items(items):
        if isinstance(item, GroupItem) and same_id(get_relation_id(item.group), group_id):
            result.extend(PageItem(page=row.page, published=row.published) for row in item.pages)
        else:
            result.append(item)
    return result


def references_page(items: list[NavItem], page_id: int | str) -> bool:
    return any(same_id(row.page_id, page_id) for row in flatten_nav_rows(items))


def references_group(items: list[NavItem], group_id: int | str) -> bool:
    return any(same_id(gid, group_id) for gid in collect_group_ids(items))
