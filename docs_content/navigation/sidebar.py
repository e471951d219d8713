"""Sidebar construction from flattened nav rows.

The rendering layer trusts the rows it is given: integrity was enforced when
the version was written, so nothing here re-validates.
"""

from typing import Any, Mapping

from docs_content.domain.enums import NavNodeKind
from docs_content.domain.models import FlatNavRow, NavNode


def _page_node(page: Mapping[str, Any]) -> NavNode:
    slug = str(page.get('slug') or '')
    title = str(page.get('title') or slug)
    return NavNode(kind=NavNodeKind.PAGE, title=title, slug=slug)


def build_sidebar(
    rows: list[FlatNavRow],
    pages_by_id: Mapping[str, Mapping[str, Any]],
    groups_by_id: Mapping[str, Mapping[str, Any]],
    include_drafts: bool = False,
) -> list[NavNode]:
    """Build sidebar nodes in nav order.

    Args:
        rows: Output of ``flatten_nav_rows`` for one version.
        pages_by_id: String page id → page document.
        groups_by_id: String group id → group document.
        include_drafts: Also show rows that are not published.

    Returns:
        Root-level nodes; group items become group nodes holding their
        pages. Rows with unknown pages and groups left empty are omitted.
    """
    nodes: list[NavNode] = []
    group_nodes: dict[int, NavNode] = {}

    for row in rows:
        if not row.published and not include_drafts:
            continue
        page = pages_by_id.get(str(row.page_id))
        if page is None:
            continue

        if row.group_id is None:
            nodes.append(_page_node(page))
            continue

        group_node = group_nodes.get(row.root_index)
        if group_node is None:
            group = groups_by_id.get(str(row.group_id)) or {}
            name = str(group.get('name') or '').strip()
            group_slug = group.get('slug') or str(row.group_id)
            group_node = NavNode(
                kind=NavNodeKind.GROUP,
                title=name or str(group_slug),
                slug=f'__group__/{group_slug}',
            )
            group_nodes[row.root_index] = group_node
            nodes.append(group_node)
        group_node.children.append(_page_node(page))

    return nodes
