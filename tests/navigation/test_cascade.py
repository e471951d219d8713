"""Tests for the page prune and group promote cascades."""

from docs_content.domain.models import GroupItem, PageItem, PageRow
from docs_content.navigation.cascade import promote_group, prune_page, references_group, references_page
from docs_content.navigation.normalizer import flatten_nav_rows, normalize_nav_items

NAV = [
    {'blockType': 'pageItem', 'page': 10},
    {'blockType': 'groupItem', 'group': 30, 'pages': [{'page': 11}, {'page': 10, 'published': False}]},
    {'blockType': 'groupItem', 'group': 31, 'pages': [{'page': 10}]},
    {'blockType': 'pageItem', 'page': 12, 'published': False},
]


class TestPrunePage:

    def test_removes_every_reference(self):
        items = prune_page(NAV, 10)
        assert not references_page(items, 10)
        assert [r.page_id for r in flatten_nav_rows(items)] == [11, 12]

    def test_keeps_emptied_groups(self):
        items = prune_page(NAV, '10')
        assert items[1] == GroupItem(group=31, pages=[])
        assert references_group(items, 31)

    def test_unrelated_page_is_noop(self):
        assert prune_page(NAV, 99) == normalize_nav_items(NAV)


class TestPromoteGroup:

    def test_rows_become_root_items_in_place(self):
        items = promote_group(NAV, 30)
        assert items[:3] == [
            PageItem(page=10),
            PageItem(page=11, published=True),
            PageItem(page=10, published=False),
        ]
        assert not references_group(items, 30)

    def test_flatten_order_and_flags_are_preserved(self):
        before = [(r.page_id, r.published) for r in flatten_nav_rows(normalize_nav_items(NAV))]
        after = [(r.page_id, r.published) for r in flatten_nav_rows(promote_group(NAV, 30))]
        assert after == before

    def test_other_groups_are_untouched(self):
        items = promote_group(NAV, 30)
        assert items[3] == GroupItem(group=31, pages=[PageRow(page=10)])
