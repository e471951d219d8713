"""Tests for the integrity guard."""

import logging

import pytest

from conftest import group_item, page_item, version_data
from docs_content.domain.errors import ValidationError
from docs_content.integrity.guard import IntegrityGuard


@pytest.fixture
def guard(store):
    return IntegrityGuard(store)


def _save_version(store, guard, **kwargs):
    return store.create('docVersions', guard.prepare_version_write(version_data(**kwargs)))


class TestPrepareVersionWrite:

    def test_fills_derived_fields(self, guard):
        data = guard.prepare_version_write(version_data(
            version=' 1.2.0-rc.1 ',
            default='/Intro/',
            nav=[page_item(10), group_item(30, (11, False))],
        ))
        assert data['version'] == '1.2.0-rc.1'
        assert data['versionKey'] == '000001.000002.000000.0,src,n000001'
        assert data['isPrerelease'] is True
        assert data['defaultPageSlug'] == 'intro'
        assert data['status'] == 'published'
        assert data['navWarnings'] is None
        assert data['navItems'][1]['pages'] == [{'page': 11, 'published': False}]

    def test_client_supplied_derived_fields_are_overwritten(self, guard):
        raw = version_data(nav=[page_item(10, published=False)])
        raw.update(status='published', versionKey='zzz', navWarnings='forged')
        data = guard.prepare_version_write(raw)
        assert data['status'] == 'draft'
        assert data['versionKey'] == '000001.000000.000000.1'
        assert data['navWarnings'] is None

    def test_field_errors_are_reported_together(self, guard):
        with pytest.raises(ValidationError) as exc_info:
            guard.prepare_version_write({'version': 'v1.0.0', 'defaultPageSlug': '../intro'})
        assert [e.path for e in exc_info.value.errors] == ['service', 'version', 'defaultPageSlug']

    def test_duplicates_are_demoted_with_warning(self, guard):
        data = guard.prepare_version_write(version_data(nav=[page_item(10), page_item(13)]))
        assert [i['published'] for i in data['navItems']] == [True, False]
        assert data['navWarnings'] == 'Duplicate published slug "intro" was auto-demoted to draft for page 13.'
        assert data['status'] == 'published'

    def test_default_slug_must_be_in_nav(self, guard):
        with pytest.raises(ValidationError) as exc_info:
            guard.prepare_version_write(version_data(
                nav=[page_item(11), page_item(10, published=False)],
                default='reference',
            ))
        assert exc_info.value.errors[0].path == 'defaultPageSlug'

    def test_published_version_needs_published_default(self, guard):
        with pytest.raises(ValidationError, match='publish the target page first'):
            guard.prepare_version_write(version_data(nav=[page_item(10, published=False), page_item(11)]))

    def test_draft_version_skips_default_guard(self, guard):
        data = guard.prepare_version_write(version_data(nav=[page_item(11, published=False)], default='intro'))
        assert data['status'] == 'draft'

    def test_cross_service_reference_rejected(self, guard):
        with pytest.raises(ValidationError) as exc_info:
            guard.prepare_version_write(version_data(nav=[page_item(10), page_item(20)]))
        assert exc_info.value.errors[0].path == 'navItems.1.page'

    def test_update_merges_with_original(self, guard, store):
        original = _save_version(store, guard)
        data = guard.prepare_version_write({'version': '1.0.1'}, original)
        assert data['versionKey'] == '000001.000000.000001.1'
        assert data['status'] == 'published'
        assert 'service' not in data


class TestPageGuards:

    def test_landing_page_of_published_version_cannot_be_deleted(self, guard, store):
        _save_version(store, guard)
        with pytest.raises(ValidationError, match='1.0.0'):
            guard.enforce_page_delete(store.find_by_id('docPages', 10))

    def test_non_landing_page_can_be_deleted(self, guard, store):
        _save_version(store, guard, nav=[page_item(10), page_item(11)])
        guard.enforce_page_delete(store.find_by_id('docPages', 11))

    def test_draft_landing_row_does_not_block(self, guard, store):
        _save_version(store, guard, nav=[page_item(10, published=False), page_item(11)], default='guides/setup')
        guard.enforce_page_delete(store.find_by_id('docPages', 10))

    def test_referenced_page_cannot_change_service(self, guard, store):
        _save_version(store, guard, nav=[page_item(10), page_item(11)])
        page = store.find_by_id('docPages', 11)
        with pytest.raises(ValidationError) as exc_info:
            guard.enforce_page_update(page, {'service': 2})
        assert exc_info.value.errors[0].path == 'service'

    def test_unreferenced_page_can_change_service(self, guard, store):
        guard.enforce_page_update(store.find_by_id('docPages', 12), {'service': 2})

    def test_landing_page_slug_is_locked(self, guard, store):
        _save_version(store, guard)
        page = store.find_by_id('docPages', 10)
        with pytest.raises(ValidationError):
            guard.enforce_page_update(page, {'slug': 'welcome'})
        guard.enforce_page_update(page, {'slug': 'Intro', 'title': 'Hello'})


class TestCascades:

    def test_prune_updates_referencing_versions(self, guard, store):
        version = _save_version(store, guard, nav=[page_item(10), group_item(30, 11, 12)])
        changed = guard.prune_page_from_versions(12)
        assert [v['id'] for v in changed] == [version['id']]
        stored = store.find_by_id('docVersions', version['id'])
        assert stored['navItems'][1]['pages'] == [{'page': 11, 'published': True}]

    def test_prune_can_demote_status(self, guard, store):
        version = _save_version(store, guard, nav=[page_item(10, published=False), page_item(11)],
                                default='guides/setup')
        guard.prune_page_from_versions(11)
        assert store.find_by_id('docVersions', version['id'])['status'] == 'draft'

    def test_promote_keeps_rows(self, guard, store):
        version = _save_version(store, guard, nav=[group_item(30, 10, (11, False)), page_item(12)])
        guard.promote_group_in_versions(30)
        nav = store.find_by_id('docVersions', version['id'])['navItems']
        assert [(i['blockType'], i['page'], i['published']) for i in nav] == [
            ('pageItem', 10, True), ('pageItem', 11, False), ('pageItem', 12, True),
        ]

    def test_unreferenced_delete_changes_nothing(self, guard, store):
        _save_version(store, guard)
        assert guard.prune_page_from_versions(12) == []
        assert guard.promote_group_in_versions(30) == []

    def test_failure_on_one_version_is_logged_and_skipped(self, guard, store, monkeypatch, caplog):
        first = _save_version(store, guard, nav=[page_item(10), page_item(12)])
        second = _save_version(store, guard, version='2.0.0', nav=[page_item(10), page_item(12)])
        real_update = store.update

        def flaky_update(collection, doc_id, data):
            if str(doc_id) == str(first['id']):
                raise RuntimeError('disk full')
            return real_update(collection, doc_id, data)

        monkeypatch.setattr(store, 'update', flaky_update)
        with caplog.at_level(logging.ERROR, logger='docs_content.integrity.guard'):
            changed = guard.prune_page_from_versions(12)

        assert [v['id'] for v in changed] == [second['id']]
        assert 'disk full' in caplog.text

    def test_refresh_after_slug_change_demotes_new_duplicate(self, guard, store):
        version = _save_version(store, guard, nav=[page_item(10), page_item(11)])
        store.update('docPages', 11, {'slug': 'intro'})
        changed = guard.refresh_versions_for_page(11)
        assert [v['id'] for v in changed] == [version['id']]
        stored = store.find_by_id('docVersions', version['id'])
        assert [i['published'] for i in stored['navItems']] == [True, False]
        assert 'page 11' in stored['navWarnings']

    def test_prune_clears_warning_of_removed_duplicate(self, guard, store):
        version = _save_version(store, guard, nav=[page_item(10), page_item(13)])
        assert 'page 13' in version['navWarnings']
        store.delete('docPages', 13)
        guard.prune_page_from_versions(13)
        stored = store.find_by_id('docVersions', version['id'])
        assert stored['navWarnings'] is None
        assert [i['page'] for i in stored['navItems']] == [10]

    def test_promote_drops_warning_from_earlier_write(self, guard, store):
        version = _save_version(store, guard, nav=[page_item(10), group_item(30, 13)])
        assert 'page 13' in version['navWarnings']
        guard.promote_group_in_versions(30)
        stored = store.find_by_id('docVersions', version['id'])
        assert stored['navWarnings'] is None
        assert [(i['page'], i['published']) for i in stored['navItems']] == [(10, True), (13, False)]
