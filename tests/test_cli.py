"""Tests for the docs-content CLI."""

import json

import pytest

from conftest import SNAPSHOT, page_item
from docs_content.cli import main, sync_latest, validate_version
from docs_content.domain.errors import ValidationError
from docs_content.store.memory import InMemoryContentStore


@pytest.fixture
def snapshot_path(tmp_path):
    """Snapshot with a valid version and a cross-service version for service 1."""
    data = json.loads(json.dumps(SNAPSHOT))
    data['docVersions'] = [
        {
            'id': 40, 'service': 1, 'version': '1.0.0', 'versionKey': '000001.000000.000000.1',
            'status': 'published', 'defaultPageSlug': 'intro',
            'navItems': [page_item(10), page_item(13)],
        },
        {
            'id': 41, 'service': 1, 'version': '1.1.0', 'versionKey': '000001.000001.000000.1',
            'status': 'published', 'defaultPageSlug': 'home',
            'navItems': [page_item(20)],
        },
    ]
    path = tmp_path / 'snapshot.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestValidateVersion:

    def test_reports_derived_fields(self, snapshot_path):
        store = InMemoryContentStore.from_json_file(snapshot_path)
        fields = validate_version(store, '40')
        assert fields['status'] == 'published'
        assert 'page 13' in fields['navWarnings']

    def test_cross_service_version_fails(self, snapshot_path):
        store = InMemoryContentStore.from_json_file(snapshot_path)
        with pytest.raises(ValidationError):
            validate_version(store, '41')

    def test_missing_version(self, snapshot_path):
        with pytest.raises(KeyError):
            validate_version(InMemoryContentStore.from_json_file(snapshot_path), '404')


class TestSyncLatest:

    def test_syncs_all_services(self, snapshot_path):
        store = InMemoryContentStore.from_json_file(snapshot_path)
        assert sync_latest(store) == ['1']
        assert store.find_by_id('services', 1)['latestVersion'] == 41

    def test_only_requested_services(self, snapshot_path):
        store = InMemoryContentStore.from_json_file(snapshot_path)
        assert sync_latest(store, ['2']) == []
        assert store.find_by_id('services', 1)['latestVersion'] is None


class TestMain:

    def test_version_key(self, capsys):
        main(['version-key', '1.2.3-beta.1'])
        assert capsys.readouterr().out.strip() == '000001.000002.000003.0,sbeta,n000001'

    def test_version_key_invalid(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(['version-key', 'v1.2.3'])
        assert exc_info.value.code == 1
        assert 'leading "v"' in capsys.readouterr().err

    def test_validate_prints_status(self, snapshot_path, capsys):
        main(['validate', str(snapshot_path), '40'])
        out = capsys.readouterr().out
        assert 'Status: published' in out
        assert 'auto-demoted' in out

    def test_validate_failure_exits_nonzero(self, snapshot_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(['validate', str(snapshot_path), '41'])
        assert exc_info.value.code == 1
        assert 'navItems.0.page' in capsys.readouterr().err

    def test_missing_snapshot(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(['validate', str(tmp_path / 'missing.json'), '1'])
        assert 'not found' in capsys.readouterr().err

    def test_sync_latest_write(self, snapshot_path, monkeypatch, capsys):
        monkeypatch.delenv('DOCS_REVALIDATE_URL', raising=False)
        monkeypatch.delenv('DOCS_SITE_URL', raising=False)
        main(['sync-latest', str(snapshot_path), '--write'])
        assert 'Updated 1 service(s)' in capsys.readouterr().out
        saved = json.loads(snapshot_path.read_text(encoding='utf-8'))
        assert saved['services'][0]['latestVersion'] == 41

    def test_sync_latest_dry_run_leaves_file(self, snapshot_path, monkeypatch):
        monkeypatch.delenv('DOCS_REVALIDATE_URL', raising=False)
        monkeypatch.delenv('DOCS_SITE_URL', raising=False)
        before = snapshot_path.read_text(encoding='utf-8')
        main(['sync-latest', str(snapshot_path)])
        assert snapshot_path.read_text(encoding='utf-8') == before
