"""CLI for docs-content."""

import argparse
import logging
import os
import sys

from docs_content.config import Settings
from docs_content.domain.constants import SERVICES, VERSIONS
from docs_content.domain.errors import ValidationError
from docs_content.integrity.guard import IntegrityGuard
from docs_content.semver import SemverError, version_key
from docs_content.store.base import ContentStore
from docs_content.store.memory import InMemoryContentStore
from docs_content.sync.latest_version import LatestVersionSynchronizer
from docs_content.sync.revalidation import HttpRevalidationNotifier, RevalidationNotifier


def validate_version(store: ContentStore, version_id: str) -> dict:
    """Re-run the version write pipeline on a stored version.

    Returns:
        The derived fields the version would be written with.

    Raises:
        KeyError: If the version does not exist.
        ValidationError: If the stored version violates an integrity rule.
    """
    original = store.find_by_id(VERSIONS, version_id)
    if original is None:
        raise KeyError(version_id)
    return IntegrityGuard(store).prepare_version_write({}, original)


def sync_latest(
    store: ContentStore,
    service_ids: list[str] | None = None,
    notifier: RevalidationNotifier | None = None,
) -> list[str]:
    """Sync latest-version pointers; returns ids of services that changed."""
    synchronizer = LatestVersionSynchronizer(store, notifier)
    if not service_ids:
        service_ids = [str(s['id']) for s in store.find(SERVICES, sort='slug')]
    return [sid for sid in service_ids if synchronizer.sync_service(sid)]


def _load_snapshot(path: str) -> InMemoryContentStore:
    if not os.path.isfile(path):
        print(f"Error: {path} not found", file=sys.stderr)
        sys.exit(1)
    return InMemoryContentStore.from_json_file(path)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(prog='docs-content', description='Docs navigation integrity tools')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command')

    # version-key command
    key_parser = subparsers.add_parser('version-key', help='Print the sortable key of a semver string')
    key_parser.add_argument('version', help='Semantic version, e.g. 1.2.3-beta.1')

    # validate command
    validate_parser = subparsers.add_parser('validate', help='Check a stored version against integrity rules')
    validate_parser.add_argument('snapshot', help='Path to a JSON content snapshot')
    validate_parser.add_argument('version_id', help='Id of the version to check')

    # sync-latest command
    sync_parser = subparsers.add_parser('sync-latest', help='Recompute latest-version pointers')
    sync_parser.add_argument('snapshot', help='Path to a JSON content snapshot')
    sync_parser.add_argument('--service', action='append', dest='services', help='Service id (repeatable)')
    sync_parser.add_argument('--write', action='store_true', help='Write the updated snapshot back')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'version-key':
        try:
            print(version_key(args.version))
        except SemverError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    elif args.command == 'validate':
        store = _load_snapshot(args.snapshot)
        try:
            fields = validate_version(store, args.version_id)
        except KeyError:
            print(f"Error: version {args.version_id} not found", file=sys.stderr)
            sys.exit(1)
        except ValidationError as e:
            for error in e.errors:
                print(f"{error.path}: {error.message}", file=sys.stderr)
            sys.exit(1)
        print(f"Status: {fields['status']}")
        print(f"Version key: {fields['versionKey']}")
        if fields['navWarnings']:
            print(fields['navWarnings'])

    elif args.command == 'sync-latest':
        store = _load_snapshot(args.snapshot)
        notifier = HttpRevalidationNotifier(Settings.from_env())
        changed = sync_latest(store, args.services, notifier)
        for service_id in changed:
            service = store.find_by_id(SERVICES, service_id)
            print(f"  {service.get('slug')}: latestVersion -> {service.get('latestVersion')}")
        print(f"Updated {len(changed)} service(s)")
        if args.write and changed:
            store.dump_json_file(args.snapshot)
            print(f"Wrote {args.snapshot}")

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
