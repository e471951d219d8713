"""Shared constants, regex patterns, and collection names.

Centralizes the patterns and names shared across the navigation,
integrity, sync, and source modules.
"""

import re

# ── Collections ──────────────────────────────────────────────────────────

SERVICES = 'services'
VERSIONS = 'docVersions'
PAGES = 'docPages'
GROUPS = 'docPageGroups'

COLLECTIONS = (SERVICES, VERSIONS, PAGES, GROUPS)

# ── Nav Block Types ──────────────────────────────────────────────────────

PAGE_ITEM = 'pageItem'
GROUP_ITEM = 'groupItem'

# Lowercased discriminator alias → canonical block type
BLOCK_TYPE_ALIASES: dict[str, str] = {
    'page': PAGE_ITEM,
    'pageitem': PAGE_ITEM,
    'group': GROUP_ITEM,
    'groupitem': GROUP_ITEM,
}

# Keys checked, in order, for the nav entry discriminator
BLOCK_TYPE_KEYS = ('blockType', 'kind', 'type')

# ── Semver ───────────────────────────────────────────────────────────────

SEMVER_RE = re.compile(
    r'^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)'
    r'(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?'
    r'(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$'
)

VERSION_KEY_WIDTH = 6
RELEASE_RANK = '1'
PRERELEASE_RANK = '0'
# Sorts below every semver identifier character ([0-9A-Za-z-])
PRERELEASE_TOKEN_SEPARATOR = ','

# ── Slugs ────────────────────────────────────────────────────────────────

DOC_PATH_SLUG_RE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*(?:/[a-z0-9]+(?:-[a-z0-9]+)*)*$')
SERVICE_SLUG_RE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

# ── Revalidation ─────────────────────────────────────────────────────────

REVALIDATE_SECRET_HEADER = 'x-revalidate-secret'
REVALIDATE_PATH = '/api/revalidate/latest-version'
LATEST_VERSION_CACHE_TAG = 'docs:latest-version'
