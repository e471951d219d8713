"""Version navigation: normalize, flatten, dedupe, derive, and cascade."""

from docs_content.navigation.cascade import promote_group, prune_page
from docs_content.navigation.dedup import DedupResult, dedupe_published_slugs
from docs_content.navigation.normalizer import (
    collect_group_ids,
    collect_page_ids,
    flatten_nav_rows,
    normalize_nav_items,
    serialize_nav_items,
)
from docs_content.navigation.sidebar import build_sidebar
from docs_content.navigation.status import derive_status, enforce_default_page_slug

__all__ = [
    'DedupResult',
    'build_sidebar',
    'collect_group_ids',
    'collect_page_ids',
    'dedupe_published_slugs',
    'derive_status',
    'enforce_default_page_slug',
    'flatten_nav_rows',
    'normalize_nav_items',
    'promote_group',
    'prune_page',
    'serialize_nav_items',
]
