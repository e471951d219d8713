"""Tag-invalidated cache of each service's latest version.

Entries never expire on their own. They are dropped when the revalidation
receiver invalidates either the per-service tag or the shared tag.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable

from docs_content.domain.constants import LATEST_VERSION_CACHE_TAG

logger = logging.getLogger(__name__)

_MISSING = object()


def service_tag(service_slug: str) -> str:
    return f'{LATEST_VERSION_CACHE_TAG}:{service_slug.strip().lower()}'


class LatestVersionCache:
    """Caches ``loader(service_slug)`` results per normalized slug.

    Args:
        loader: Fetches the latest version of a service, or None.
        maxsize: Entries kept before the least recently used is evicted.
    """

    def __init__(self, loader: Callable[[str], dict | None], maxsize: int = 256):
        self._loader = loader
        self._maxsize = maxsize
        self._entries: OrderedDict[str, dict | None] = OrderedDict()

    def get(self, service_slug: str) -> dict | None:
        slug = service_slug.strip().lower()
        cached = self._entries.get(slug, _MISSING)
        if cached is not _MISSING:
            self._entries.move_to_end(slug)
            return cached

        value = self._loader(slug)
        self._entries[slug] = value
        if len(self._entries) > self._maxsize:
            self._entries.popitem(last=False)
        return value

    def invalidate_tag(self, tag: str) -> int:
        """Drop entries carrying ``tag``; returns how many were dropped."""
        if tag == LATEST_VERSION_CACHE_TAG:
            count = len(self._entries)
            self._entries.clear()
        else:
            matches = [slug for slug in self._entries if service_tag(slug) == tag]
            for slug in matches:
                del self._entries[slug]
            count = len(matches)
        logger.debug('Invalidated %d latest-version entries for tag %s', count, tag)
        return count

    def __contains__(self, service_slug: str) -> bool:
        return service_slug.strip().lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)
