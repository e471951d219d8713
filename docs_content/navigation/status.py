"""Version status derivation and the default landing slug guard."""

from typing import Mapping

from docs_content.domain.constants import VERSIONS
from docs_content.domain.enums import VersionStatus
from docs_content.domain.errors import ValidationError
from docs_content.domain.field_validation import normalize_slug
from docs_content.domain.models import NavItem
from docs_content.navigation.normalizer import flatten_nav_rows


def derive_status(items: list[NavItem]) -> VersionStatus:
    """A version is published iff at least one flattened row is published."""
    if any(row.published for row in flatten_nav_rows(items)):
        return VersionStatus.PUBLISHED
    return VersionStatus.DRAFT


def published_slugs(items: list[NavItem], page_slug_by_id: Mapping[str, str]) -> list[str]:
    """Normalized slugs of all published rows, in flatten order."""
    slugs = []
    for row in flatten_nav_rows(items):
        if not row.published:
            continue
        slug = normalize_slug(page_slug_by_id.get(str(row.page_id)))
        if slug:
            slugs.append(slug)
    return slugs


def enforce_default_page_slug(
    status: VersionStatus,
    default_page_slug: str | None,
    items: list[NavItem],
    page_slug_by_id: Mapping[str, str],
) -> None:
    """Reject a published version whose landing slug is not a published row.

    Must run on the deduplicated items, so a row demoted by dedup cannot
    satisfy it.

    Raises:
        ValidationError: On ``defaultPageSlug`` when the guard fails.
    """
    if status != VersionStatus.PUBLISHED:
        return
    target = normalize_slug(default_page_slug)
    if target and target in published_slugs(items, page_slug_by_id):
        return
    raise ValidationError.single(
        'defaultPageSlug',
        f'Default page slug "{target}" is not a published page in this version. '
        'Choose a currently published page slug as the default, '
        'or publish the target page first.',
        collection=VERSIONS,
    )
