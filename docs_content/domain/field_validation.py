"""Field-level validation and normalization for slugs.

Validators return ``None`` when the value is acceptable, or the message to
attach to a field error.
"""

import re
from typing import Any

from docs_content.domain.constants import DOC_PATH_SLUG_RE, SERVICE_SLUG_RE


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_slug(value: Any) -> str:
    """Trim, strip surrounding slashes, and lowercase a slug for comparison."""
    if not isinstance(value, str):
        return ''
    return value.strip().strip('/').lower()


def normalize_default_page_slug(value: str) -> str:
    """Normalize an editor-entered default page slug to kebab-case path form."""
    slug = value.strip().strip('/').lower()
    slug = re.sub(r'[\s_]+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return re.sub(r'/+', '/', slug)


def slugify(value: str) -> str:
    """Derive a kebab-case slug from a display name."""
    slug = value.strip().lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s_]+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def validate_required(value: Any, label: str) -> str | None:
    return None if _is_non_empty_string(value) else f'{label} is required.'


def validate_doc_path_slug(value: Any, label: str) -> str | None:
    """Validate a lowercase kebab-case path slug such as ``guides/intro``."""
    if not _is_non_empty_string(value):
        return f'{label} is required.'
    trimmed = value.strip()
    if trimmed.startswith('/'):
        return f'{label} must not start with "/".'
    if re.search(r'\s', trimmed):
        return f'{label} must not include spaces.'
    if '..' in trimmed:
        return f'{label} must not include "..".'
    if not DOC_PATH_SLUG_RE.match(trimmed):
        return f'{label} must be lowercase kebab-case segments separated by "/".'
    return None


def validate_service_slug(value: Any) -> str | None:
    """Validate a single-segment service slug such as ``api``."""
    if not _is_non_empty_string(value):
        return 'Service slug is required.'
    trimmed = value.strip()
    if '/' in trimmed:
        return 'Service slug must not include "/".'
    if re.search(r'\s', trimmed):
        return 'Service slug must not include spaces.'
    if '..' in trimmed:
        return 'Service slug must not include "..".'
    if not SERVICE_SLUG_RE.match(trimmed):
        return 'Service slug must be lowercase kebab-case.'
    return None
