"""Runtime configuration.

Loaded from environment variables; secrets are held but never logged.

Environment Variables:
    DOCS_REVALIDATE_URL: Full URL of the docs site revalidation endpoint.
    DOCS_SITE_URL: Docs site base URL, used when DOCS_REVALIDATE_URL is unset.
    DOCS_REVALIDATE_SECRET: Shared secret sent with revalidation requests.
    DOCS_REVALIDATE_TIMEOUT: Revalidation request timeout in seconds (default: 5).
    DOCS_SOURCE_URL: Base URL of the CMS REST API read by the docs site.
    DOCS_SOURCE_EMAIL: Login email for the CMS API (optional).
    DOCS_SOURCE_PASSWORD: Login password for the CMS API (optional).
    DOCS_INCLUDE_DRAFTS: "1", "true" or "yes" to read draft versions.
    DOCS_TOKEN_TTL: Seconds a CMS auth token is reused (default: 600).
"""

import os
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urljoin

from docs_content.domain.constants import REVALIDATE_PATH

_TRUTHY = {'1', 'true', 'yes', 'on'}


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _float(value: str | None, default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Engine, notifier, and client settings."""

    revalidate_url: str | None = None
    site_url: str | None = None
    revalidate_secret: str | None = None
    revalidate_timeout: float = 5.0
    source_url: str | None = None
    source_email: str | None = None
    source_password: str | None = None
    include_drafts: bool = False
    token_ttl: float = 600.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'Settings':
        env = os.environ if environ is None else environ
        return cls(
            revalidate_url=_clean(env.get('DOCS_REVALIDATE_URL')),
            site_url=_clean(env.get('DOCS_SITE_URL')),
            revalidate_secret=_clean(env.get('DOCS_REVALIDATE_SECRET')),
            revalidate_timeout=_float(env.get('DOCS_REVALIDATE_TIMEOUT'), 5.0),
            source_url=_clean(env.get('DOCS_SOURCE_URL')),
            source_email=_clean(env.get('DOCS_SOURCE_EMAIL')),
            source_password=env.get('DOCS_SOURCE_PASSWORD') or None,
            include_drafts=(env.get('DOCS_INCLUDE_DRAFTS') or '').strip().lower() in _TRUTHY,
            token_ttl=_float(env.get('DOCS_TOKEN_TTL'), 600.0),
        )

    def resolve_revalidate_url(self) -> str | None:
        """Explicit URL first, else the well-known path on the site URL."""
        if self.revalidate_url:
            return self.revalidate_url
        if not self.site_url or '://' not in self.site_url:
            return None
        return urljoin(self.site_url, REVALIDATE_PATH)

    @property
    def source_auth(self) -> dict[str, str] | None:
        if self.source_email and self.source_password:
            return {'email': self.source_email, 'password': self.source_password}
        return None
