"""Semantic version parsing and sortable version keys.

A version key is a plain string whose lexicographic order matches semver
precedence, so the content store can sort versions by it without any
numeric-aware comparison:

    1.2.0          -> 000001.000002.000000.1
    1.2.3-beta.1   -> 000001.000002.000003.0,sbeta,n000001
    1.2.3          -> 000001.000002.000003.1

Build metadata is accepted but ignored.
"""

from docs_content.domain.constants import (
    PRERELEASE_RANK,
    PRERELEASE_TOKEN_SEPARATOR,
    RELEASE_RANK,
    SEMVER_RE,
    VERSION_KEY_WIDTH,
)
from docs_content.domain.models import ParsedSemver

_MAX_COMPONENT = 10 ** VERSION_KEY_WIDTH - 1


class SemverError(ValueError):
    """Raised for version strings that are not valid semver."""


def parse_semver(value: str) -> ParsedSemver:
    """Parse a semver string without a leading "v".

    Args:
        value: Version string such as ``1.2.3`` or ``1.2.3-alpha.1+build.5``.

    Returns:
        ParsedSemver with numeric components and the raw prerelease.

    Raises:
        SemverError: If the string has a leading "v", does not follow the
            semver grammar, or has a numeric part too wide to encode.
    """
    if not isinstance(value, str):
        raise SemverError('Version must be a string.')
    trimmed = value.strip()
    if trimmed[:1] in ('v', 'V'):
        raise SemverError('Version must not include a leading "v".')

    m = SEMVER_RE.match(trimmed)
    if not m:
        raise SemverError('Version must follow semver (e.g. "1.2.3" or "1.2.3-alpha.1").')

    major, minor, patch = (int(m.group(i)) for i in (1, 2, 3))
    if max(major, minor, patch) > _MAX_COMPONENT:
        raise SemverError(f'Version numbers must not exceed {_MAX_COMPONENT}.')

    prerelease = m.group(4)
    if prerelease:
        for part in prerelease.split('.'):
            if part.isdigit() and int(part) > _MAX_COMPONENT:
                raise SemverError(
                    f'Numeric prerelease identifiers must not exceed {_MAX_COMPONENT}.'
                )
    return ParsedSemver(major, minor, patch, prerelease)


def _pad(value: int) -> str:
    return str(value).zfill(VERSION_KEY_WIDTH)


def _prerelease_rank(prerelease: str | None) -> str:
    if not prerelease:
        return RELEASE_RANK
    tokens = []
    for part in prerelease.split('.'):
        if part.isdigit():
            tokens.append(f'n{_pad(int(part))}')
        else:
            tokens.append(f's{part.lower()}')
    return PRERELEASE_TOKEN_SEPARATOR.join([PRERELEASE_RANK, *tokens])


def build_version_key(parsed: ParsedSemver) -> str:
    """Encode a parsed version as a lexicographically sortable key."""
    base = '.'.join(_pad(n) for n in (parsed.major, parsed.minor, parsed.patch))
    return f'{base}.{_prerelease_rank(parsed.prerelease)}'


def version_key(value: str) -> str:
    """Parse and encode a version string in one step."""
    return build_version_key(parse_semver(value))
