"""Shared data models for navigation items and derived rows.

Persisted documents (services, versions, pages, groups) stay plain dicts at
the content-store boundary. The navigation tree is modeled as a tagged
union: a nav item is either a ``PageItem`` or a ``GroupItem``.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from docs_content.domain.enums import NavNodeKind


@dataclass
class PageRow:
    """A page entry nested inside a group item."""

    page: Any
    published: bool = True
    id: str | None = None


@dataclass
class PageItem:
    """A root-level nav entry pointing at one page."""

    page: Any
    published: bool = True
    id: str | None = None
    block_name: str | None = None


@dataclass
class GroupItem:
    """A root-level nav entry labelling an ordered list of page rows."""

    group: Any
    pages: list[PageRow] = field(default_factory=list)
    id: str | None = None
    block_name: str | None = None


NavItem = Union[PageItem, GroupItem]


@dataclass(frozen=True)
class FlatNavRow:
    """One page row of a flattened nav tree.

    ``page_index`` is ``None`` for root page items; ``group_id`` is ``None``
    unless the row came from a group item.
    """

    page_id: int | str
    published: bool
    group_id: int | str | None
    root_index: int
    page_index: int | None


@dataclass(frozen=True)
class ParsedSemver:
    """Components of a validated semantic version string."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None


@dataclass
class NavNode:
    """A sidebar node handed to the rendering layer."""

    kind: NavNodeKind
    title: str
    slug: str
    children: list['NavNode'] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'kind': self.kind.value, 'title': self.title, 'slug': self.slug}
        if self.children:
            data['children'] = [c.to_dict() for c in self.children]
        return data
