"""Domain enums for the docs content engine."""
from enum import Enum


class VersionStatus(str, Enum):
    """Derived publish state of a documentation version."""
    DRAFT = 'draft'
    PUBLISHED = 'published'


class NavNodeKind(str, Enum):
    """Sidebar node kinds."""
    PAGE = 'page'
    GROUP = 'group'
