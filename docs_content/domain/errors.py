"""Exceptions raised by the docs content engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A validation failure scoped to one document field."""

    path: str
    message: str


class DocsContentError(Exception):
    """Base class for all engine errors."""


class ValidationError(DocsContentError):
    """Raised when a write violates a field or integrity rule.

    Nothing is persisted when this is raised.

    Attributes:
        errors: Field-scoped failures, in the order they were found.
        collection: Collection the rejected write targeted, if known.
    """

    def __init__(self, errors: list[FieldError] | FieldError, collection: str | None = None):
        if isinstance(errors, FieldError):
            errors = [errors]
        self.errors = list(errors)
        self.collection = collection
        super().__init__('; '.join(f'{e.path}: {e.message}' for e in self.errors))

    @classmethod
    def single(cls, path: str, message: str, collection: str | None = None) -> 'ValidationError':
        return cls(FieldError(path, message), collection=collection)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict."""
        return {
            'collection': self.collection,
            'errors': [{'path': e.path, 'message': e.message} for e in self.errors],
        }


class NotFoundError(DocsContentError):
    """Raised when a document to update or delete does not exist."""

    def __init__(self, collection: str, doc_id):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f'{collection} document {doc_id} not found')


class DocsSourceError(DocsContentError):
    """Raised when the CMS REST API answers a read or login with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
