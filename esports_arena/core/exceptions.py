"""
Storage-level exceptions.

Lookups return ``None`` for a missing id; only operations that must act on
an existing row (balance adjustment, match result, withdrawal review)
raise. The application maps these to HTTP status codes in ``main``.
"""


class StorageError(Exception):
    """Base class for storage failures."""


class NotFoundError(StorageError):
    """The targeted entity does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class InvalidOperationError(StorageError):
    """The entity exists but is in a state that does not allow the operation."""
