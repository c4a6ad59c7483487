"""Error types raised by the IdeaVault core."""


class IdeaVaultError(Exception):
    """Base class for every error the core raises."""


class ValidationError(IdeaVaultError, ValueError):
    """A caller-supplied value violates a domain constraint."""


class NotFoundError(IdeaVaultError, LookupError):
    """A referenced id does not exist in its collection."""

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} with ID {entity_id} not found")


class ConflictError(IdeaVaultError):
    """An operation would break a relational invariant that must be rejected."""


class StorageError(IdeaVaultError):
    """The repository failed to read or write a collection."""
