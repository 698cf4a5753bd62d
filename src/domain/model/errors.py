"""Domain-level exceptions.

Repositories and the password hasher raise these errors to express failures
without leaking driver or library types. Route handlers catch them, log the
cause and map them to a fixed HTTP error envelope.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Identifier is malformed or does not resolve to an existing user."""


class PersistenceError(DomainError):
    """Communication with the document store or a write failed."""


class HashingError(DomainError):
    """The password hashing primitive rejected its input."""
