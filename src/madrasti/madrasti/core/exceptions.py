class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced school or record does not exist."""


class SubscriptionError(DomainError):
    """Raised when a school account is disabled or its activation code is wrong."""


class ImportFileError(DomainError):
    """Raised when a roster file cannot be read or parsed as a whole."""


class StoreNotReadyError(DomainError):
    """Raised when a school's data is still loading from the remote store."""


class StorageError(Exception):
    """Local cache read/write failure."""


class StorageQuotaError(StorageError):
    """Local cache is over its configured size limit."""


class RemoteStoreError(Exception):
    """Remote document store failure."""
