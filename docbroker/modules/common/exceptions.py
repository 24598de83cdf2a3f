"""Domain exception classes for business logic errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ConfigurationError(DomainError):
    """Raised when the application is started with incomplete configuration."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ValidationError(DomainError):
    """Raised when caller-supplied data is missing or invalid."""

    pass


class UnsupportedFileTypeError(ValidationError):
    """Raised when an upload's declared extension is not on the allow-list."""

    pass


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size ceiling."""

    pass


class AuthenticationError(DomainError):
    """Raised when credentials are missing or do not match a known user."""

    pass


class PermissionDeniedError(DomainError):
    """Raised when a presented token is invalid, tampered with or expired."""

    pass


class InternalError(DomainError):
    """Base class for failures that are reported to callers generically."""

    public_message = "An unexpected error occurred."


class StorageError(InternalError):
    """Raised when upload storage fails for a reason other than a missing file."""

    public_message = "Unable to access upload storage."


class TokenSigningError(InternalError):
    """Raised when a token cannot be signed."""

    public_message = "Unable to sign editor configuration."
