"""Domain exceptions raised by services and mapped to HTTP responses in main."""


class PhishNetError(Exception):
    """Base exception for service errors."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationFailedError(PhishNetError):
    """Input did not match the expected schema."""

    status_code = 400

    def __init__(self, message: str = "Validation error", errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class AccessDeniedError(PhishNetError):
    """Resource belongs to another organization, or there is no valid session."""

    status_code = 403

    def __init__(self, message: str = "Access denied", invalid: list[str] | None = None):
        super().__init__(message)
        self.invalid = invalid or []


class AuthenticationError(AccessDeniedError):
    """Missing, invalid or revoked session."""


class InvalidCredentialsError(PhishNetError):
    """Login with an unknown email or a wrong password."""

    status_code = 401


class NotFoundError(PhishNetError):
    """Requested resource does not exist."""

    status_code = 404


class ConflictError(PhishNetError):
    """Write conflicts with existing data (duplicate email, org name)."""

    status_code = 409


class ResourceInUseError(ConflictError):
    """Resource is referenced by a campaign and cannot be deleted."""
