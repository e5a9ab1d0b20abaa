"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Every class carries a stable ``code`` so callers branch on the error kind,
never on the message text. Route handlers map codes to HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    code = "NOT_FOUND"


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""

    code = "DUPLICATE"


class PermissionDeniedError(DomainError):
    """Caller lacks permission for the requested action."""

    code = "PERMISSION_DENIED"


class ValidationError(DomainError):
    """Input violates a business validation rule."""

    code = "VALIDATION_ERROR"


# ── users ────────────────────────────────────────────────────


class UserNotFoundError(NotFoundError):
    """User not found."""

    code = "USER_NOT_FOUND"


class DuplicateEmailError(DuplicateError):
    """Email already registered."""

    code = "DUPLICATE_EMAIL"


# ── authentication ───────────────────────────────────────────


class AuthenticationError(DomainError):
    """Authentication failed."""

    code = "AUTHENTICATION_FAILED"


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""

    code = "INVALID_CREDENTIALS"


class InvalidSessionError(AuthenticationError):
    """Invalid or expired session."""

    code = "INVALID_SESSION"


class FederatedLoginError(AuthenticationError):
    """Federated sign-in failed."""

    code = "FEDERATED_LOGIN_FAILED"


class InvalidTokenError(FederatedLoginError):
    """Identity token could not be verified."""

    code = "INVALID_TOKEN"


class AudienceMismatchError(FederatedLoginError):
    """Identity token was issued for a different client."""

    code = "AUDIENCE_MISMATCH"


class IncompleteProfileError(FederatedLoginError):
    """Identity provider profile is missing email or name."""

    code = "INCOMPLETE_PROFILE"


class IdentityProviderError(FederatedLoginError):
    """Identity provider is unavailable or misconfigured."""

    code = "IDENTITY_PROVIDER_ERROR"


class AccountLinkRefusedError(FederatedLoginError):
    """An account with this email exists and cannot be linked automatically."""

    code = "ACCOUNT_LINK_REFUSED"
