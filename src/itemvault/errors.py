"""Error hierarchy for ItemVault.

Every failure the core can produce is an ItemVaultError with a stable
machine code and exactly one HTTP status. The message is what the caller
sees; anything more specific (which token check failed, driver error text)
goes to the logs only.

The token-gate family (MissingCredential, SignatureInvalid, TokenExpired,
MalformedToken, MalformedSubject) all share Unauthorized's public message,
so a caller cannot tell which check rejected the token.
"""


class ItemVaultError(Exception):
    """Base exception for all ItemVault errors."""

    status_code = 500
    code = "internal_error"
    public_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.public_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"detail": self.public_message, "code": self.code}


class ValidationFailed(ItemVaultError):
    """Malformed or missing input field."""

    status_code = 422
    code = "validation_failed"
    public_message = "Validation failed"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def to_response(self) -> dict:
        # Same shape as FastAPI's RequestValidationError body.
        return {
            "detail": [
                {
                    "loc": ["body", self.field],
                    "msg": self.message,
                    "type": self.code,
                }
            ]
        }


class Conflict(ItemVaultError):
    """Email or username already registered."""

    status_code = 409
    code = "conflict"
    public_message = "User with this email or username already exists"


class AuthenticationFailed(ItemVaultError):
    """Unknown email or wrong password. Deliberately undifferentiated."""

    status_code = 401
    code = "authentication_failed"
    public_message = "Invalid email or password"


class NotFound(ItemVaultError):
    """Record absent, or owned by someone else."""

    status_code = 404
    code = "not_found"
    public_message = "Not found"

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class StoreUnavailable(ItemVaultError):
    """The database cannot be reached."""

    status_code = 503
    code = "store_unavailable"
    public_message = "Service unavailable"


# ─── Token gate ──────────────────────────────────────────


class Unauthorized(ItemVaultError):
    """Base for every token-gate rejection."""

    status_code = 401
    code = "unauthorized"
    public_message = "Unauthorized"


class MissingCredential(Unauthorized):
    """No Authorization header, or not a Bearer credential."""


class MalformedSubject(Unauthorized):
    """Token verified but its subject is not a user id."""


class TokenError(Unauthorized):
    """Raised when token verification fails."""


class SignatureInvalid(TokenError):
    """Signature does not match the signed segments."""


class MalformedToken(TokenError):
    """Token cannot be split or its claims cannot be decoded."""


class TokenExpired(TokenError):
    """Verifier's clock is at or past the token's exp claim."""
