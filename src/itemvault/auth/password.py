"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt embeds the work
factor and a random salt in every hash ("$2b$12$<salt><digest>"), so
hashing the same password twice yields different strings and both verify.
checkpw compares digests in constant time.

The work factor comes from configuration and is fixed for the process;
nothing in a request can influence it.
"""

import bcrypt

from itemvault.errors import ValidationFailed

# bcrypt only looks at the first 72 bytes of the input. Longer passwords
# are refused rather than cut, so two of them can never share a hash.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Hash and verify passwords with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 12, min_length: int = 8):
        self.rounds = rounds
        self.min_length = min_length
        # Verified against when the email is unknown, so a failed login
        # costs the same whether or not the account exists.
        self._dummy_hash = bcrypt.hashpw(
            b"itemvault-dummy-password", bcrypt.gensalt(rounds=rounds)
        )

    def validate(self, password: str) -> None:
        if len(password) < self.min_length:
            raise ValidationFailed(
                "password",
                f"Password must be at least {self.min_length} characters",
            )
        if len(_encode(password)) > BCRYPT_MAX_BYTES:
            raise ValidationFailed(
                "password",
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes",
            )

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt.

        Raises ValidationFailed if the password is shorter than min_length
        or longer than bcrypt's 72-byte limit.
        """
        self.validate(password)
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        Returns False on mismatch, on a password no hash could have been
        made from (over 72 bytes), and on a malformed hash (e.g. a corrupted
        row); never raises for any of them.
        """
        raw = _encode(password)
        if len(raw) > BCRYPT_MAX_BYTES:
            return self.verify_dummy(password)
        try:
            return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Burn one verification's worth of CPU. Always returns False."""
        bcrypt.checkpw(_encode(password)[:BCRYPT_MAX_BYTES], self._dummy_hash)
        return False


def _encode(password: str) -> bytes:
    return password.encode("utf-8")
