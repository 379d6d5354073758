"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token is
three base64url segments, header.payload.signature, where the signature is
an HMAC over "header.payload" keyed with a server-side secret. Nothing is
stored server-side; a token simply stops working at its exp claim.

Claims:
- sub: the user's id (canonical UUID string)
- iat: issued-at, integer epoch seconds
- exp: iat + ttl, integer epoch seconds

Verification order matters. The signature is checked over everything
before the last "." ahead of any other check, so no edit to a signed
token can surface as anything but SignatureInvalid. Only then are the
segments counted and the claims decoded. Expiry is judged by the
verifier's clock, never by anything the client sent.

Time has whole-second granularity. issue() drops the fraction of `now`,
so a token minted at 12:00:00.9 carries iat=12:00:00 and is valid for
[12:00:00, 12:00:00 + ttl), up to a second less than ttl from the
moment of the call.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import jwt
from jwt.algorithms import HMACAlgorithm, get_default_algorithms
from jwt.utils import base64url_decode, base64url_encode

from itemvault.errors import MalformedToken, SignatureInvalid, TokenExpired

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
REQUIRED_CLAIMS = ("sub", "iat", "exp")


@dataclass(frozen=True)
class TokenClaims:
    """Verified claim set."""

    sub: str
    iat: int
    exp: int


class TokenCodec:
    """Issue and verify HMAC-signed, time-bounded bearer tokens."""

    def __init__(self, secret: str, ttl_seconds: int = 86400, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm: {algorithm}")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive")
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm
        self._secret = secret
        self._hmac: HMACAlgorithm = get_default_algorithms()[algorithm]
        self._key = self._hmac.prepare_key(secret)

    def issue(self, subject_id: str, now: datetime | None = None) -> str:
        """Create a signed token for subject_id, valid for ttl_seconds."""
        issued = _epoch(now)
        payload = {
            "sub": str(subject_id),
            "iat": issued,
            "exp": issued + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims:
        """Verify a token and return its claims.

        Raises SignatureInvalid, MalformedToken or TokenExpired.
        """
        signing_input, dot, signature_seg = token.rpartition(".")
        if not dot:
            raise MalformedToken("Token has no signature segment")

        self._verify_signature(signing_input, signature_seg)

        header_seg, _, payload_seg = signing_input.partition(".")
        if not header_seg or not payload_seg or "." in payload_seg:
            raise MalformedToken("Token must have three segments")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidSignatureError as e:
            raise SignatureInvalid(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(str(e)) from e

        claims = _claims_from_payload(payload)
        if _epoch(now) >= claims.exp:
            raise TokenExpired("Token has expired")
        return claims

    def _verify_signature(self, signing_input: str, signature_seg: str) -> None:
        try:
            signature = base64url_decode(signature_seg)
        except ValueError as e:
            raise SignatureInvalid("Signature is not base64url") from e
        # Reject non-canonical encodings: the trailing bits of the last
        # character must not let two strings decode to one signature.
        if base64url_encode(signature).decode("ascii") != signature_seg:
            raise SignatureInvalid("Signature encoding is not canonical")
        if not self._hmac.verify(signing_input.encode("utf-8"), self._key, signature):
            raise SignatureInvalid("Signature verification failed")


def _claims_from_payload(payload: dict) -> TokenClaims:
    sub, iat, exp = (payload.get(name) for name in REQUIRED_CLAIMS)
    if not isinstance(sub, str) or not sub:
        raise MalformedToken("sub claim must be a non-empty string")
    for name, value in (("iat", iat), ("exp", exp)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise MalformedToken(f"{name} claim must be an integer")
    return TokenClaims(sub=sub, iat=iat, exp=exp)


def _epoch(now: datetime | None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())
