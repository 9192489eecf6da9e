"""
Security utilities for password hashing and JWT token management.

Tokens are signed with an asymmetric private key and carry the key id in
their ``kid`` header. Verification looks the public key up by that id
through a pluggable ``KeyLookup`` callable, so a single static key and a
rotating key set share the same contract.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt
from jose.exceptions import JOSEError, JWTError
from jose.utils import base64url_decode
from passlib.context import CryptContext
from pydantic import ValidationError

from shortener.core.config import SIGNING_ALGORITHMS, settings
from shortener.core.exceptions import (
    ClaimsDecodeError,
    InternalServerError,
    InvalidTokenError,
    KeyLookupError,
    MissingTokenError,
    TokenSignatureError,
)
from shortener.schemas.token import Claims

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__default_rounds=settings.BCRYPT_ROUNDS
)

# Returns the PEM encoded public key registered under a key id.
KeyLookup = Callable[[str], str]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def generate_private_key_pem(key_size: int = 2048) -> str:
    """Create a new RSA private key, PEM encoded (PKCS#1)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


def public_key_from_private(private_key_pem: str) -> str:
    """Derive the PEM encoded public key of a private key."""
    try:
        key = serialization.load_pem_private_key(private_key_pem.encode("utf-8"), password=None)
    except (TypeError, ValueError) as exc:
        raise InternalServerError("can't parse auth private key") from exc
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


def load_private_key(path: str) -> str:
    """Read a PEM private key from disk."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise InternalServerError(f"can't read auth private key {path}") from exc


def simple_key_lookup(key_id: str, public_key_pem: str) -> KeyLookup:
    """
    Key lookup for a single key pair.

    Args:
        key_id: The only key id accepted
        public_key_pem: Public key returned for that id

    Returns:
        Lookup callable raising KeyLookupError for any other id
    """

    def lookup(kid: str) -> str:
        if kid != key_id:
            raise KeyLookupError(kid)
        return public_key_pem

    return lookup


def decode_token(
    token: Optional[str],
    key_lookup: KeyLookup,
    algorithm: str,
    now: Optional[datetime] = None,
) -> Claims:
    """
    Verify a bearer token and return its claims.

    Args:
        token: Encoded JWT
        key_lookup: Resolves the ``kid`` header to a public key
        algorithm: The only signing algorithm accepted
        now: Verification time, defaults to the current time

    Returns:
        Verified claims

    Raises:
        MissingTokenError: Token absent or not parseable
        TokenSignatureError: Unknown key id or signature mismatch
        InvalidTokenError: Unexpected algorithm or expired token
        ClaimsDecodeError: Payload does not have the Claims shape
    """
    if not token:
        raise MissingTokenError()

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise MissingTokenError() from exc

    key_id = header.get("kid")
    if not key_id:
        raise MissingTokenError("token header has no key id")
    if header.get("alg") != algorithm:
        raise InvalidTokenError(f"unexpected signing algorithm {header.get('alg')!r}")

    try:
        public_key = key_lookup(key_id)
    except KeyLookupError as exc:
        raise TokenSignatureError() from exc

    try:
        message, encoded_signature = token.rsplit(".", 1)
        signature = base64url_decode(encoded_signature.encode("utf-8"))
        verified = jwk.construct(public_key, algorithm).verify(message.encode("utf-8"), signature)
    except (JOSEError, ValueError) as exc:
        raise TokenSignatureError() from exc
    if not verified:
        raise TokenSignatureError()

    try:
        payload = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MissingTokenError() from exc

    try:
        claims = Claims.model_validate(payload)
    except ValidationError as exc:
        raise ClaimsDecodeError() from exc

    now = now or datetime.now(timezone.utc)
    if claims.expires_at <= int(now.timestamp()):
        raise InvalidTokenError("token has expired")

    return claims


class Authenticator:
    """
    Issues and verifies signed bearer tokens.

    Args:
        private_key_pem: PEM private key used for signing
        key_id: Key id written to the ``kid`` header
        algorithm: Asymmetric signing algorithm, e.g. RS256
        key_lookup: Public key lookup used for verification
    """

    def __init__(
        self,
        private_key_pem: str,
        key_id: str,
        algorithm: str,
        key_lookup: KeyLookup,
    ) -> None:
        if not private_key_pem:
            raise ValueError("private key cannot be empty")
        if not key_id:
            raise ValueError("key id cannot be blank")
        if algorithm not in SIGNING_ALGORITHMS:
            raise ValueError(f"unknown or symmetric signing algorithm {algorithm!r}")
        if not callable(key_lookup):
            raise ValueError("public key lookup function cannot be empty")

        self._private_key = private_key_pem
        self.key_id = key_id
        self.algorithm = algorithm
        self._key_lookup = key_lookup

    @classmethod
    def from_private_key(cls, private_key_pem: str, key_id: str, algorithm: str) -> "Authenticator":
        """Authenticator whose lookup serves the matching public key."""
        public = simple_key_lookup(key_id, public_key_from_private(private_key_pem))
        return cls(private_key_pem, key_id, algorithm, public)

    def generate_token(self, claims: Claims) -> str:
        """
        Sign claims into a JWT.

        Raises:
            InternalServerError: If signing fails (e.g. malformed key)
        """
        try:
            return jwt.encode(
                claims.to_payload(),
                self._private_key,
                algorithm=self.algorithm,
                headers={"kid": self.key_id},
            )
        except (JOSEError, TypeError, ValueError) as exc:
            raise InternalServerError("can't sign token") from exc

    def parse_claims(self, token: Optional[str], now: Optional[datetime] = None) -> Claims:
        """Verify a token with this authenticator's key lookup."""
        return decode_token(token, self._key_lookup, self.algorithm, now)

