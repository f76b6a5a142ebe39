"""Password hashing and HTTP Basic credential parsing."""

import base64
import binascii
from dataclasses import dataclass
from functools import lru_cache

from passlib.context import CryptContext

from book_api.runtime.context import get_config


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str


@lru_cache(maxsize=8)
def _crypt_context(schemes: tuple[str, ...]) -> CryptContext:
    return CryptContext(schemes=list(schemes), deprecated="auto")


def get_password_context(schemes: list[str] | None = None) -> CryptContext:
    """Return the passlib context for the configured (or given) schemes."""
    if schemes is None:
        schemes = get_config().security.password_schemes
    return _crypt_context(tuple(schemes))


def hash_password(password: str, context: CryptContext | None = None) -> str:
    return (context or get_password_context()).hash(password)


def verify_password(
    plain_password: str, hashed_password: str, context: CryptContext | None = None
) -> bool:
    """Check a password against a stored hash.

    An unrecognised hash format counts as a mismatch.
    """
    try:
        return (context or get_password_context()).verify(plain_password, hashed_password)
    except ValueError:
        return False


def dummy_verify(context: CryptContext | None = None) -> None:
    """Spend the time of a real verification, for unknown usernames."""
    (context or get_password_context()).dummy_verify()


def parse_basic_authorization(header: str | None) -> BasicCredentials | None:
    """Decode an ``Authorization: Basic <base64>`` header value.

    Returns None when the header is missing, uses another scheme, is not valid
    base64/UTF-8, or has no ``:`` separator.

    Args:
        header: Raw value of the Authorization header

    Returns:
        The decoded username/password pair, or None
    """
    if not header:
        return None

    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, separator, password = decoded.partition(":")
    if not separator:
        return None
    return BasicCredentials(username=username, password=password)
