"""
Client-side encryption for Aer.

The key is derived from the auth token (aer_{userId}) so any client holding
the same token can decrypt. Blobs are AES-256-GCM with a fresh random nonce
per call. A blob whose nonce is the sentinel "plain" carries cleartext in
its ciphertext field and is passed through untouched.
"""

import base64
import binascii
import hashlib
import os
from collections.abc import Mapping
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel, ValidationError

from aer.config import TOKEN_PREFIX, Settings
from aer.errors import InvalidTokenFormatError, UnauthenticatedError

PLAIN_NONCE = "plain"
KEY_LENGTH = 32
NONCE_LENGTH = 12


class EncryptedBlob(BaseModel):
    """Wire shape of an encrypted field: base64 ciphertext and nonce."""

    ciphertext: str
    nonce: str

    @property
    def is_plain(self) -> bool:
        return self.nonce == PLAIN_NONCE

    @classmethod
    def plain(cls, text: str) -> "EncryptedBlob":
        """Wrap cleartext with the plain sentinel."""
        return cls(ciphertext=text, nonce=PLAIN_NONCE)


def user_id_from_token(token: str) -> str:
    """Extract the userId from an aer_{userId} token."""
    if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
        raise InvalidTokenFormatError()
    user_id = token[len(TOKEN_PREFIX):]
    if not user_id:
        raise InvalidTokenFormatError()
    return user_id


def derive_key_from_user_id(user_id: str) -> str:
    """SHA-256 of the userId, truncated to the key length, base64-encoded."""
    digest = hashlib.sha256(user_id.encode("utf-8")).digest()
    return base64.b64encode(digest[:KEY_LENGTH]).decode("ascii")


def derive_key(token: str) -> str:
    """
    Derive the symmetric key for a token.

    Deterministic: the same token always yields the same key.

    Raises:
        InvalidTokenFormatError: token lacks the aer_ prefix
    """
    return derive_key_from_user_id(user_id_from_token(token))


def key_for_settings(settings: Settings) -> str:
    """
    Derive the key for the configured token.

    Raises:
        UnauthenticatedError: no token configured
        InvalidTokenFormatError: token lacks the aer_ prefix
    """
    if not settings.auth_token:
        raise UnauthenticatedError()
    return derive_key(settings.auth_token)


def encrypt(plaintext: Any, key_b64: str) -> EncryptedBlob:
    """Encrypt a string (other values are stringified) under a base64 key."""
    key = base64.b64decode(key_b64)
    message = plaintext if isinstance(plaintext, str) else str(plaintext)
    nonce = os.urandom(NONCE_LENGTH)
    ciphertext = AESGCM(key).encrypt(nonce, message.encode("utf-8"), None)
    return EncryptedBlob(
        ciphertext=base64.b64encode(ciphertext).decode("ascii"),
        nonce=base64.b64encode(nonce).decode("ascii"),
    )


def _coerce_blob(blob: Any) -> EncryptedBlob | None:
    if isinstance(blob, EncryptedBlob):
        return blob
    if isinstance(blob, Mapping):
        try:
            return EncryptedBlob.model_validate(blob)
        except ValidationError:
            return None
    return None


def decrypt(blob: Any, key_b64: str) -> str | None:
    """
    Decrypt a blob, returning None when it cannot be opened.

    Plain-sentinel blobs return their ciphertext verbatim. Malformed blobs,
    a wrong key, or a failed authentication tag all yield None.
    """
    enc = _coerce_blob(blob)
    if enc is None or not enc.ciphertext or not enc.nonce:
        return None
    if enc.is_plain:
        return enc.ciphertext

    try:
        key = base64.b64decode(key_b64, validate=True)
        nonce = base64.b64decode(enc.nonce, validate=True)
        ciphertext = base64.b64decode(enc.ciphertext, validate=True)
        if len(key) != KEY_LENGTH or len(nonce) != NONCE_LENGTH:
            return None
        opened = AESGCM(key).decrypt(nonce, ciphertext, None)
        return opened.decode("utf-8")
    except (binascii.Error, ValueError, TypeError, InvalidTag):
        return None
