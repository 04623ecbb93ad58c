"""
crypto.py

Responsibility: Turn a machine identifier into a key and seal/open the token.

Record layout (base64 text): nonce (12 bytes) || ciphertext || GCM tag (16 bytes).
Opening a record with the wrong key, or a corrupted record, raises
`AuthenticationFailure` rather than returning garbage plaintext.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


class AuthenticationFailure(ValueError):
    pass


def derive_key(machine_id: str) -> bytes:
    """
    SHA-256 of the UTF-8 identifier, used directly as an AES-256 key.
    """
    return hashlib.sha256(machine_id.encode("utf-8")).digest()


def encrypt_token(token: str, key: bytes) -> str:
    nonce = os.urandom(NONCE_SIZE)
    sealed = AESGCM(key).encrypt(nonce, token.encode("utf-8"), None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt_token(record: str, key: bytes) -> str:
    """
    Open a record produced by `encrypt_token`.

    Raises AuthenticationFailure if the record is malformed or the tag does
    not verify under `key`.
    """
    try:
        raw = base64.b64decode(record.strip().encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise AuthenticationFailure("Stored token record is not valid base64") from e

    if len(raw) < NONCE_SIZE + TAG_SIZE:
        raise AuthenticationFailure("Stored token record is truncated")

    nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise AuthenticationFailure("Stored token could not be authenticated") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise AuthenticationFailure("Stored token is not valid UTF-8") from e
