"""
AES-256-CBC codec for opaque, URL-safe tokens.

Token layout: 32 lowercase hex characters holding the random IV, followed by
the base64 ciphertext with ``+``, ``/`` and ``=`` remapped to ``-``, ``_``
and ``~``. There is no version byte and no authentication tag, so existing
tokens stay decodable and tampering is only caught when the padding breaks.
"""
from __future__ import annotations

from typing import Union
import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import CryptoError, FormatError

IV_LENGTH = 16
IV_HEX_LENGTH = IV_LENGTH * 2

_URL_ENCODE = str.maketrans("+/=", "-_~")
_URL_DECODE = str.maketrans("-_~", "+/=")

Secret = Union[str, bytes]


def create_secret(secret: Secret) -> bytes:
    """
    Coerce a secret of any length into the 32 bytes an AES-256 key needs.

    This is a plain SHA-256 digest (no salt, no iterations), not a password KDF.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    return hashlib.sha256(secret).digest()


def create_iv() -> bytes:
    return os.urandom(IV_LENGTH)


def url_encode(unencoded: str) -> str:
    return unencoded.translate(_URL_ENCODE)


def url_decode(encoded: str) -> str:
    return encoded.translate(_URL_DECODE)


def _cipher(secret: Secret, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(create_secret(secret)), modes.CBC(iv))


def encrypt(value: str, secret: Secret) -> str:
    """
    Encrypt ``value`` with AES-256-CBC under a fresh random IV.

    Args:
        value: Plaintext, encoded as UTF-8 before encryption
        secret: Caller-supplied secret of any length

    Returns:
        The hex IV followed by the URL-safe base64 ciphertext
    """
    iv = create_iv()
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(value.encode("utf-8")) + padder.finalize()
    encryptor = _cipher(secret, iv).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return iv.hex() + url_encode(base64.b64encode(ciphertext).decode("ascii"))


def decrypt(token: str, secret: Secret) -> str:
    """
    Decrypt a token produced by :func:`encrypt`.

    Raises:
        FormatError: The token is too short to hold an IV, or the IV is not hex
        CryptoError: Wrong secret or corrupted ciphertext
    """
    if len(token) < IV_HEX_LENGTH:
        raise FormatError("Invalid encrypted value. Maybe it was generated with an old version?")

    try:
        iv = bytes.fromhex(token[:IV_HEX_LENGTH])
    except ValueError as exc:
        raise FormatError("Invalid encrypted value: IV is not hex") from exc

    try:
        ciphertext = base64.b64decode(url_decode(token[IV_HEX_LENGTH:]), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CryptoError(f"Invalid encrypted value: {exc}") from exc

    try:
        decryptor = _cipher(secret, iv).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise CryptoError(f"Unable to decrypt value: {exc}") from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CryptoError("Unable to decrypt value: plaintext is not valid UTF-8") from exc
