"""Secret value resolution and sealed-box encryption."""

import base64
import binascii
from pathlib import Path
from typing import Union

from nacl import exceptions as nacl_exceptions
from nacl import public

FILE_PREFIX = "file("
FILE_SUFFIX = ")"
PUBLIC_KEY_SIZE = public.PublicKey.SIZE


class SecretsError(Exception):
    """Base exception for secrets errors."""
    pass


class ResolutionError(SecretsError):
    """Secret value could not be resolved."""
    pass


class EmptyFilePathError(ResolutionError):
    """file() syntax used without a path."""

    def __init__(self):
        super().__init__("empty file path in file() syntax")


class FileReadError(ResolutionError):
    """File referenced by file() could not be read."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to read file '{path}': {cause}")


class EncryptError(SecretsError):
    """Secret value could not be encrypted."""
    pass


class InvalidKeyEncodingError(EncryptError):
    """Public key is not valid base64."""
    pass


class InvalidKeyLengthError(EncryptError):
    """Public key does not decode to 32 bytes."""

    def __init__(self, got: int):
        self.got = got
        super().__init__(f"public key must be {PUBLIC_KEY_SIZE} bytes, got {got}")


def resolve_value(raw_value: str) -> Union[str, bytes]:
    """
    Resolve a raw secret value to the plaintext to encrypt.

    ``file(path)`` returns the raw bytes of ``path``, dropping a single trailing
    newline, so binary files (keystores, DER certs) pass through untouched.
    Anything else is a literal and is returned as the given string.
    """
    if not (raw_value.startswith(FILE_PREFIX) and raw_value.endswith(FILE_SUFFIX)):
        return raw_value

    file_path = raw_value[len(FILE_PREFIX):-len(FILE_SUFFIX)]
    if not file_path:
        raise EmptyFilePathError()

    try:
        content = Path(file_path).read_bytes()
    except OSError as e:
        raise FileReadError(file_path, e) from e

    # One newline only, not rstrip()
    if content.endswith(b"\n"):
        content = content[:-1]
    return content


def decode_public_key(public_key_b64: str) -> bytes:
    """Decode a base64 repository public key and check its length."""
    try:
        key_bytes = base64.b64decode(public_key_b64, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise InvalidKeyEncodingError(f"failed to decode public key: {e}") from e

    if len(key_bytes) != PUBLIC_KEY_SIZE:
        raise InvalidKeyLengthError(len(key_bytes))
    return key_bytes


def encrypt_secret(public_key_b64: str, plaintext: Union[str, bytes]) -> str:
    """
    Seal a secret value for the holder of ``public_key_b64``.

    Produces a libsodium ``crypto_box_seal`` box: a fresh ephemeral public key
    followed by the ciphertext and its 16-byte tag, base64-encoded. This is the
    format the GitHub secrets API expects in ``encrypted_value``.
    """
    key_bytes = decode_public_key(public_key_b64)

    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")

    try:
        sealed = public.SealedBox(public.PublicKey(key_bytes)).encrypt(plaintext)
    except nacl_exceptions.CryptoError as e:
        raise EncryptError(f"failed to seal secret: {e}") from e

    return base64.b64encode(sealed).decode("ascii")
