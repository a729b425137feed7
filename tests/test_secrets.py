"""Tests for value resolution and sealed-box encryption."""

import base64

import pytest
from nacl import exceptions as nacl_exceptions
from nacl import public

from gh_repo_secrets.secrets import (
    EmptyFilePathError,
    EncryptError,
    FileReadError,
    InvalidKeyEncodingError,
    InvalidKeyLengthError,
    ResolutionError,
    encrypt_secret,
    resolve_value,
)


@pytest.fixture
def keypair():
    """Recipient key pair, public key base64-encoded like the API returns it."""
    private_key = public.PrivateKey.generate()
    public_b64 = base64.b64encode(bytes(private_key.public_key)).decode()
    return private_key, public_b64


def open_box(private_key, sealed_b64):
    return public.SealedBox(private_key).decrypt(base64.b64decode(sealed_b64))


class TestResolveValue:
    """Tests for literal and file() values."""

    def test_literal_unchanged(self):
        """Plain values pass through."""
        assert resolve_value("plain-literal") == "plain-literal"

    def test_literal_not_trimmed(self):
        """Whitespace and newlines in literals are kept."""
        assert resolve_value("  padded\n") == "  padded\n"

    def test_partial_syntax_is_literal(self):
        """Only the full file(...) form is an indirection."""
        assert resolve_value("file(missing-paren") == "file(missing-paren"
        assert resolve_value("xfile(a)") == "xfile(a)"

    def test_file_contents(self, tmp_path):
        """file(path) returns the file contents."""
        path = tmp_path / "token.txt"
        path.write_text("abc123")
        assert resolve_value(f"file({path})") == b"abc123"

    def test_file_strips_one_newline(self, tmp_path):
        """Exactly one trailing newline is removed."""
        path = tmp_path / "key.pem"
        path.write_bytes(b"line1\nline2\n\n")
        assert resolve_value(f"file({path})") == b"line1\nline2\n"

    def test_file_keeps_carriage_return(self, tmp_path):
        """Only the \\n is stripped, not a preceding \\r."""
        path = tmp_path / "crlf.txt"
        path.write_bytes(b"value\r\n")
        assert resolve_value(f"file({path})") == b"value\r"

    def test_binary_file_passes_through(self, tmp_path, keypair):
        """Non-UTF-8 files are sealed byte for byte."""
        private_key, public_b64 = keypair
        path = tmp_path / "keystore.p12"
        path.write_bytes(b"\x30\x82\xff\xfe\n")

        plaintext = resolve_value(f"file({path})")

        assert plaintext == b"\x30\x82\xff\xfe"
        assert open_box(private_key, encrypt_secret(public_b64, plaintext)) == b"\x30\x82\xff\xfe"

    def test_empty_path(self):
        """file() with nothing inside fails."""
        with pytest.raises(EmptyFilePathError):
            resolve_value("file()")

    def test_missing_file(self, tmp_path):
        """Unreadable files raise FileReadError with the path."""
        missing = tmp_path / "nonexistent"
        with pytest.raises(FileReadError) as exc_info:
            resolve_value(f"file({missing})")
        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.cause, OSError)
        assert isinstance(exc_info.value, ResolutionError)

    def test_directory_is_read_error(self, tmp_path):
        """A directory path is not readable as a file."""
        with pytest.raises(FileReadError):
            resolve_value(f"file({tmp_path})")


class TestEncryptSecret:
    """Tests for the sealed-box encryptor."""

    def test_round_trip(self, keypair):
        """The recipient's private key opens the box."""
        private_key, public_b64 = keypair
        sealed = encrypt_secret(public_b64, "hunter2")
        assert open_box(private_key, sealed) == b"hunter2"

    def test_round_trip_unicode_and_bytes(self, keypair):
        """str values are UTF-8 encoded, bytes are sealed as-is."""
        private_key, public_b64 = keypair
        assert open_box(private_key, encrypt_secret(public_b64, "pässwörd")) == "pässwörd".encode()
        assert open_box(private_key, encrypt_secret(public_b64, b"\x00\xff")) == b"\x00\xff"

    def test_layout(self, keypair):
        """Output is ephemeral key (32) + ciphertext + 16-byte tag."""
        _, public_b64 = keypair
        sealed = base64.b64decode(encrypt_secret(public_b64, "12345"))
        assert len(sealed) == 32 + 5 + 16

    def test_empty_plaintext(self, keypair):
        """Empty values still seal to a valid box."""
        private_key, public_b64 = keypair
        sealed = encrypt_secret(public_b64, "")
        assert len(base64.b64decode(sealed)) == 48
        assert open_box(private_key, sealed) == b""

    def test_fresh_ephemeral_key_each_call(self, keypair):
        """Sealing the same value twice gives different boxes."""
        _, public_b64 = keypair
        assert encrypt_secret(public_b64, "same") != encrypt_secret(public_b64, "same")

    def test_wrong_private_key_cannot_open(self, keypair):
        """Only the intended recipient can decrypt."""
        _, public_b64 = keypair
        sealed = encrypt_secret(public_b64, "value")
        with pytest.raises(nacl_exceptions.CryptoError):
            open_box(public.PrivateKey.generate(), sealed)

    @pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
    def test_invalid_key_length(self, size):
        """Keys that are not 32 bytes are rejected, never padded or truncated."""
        key_b64 = base64.b64encode(b"k" * size).decode()
        with pytest.raises(InvalidKeyLengthError) as exc_info:
            encrypt_secret(key_b64, "value")
        assert exc_info.value.got == size

    def test_invalid_key_encoding(self):
        """Malformed base64 is an encoding error."""
        with pytest.raises(InvalidKeyEncodingError):
            encrypt_secret("not base64!!", "value")

    @pytest.mark.parametrize("key", [None, 12345])
    def test_non_string_key(self, key):
        """A key that is not text at all is an encoding error."""
        with pytest.raises(InvalidKeyEncodingError):
            encrypt_secret(key, "value")

    def test_errors_share_base(self):
        """Key errors are encryption errors."""
        assert issubclass(InvalidKeyLengthError, EncryptError)
        assert issubclass(InvalidKeyEncodingError, EncryptError)
