"""Set a batch of secrets, one at a time, tolerating individual failures."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from rich.console import Console

from .github import EncryptedSecret, RepositoryPublicKey
from .secrets import EncryptError, ResolutionError, SecretsError, encrypt_secret, resolve_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SecretRequest:
    """A secret to set, with its value before file() resolution."""

    name: str
    raw_value: str


@dataclass
class BatchResult:
    """Running tally of a batch."""

    total: int = 0
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def all_succeeded(self) -> bool:
        return self.succeeded == self.total


def requests_from_mapping(secrets: Mapping[str, str]) -> list[SecretRequest]:
    """Batch requests in the mapping's insertion order."""
    return [SecretRequest(name, raw_value) for name, raw_value in secrets.items()]


def _failed_stage(error: SecretsError) -> str:
    if isinstance(error, ResolutionError):
        return "resolve"
    if isinstance(error, EncryptError):
        return "encrypt"
    return "set"


def seal_request(request: SecretRequest, public_key: RepositoryPublicKey) -> EncryptedSecret:
    """Resolve and encrypt a single request."""
    plaintext = resolve_value(request.raw_value)
    return EncryptedSecret(
        name=request.name,
        key_id=public_key.key_id,
        encrypted_value=encrypt_secret(public_key.key, plaintext),
    )


def run_batch(
    requests: Iterable[SecretRequest],
    public_key: RepositoryPublicKey,
    submit: Callable[[EncryptedSecret], object],
    console: Optional[Console] = None,
) -> BatchResult:
    """
    Resolve, encrypt and submit each secret in order.

    A failure at any stage is logged and that secret is skipped; the rest of
    the batch still runs. ``submit`` signals failure by raising a SecretsError.
    """
    console = console or Console()
    result = BatchResult()

    for request in requests:
        result.total += 1
        try:
            submit(seal_request(request, public_key))
        except SecretsError as e:
            logger.error(f"Failed to {_failed_stage(e)} secret '{request.name}': {e}")
        else:
            console.print(f"Secret '{request.name}' set successfully", highlight=False)
            result.succeeded += 1

    return result
