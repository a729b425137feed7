"""Minimal GitHub Actions secrets API client."""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests.utils import quote

from .config import DEFAULT_API_URL
from .secrets import SecretsError

logger = logging.getLogger(__name__)

GITHUB_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}


class GitHubAPIError(SecretsError):
    """GitHub API request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class RepositoryPublicKey:
    """Repository public key used to seal secrets."""

    key_id: str
    key: str


@dataclass(frozen=True)
class EncryptedSecret:
    """Sealed secret as sent to the API."""

    name: str
    key_id: str
    encrypted_value: str


def _error_message(response: requests.Response) -> str:
    try:
        return response.json().get("message") or response.reason
    except (ValueError, AttributeError):
        return response.text or response.reason


class GitHubClient:
    """Thin wrapper over the repository secrets endpoints."""

    def __init__(self, token: str, api_url: Optional[str] = None, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(GITHUB_HEADERS)
        self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubAPIError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise GitHubAPIError(
                f"{method} {url}: {response.status_code} {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def get_repo_public_key(self, owner: str, repo: str) -> RepositoryPublicKey:
        """Fetch the key secrets for ``owner/repo`` must be sealed with."""
        response = self._request("GET", f"/repos/{owner}/{repo}/actions/secrets/public-key")
        try:
            data = response.json()
            key_id, key = data["key_id"], data["key"]
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubAPIError(f"Unexpected public key response: {e}") from e

        if not isinstance(key, str):
            raise GitHubAPIError(f"Unexpected public key response: key is {type(key).__name__}, not a string")
        return RepositoryPublicKey(key_id=str(key_id), key=key)

    def create_or_update_repo_secret(self, owner: str, repo: str, secret: EncryptedSecret) -> bool:
        """
        Upsert an encrypted repository secret.

        Returns True if the secret was created, False if it was updated.
        """
        response = self._request(
            "PUT",
            f"/repos/{owner}/{repo}/actions/secrets/{quote(secret.name, safe='')}",
            json={"encrypted_value": secret.encrypted_value, "key_id": secret.key_id},
        )
        return response.status_code == 201
