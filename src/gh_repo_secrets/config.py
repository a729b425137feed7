"""Configuration for gh-repo-secrets."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from .secrets import SecretsError

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"
API_URL_ENV_VAR = "GITHUB_API_URL"
DEFAULT_API_URL = "https://api.github.com"


class ConfigError(SecretsError):
    """Configuration is missing or invalid."""
    pass


@dataclass
class Config:
    """Repository target and the secrets to set on it."""

    owner: str = ""
    repo: str = ""
    token: str = ""
    secrets: Dict[str, str] = field(default_factory=dict)
    # Deprecated single-secret fields, folded into secrets on load
    secret: str = ""
    value: str = ""


def get_token(cfg: Config) -> str:
    """Token from config/flags, falling back to the environment."""
    return cfg.token or os.environ.get(TOKEN_ENV_VAR, "")


def get_api_url() -> str:
    """GitHub API base URL (GitHub Actions and Enterprise set GITHUB_API_URL)."""
    return os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL


def _as_str(value) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_legacy(cfg: Config) -> Config:
    """Fold the deprecated secret/value pair into the secrets mapping."""
    if cfg.secret and cfg.value:
        cfg.secrets[cfg.secret] = cfg.value
    elif cfg.secret or cfg.value:
        logger.warning("Ignoring config 'secret'/'value': both must be set")
    cfg.secret = ""
    cfg.value = ""
    return cfg


def load_config(path: Path) -> Config:
    """
    Load a YAML config file.

    Expected format:

        owner: my-org
        repo: my-repo
        token: ghp_...           # optional, else GITHUB_TOKEN
        secrets:
          API_KEY: literal-value
          SSH_KEY: file(keys/deploy_key)

    Raises:
        ConfigError: If the file cannot be read or is not a valid config
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must be a mapping")

    raw_secrets = data.get("secrets") or {}
    if not isinstance(raw_secrets, dict):
        raise ConfigError(f"'secrets' in {path} must be a mapping of name to value")

    cfg = Config(
        owner=_as_str(data.get("owner")),
        repo=_as_str(data.get("repo")),
        token=_as_str(data.get("token")),
        secrets={str(name): _as_str(value) for name, value in raw_secrets.items()},
        secret=_as_str(data.get("secret")),
        value=_as_str(data.get("value")),
    )
    logger.debug(f"Loaded config from {path} ({len(cfg.secrets)} secrets)")
    return normalize_legacy(cfg)


def build_config(
    config_path: Optional[Path] = None,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    token: Optional[str] = None,
    secret: Optional[str] = None,
    value: Optional[str] = None,
) -> Config:
    """
    Merge the config file with command-line flags and validate the result.

    Flags take precedence over the file. The ``secret``/``value`` flag pair is
    added to the file's secrets, overwriting an entry with the same name.

    Raises:
        ConfigError: On any missing or inconsistent setting
    """
    cfg = load_config(config_path) if config_path else Config()

    if owner:
        cfg.owner = owner
    if repo:
        cfg.repo = repo
    if token:
        cfg.token = token

    if secret and value:
        cfg.secrets[secret] = value
    elif secret or value:
        raise ConfigError("Both --secret and --value must be provided when using CLI flags")

    if not cfg.owner or not cfg.repo:
        raise ConfigError("Missing required values: owner, repo")
    if not cfg.secrets:
        raise ConfigError("No secrets to set. Use --secret/--value flags or 'secrets' in config file")

    cfg.token = get_token(cfg)
    if not cfg.token:
        raise ConfigError(f"GitHub token not provided via flag, config, or {TOKEN_ENV_VAR} env var")

    return cfg
