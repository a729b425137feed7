"""CLI for gh-repo-secrets - set encrypted GitHub Actions secrets."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .batch import requests_from_mapping, run_batch
from .config import ConfigError, build_config, get_api_url
from .github import GitHubAPIError, GitHubClient

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )
    # Keep urllib3 quiet under --verbose
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def cmd_set(args) -> int:
    """Set every configured secret on the repository."""
    try:
        cfg = build_config(
            config_path=args.config,
            owner=args.owner,
            repo=args.repo,
            token=args.token,
            secret=args.secret,
            value=args.value,
        )
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        return 1

    client = GitHubClient(cfg.token, api_url=get_api_url())

    try:
        key = client.get_repo_public_key(cfg.owner, cfg.repo)
    except GitHubAPIError as e:
        err_console.print(f"[red]Error:[/red] Failed to get public key: {e}", highlight=False)
        return 1
    logger.debug(f"Using public key {key.key_id} for {cfg.owner}/{cfg.repo}")

    result = run_batch(
        requests_from_mapping(cfg.secrets),
        key,
        lambda secret: client.create_or_update_repo_secret(cfg.owner, cfg.repo, secret),
        console=console,
    )

    if result.all_succeeded:
        console.print(f"All {result.succeeded} secrets set successfully!", highlight=False)
    else:
        console.print(
            f"[yellow]Warning:[/yellow] {result.succeeded} of {result.total} secrets set successfully",
            highlight=False,
        )
    # Partial failure is reported, not turned into a failing exit status
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-repo-secrets",
        description="Set encrypted GitHub Actions secrets on a repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gh-repo-secrets --owner me --repo app --secret API_KEY --value s3cr3t
  gh-repo-secrets --config secrets.yaml
  gh-repo-secrets --config secrets.yaml --secret SSH_KEY --value 'file(keys/id_ed25519)'
  gh-repo-secrets --owner me --repo app --secret PASSWORD --value=-starts-with-dash

Config file (YAML):
  owner: me
  repo: app
  secrets:
    API_KEY: s3cr3t
    SSH_KEY: file(/path/to/key)

Values:
  file(PATH)   read the value from PATH (one trailing newline is dropped)
  anything     used literally

Environment:
  GITHUB_TOKEN     Token used when --token and config 'token' are not set
  GITHUB_API_URL   API base URL (default: https://api.github.com)
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", "-config", type=Path, help="Path to optional YAML config file")
    parser.add_argument("--owner", "-owner", help="GitHub repository owner")
    parser.add_argument("--repo", "-repo", help="GitHub repository name")
    parser.add_argument("--secret", "-secret", help="Name of the secret to set (for single secret)")
    parser.add_argument("--value", "-value", help="Value of the secret (for single secret)")
    parser.add_argument("--token", "-token",
                        help="GitHub personal access token (optional, can use GITHUB_TOKEN env var)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.config:
        args.config = Path(args.config).expanduser()

    setup_logging(args.verbose)
    return cmd_set(args)


if __name__ == "__main__":
    sys.exit(main())
