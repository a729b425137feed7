"""
gh-repo-secrets - set encrypted GitHub Actions secrets from the command line.

Values are sealed client-side with the repository's public key, so the
plaintext never leaves your machine.

Features:
- secrets: Set many secrets at once from a YAML config
- file(): Read a secret value from a file instead of the command line
- secret/value: Set a single secret straight from flags

Requires: a GitHub token with permission to write repository secrets
"""

__version__ = "0.1.0"
