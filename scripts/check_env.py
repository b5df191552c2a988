"""Verify the Google OAuth configuration needed by the Drive session layer.

The tool performs two main checks:

1. It loads the given ``.env`` file, reports any required Google variables
   that are missing, then instantiates ``AppSettings`` so malformed values
   (for example a redirect URI that is not a URL) surface before the
   service runs.
2. It can record and verify a checksum for the ``.env`` file so unexpected
   edits to the OAuth client configuration are detected.

Example usages::

    # Validate settings and record the expected checksum.
    python -m scripts.check_env record --env-file /opt/docbridge/.env \
        --hash-file /opt/docbridge/.env.sha256

    # Run later to alert on drift.
    python -m scripts.check_env verify --env-file /opt/docbridge/.env \
        --hash-file /opt/docbridge/.env.sha256

    # Validate only.
    python -m scripts.check_env check --env-file /opt/docbridge/.env
"""

from __future__ import annotations

import argparse
import hashlib
import os
import sys
from pathlib import Path
from typing import Callable, Mapping

from pydantic import ValidationError

from docbridge.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_MISSING_VARIABLES = 2
EXIT_VALIDATION_ERROR = 3
EXIT_CHECKSUM_ERROR = 4
EXIT_RUNTIME_ERROR = 5

REQUIRED_VARIABLES = (
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_REDIRECT_URI",
)


def missing_variables(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the required variables absent or empty in ``environ``."""
    source = os.environ if environ is None else environ
    return [name for name in REQUIRED_VARIABLES if not source.get(name)]


def _compute_hash(env_file: Path) -> str:
    """Return the SHA256 checksum of the environment file."""
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _validate_settings(env_file: Path) -> int:
    """Load ``env_file`` and confirm the Google settings are usable."""
    _load_env_file(str(env_file))
    missing = missing_variables()
    if missing:
        print(
            f"Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        return EXIT_MISSING_VARIABLES

    try:
        settings = AppSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        print(
            "Settings validation failed. Invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    print(f"Redirect URI: {settings.google.redirect_uri}")
    print(f"Client ID configured: {bool(settings.google.client_id)}")
    print(f"Client Secret configured: {bool(settings.google.client_secret)}")
    return EXIT_OK


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    """Compare the env file against the recorded baseline."""
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "Google OAuth settings changed since the baseline was recorded.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate Google OAuth settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text, needs_hash in (
        ("record", "Validate settings and store the checksum baseline.", True),
        ("verify", "Validate settings and compare with the checksum baseline.", True),
        ("check", "Validate settings without touching checksum files.", False),
    ):
        subparser = subparsers.add_parser(command, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )
        if needs_hash:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Location of the checksum baseline.",
            )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    status = _validate_settings(env_file)
    if status != EXIT_OK:
        return status

    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
