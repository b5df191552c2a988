"""
Command-line entrypoint for pushing documents through the Drive session layer.

Example usages::

    # Upload a document and print its editable Google Docs copy.
    DRIVE_ACCESS_TOKEN=ya29... python -m docbridge.main convert \
        --user-id alice@example.com ./report.docx

    # Remove a previously converted copy.
    python -m docbridge.main delete --user-id alice@example.com \
        --access-token ya29... 1AbCdEf
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from pydantic import ValidationError

from docbridge.core.config import get_settings
from docbridge.core.errors import AuthenticationFailedError, DocBridgeError
from docbridge.core.logging import configure_logging
from docbridge.dependencies import get_drive_operations_service, get_session_registry
from docbridge.services import DriveOperationsService

EXIT_OK = 0
EXIT_AUTH_ERROR = 3
EXIT_OPERATION_ERROR = 4
EXIT_CONFIG_ERROR = 5


def create_service() -> DriveOperationsService:
    """Configure logging and return the shared operations service."""
    settings = get_settings()
    configure_logging(settings.log_level)
    return get_drive_operations_service()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Upload, convert and delete documents in Google Drive."
    )
    parser.add_argument("--user-id", required=True, help="Identity owning the Drive session.")
    parser.add_argument(
        "--access-token",
        default=os.environ.get("DRIVE_ACCESS_TOKEN"),
        help="Bearer access token (default: $DRIVE_ACCESS_TOKEN).",
    )
    parser.add_argument(
        "--refresh-token",
        default=os.environ.get("DRIVE_REFRESH_TOKEN"),
        help="Optional refresh token (default: $DRIVE_REFRESH_TOKEN).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload_parser = subparsers.add_parser("upload", help="Upload a local file as-is.")
    upload_parser.add_argument("path")
    upload_parser.add_argument("--mime-type", default=None)

    convert_parser = subparsers.add_parser(
        "convert", help="Upload a local file and create an editable Google Docs copy."
    )
    convert_parser.add_argument("path")
    convert_parser.add_argument("--mime-type", default=None)

    delete_parser = subparsers.add_parser("delete", help="Delete a Drive file by id.")
    delete_parser.add_argument("file_id")

    return parser


async def _run(service: DriveOperationsService, args: argparse.Namespace) -> dict:
    if args.command == "upload":
        remote = await service.upload_file(args.user_id, args.path, mime_type=args.mime_type)
        return remote.model_dump(by_alias=True)
    if args.command == "convert":
        remote = await service.upload_and_convert(args.user_id, args.path, mime_type=args.mime_type)
        return remote.model_dump(by_alias=True)
    deleted = await service.delete_file(args.user_id, args.file_id)
    return {"deleted": deleted, "id": args.file_id}


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        service = create_service()
    except ValidationError as exc:
        print(
            "Settings validation failed. Invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_CONFIG_ERROR

    try:
        get_session_registry().init_session(
            args.user_id,
            {"access_token": args.access_token, "refresh_token": args.refresh_token},
        )
        result = asyncio.run(_run(service, args))
    except AuthenticationFailedError as exc:
        print(f"Google Drive authentication failed: {exc}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    except DocBridgeError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_OPERATION_ERROR

    print(json.dumps(result, indent=2))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
