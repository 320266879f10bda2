"""
Main entry point for the LucyPOS exporter.

Usage:
    lucypos-exporter serve                      # Serve /metrics (default)
    lucypos-exporter encrypt PLAINTEXT          # Print a crypt:// token and exit
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from pydantic import ValidationError

from lucypos_exporter.config import Settings, get_settings
from lucypos_exporter.vault import VaultError, seal_secret

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Set specific loggers
    logging.getLogger("aiomysql").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lucypos-exporter",
        description="Expose LucyPOS backup freshness and sync health to Prometheus.",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Serve the metrics endpoint")
    serve_parser.add_argument("--host", help="Bind address (default: EXPORTER_API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: EXPORTER_API_PORT)")
    serve_parser.add_argument("--backup-dir", type=Path, help="Directory holding backup archives")

    encrypt_parser = subparsers.add_parser(
        "encrypt", help="Encrypt a database password for EXPORTER_DB_PASSWORD"
    )
    encrypt_parser.add_argument("plaintext", help="Password to encrypt")
    encrypt_parser.add_argument("--tenant", help="Tenant id (default: EXPORTER_TENANT_ID)")

    return parser


def cmd_encrypt(args: argparse.Namespace, settings: Settings) -> int:
    """Print the crypt:// token for a plaintext secret."""
    tenant_id = args.tenant or settings.tenant_id
    try:
        token = seal_secret(args.plaintext, tenant_id, settings.vault_passphrase)
    except VaultError as e:
        print(f"Cannot encrypt secret: {e}", file=sys.stderr)
        return 1
    print(token)
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Run the exporter HTTP server."""
    from lucypos_exporter.api.app import create_app

    overrides = {}
    if args.host:
        overrides["api_host"] = args.host
    if args.port:
        overrides["api_port"] = args.port
    if args.backup_dir:
        overrides["backup_dir"] = args.backup_dir
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        app = create_app(settings=settings)
    except VaultError as e:
        logger.critical(f"Cannot decrypt database password, refusing to start: {e}")
        return 1

    logger.info(f"Starting server on {settings.api_host}:{settings.api_port}{settings.metrics_path}")
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the LucyPOS exporter."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    if args.command == "encrypt":
        return cmd_encrypt(args, settings)

    setup_logging(settings.log_level)
    if args.command is None:
        args = build_parser().parse_args(["serve"])
    return cmd_serve(args, settings)


if __name__ == "__main__":
    sys.exit(main())
