"""Command-line front door for s3lens.

Parses CLI options, configures logging, resolves the starting backend and
prefix, then dispatches into the interactive runtime and saves the session.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from platformdirs import user_log_dir

from .backend import Backend, BackendError, create_backend_from_uri
from .backend.local import LocalBackend
from .runtime import config as config_module
from .runtime import run_app
from .runtime.session import SessionState, load_session, save_session

logger = logging.getLogger(__name__)

DEBUG_LOG_FILENAME = "debug.log"


def configure_logging(debug: bool) -> Path | None:
    """Send debug logs to a file under the user log dir, or silence logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL)
        return None
    log_dir = Path(user_log_dir("s3lens", appauthor=False))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / DEBUG_LOG_FILENAME
    logging.basicConfig(
        filename=str(log_path),
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    return log_path


def resolve_start(uri: str | None, local: str | None, session: SessionState) -> tuple[Backend, str]:
    """Pick the backend and prefix to open from the CLI arguments or the last session.

    Raises ``BackendError`` for bad locations and ``ValueError`` when there is
    nothing to open at all.
    """
    if local is not None:
        return LocalBackend(Path(local)), ""
    if uri is not None:
        if uri.startswith(("s3://", "local://")):
            return create_backend_from_uri(uri)
        return LocalBackend(Path(uri)), ""
    if session.last_location:
        logger.debug("reopening last location %s", session.last_location)
        return create_backend_from_uri(session.last_location)
    raise ValueError("No URI provided. Please specify an S3 URI or local path.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3lens",
        description="Browse S3 buckets and local directories in the terminal.",
    )
    parser.add_argument(
        "uri",
        nargs="?",
        default=None,
        help="s3://bucket/prefix or a local directory. Defaults to the last location.",
    )
    parser.add_argument("--local", metavar="PATH", default=None, help="Browse a local directory.")
    parser.add_argument("--style", default=None, help="Pygments style name for previews.")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to the user log directory.")
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a starter config file if none exists, then exit.",
    )
    return parser


def main() -> None:
    """Parse CLI arguments and launch the interactive explorer."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.debug)

    if args.init_config:
        path = config_module.CONFIG_PATH
        if path.exists():
            parser.exit(message=f"Config already exists: {path}\n")
        config_module.save_config(config_module.default_config_data())
        if not path.exists():
            parser.exit(1, f"Cannot write {path}\n")
        parser.exit(message=f"Wrote {path}\n")

    if args.uri is not None and args.local is not None:
        parser.error("Cannot combine a URI with --local.")

    session = load_session()
    try:
        backend, prefix = resolve_start(args.uri, args.local, session)
    except (BackendError, ValueError) as exc:
        parser.error(str(exc))

    config, config_error = config_module.load_config()
    if config_error is not None:
        print(f"Warning: Failed to load config, using defaults: {config_error}", file=sys.stderr)
    if args.style:
        config = dataclasses.replace(config, style=args.style)

    final_session = run_app(backend, prefix, config, session, config_error)
    save_session(final_session)
