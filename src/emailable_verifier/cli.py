"""CLI entrypoint for emailable-verifier."""

from __future__ import annotations

import argparse
import json
import logging
import os
from collections.abc import Sequence
from dataclasses import replace

from requests.exceptions import RequestException

from .batching import batch_from_file
from .client import EmailableClient
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    ClientConfig,
)
from .errors import ConfigError, EmailableError, UpstreamBusyError
from .io_csv import write_rows
from .logging_utils import configure_logging, get_logger
from .models import VerifyRequest
from .validation import MIN_VERIFY_TIMEOUT


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Emailable client - verify addresses, submit batches and poll batch status."
    )
    parser.add_argument("--api-key", help="Emailable key (or set EMAILABLE_API_KEY env var).")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL.")
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="HTTP timeout in seconds for each API call.",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    verify = commands.add_parser("verify", help="Verify a single address.")
    verify.add_argument("email", help="Address to verify.")
    verify.add_argument("--smtp", action="store_true", help="Run the SMTP step.")
    verify.add_argument("--accept-all", action="store_true", help="Run the accept-all check.")
    verify.add_argument(
        "--timeout",
        type=int,
        default=MIN_VERIFY_TIMEOUT,
        help="Seconds the API may spend verifying (clamped to 5-30).",
    )

    batch = commands.add_parser("batch", help="Submit addresses from a file, one per line.")
    batch.add_argument("file", help="Path to a UTF-8 text file of addresses.")
    batch.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="Addresses per submitted batch.",
    )
    batch.add_argument(
        "--lenient",
        action="store_true",
        help="Keep already submitted batches when the last submission fails.",
    )

    status = commands.add_parser("status", help="Show the status of a batch.")
    status.add_argument("batch_id", help="Batch id returned on submission.")
    status.add_argument("--partial", action="store_true", help="Include partial results.")
    status.add_argument("--output", help="Write per-email results to this CSV path.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI input."""
    return build_parser().parse_args(argv)


def namespace_to_config(args: argparse.Namespace) -> ClientConfig:
    """Convert CLI args to validated ClientConfig."""
    return ClientConfig(
        api_key=args.api_key or os.getenv("EMAILABLE_API_KEY", ""),
        base_url=args.base_url,
        request_timeout=args.request_timeout,
        chunk_size=getattr(args, "chunk_size", DEFAULT_CHUNK_SIZE),
        show_progress=not args.no_progress,
    )


def make_client(config: ClientConfig, logger: logging.Logger) -> EmailableClient:
    return EmailableClient.from_config(config, logger=logger)


def _run_verify(
    client: EmailableClient, args: argparse.Namespace, _config: ClientConfig
) -> int:
    request = VerifyRequest(
        email=args.email, smtp=args.smtp, accept_all=args.accept_all, timeout=args.timeout
    )
    response = client.verify(request)
    print(json.dumps(response.to_dict(), indent=2))
    return 0


def _run_batch(client: EmailableClient, args: argparse.Namespace, config: ClientConfig) -> int:
    responses = batch_from_file(
        client,
        args.file,
        chunk_size=config.chunk_size,
        strict=not args.lenient,
        show_progress=config.show_progress,
    )
    for response in responses:
        print(f"{response.id}\t{response.message}")
    get_logger().info("Submitted %d batches", len(responses))
    return 0


def _run_status(client: EmailableClient, args: argparse.Namespace, _config: ClientConfig) -> int:
    request = client.new_batch_status_request(args.batch_id)
    if args.partial:
        request = replace(request, partial=True)
    status = client.batch_status(request)
    summary = status.to_dict()
    summary.pop("emails")
    print(json.dumps(summary, indent=2))
    if args.output:
        count = write_rows(args.output, status.emails)
        get_logger().info("Wrote %d results to %s", count, args.output)
    return 0


COMMANDS = {
    "verify": _run_verify,
    "batch": _run_batch,
    "status": _run_status,
}


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    with make_client(config, logger) as client:
        try:
            return COMMANDS[args.command](client, args, config)
        except UpstreamBusyError:
            logger.error("The API is still processing this request; send it again later.")
            return 1
        except (EmailableError, RequestException, OSError) as exc:
            logger.error("%s failed: %s", args.command, exc)
            return 1


if __name__ == "__main__":
    raise SystemExit(main())
