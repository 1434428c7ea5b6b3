"""Chunk a stream of candidate addresses into batch submissions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from requests.exceptions import RequestException
from tqdm import tqdm

from .config import DEFAULT_CHUNK_SIZE
from .errors import ConfigError, EmailableError
from .logging_utils import get_logger
from .models import BatchResponse, EmailableClientProtocol
from .validation import MAX_BATCH_SIZE, is_valid_address


def _flush(
    client: EmailableClientProtocol, buffer: list[str], logger: logging.Logger
) -> BatchResponse:
    response = client.batch_verify(client.new_batch_request(buffer))
    logger.info("Submitted batch %s with %d emails", response.id, len(buffer))
    return response


def batch_from_stream(
    client: EmailableClientProtocol,
    stream: Iterable[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    strict: bool = True,
    show_progress: bool = False,
    logger: logging.Logger | None = None,
) -> list[BatchResponse]:
    """Submit every valid address read from stream, chunk_size addresses per batch.

    Lines that are not valid addresses are dropped. A failed flush while
    reading aborts the run. When strict is False a failure of the last flush
    is logged and the batches submitted so far are returned instead.
    """
    if not 1 <= chunk_size <= MAX_BATCH_SIZE:
        raise ConfigError(f"chunk_size must be between 1 and {MAX_BATCH_SIZE}.")
    logger = logger or get_logger()
    results: list[BatchResponse] = []
    buffer: list[str] = []
    dropped = 0

    lines = tqdm(stream, desc="reading emails", unit="line", disable=not show_progress)
    for raw in lines:
        if len(buffer) == chunk_size:
            results.append(_flush(client, buffer, logger))
            buffer = []
        email = raw.strip()
        if not email:
            continue
        if not is_valid_address(email):
            dropped += 1
            logger.debug("Dropping invalid address: %r", email)
            continue
        buffer.append(email)

    if buffer:
        try:
            results.append(_flush(client, buffer, logger))
        except (EmailableError, RequestException) as exc:
            if strict:
                raise
            logger.warning(
                "Final batch of %d emails failed, returning %d submitted batches: %s",
                len(buffer),
                len(results),
                exc,
            )
    if dropped:
        logger.info("Skipped %d invalid addresses", dropped)
    return results


def batch_from_file(
    client: EmailableClientProtocol, path: str | Path, **kwargs: Any
) -> list[BatchResponse]:
    """Read addresses from a UTF-8 text file, one per line, and submit them.

    Undecodable bytes are replaced, so the affected line fails validation and is dropped.
    """
    with Path(path).open(encoding="utf-8", errors="replace") as file_obj:
        return batch_from_stream(client, file_obj, **kwargs)
