"""Emailable API client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from requests import Response, Session

from .config import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT, ClientConfig
from .errors import BatchSizeError, DecodeError, UpstreamBusyError, UpstreamError
from .logging_utils import get_logger
from .models import (
    BatchRequest,
    BatchResponse,
    BatchStatusRequest,
    BatchStatusResponse,
    VerifyRequest,
    VerifyResponse,
)
from .session import make_session
from .validation import MAX_BATCH_SIZE, MIN_VERIFY_TIMEOUT

HTTP_OK = 200
HTTP_STILL_PROCESSING = 249


def _decode_json(response: Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"response body is not valid JSON: {exc}") from exc


class EmailableClient:
    """Synchronous wrapper around the Emailable verify and batch endpoints.

    The client owns one credential and sends it with every request. Network
    errors raised by requests propagate unchanged.
    """

    def __init__(
        self,
        *,
        session: Session,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = logger or get_logger()
        self._owns_session = False

    @classmethod
    def from_config(
        cls, config: ClientConfig, *, logger: logging.Logger | None = None
    ) -> EmailableClient:
        """Build a client with its own session from validated configuration."""
        client = cls(
            session=make_session(config.user_agent),
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout,
            logger=logger,
        )
        client._owns_session = True
        return client

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> EmailableClient:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def new_verify_request(self, email: str) -> VerifyRequest:
        return VerifyRequest(
            email=email,
            smtp=False,
            accept_all=False,
            timeout=MIN_VERIFY_TIMEOUT,
            api_key=self._api_key,
        )

    def new_batch_request(self, emails: Sequence[str]) -> BatchRequest:
        return BatchRequest(
            emails=tuple(emails), url=None, retries=False, simulate=None, api_key=self._api_key
        )

    def new_batch_status_request(self, batch_id: str) -> BatchStatusRequest:
        return BatchStatusRequest(id=batch_id, partial=False, simulate=None, api_key=self._api_key)

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        """Verify one address.

        Raises UpstreamBusyError on HTTP 249, UpstreamError on any other
        non-200 status and DecodeError when the body cannot be decoded.
        """
        params = request.to_params(self._api_key)
        self._logger.debug("Verifying %s (timeout=%s)", request.email, params["timeout"])
        response = self._session.get(
            f"{self._base_url}/verify", params=params, timeout=self._timeout
        )
        if response.status_code == HTTP_STILL_PROCESSING:
            self._logger.debug("Verification of %s still processing", request.email)
            raise UpstreamBusyError(response.text)
        if response.status_code != HTTP_OK:
            raise UpstreamError(response.status_code, response.text)
        return VerifyResponse.from_dict(_decode_json(response))

    def batch_verify(self, request: BatchRequest) -> BatchResponse:
        """Submit up to 1000 addresses for asynchronous verification."""
        if len(request.emails) > MAX_BATCH_SIZE:
            raise BatchSizeError(
                f"batch holds {len(request.emails)} emails, at most {MAX_BATCH_SIZE} are accepted"
            )
        payload = request.to_dict()
        payload["api_key"] = self._api_key
        self._logger.debug("Submitting batch of %d emails", len(request.emails))
        response = self._session.post(
            f"{self._base_url}/batch", json=payload, timeout=self._timeout
        )
        if response.status_code != HTTP_OK:
            raise UpstreamError(response.status_code, response.text)
        return BatchResponse.from_dict(_decode_json(response))

    def batch_status(self, request: BatchStatusRequest) -> BatchStatusResponse:
        """Fetch the progress of a batch; the body is decoded whatever the status."""
        response = self._session.get(
            f"{self._base_url}/batch",
            params=request.to_params(self._api_key),
            timeout=self._timeout,
        )
        try:
            return BatchStatusResponse.from_dict(_decode_json(response))
        except DecodeError:
            if response.status_code != HTTP_OK:
                raise UpstreamError(response.status_code, response.text) from None
            raise
