"""Outcome reporting for schema verification.

Verification and notification meet only at ``OutcomeReporter.report``: the
gate hands each reporter the ``VerificationResult`` and moves on. Reporters
must not raise for delivery problems; a failed notification never changes
whether the service may start.

The webhook payload is a small JSON object:

    {"result": "SCHEMA_MISMATCH", "webhookId": "collector-7",
     "message": "Schema mismatch - missing tables: TraceV2"}

``message`` is left out entirely (not ``null``) when there is none.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional, Protocol, runtime_checkable

import requests
from pydantic import BaseModel, ConfigDict, Field

from schemagate.lib.resilience import with_retry
from schemagate.lib.verifier import VerificationResult

logger = logging.getLogger(__name__)

__all__ = [
    "OutcomeReporter",
    "ValidationResultCode",
    "WebhookReporter",
    "WebhookResponse",
]


class ValidationResultCode(str, Enum):
    """Result codes carried in the ``result`` field."""

    SUCCESS = "SUCCESS"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"


class WebhookResponse(BaseModel):
    """Notification payload describing a validation outcome."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    result: str = Field(..., description="SUCCESS or a failure code")
    webhook_id: str = Field(..., alias="webhookId", description="Opaque correlation identifier")
    message: Optional[str] = Field(default=None, description="Optional detail; omitted when absent")

    @classmethod
    def from_result(cls, result: VerificationResult, webhook_id: str) -> "WebhookResponse":
        """Build the payload for a verification result."""
        if result.compatible:
            return cls(result=ValidationResultCode.SUCCESS.value, webhook_id=webhook_id)
        return cls(
            result=ValidationResultCode.SCHEMA_MISMATCH.value,
            webhook_id=webhook_id,
            message=result.summary(),
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


@runtime_checkable
class OutcomeReporter(Protocol):
    """Receives the result of one verification."""

    def report(self, result: VerificationResult) -> None:
        ...


class WebhookReporter:
    """POSTs a ``WebhookResponse`` to each configured URL.

    Transient request errors are retried with backoff; anything still failing
    is logged as a warning and dropped. A session passed in stays open on
    ``close()``; one created here is closed with the reporter.
    """

    def __init__(
        self,
        urls: Iterable[str],
        webhook_id: str,
        *,
        timeout: float = 5.0,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.urls: List[str] = [url for url in urls if url]
        self.webhook_id = webhook_id
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._owns_session = session is None
        self._session = requests.Session() if session is None else session

    def close(self) -> None:
        """Close the HTTP session if this reporter created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "WebhookReporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def report(self, result: VerificationResult) -> None:
        if not self.urls:
            return

        payload = WebhookResponse.from_result(result, self.webhook_id)
        for url in self.urls:
            self.send(url, payload)

    def send(self, url: str, payload: WebhookResponse) -> bool:
        """Deliver one payload; returns whether the POST succeeded."""

        @with_retry(
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
            retry_exceptions=(requests.ConnectionError, requests.Timeout),
        )
        def _post() -> requests.Response:
            response = self._session.post(
                url,
                data=payload.to_json().encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response

        try:
            _post()
        except requests.RequestException as exc:
            logger.warning("Webhook POST failed for %s: %s", url, exc)
            return False

        logger.debug("Webhook POST succeeded for %s (result=%s)", url, payload.result)
        return True
