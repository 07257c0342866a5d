"""Contracts and configuration for the Orion ledger and Jira ticketing clients.

The push workflow depends only on :class:`LedgerClient` and
:class:`TicketClient`; tests pass fakes, production passes the HTTP clients
built by :mod:`advisory_api.services.integrations`.
"""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from advisory_api.core.config import Settings
from advisory_api.core.exceptions import IntegrationError
from advisory_api.schemas.advisory import AdvisoryRecord
from advisory_api.schemas.integrations import (
    AccountCheck,
    JiraAttachment,
    JiraTicket,
    LedgerPushResult,
    TicketReply,
)


class LedgerClient(Protocol):
    async def validate_account(self, account_number: str) -> AccountCheck: ...

    async def push_advisory_data(
        self, account_number: str, record: AdvisoryRecord,
    ) -> LedgerPushResult: ...

    async def get_account_details(self, account_number: str) -> dict[str, Any] | None: ...


class TicketClient(Protocol):
    async def reply_to_ticket(self, ticket_id: str, text: str) -> TicketReply: ...

    async def transition_ticket(self, ticket_id: str, transition_name: str) -> bool: ...

    async def fetch_new_advisory_tickets(self) -> list[JiraTicket]: ...

    async def get_ticket_details(self, ticket_id: str) -> JiraTicket | None: ...

    async def download_attachment(self, attachment: JiraAttachment) -> bytes | None: ...


def path_segment(value: str) -> str:
    """Percent-encode *value* for use as one URL path segment ('/', '#', '?' included)."""
    return quote(str(value), safe="")


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------

class RetryPolicy(BaseModel):
    """How often a failed outbound call is retried.

    Only transport failures (connection refused, timeouts) are retried; an HTTP
    response of any status is final. ``max_attempts=1`` disables retrying.
    """

    max_attempts: int = 1
    wait_seconds: float = 1.0

    model_config = {"frozen": True}

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.wait_seconds, max=self.wait_seconds * 8),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.integration_max_attempts,
            wait_seconds=settings.integration_retry_wait,
        )


# ---------------------------------------------------------------------------
# Explicit client configuration (built once from Settings at startup)
# ---------------------------------------------------------------------------

class OrionConfig(BaseModel):
    base_url: str
    api_key: str
    timeout: float = 30.0
    retry: RetryPolicy = RetryPolicy()

    @classmethod
    def from_settings(cls, settings: Settings) -> OrionConfig:
        return cls(
            base_url=settings.orion_api_url,
            api_key=settings.orion_api_key or "",
            timeout=settings.orion_timeout,
            retry=RetryPolicy.from_settings(settings),
        )


class JiraConfig(BaseModel):
    base_url: str
    user_email: str
    api_token: str
    project_key: str = "ADV"
    new_status: str = "New"
    timeout: float = 30.0
    retry: RetryPolicy = RetryPolicy()

    @classmethod
    def from_settings(cls, settings: Settings) -> JiraConfig:
        return cls(
            base_url=settings.jira_base_url,
            user_email=settings.jira_user_email or "",
            api_token=settings.jira_api_token or "",
            project_key=settings.jira_project_key,
            new_status=settings.jira_new_status,
            timeout=settings.jira_timeout,
            retry=RetryPolicy.from_settings(settings),
        )


class HTTPIntegration:
    """Shared httpx plumbing: one AsyncClient per instance, retried requests."""

    service_name = "integration"

    def __init__(
        self,
        client: httpx.AsyncClient,
        retry: RetryPolicy,
    ) -> None:
        self._client = client
        self._retry = retry

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async for attempt in self._retry.retrying():
                with attempt:
                    response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise IntegrationError(self.service_name, f"{method} {url} failed: {exc}") from exc
        return response

    def _json(self, response: httpx.Response, what: str) -> dict[str, Any]:
        """Decode a JSON object body; anything else is an IntegrationError."""
        try:
            body = response.json()
        except ValueError as exc:
            raise IntegrationError(
                self.service_name, f"{what} returned a non-JSON body: {response.text[:200]!r}",
            ) from exc
        if not isinstance(body, dict):
            raise IntegrationError(self.service_name, f"{what} returned unexpected JSON: {body!r}")
        return body

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class OfflineIntegration:
    """Base for the offline stand-ins used when credentials are not configured."""

    async def aclose(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None
