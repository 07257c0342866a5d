"""Orion account ledger client.

Only IGO documents ever reach :meth:`OrionClient.push_advisory_data`, and only
after :meth:`OrionClient.validate_account` confirmed the account exists.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from advisory_api.core.exceptions import IntegrationError
from advisory_api.schemas.advisory import AdvisoryRecord
from advisory_api.schemas.integrations import (
    AccountCheck,
    LedgerPushResult,
    OrionAccountUpdate,
)
from advisory_api.services.integrations.base import (
    HTTPIntegration,
    OfflineIntegration,
    OrionConfig,
    path_segment,
)

logger = logging.getLogger(__name__)


def build_account_update(account_number: str, record: AdvisoryRecord) -> OrionAccountUpdate:
    return OrionAccountUpdate(
        account_number=account_number,
        discretionary=record.discretionary,
        wrap=record.wrap,
        client_name=record.client_name,
        effective_date=record.effective_date,
        fee_type=record.fee_type,
        fee_amount=record.fee_amount,
        advisor_name=record.advisor_name,
        rep_code=record.rep_code,
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class OrionClient(HTTPIntegration):
    """Async REST client for the Orion account API (bearer-token auth)."""

    service_name = "Orion"

    def __init__(
        self,
        config: OrionConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=config.timeout,
            transport=transport,
        )
        super().__init__(client, config.retry)

    async def validate_account(self, account_number: str) -> AccountCheck:
        response = await self._request("GET", f"/accounts/{path_segment(account_number)}")
        if response.status_code == 404:
            logger.info("Orion account %s not found", account_number)
            return AccountCheck(exists=False, message=f"Account {account_number} not found")
        if response.is_error:
            raise IntegrationError(
                self.service_name,
                f"account lookup returned {response.status_code}: {_error_detail(response)}",
            )
        return AccountCheck(exists=True, message=f"Account {account_number} found")

    async def push_advisory_data(
        self, account_number: str, record: AdvisoryRecord,
    ) -> LedgerPushResult:
        update = build_account_update(account_number, record)
        logger.info("Pushing advisory data to Orion account %s", account_number)
        response = await self._request(
            "PUT",
            f"/accounts/{path_segment(account_number)}/advisory",
            json=update.model_dump(by_alias=True),
        )
        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "Orion rejected update for %s (%d): %s",
                account_number, response.status_code, detail,
            )
            return LedgerPushResult(
                success=False,
                message=f"Orion rejected update for account {account_number}: {detail}",
            )
        return LedgerPushResult(
            success=True, message=f"Account {account_number} updated successfully",
        )

    async def get_account_details(self, account_number: str) -> dict[str, Any] | None:
        response = await self._request("GET", f"/accounts/{path_segment(account_number)}")
        if response.status_code == 404:
            return None
        if response.is_error:
            raise IntegrationError(
                self.service_name,
                f"account lookup returned {response.status_code}: {_error_detail(response)}",
            )
        return self._json(response, "account lookup")


class OfflineOrionClient(OfflineIntegration):
    """Used when ORION_API_KEY is not set: logs the update it would send and succeeds."""

    async def validate_account(self, account_number: str) -> AccountCheck:
        logger.info("[orion offline] validate_account %s", account_number)
        return AccountCheck(exists=True, message=f"Account {account_number} found (offline)")

    async def push_advisory_data(
        self, account_number: str, record: AdvisoryRecord,
    ) -> LedgerPushResult:
        update = build_account_update(account_number, record)
        logger.info(
            "[orion offline] would push update: %s",
            update.model_dump_json(by_alias=True),
        )
        return LedgerPushResult(
            success=True,
            message=f"Account {account_number} updated successfully (offline)",
        )

    async def get_account_details(self, account_number: str) -> dict[str, Any] | None:
        logger.info("[orion offline] get_account_details %s", account_number)
        return None
