"""Orion and Jira integrations.

Files:
  base.py   — LedgerClient / TicketClient contracts, client config, retry policy
  orion.py  — Orion account API client (+ offline stand-in)
  jira.py   — Jira Cloud client (+ offline stand-in)

The factories below pick the real HTTP client when credentials are configured
and the offline stand-in otherwise.
"""

from advisory_api.core.config import Settings, settings as default_settings
from advisory_api.services.integrations.base import (
    JiraConfig,
    LedgerClient,
    OrionConfig,
    RetryPolicy,
    TicketClient,
)
from advisory_api.services.integrations.jira import JiraClient, OfflineJiraClient
from advisory_api.services.integrations.orion import OfflineOrionClient, OrionClient


def get_ledger_client(settings: Settings = default_settings) -> OrionClient | OfflineOrionClient:
    if settings.orion_enabled:
        return OrionClient(OrionConfig.from_settings(settings))
    return OfflineOrionClient()


def get_ticket_client(settings: Settings = default_settings) -> JiraClient | OfflineJiraClient:
    if settings.jira_enabled:
        return JiraClient(JiraConfig.from_settings(settings))
    return OfflineJiraClient()


__all__ = [
    "JiraClient",
    "JiraConfig",
    "LedgerClient",
    "OfflineJiraClient",
    "OfflineOrionClient",
    "OrionClient",
    "OrionConfig",
    "RetryPolicy",
    "TicketClient",
    "get_ledger_client",
    "get_ticket_client",
]
