"""Jira Cloud client (REST API v3, basic auth with email + API token).

Used for three things: replying to the submitter's ticket, moving the ticket
to "Processed" / "Needs Review", and pulling new advisory agreement tickets
with their PDF attachments.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from advisory_api.core.exceptions import IntegrationError
from advisory_api.schemas.integrations import JiraAttachment, JiraTicket, TicketReply
from advisory_api.services.integrations.base import (
    HTTPIntegration,
    JiraConfig,
    OfflineIntegration,
    path_segment,
)

logger = logging.getLogger(__name__)

_ISSUE_FIELDS = "summary,status,attachment,reporter"


def to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in an Atlassian Document Format doc, one paragraph per line."""
    paragraphs = []
    for line in text.split("\n"):
        content = [{"type": "text", "text": line}] if line else []
        paragraphs.append({"type": "paragraph", "content": content})
    return {"type": "doc", "version": 1, "content": paragraphs}


def parse_issue(issue: dict[str, Any]) -> JiraTicket:
    fields = issue.get("fields") or {}
    reporter = fields.get("reporter") or {}
    attachments = [
        JiraAttachment(
            id=str(a["id"]),
            filename=a.get("filename", ""),
            mime_type=a.get("mimeType", "application/octet-stream"),
            size=a.get("size", 0),
            content_url=a.get("content"),
        )
        for a in fields.get("attachment") or []
        if "id" in a
    ]
    return JiraTicket(
        id=str(issue.get("id", "")),
        key=issue.get("key", ""),
        summary=fields.get("summary") or "",
        status=(fields.get("status") or {}).get("name", ""),
        reporter=reporter.get("displayName"),
        attachments=attachments,
    )


class JiraClient(HTTPIntegration):
    service_name = "Jira"

    def __init__(
        self,
        config: JiraConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client = httpx.AsyncClient(
            base_url=config.base_url,
            auth=httpx.BasicAuth(config.user_email, config.api_token),
            headers={"Accept": "application/json"},
            timeout=config.timeout,
            transport=transport,
        )
        super().__init__(client, config.retry)
        self._config = config

    def _raise_for_status(self, response: httpx.Response, what: str) -> None:
        if response.is_error:
            raise IntegrationError(
                self.service_name, f"{what} returned {response.status_code}: {response.text[:200]}",
            )

    async def reply_to_ticket(self, ticket_id: str, text: str) -> TicketReply:
        response = await self._request(
            "POST",
            f"/rest/api/3/issue/{path_segment(ticket_id)}/comment",
            json={"body": to_adf(text)},
        )
        if response.is_error:
            logger.warning(
                "Jira comment on %s failed (%d): %s",
                ticket_id, response.status_code, response.text[:200],
            )
            return TicketReply(success=False)
        try:
            comment_id = str(self._json(response, "comment").get("id", ""))
        except IntegrationError as exc:
            # the comment exists; only its id is unknown
            logger.warning("Jira comment on %s posted, response unreadable: %s", ticket_id, exc.message)
            comment_id = ""
        logger.info("Replied to Jira ticket %s (comment %s)", ticket_id, comment_id)
        return TicketReply(success=True, comment_id=comment_id or None)

    async def transition_ticket(self, ticket_id: str, transition_name: str) -> bool:
        """Move *ticket_id* through the transition called *transition_name*.

        Jira only accepts transition ids, so the available transitions are
        listed first and matched by name (or by target status name).
        """
        path = f"/rest/api/3/issue/{path_segment(ticket_id)}/transitions"
        response = await self._request("GET", path)
        self._raise_for_status(response, "transition lookup")

        wanted = transition_name.lower()
        transition_id = None
        for transition in self._json(response, "transition lookup").get("transitions") or []:
            target = (transition.get("to") or {}).get("name", "")
            if transition.get("name", "").lower() == wanted or target.lower() == wanted:
                transition_id = transition.get("id")
                break

        if transition_id is None:
            logger.warning(
                "Jira ticket %s has no transition named %r", ticket_id, transition_name,
            )
            return False

        response = await self._request(
            "POST",
            path,
            json={"transition": {"id": transition_id}},
        )
        if response.is_error:
            logger.warning(
                "Jira transition %s -> %s failed (%d)",
                ticket_id, transition_name, response.status_code,
            )
            return False
        logger.info("Jira ticket %s -> %s", ticket_id, transition_name)
        return True

    async def fetch_new_advisory_tickets(self) -> list[JiraTicket]:
        jql = (
            f'project = {self._config.project_key} '
            f'AND status = "{self._config.new_status}" '
            f'AND attachments IS NOT EMPTY ORDER BY created ASC'
        )
        response = await self._request(
            "GET",
            "/rest/api/3/search",
            params={"jql": jql, "fields": _ISSUE_FIELDS, "maxResults": 50},
        )
        self._raise_for_status(response, "ticket search")
        issues = self._json(response, "ticket search").get("issues") or []
        tickets = [parse_issue(issue) for issue in issues]
        logger.info("Found %d new advisory ticket(s)", len(tickets))
        return tickets

    async def get_ticket_details(self, ticket_id: str) -> JiraTicket | None:
        response = await self._request(
            "GET",
            f"/rest/api/3/issue/{path_segment(ticket_id)}",
            params={"fields": _ISSUE_FIELDS},
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "ticket lookup")
        return parse_issue(self._json(response, "ticket lookup"))

    async def download_attachment(self, attachment: JiraAttachment) -> bytes | None:
        url = (
            attachment.content_url
            or f"/rest/api/3/attachment/content/{path_segment(attachment.id)}"
        )
        response = await self._request("GET", url, follow_redirects=True)
        if response.status_code == 404:
            logger.warning("Jira attachment %s (%s) is gone", attachment.id, attachment.filename)
            return None
        self._raise_for_status(response, "attachment download")
        return response.content


class OfflineJiraClient(OfflineIntegration):
    """Used when Jira credentials are not set: logs replies and reports success."""

    async def reply_to_ticket(self, ticket_id: str, text: str) -> TicketReply:
        logger.info("[jira offline] reply to %s:\n%s", ticket_id, text)
        return TicketReply(success=True, comment_id=f"stub-comment-{int(time.time() * 1000)}")

    async def transition_ticket(self, ticket_id: str, transition_name: str) -> bool:
        logger.info("[jira offline] transition %s -> %s", ticket_id, transition_name)
        return True

    async def fetch_new_advisory_tickets(self) -> list[JiraTicket]:
        logger.info("[jira offline] fetch_new_advisory_tickets")
        return []

    async def get_ticket_details(self, ticket_id: str) -> JiraTicket | None:
        return None

    async def download_attachment(self, attachment: JiraAttachment) -> bytes | None:
        return None
