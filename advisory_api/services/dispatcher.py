"""The "Push" workflow for an analyzed advisory agreement.

  IGO   — confirm the account exists in Orion, push the data, then reply to the
          Jira ticket and transition it to "Processed".
  NIGO  — never touch Orion; reply to the Jira ticket with the missing fields
          and transition it to "Needs Review".

Calls run strictly in that order and the first ledger failure ends the push,
so Orion is only ever written after its account check succeeded. Failures are
returned as a ``PushResult`` with ``action="error"``; nothing is raised.

Jira reply / transition results are passed through without being checked:
a failed transition after a successful reply is not compensated.
"""


import logging

from advisory_api.core.exceptions import IntegrationError
from advisory_api.schemas.advisory import AdvisoryRecord, DocumentHandle, PushResult
from advisory_api.services.formatter import format_igo_response, format_nigo_response
from advisory_api.services.integrations.base import LedgerClient, TicketClient
from advisory_api.services.validator import get_validation_errors

logger = logging.getLogger(__name__)

IGO_TRANSITION = "Processed"
NIGO_TRANSITION = "Needs Review"

NOT_ANALYZED_ERROR = "Document has not been analyzed yet"


def _error(message: str) -> PushResult:
    return PushResult(success=False, action="error", errors=[message])


async def _notify(tickets: TicketClient, ticket_id: str, message: str, transition: str) -> str | None:
    """Reply to *ticket_id*, then transition it. Returns the comment id."""
    try:
        reply = await tickets.reply_to_ticket(ticket_id, message)
    except IntegrationError as exc:
        logger.warning("Jira reply to %s failed: %s", ticket_id, exc.message)
        return None
    try:
        await tickets.transition_ticket(ticket_id, transition)
    except IntegrationError as exc:
        logger.warning("Jira transition of %s failed: %s", ticket_id, exc.message)
    return reply.comment_id


async def _push_igo(
    document: DocumentHandle,
    record: AdvisoryRecord,
    ledger: LedgerClient,
    tickets: TicketClient,
) -> PushResult:
    account_number = record.account_number

    try:
        check = await ledger.validate_account(account_number)
        if not check.exists:
            logger.info("Push of %s stopped: account %s not in Orion", document.id, account_number)
            return _error(f"Account {account_number} not found in Orion")

        outcome = await ledger.push_advisory_data(account_number, record)
    except IntegrationError as exc:
        logger.error("Orion call failed for document %s: %s", document.id, exc.message)
        return _error(exc.message)

    if not outcome.success:
        return _error(outcome.message)

    if not document.jira_ticket_id:
        return PushResult(success=True, action="pushed", orion_updated=True)

    comment_id = await _notify(
        tickets, document.jira_ticket_id, format_igo_response(record), IGO_TRANSITION,
    )
    return PushResult(
        success=True, action="pushed", jira_comment_id=comment_id, orion_updated=True,
    )


async def _reply_nigo(
    document: DocumentHandle, errors: list[str], tickets: TicketClient,
) -> PushResult:
    if not document.jira_ticket_id:
        return PushResult(
            success=True, action="nigo-replied", orion_updated=False, errors=errors,
        )

    comment_id = await _notify(
        tickets, document.jira_ticket_id, format_nigo_response(errors), NIGO_TRANSITION,
    )
    return PushResult(
        success=True,
        action="nigo-replied",
        jira_comment_id=comment_id,
        orion_updated=False,
        errors=errors,
    )


async def push(
    document: DocumentHandle,
    *,
    ledger: LedgerClient,
    tickets: TicketClient,
    treat_false_as_missing: bool = True,
) -> PushResult:
    """Run the IGO / NIGO push for *document* and report what happened."""
    record = document.data
    if record is None:
        return _error(NOT_ANALYZED_ERROR)

    errors = get_validation_errors(record, treat_false_as_missing=treat_false_as_missing)
    if not errors:
        result = await _push_igo(document, record, ledger, tickets)
    else:
        result = await _reply_nigo(document, errors, tickets)

    logger.info(
        "Push of document %s (ticket=%s): action=%s success=%s",
        document.id, document.jira_ticket_id, result.action, result.success,
    )
    return result
