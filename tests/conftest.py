"""Shared fixtures. The environment is pinned before advisory_api is imported."""

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="advisory-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'api.db'}"
os.environ["DOCUMENTS_DIR"] = str(_TMP / "documents")
os.environ["GENERATED_DIR"] = str(_TMP / "generated")
os.environ["REFERENCE_DOCS_DIR"] = str(_TMP / "reference-docs")
for _key in ("OPENAI_API_KEY", "ORION_API_KEY", "JIRA_API_TOKEN", "JIRA_USER_EMAIL"):
    os.environ.pop(_key, None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from advisory_api.core.config import Settings  # noqa: E402
from advisory_api.db.base import Base  # noqa: E402
from advisory_api.schemas.advisory import AdvisoryRecord  # noqa: E402
from advisory_api.schemas.integrations import (  # noqa: E402
    AccountCheck,
    JiraTicket,
    LedgerPushResult,
    TicketReply,
)

import advisory_api.domain  # noqa: E402,F401


def make_record(**overrides) -> AdvisoryRecord:
    """A fully populated (IGO) record; keyword overrides use field names."""
    values = dict(
        discretionary=True,
        wrap=True,
        advisor_name="Daniel Clark",
        rep_code="R123",
        client_name="Mary Johnson",
        effective_date="01/15/2026",
        account_holders=1,
        adv_received_date="01/10/2026",
        client_signed_p11=True,
        client_name_p11="Mary Johnson",
        client_date_p11="01/12/2026",
        advisor_signed_p11=True,
        advisor_name_p11="Daniel Clark",
        advisor_date_p11="01/12/2026",
        account_number="12345678",
        fee_type="Flat",
        fee_amount="1.00%",
        client_signed_p14=True,
        client_name_p14="Mary Johnson",
        client_date_p14="01/12/2026",
        advisor_signed_p14=True,
        advisor_name_p14="Daniel Clark",
        advisor_date_p14="01/12/2026",
    )
    values.update(overrides)
    return AdvisoryRecord(**values)


class FakeLedger:
    """Records every call into a shared event list."""

    def __init__(self, events: list, *, exists: bool = True, push_ok: bool = True, error=None):
        self.events = events
        self.exists = exists
        self.push_ok = push_ok
        self.error = error

    async def validate_account(self, account_number):
        self.events.append(("validate_account", account_number))
        if self.error:
            raise self.error
        return AccountCheck(exists=self.exists, message="checked")

    async def push_advisory_data(self, account_number, record):
        self.events.append(("push_advisory_data", account_number))
        if self.push_ok:
            return LedgerPushResult(success=True, message="ok")
        return LedgerPushResult(success=False, message="Orion rejected the fee schedule")

    async def get_account_details(self, account_number):
        self.events.append(("get_account_details", account_number))
        return None


class FakeTickets:
    def __init__(self, events: list, *, tickets: list[JiraTicket] | None = None,
                 attachments: dict[str, bytes] | None = None, reply_error=None,
                 transition_error=None, transition_ok: bool = True):
        self.events = events
        self.tickets = tickets or []
        self.attachments = attachments or {}
        self.reply_error = reply_error
        self.transition_error = transition_error
        self.transition_ok = transition_ok

    async def reply_to_ticket(self, ticket_id, text):
        self.events.append(("reply_to_ticket", ticket_id, text))
        if self.reply_error:
            raise self.reply_error
        return TicketReply(success=True, comment_id="10001")

    async def transition_ticket(self, ticket_id, transition_name):
        self.events.append(("transition_ticket", ticket_id, transition_name))
        if self.transition_error:
            raise self.transition_error
        return self.transition_ok

    async def fetch_new_advisory_tickets(self):
        self.events.append(("fetch_new_advisory_tickets",))
        return self.tickets

    async def get_ticket_details(self, ticket_id):
        return next((t for t in self.tickets if t.key == ticket_id), None)

    async def download_attachment(self, attachment):
        self.events.append(("download_attachment", attachment.id))
        return self.attachments.get(attachment.id)


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        documents_dir=tmp_path / "documents",
        reference_docs_dir=tmp_path / "reference-docs",
        generated_dir=tmp_path / "generated",
        openai_api_key=None,
        orion_api_key=None,
        jira_api_token=None,
    )


@pytest_asyncio.fixture
async def db_session(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'svc.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session
        await session.commit()
    await engine.dispose()
