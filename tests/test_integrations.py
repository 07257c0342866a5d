"""Tests for the Orion and Jira HTTP clients, served by httpx.MockTransport."""

import json

import httpx
import pytest

from advisory_api.core.config import Settings
from advisory_api.core.exceptions import IntegrationError
from advisory_api.schemas.advisory import DocumentHandle
from advisory_api.schemas.integrations import JiraAttachment
from advisory_api.services.dispatcher import push
from advisory_api.services.integrations import (
    JiraClient,
    JiraConfig,
    OfflineJiraClient,
    OfflineOrionClient,
    OrionClient,
    OrionConfig,
    RetryPolicy,
    get_ledger_client,
    get_ticket_client,
)
from advisory_api.services.integrations.jira import parse_issue, to_adf
from tests.conftest import make_record

ORION_URL = "https://orion.test/api/v1"
JIRA_URL = "https://acme.atlassian.test"


def _orion(handler, retry: RetryPolicy | None = None) -> OrionClient:
    config = OrionConfig(base_url=ORION_URL, api_key="orion-key", retry=retry or RetryPolicy())
    return OrionClient(config, transport=httpx.MockTransport(handler))


def _jira(handler) -> JiraClient:
    config = JiraConfig(base_url=JIRA_URL, user_email="ops@acme.test", api_token="token")
    return JiraClient(config, transport=httpx.MockTransport(handler))


class TestOrionClient:
    @pytest.mark.asyncio
    async def test_validate_account_found(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"accountNumber": "123"})

        async with _orion(handler) as client:
            check = await client.validate_account("123")

        assert check.exists is True
        assert seen[0].url == httpx.URL(f"{ORION_URL}/accounts/123")
        assert seen[0].headers["Authorization"] == "Bearer orion-key"

    @pytest.mark.asyncio
    async def test_validate_account_missing(self):
        async with _orion(lambda r: httpx.Response(404)) as client:
            check = await client.validate_account("123")
        assert check.exists is False

    @pytest.mark.asyncio
    async def test_validate_account_server_error_raises(self):
        async with _orion(lambda r: httpx.Response(503, text="down")) as client:
            with pytest.raises(IntegrationError) as exc_info:
                await client.validate_account("123")
        assert exc_info.value.service == "Orion"
        assert "503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_push_sends_camel_case_update(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert request.url.path == "/api/v1/accounts/12345678/advisory"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        record = make_record(account_number="12345678", fee_amount="1.25%")
        async with _orion(handler) as client:
            result = await client.push_advisory_data("12345678", record)

        assert result.success is True
        assert bodies[0]["accountNumber"] == "12345678"
        assert bodies[0]["feeAmount"] == "1.25%"
        assert bodies[0]["discretionary"] is True

    @pytest.mark.asyncio
    async def test_push_rejection_is_reported(self):
        handler = lambda r: httpx.Response(400, json={"message": "Invalid fee"})  # noqa: E731
        async with _orion(handler) as client:
            result = await client.push_advisory_data("1", make_record())

        assert result.success is False
        assert result.message == "Orion rejected update for account 1: Invalid fee"

    @pytest.mark.asyncio
    async def test_get_account_details(self):
        handler = lambda r: httpx.Response(200, json={"accountNumber": "1", "name": "Mary"})  # noqa: E731
        async with _orion(handler) as client:
            assert await client.get_account_details("1") == {"accountNumber": "1", "name": "Mary"}

    @pytest.mark.asyncio
    async def test_account_number_is_encoded_as_one_path_segment(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.raw_path))
            return httpx.Response(200, json={})

        async with _orion(handler) as client:
            await client.validate_account("ABC#1")
            await client.push_advisory_data("ABC#1", make_record(account_number="ABC#1"))
            await client.get_account_details("12/../34?x=1")

        assert seen == [
            ("GET", b"/api/v1/accounts/ABC%231"),
            ("PUT", b"/api/v1/accounts/ABC%231/advisory"),
            ("GET", b"/api/v1/accounts/12%2F..%2F34%3Fx%3D1"),
        ]

    @pytest.mark.asyncio
    async def test_account_details_with_non_json_body_raises(self):
        async with _orion(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(IntegrationError) as exc_info:
                await client.get_account_details("1")
        assert exc_info.value.service == "Orion"


class TestRetryPolicy:
    @pytest.mark.asyncio
    async def test_transport_errors_fail_fast_by_default(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        async with _orion(handler) as client:
            with pytest.raises(IntegrationError):
                await client.validate_account("1")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={})

        async with _orion(handler, RetryPolicy(max_attempts=3, wait_seconds=0)) as client:
            check = await client.validate_account("1")

        assert check.exists is True
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_http_error_status_is_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        async with _orion(handler, RetryPolicy(max_attempts=3, wait_seconds=0)) as client:
            with pytest.raises(IntegrationError):
                await client.validate_account("1")
        assert len(calls) == 1


class TestJiraClient:
    @pytest.mark.asyncio
    async def test_reply_posts_adf_comment(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/rest/api/3/issue/ADV-7/comment"
            assert request.headers["Authorization"].startswith("Basic ")
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": "10042"})

        async with _jira(handler) as client:
            reply = await client.reply_to_ticket("ADV-7", "line one\nline two")

        assert reply.success is True
        assert reply.comment_id == "10042"
        assert bodies[0]["body"] == to_adf("line one\nline two")

    @pytest.mark.asyncio
    async def test_reply_failure_is_reported(self):
        async with _jira(lambda r: httpx.Response(403, text="forbidden")) as client:
            reply = await client.reply_to_ticket("ADV-7", "hi")
        assert reply.success is False
        assert reply.comment_id is None

    @pytest.mark.asyncio
    async def test_transition_matches_by_name(self):
        posted = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"transitions": [
                    {"id": "11", "name": "Start Review", "to": {"name": "In Review"}},
                    {"id": "31", "name": "processed", "to": {"name": "Done"}},
                ]})
            posted.append(json.loads(request.content))
            return httpx.Response(204)

        async with _jira(handler) as client:
            assert await client.transition_ticket("ADV-7", "Processed") is True
        assert posted == [{"transition": {"id": "31"}}]

    @pytest.mark.asyncio
    async def test_transition_matches_by_target_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"transitions": [
                    {"id": "41", "name": "Send back", "to": {"name": "Needs Review"}},
                ]})
            return httpx.Response(204)

        async with _jira(handler) as client:
            assert await client.transition_ticket("ADV-7", "Needs Review") is True

    @pytest.mark.asyncio
    async def test_unknown_transition_returns_false(self):
        handler = lambda r: httpx.Response(200, json={"transitions": []})  # noqa: E731
        async with _jira(handler) as client:
            assert await client.transition_ticket("ADV-7", "Processed") is False

    @pytest.mark.asyncio
    async def test_fetch_new_tickets(self):
        queries = []

        def handler(request: httpx.Request) -> httpx.Response:
            queries.append(request.url.params["jql"])
            return httpx.Response(200, json={"issues": [{
                "id": "10001",
                "key": "ADV-7",
                "fields": {
                    "summary": "New advisory agreement",
                    "status": {"name": "New"},
                    "reporter": {"displayName": "Daniel Clark"},
                    "attachment": [
                        {"id": "501", "filename": "agreement.pdf", "mimeType": "application/pdf",
                         "size": 1024, "content": f"{JIRA_URL}/attachments/501"},
                        {"id": "502", "filename": "notes.txt", "mimeType": "text/plain"},
                    ],
                },
            }]})

        async with _jira(handler) as client:
            tickets = await client.fetch_new_advisory_tickets()

        assert 'project = ADV AND status = "New"' in queries[0]
        assert [t.key for t in tickets] == ["ADV-7"]
        assert tickets[0].reporter == "Daniel Clark"
        assert [a.id for a in tickets[0].pdf_attachments] == ["501"]

    @pytest.mark.asyncio
    async def test_get_missing_ticket_returns_none(self):
        async with _jira(lambda r: httpx.Response(404)) as client:
            assert await client.get_ticket_details("ADV-404") is None

    @pytest.mark.asyncio
    async def test_download_attachment(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/rest/api/3/attachment/content/501"
            return httpx.Response(200, content=b"%PDF-1.4")

        async with _jira(handler) as client:
            data = await client.download_attachment(JiraAttachment(id="501", filename="a.pdf"))
        assert data == b"%PDF-1.4"

    @pytest.mark.asyncio
    async def test_ticket_id_is_encoded_as_one_path_segment(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.split(b"?")[0])
            if request.url.raw_path.endswith(b"/comment"):
                return httpx.Response(201, json={"id": "1"})
            return httpx.Response(200, json={"transitions": []})

        async with _jira(handler) as client:
            await client.reply_to_ticket("ADV-7/../ADV-8", "hi")
            await client.transition_ticket("ADV-7#x", "Processed")

        assert seen == [
            b"/rest/api/3/issue/ADV-7%2F..%2FADV-8/comment",
            b"/rest/api/3/issue/ADV-7%23x/transitions",
        ]

    @pytest.mark.asyncio
    async def test_reply_with_non_json_body_still_succeeds(self):
        async with _jira(lambda r: httpx.Response(201, text="created")) as client:
            reply = await client.reply_to_ticket("ADV-7", "hi")
        assert reply.success is True
        assert reply.comment_id is None

    @pytest.mark.asyncio
    async def test_search_with_non_json_body_raises(self):
        async with _jira(lambda r: httpx.Response(200, text="")) as client:
            with pytest.raises(IntegrationError):
                await client.fetch_new_advisory_tickets()

    @pytest.mark.asyncio
    async def test_transition_lookup_with_non_json_body_raises(self):
        async with _jira(lambda r: httpx.Response(200, text="ok")) as client:
            with pytest.raises(IntegrationError):
                await client.transition_ticket("ADV-7", "Processed")


class TestPushOverHttp:
    @pytest.mark.asyncio
    async def test_igo_push_survives_unreadable_jira_reply(self):
        calls = []

        def orion_handler(request: httpx.Request) -> httpx.Response:
            calls.append(("orion", request.method))
            return httpx.Response(200, json={})

        def jira_handler(request: httpx.Request) -> httpx.Response:
            calls.append(("jira", request.method))
            if request.method == "POST" and request.url.path.endswith("/comment"):
                return httpx.Response(201, text="created")
            if request.method == "GET":
                return httpx.Response(200, json={"transitions": [
                    {"id": "31", "name": "Processed", "to": {"name": "Done"}},
                ]})
            return httpx.Response(204)

        document = DocumentHandle(
            id="doc-1",
            file_name="a.pdf",
            file_path="/tmp/a.pdf",
            status="igo",
            data=make_record(),
            jira_ticket_id="ADV-7",
        )
        async with _orion(orion_handler) as ledger, _jira(jira_handler) as tickets:
            result = await push(document, ledger=ledger, tickets=tickets)

        assert result.success is True
        assert result.action == "pushed"
        assert result.orion_updated is True
        assert result.jira_comment_id is None
        assert calls == [
            ("orion", "GET"), ("orion", "PUT"), ("jira", "POST"), ("jira", "GET"), ("jira", "POST"),
        ]


class TestJiraHelpers:
    def test_to_adf_keeps_blank_lines_as_empty_paragraphs(self):
        doc = to_adf("a\n\nb")
        assert doc["type"] == "doc"
        assert [p["content"] for p in doc["content"]] == [
            [{"type": "text", "text": "a"}], [], [{"type": "text", "text": "b"}],
        ]

    def test_parse_issue_without_fields(self):
        ticket = parse_issue({"id": 1, "key": "ADV-1"})
        assert ticket.id == "1"
        assert ticket.attachments == []


class TestOfflineClients:
    @pytest.mark.asyncio
    async def test_offline_jira_reply_returns_stub_comment(self):
        async with OfflineJiraClient() as client:
            reply = await client.reply_to_ticket("ADV-1", "hello")
        assert reply.success is True
        assert reply.comment_id.startswith("stub-comment-")

    @pytest.mark.asyncio
    async def test_offline_orion_accepts_every_account(self):
        async with OfflineOrionClient() as client:
            assert (await client.validate_account("1")).exists is True
            assert (await client.push_advisory_data("1", make_record())).success is True

    def test_factories_pick_offline_clients_without_credentials(self, test_settings):
        assert isinstance(get_ledger_client(test_settings), OfflineOrionClient)
        assert isinstance(get_ticket_client(test_settings), OfflineJiraClient)

    def test_factories_pick_http_clients_with_credentials(self):
        settings = Settings(
            orion_api_key="k", jira_api_token="t", jira_user_email="ops@acme.test",
        )
        assert isinstance(get_ledger_client(settings), OrionClient)
        assert isinstance(get_ticket_client(settings), JiraClient)
