"""End-to-end HTTP tests. Runs fully offline: no OpenAI, Orion or Jira credentials."""

import random

import pytest
from fastapi.testclient import TestClient

from advisory_api.main import app
from advisory_api.services.pdf_generator import build_record, render_agreement
from advisory_api.services.templates import parse_template_name

DOCS = "/api/v1/advisory-documents"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def pdf_bytes(tmp_path) -> bytes:
    classification = parse_template_name("Discretionary WRAP Flat (1)")
    record = build_record(classification, random.Random(11))
    return render_agreement(tmp_path / "agreement.pdf", classification, record).read_bytes()


def _upload(client, pdf_bytes, name="agreement.pdf") -> dict:
    response = client.post(DOCS, files=[("files", (name, pdf_bytes, "application/pdf"))])
    assert response.status_code == 201
    return response.json()["data"]["documents"][0]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["app"] == "Advisory Review API"
        assert body["ai_enabled"] is False
        assert body["orion_enabled"] is False
        assert body["jira_enabled"] is False


class TestDocuments:
    def test_upload_and_get(self, client, pdf_bytes):
        doc = _upload(client, pdf_bytes)
        assert doc["status"] == "pending"
        assert doc["fileName"].endswith(".pdf")

        response = client.get(f"{DOCS}/{doc['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == doc["id"]

    def test_upload_rejects_non_pdf(self, client):
        response = client.post(DOCS, files=[("files", ("notes.txt", b"hello", "text/plain"))])
        assert response.status_code == 415

    def test_upload_rejects_empty_file(self, client):
        response = client.post(DOCS, files=[("files", ("empty.pdf", b"", "application/pdf"))])
        assert response.status_code == 400

    def test_unknown_document(self, client):
        response = client.get(f"{DOCS}/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_analyze_push_flow(self, client, pdf_bytes):
        doc = _upload(client, pdf_bytes)

        response = client.put(f"{DOCS}/{doc['id']}/analyze")
        assert response.status_code == 200
        analysis = response.json()["data"]
        assert analysis["status"] == "nigo"
        assert analysis["templateName"] == "Discretionary NON-WRAP Flat (1)"
        assert "Account Number" in analysis["errors"]

        response = client.put(f"{DOCS}/{doc['id']}/push")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["result"]["action"] == "nigo-replied"
        assert body["result"]["orionUpdated"] is False
        assert "jiraCommentId" not in body["result"]

        listed = client.get(DOCS, params={"status": "nigo"}).json()
        assert doc["id"] in [d["id"] for d in listed["data"]]
        assert listed["meta"]["total"] >= 1

    def test_push_before_analysis_reports_error(self, client, pdf_bytes):
        doc = _upload(client, pdf_bytes)
        body = client.put(f"{DOCS}/{doc['id']}/push").json()
        assert body["success"] is False
        assert body["message"] == "Push failed"
        assert body["result"]["errors"] == ["Document has not been analyzed yet"]

    def test_view_and_delete(self, client, pdf_bytes):
        doc = _upload(client, pdf_bytes)

        response = client.get(f"{DOCS}/{doc['id']}/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"].startswith("inline")
        assert response.content == pdf_bytes

        assert client.delete(f"{DOCS}/{doc['id']}").status_code == 204
        assert client.get(f"{DOCS}/{doc['id']}").status_code == 404

    def test_sync_offline_imports_nothing(self, client):
        response = client.post(f"{DOCS}/sync")
        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_invalid_status_filter(self, client):
        assert client.get(DOCS, params={"status": "done"}).status_code == 422


class TestGeneratePdfs:
    def test_templates(self, client):
        data = client.get("/api/v1/generate-pdfs/templates").json()["data"]
        assert len(data) == 16

    @pytest.mark.parametrize("count", [0, 101])
    def test_count_out_of_range(self, client, count):
        response = client.post("/api/v1/generate-pdfs", json={"count": count})
        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Count must be between 1 and 100"

    def test_unknown_template(self, client):
        response = client.post(
            "/api/v1/generate-pdfs", json={"count": 1, "template": "Nope (1)"},
        )
        assert response.status_code == 422

    def test_generate(self, client):
        response = client.post("/api/v1/generate-pdfs", json={"count": 2, "nigoRatio": 0.5})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Successfully generated 2 PDF document(s)"
        assert len(body["filePaths"]) == 2
        assert body["metadata"]["count"] == 2
