import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from service.app import create_app
from utils.error_handler import ErrorCategory, error_reporter

PAYLOAD = {
    "problemTitle": "Two Sum",
    "problemDifficulty": "Easy",
    "problemTopics": "Array, Hash Table",
    "problemLink": "https://leetcode.com/problems/two-sum/",
    "problemContent": "Given an array of integers nums and an integer target.",
    "analysis": "# Intro\nSolve it.\n- use a hash map",
    "date": "Jan 5, 2024",
}


@pytest.fixture
def client(tmp_path):
    app = create_app({
        "TESTING": True,
        "OUTPUT_DIR": str(tmp_path),
        "EMOJI_FONT_PATHS": [],
        "UNICODE_FONT_PATHS": [],
        "STREAM_CHUNK_SIZE": 1024,
    })
    error_reporter.clear()
    return app.test_client()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "service": "leetcode-pdf-generator"}


def test_generate_pdf_streams_document(client):
    response = client.post("/generate-pdf", json=PAYLOAD)
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.headers["Content-Disposition"] == 'attachment; filename="LeetCode_Jan_5__2024.pdf"'
    data = response.get_data()
    assert data[:4] == b"%PDF"
    assert int(response.headers["Content-Length"]) == len(data)


def test_generate_pdf_without_date_uses_daily_name(client):
    payload = dict(PAYLOAD)
    del payload["date"]
    response = client.post("/generate-pdf", json=payload)
    assert response.headers["Content-Disposition"] == 'attachment; filename="LeetCode_Daily.pdf"'


@pytest.mark.parametrize("missing", ["problemTitle", "analysis"])
def test_missing_required_field_returns_400(client, missing):
    payload = dict(PAYLOAD)
    payload[missing] = ""
    response = client.post("/generate-pdf", json=payload)
    assert response.status_code == 400
    assert response.get_json() == {
        "error": "Missing required fields: problemTitle and analysis are required"
    }
    assert error_reporter.error_history[-1].category == ErrorCategory.VALIDATION


def test_non_json_body_returns_400(client):
    response = client.post("/generate-pdf", data="not json", content_type="text/plain")
    assert response.status_code == 400


def test_render_failure_returns_500(client, monkeypatch):
    from pdf_generator.pdf_creator import PDFCreator

    def broken(self, *args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(PDFCreator, "render_to_bytes", broken)
    response = client.post("/generate-pdf", json=PAYLOAD)
    assert response.status_code == 500
    body = response.get_json()
    assert body == {"error": "Failed to generate PDF", "message": "An unexpected error occurred."}
    assert "disk on fire" not in response.get_data(as_text=True)


def test_cors_headers_present(client):
    response = client.get("/health", headers={"Origin": "chrome-extension://abc"})
    assert response.headers.get("Access-Control-Allow-Origin") == "*"
