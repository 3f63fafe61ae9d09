"""
Unit tests for the analysis service client.
"""

import io
import json
from http import client as http_client
from unittest.mock import MagicMock, patch
from urllib import error

import pytest

from legacylens.client.analysis import AnalysisClient, parse_response, strip_code_fences
from legacylens.core.exceptions import (
    AnalysisRejectedError,
    AnalysisTimeoutError,
    MalformedResponseError,
    PayloadTooLargeError,
)

URLOPEN = "legacylens.client.analysis.request.urlopen"


def _http_response(body: str) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = body.encode("utf-8")
    resp.__enter__.return_value = resp
    return resp


def _http_error(code: int, body: bytes = b"") -> error.HTTPError:
    return error.HTTPError("http://test", code, "Error", {}, io.BytesIO(body))


class TestParseResponse:
    def test_full_payload(self):
        response = parse_response(json.dumps({
            "summary": "Monolith",
            "suggestions": ["Split it", 3],
            "nodes": [{"id": "A"}],
            "edges": [],
            "extra": "ignored",
        }))

        assert response.summary == "Monolith"
        assert response.suggestions == ["Split it"]
        assert response.nodes == [{"id": "A"}]

    def test_missing_and_null_fields_default(self):
        response = parse_response('{"summary": null, "nodes": null}')

        assert response.summary == ""
        assert response.nodes == []
        assert response.edges == []
        assert response.suggestions == []

    def test_code_fences_stripped(self):
        text = '```json\n{"summary": "ok"}\n```'
        assert strip_code_fences(text) == '{"summary": "ok"}'
        assert parse_response(text).summary == "ok"

    def test_invalid_json(self):
        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            parse_response("I could not analyze this")

    def test_not_an_object(self):
        with pytest.raises(MalformedResponseError, match="JSON object"):
            parse_response("[1, 2]")

    def test_wrong_field_type(self):
        with pytest.raises(MalformedResponseError):
            parse_response('{"nodes": "many"}')

    @pytest.mark.parametrize("text", ["", "   ", "```json\n```"])
    def test_empty_body(self, text):
        with pytest.raises(MalformedResponseError, match="empty"):
            parse_response(text)


class TestAnalysisClient:
    @patch(URLOPEN)
    def test_posts_full_context(self, mock_urlopen):
        mock_urlopen.return_value = _http_response('{"summary": "done", "nodes": [], "edges": []}')
        client = AnalysisClient(endpoint="http://svc/api", timeout=5)

        response = client.analyze("--- START FILE: a ---")

        assert response.summary == "done"
        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "http://svc/api"
        assert req.get_method() == "POST"
        assert json.loads(req.data) == {"fullContext": "--- START FILE: a ---"}
        assert mock_urlopen.call_args[1]["timeout"] == 5

    @patch(URLOPEN)
    def test_payload_too_large(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(413, b'{"error": "Codebase too large."}')

        with pytest.raises(PayloadTooLargeError, match="Codebase too large.") as exc_info:
            AnalysisClient().analyze("x")
        assert exc_info.value.status == 413
        assert exc_info.value.kind == "rejected"

    @patch(URLOPEN)
    def test_server_error_surfaces_error_field(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(500, b'{"error": "Model overloaded"}')

        with pytest.raises(AnalysisRejectedError, match="Model overloaded") as exc_info:
            AnalysisClient().analyze("x")
        assert exc_info.value.status == 500
        assert exc_info.value.retryable

    @patch(URLOPEN)
    def test_server_error_without_body(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(502, b"<html>bad gateway</html>")

        with pytest.raises(AnalysisRejectedError, match="502"):
            AnalysisClient().analyze("x")

    @patch(URLOPEN)
    def test_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = TimeoutError("timed out")

        with pytest.raises(AnalysisTimeoutError) as exc_info:
            AnalysisClient(timeout=2).analyze("x")
        assert exc_info.value.kind == "timeout"

    @patch(URLOPEN)
    def test_url_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = error.URLError(TimeoutError("timed out"))

        with pytest.raises(AnalysisTimeoutError):
            AnalysisClient().analyze("x")

    @patch(URLOPEN)
    def test_unreachable(self, mock_urlopen):
        mock_urlopen.side_effect = error.URLError("Connection refused")

        with pytest.raises(AnalysisRejectedError, match="unreachable"):
            AnalysisClient().analyze("x")

    @patch(URLOPEN)
    def test_malformed_body(self, mock_urlopen):
        mock_urlopen.return_value = _http_response("Sorry, I can't help")

        with pytest.raises(MalformedResponseError):
            AnalysisClient().analyze("x")

    @patch(URLOPEN)
    def test_empty_body(self, mock_urlopen):
        mock_urlopen.return_value = _http_response("")

        with pytest.raises(MalformedResponseError, match="empty"):
            AnalysisClient().analyze("x")

    @patch(URLOPEN)
    def test_body_not_utf8(self, mock_urlopen):
        resp = _http_response("")
        resp.read.return_value = b'{"summary": "\xff\xfe"}'
        mock_urlopen.return_value = resp

        with pytest.raises(MalformedResponseError, match="UTF-8") as exc_info:
            AnalysisClient().analyze("x")
        assert exc_info.value.kind == "malformed"

    @pytest.mark.parametrize(
        "read_error",
        [ConnectionResetError("reset by peer"), http_client.IncompleteRead(b'{"summ')],
    )
    @patch(URLOPEN)
    def test_connection_lost_while_reading(self, mock_urlopen, read_error):
        resp = _http_response("")
        resp.read.side_effect = read_error
        mock_urlopen.return_value = resp

        with pytest.raises(AnalysisRejectedError, match="could not be read") as exc_info:
            AnalysisClient().analyze("x")
        assert exc_info.value.retryable
