"""
Tests for core/sheets.py — Google Sheets REST calls against a mock transport.
"""

import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.sheets import SheetsError, list_sheets, load_sheet_rows, rows_to_text


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")


class TestListSheets:
    """Tests for list_sheets."""

    def test_returns_tab_names_and_ids(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(200, json={"sheets": [
                {"properties": {"title": "10A", "sheetId": 0}},
                {"properties": {"title": "10B", "sheetId": 123}},
                {"properties": {}},
            ]})

        tabs = list_sheets("abc123", client=_client(handler))
        assert tabs == [
            {"name": "10A", "id": 0},
            {"name": "10B", "id": 123},
            {"name": "Sem nome", "id": 0},
        ]
        assert seen["url"].path.endswith("/spreadsheets/abc123")
        assert seen["url"].params["key"] == "test-key"

    def test_http_error(self):
        client = _client(lambda request: httpx.Response(404, json={"error": {"message": "not found"}}))
        with pytest.raises(SheetsError, match="404"):
            list_sheets("missing", client=client)

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY")
        with pytest.raises(SheetsError):
            list_sheets("abc123", client=_client(lambda request: httpx.Response(200, json={})))

    def test_missing_id(self):
        with pytest.raises(SheetsError):
            list_sheets("  ")

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(SheetsError):
            list_sheets("abc123", client=_client(handler))


class TestLoadSheetRows:
    """Tests for load_sheet_rows / rows_to_text."""

    def test_reads_quoted_range(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"values": [["Nº", "Aluno", "Port"], ["1", "Ana", "12,5"], [2, "Rui"]]})

        rows = load_sheet_rows("abc123", "Turma 10A", client=_client(handler))
        assert rows == [["Nº", "Aluno", "Port"], ["1", "Ana", "12,5"], ["2", "Rui"]]
        assert seen["path"].endswith("/values/'Turma 10A'!A:Z")

    def test_empty_tab(self):
        rows = load_sheet_rows("abc123", "Vazia", client=_client(lambda request: httpx.Response(200, json={})))
        assert rows == []

    def test_non_json_body(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(SheetsError):
            load_sheet_rows("abc123", "10A", client=client)

    def test_rows_to_text(self):
        text = rows_to_text([["Nº", "Aluno"], ["1", "Ana", "12,5"]])
        assert text == "Nº, Aluno\n1, Ana, 12,5"
