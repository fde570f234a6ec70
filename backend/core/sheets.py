"""
sheets.py — Read-only Google Sheets access over the REST v4 API.

Only two calls are needed: list the tabs of a spreadsheet, and read the
cells of one tab. Rows are flattened into plain text for the extraction step.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
READ_RANGE = "A:Z"


class SheetsError(RuntimeError):
    """Raised when a spreadsheet cannot be listed or read."""


def _api_key() -> str:
    api_key = os.getenv("GOOGLE_API_KEY", "").strip()
    if not api_key:
        raise SheetsError("GOOGLE_API_KEY is not set.")
    return api_key


def _get_json(url: str, client: Optional[httpx.Client]) -> Dict[str, Any]:
    params = {"key": _api_key()}
    timeout_s = float(os.getenv("SHEETS_TIMEOUT_SECONDS", "15"))
    logger.debug("GET %s", url)
    try:
        if client is None:
            with httpx.Client(timeout=timeout_s) as own_client:
                res = own_client.get(url, params=params)
        else:
            res = client.get(url, params=params)
        res.raise_for_status()
        data = res.json()
    except httpx.HTTPStatusError as exc:
        logger.warning("Sheets API returned %s for %s", exc.response.status_code, url)
        raise SheetsError(f"Could not access the spreadsheet (HTTP {exc.response.status_code}).") from exc
    except httpx.HTTPError as exc:
        logger.warning("Sheets API request failed: %s", exc)
        raise SheetsError(f"Could not reach Google Sheets: {exc}") from exc
    except ValueError as exc:
        raise SheetsError("Google Sheets returned a non-JSON response.") from exc

    if not isinstance(data, dict):
        raise SheetsError("Unexpected response from Google Sheets.")
    return data


def list_sheets(sheet_id: str, client: Optional[httpx.Client] = None) -> List[Dict[str, Any]]:
    """Return ``[{"name": ..., "id": ...}]`` for every tab in the spreadsheet."""
    if not sheet_id or not sheet_id.strip():
        raise SheetsError("Missing spreadsheet id.")

    metadata = _get_json(f"{SHEETS_API_URL}/{sheet_id.strip()}", client)
    tabs = []
    for sheet in metadata.get("sheets") or []:
        props = (sheet or {}).get("properties") or {}
        tabs.append({
            "name": props.get("title") or "Sem nome",
            "id": props.get("sheetId") or 0,
        })
    return tabs


def load_sheet_rows(sheet_id: str, sheet_name: str, client: Optional[httpx.Client] = None) -> List[List[str]]:
    """Return the raw cell rows of one tab (columns A to Z)."""
    if not sheet_id or not sheet_name:
        raise SheetsError("Missing spreadsheet id or sheet name.")

    # Quote the tab name so names with spaces resolve as a single range.
    a1_range = f"'{sheet_name}'!{READ_RANGE}"
    result = _get_json(f"{SHEETS_API_URL}/{sheet_id.strip()}/values/{a1_range}", client)
    rows = result.get("values") or []
    return [[str(cell) for cell in row] for row in rows if isinstance(row, list)]


def rows_to_text(rows: List[List[str]]) -> str:
    """Cells joined by ", ", rows by newlines."""
    return "\n".join(", ".join(row) for row in rows)
