"""
Sheets routes — connect to a Google Sheet, list its tabs and load one tab
through AI extraction into a validated roster.
"""

import logging

from fastapi import APIRouter, HTTPException

from core.extraction import ExtractionError, extract_roster
from core.sheets import SheetsError, list_sheets, load_sheet_rows, rows_to_text
from core.validator import validate_records
from routes.analyze import build_dashboard

logger = logging.getLogger(__name__)

router = APIRouter()

# Blocking httpx calls: plain `def` handlers run in the threadpool.


@router.post("/list")
def list_tabs(payload: dict):
    """
    List the tabs of a spreadsheet.
    Expects: { "sheetId": "..." }
    """
    sheet_id = str(payload.get("sheetId") or "").strip()
    if not sheet_id:
        raise HTTPException(400, "Missing sheetId.")

    try:
        sheets = list_sheets(sheet_id)
    except SheetsError as e:
        logger.warning("Could not list sheets for %s: %s", sheet_id, e)
        raise HTTPException(502, str(e))

    return {"sheets": sheets}


@router.post("/load")
def load_tab(payload: dict):
    """
    Read one tab, extract its roster with the AI service and analyse it.
    The returned roster replaces whatever the client held before.
    Expects: { "sheetId": "...", "sheetName": "..." }
    """
    sheet_id = str(payload.get("sheetId") or "").strip()
    sheet_name = str(payload.get("sheetName") or "").strip()
    if not sheet_id or not sheet_name:
        raise HTTPException(400, "Missing sheetId or sheetName.")

    try:
        rows = load_sheet_rows(sheet_id, sheet_name)
    except SheetsError as e:
        logger.warning("Could not read sheet %r: %s", sheet_name, e)
        raise HTTPException(502, str(e))

    if rows:
        try:
            candidates = extract_roster(rows_to_text(rows))
        except ExtractionError as e:
            logger.error("AI extraction failed for sheet %r: %s", sheet_name, e)
            raise HTTPException(502, f"AI extraction failed: {e}")
    else:
        candidates = []

    records = validate_records(candidates)
    logger.info("Loaded %d students from sheet %r", len(records), sheet_name)

    return {
        "sheetName": sheet_name,
        "data": records,
        **build_dashboard(records),
    }
