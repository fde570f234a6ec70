"""
Report routes — PDF and Excel report generation endpoints.
"""

import os
import re
import uuid
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from core.report_builder import generate_class_report_pdf, generate_excel_export
from core.stats import compute_subject_stats
from routes.analyze import build_dashboard, records_from_payload

router = APIRouter()

REPORTS_DIR = Path(__file__).resolve().parent.parent / "reports"
REPORTS_DIR.mkdir(parents=True, exist_ok=True)


def _safe_token(value: str, fallback: str = "item") -> str:
    """Create filesystem-safe token for filenames."""
    token = re.sub(r"[^A-Za-z0-9._-]+", "_", str(value)).strip("._-")
    return token or fallback


def _safe_unlink(path: str):
    """Delete a generated file after the response is sent."""
    Path(path).unlink(missing_ok=True)


@router.post("/pdf")
async def class_report_pdf(payload: dict):
    """Generate the dashboard summary as a PDF."""
    records = records_from_payload(payload)
    title = str(payload.get("title") or os.getenv("APP_NAME", "EduStats Nexus"))
    report_id = str(uuid.uuid4())[:8]
    output_path = REPORTS_DIR / f"class_report_{report_id}.pdf"

    dashboard = build_dashboard(records)
    generate_class_report_pdf(
        output_path=str(output_path),
        title=title,
        overview=dashboard["overview"],
        subject_stats=dashboard["stats"],
        rankings=dashboard["rankings"],
    )

    return FileResponse(
        str(output_path),
        media_type="application/pdf",
        filename=f"{_safe_token(title, fallback='Relatorio')}_{report_id}.pdf",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )


@router.post("/excel")
async def excel_export(payload: dict):
    """Export the validated roster and subject statistics as an Excel workbook."""
    records = records_from_payload(payload)
    title = str(payload.get("title") or os.getenv("APP_NAME", "EduStats Nexus"))
    report_id = str(uuid.uuid4())[:8]
    output_path = REPORTS_DIR / f"export_{report_id}.xlsx"

    generate_excel_export(
        output_path=str(output_path),
        records=records,
        subject_stats=compute_subject_stats(records),
    )

    return FileResponse(
        str(output_path),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"{_safe_token(title, fallback='Export')}_{report_id}.xlsx",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )
