"""
report_builder.py — PDF and Excel report generation.

Generates:
- Class Report PDF (summary cards, subject table, pass/fail balance,
                    top failing subjects, per-subject grade distributions)
- Excel Export     (roster with student averages and red cells for failing
                    grades, plus a subject statistics sheet)

PDFs are A4, print-ready with a title / date footer.
"""

import io
from datetime import datetime
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for server use
import matplotlib.pyplot as plt
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm, mm
from reportlab.platypus import (
    Image,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from core.formatting import format_decimal, round_half_up
from core.grading import SUBJECT_KEYS, is_failing
from core.rankings import student_average
from core.validator import StudentRecord


# ── Colour palette ──────────────────────────────────────────────────

BRAND_DARK  = colors.HexColor("#0f172a")
RED         = colors.HexColor("#f43f5e")
LIGHT_GREY  = colors.HexColor("#f5f5f5")
WHITE       = colors.white

POSITIVE_COLOR = "#10b981"
NEGATIVE_COLOR = "#f43f5e"


# ── Helpers ─────────────────────────────────────────────────────────

def _footer(canvas, doc, title: str):
    """Draw the report title and date in the page footer."""
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(colors.grey)
    footer_text = f"{title} — Gerado em {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    canvas.drawString(2 * cm, 1.2 * cm, footer_text)
    canvas.drawRightString(A4[0] - 2 * cm, 1.2 * cm, f"Página {doc.page}")
    canvas.restoreState()


def _chart_to_image(fig, width=14 * cm, height=8 * cm) -> Image:
    """Convert a matplotlib figure to a ReportLab Image."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight")
    plt.close(fig)
    buf.seek(0)
    return Image(buf, width=width, height=height)


def _styles():
    ss = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "CustomTitle", parent=ss["Title"],
            fontSize=24, leading=30, textColor=BRAND_DARK,
            spaceAfter=6 * mm,
        ),
        "heading": ParagraphStyle(
            "CustomHeading", parent=ss["Heading2"],
            fontSize=14, leading=18, textColor=BRAND_DARK,
            spaceBefore=6 * mm, spaceAfter=3 * mm,
        ),
        "body": ParagraphStyle(
            "CustomBody", parent=ss["Normal"],
            fontSize=10, leading=14, textColor=colors.black,
            spaceAfter=3 * mm,
        ),
    }


def _make_table(data: List[List], col_widths=None, header_color=BRAND_DARK, extra_styles=None):
    """Create a styled table."""
    style_cmds = [
        ("BACKGROUND", (0, 0), (-1, 0), header_color),
        ("TEXTCOLOR", (0, 0), (-1, 0), WHITE),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [WHITE, LIGHT_GREY]),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    t = Table(data, colWidths=col_widths, repeatRows=1)
    t.setStyle(TableStyle(style_cmds + list(extra_styles or [])))
    return t


# ── Charts ──────────────────────────────────────────────────────────

def _balance_chart(balance: List[Dict[str, Any]]) -> Optional[Image]:
    """Horizontal stacked bars: passing vs failing students per subject."""
    if not balance or not any(b["positives"] or b["negatives"] for b in balance):
        return None

    names = [b["subject"] for b in balance]
    positives = [b["positives"] for b in balance]
    negatives = [b["negatives"] for b in balance]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.barh(names, positives, color=POSITIVE_COLOR, label="Positivas")
    ax.barh(names, negatives, left=positives, color=NEGATIVE_COLOR, label="Negativas")
    ax.invert_yaxis()
    ax.set_xlabel("Alunos", fontsize=10)
    ax.set_title("Sucesso / Insucesso", fontsize=12, fontweight="bold", pad=12)
    ax.legend(loc="lower right", fontsize=8)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    fig.tight_layout()
    return _chart_to_image(fig)


def _top_failing_chart(top_failing: List[Dict[str, Any]]) -> Optional[Image]:
    """Bar chart of the subjects with the highest failing percentage."""
    if not top_failing:
        return None

    names = [s["subject"] for s in top_failing]
    values = [s["percentageBelowTen"] for s in top_failing]

    fig, ax = plt.subplots(figsize=(6, 3.5))
    bars = ax.bar(names, values, color=[s["color"] for s in top_failing], edgecolor="white")
    for bar, val in zip(bars, values):
        ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height() + 1,
                f"{format_decimal(val)}%", ha="center", va="bottom", fontsize=8, fontweight="bold")
    ax.set_ylabel("% < 10", fontsize=10)
    ax.set_ylim(0, 105)
    ax.set_title("Disciplinas com Maior % de Negativas", fontsize=12, fontweight="bold", pad=12)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    fig.tight_layout()
    return _chart_to_image(fig, width=12 * cm, height=7 * cm)


def _distribution_grid_chart(subject_stats: List[Dict[str, Any]]) -> Optional[Image]:
    """Small multiples of each subject's divergent bucket chart (failing bucket below zero)."""
    if not subject_stats:
        return None

    cols = 4
    rows = (len(subject_stats) + cols - 1) // cols
    fig, axes = plt.subplots(rows, cols, figsize=(10, 2.6 * rows), squeeze=False)
    for ax in axes.flat[len(subject_stats):]:
        ax.axis("off")

    for ax, s in zip(axes.flat, subject_stats):
        dist = s["distribution"]
        ax.bar([d["range"] for d in dist], [d["chartValue"] for d in dist], color=[d["color"] for d in dist])
        ax.axhline(0, color="#94a3b8", linewidth=0.8)
        ax.set_title(s["subject"], fontsize=9, fontweight="bold")
        ax.tick_params(axis="both", labelsize=7)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
    fig.tight_layout()
    return _chart_to_image(fig, width=17 * cm, height=4.4 * rows * cm)


# ═══════════════════════════════════════════════════════════════════
# 1. CLASS REPORT PDF
# ═══════════════════════════════════════════════════════════════════

def generate_class_report_pdf(
    output_path: str,
    title: str,
    overview: Dict[str, Any],
    subject_stats: List[Dict[str, Any]],
    rankings: Dict[str, Any],
):
    """Dashboard summary as a two-page PDF."""
    st = _styles()
    story: List[Any] = []

    story.append(Paragraph(escape(title), st["title"]))

    best = rankings.get("bestSubject")
    worst = rankings.get("lowestAvgSubject")
    spread = rankings.get("highestStdDevSubject")
    leader = rankings.get("bestStudent")

    cards = [
        ["Indicador", "Valor"],
        ["Total de Alunos", str(overview.get("totalStudents", 0))],
        ["Média Global", format_decimal(overview.get("globalAverage", 0))],
        ["Aluno com Média Mais Alta",
         f"{leader['name']} ({format_decimal(leader['avg'])})" if leader else "N/A"],
        ["Disciplina com Média Mais Alta",
         f"{best['subject']} ({format_decimal(best['avg'])})" if best else "N/A"],
        ["Média Mais Baixa",
         f"{worst['subject']} ({format_decimal(worst['avg'])})" if worst else "N/A"],
        ["Maior Desvio Padrão",
         f"{spread['subject']} ({format_decimal(spread['stdDev'])})" if spread else "N/A"],
    ]
    story.append(_make_table(cards, col_widths=[8 * cm, 8 * cm]))

    story.append(Paragraph("Estatísticas por Disciplina", st["heading"]))
    table = [["Disciplina", "Média", "Desvio Padrão", "Mín", "Máx", "% < 10", "Alunos"]]
    failing_rows = []
    for idx, s in enumerate(subject_stats, 1):
        table.append([
            s["subject"],
            format_decimal(s["avg"]),
            format_decimal(s["stdDev"]),
            format_decimal(s["min"]),
            format_decimal(s["max"]),
            f"{format_decimal(s['percentageBelowTen'])}%",
            str(s["count"]),
        ])
        if s["count"] and is_failing(s["avg"]):
            failing_rows.append(("TEXTCOLOR", (1, idx), (1, idx), RED))
    story.append(_make_table(table, extra_styles=failing_rows))

    balance_img = _balance_chart(rankings.get("balance", []))
    if balance_img:
        story.append(Spacer(1, 4 * mm))
        story.append(balance_img)

    story.append(PageBreak())

    story.append(Paragraph("Top 3 Disciplinas com Maior % de Negativas", st["heading"]))
    top_img = _top_failing_chart(rankings.get("topNegativeSubjects", []))
    if top_img:
        story.append(top_img)
    else:
        story.append(Paragraph("Sem dados.", st["body"]))

    story.append(Paragraph("Distribuição de Notas", st["heading"]))
    if overview.get("totalStudents"):
        dist_img = _distribution_grid_chart(subject_stats)
        if dist_img:
            story.append(dist_img)
    else:
        story.append(Paragraph("Sem dados.", st["body"]))

    doc = SimpleDocTemplate(
        output_path, pagesize=A4,
        leftMargin=2 * cm, rightMargin=2 * cm,
        topMargin=2 * cm, bottomMargin=2.5 * cm,
    )
    doc.build(
        story,
        onFirstPage=lambda c, d: _footer(c, d, title),
        onLaterPages=lambda c, d: _footer(c, d, title),
    )


# ═══════════════════════════════════════════════════════════════════
# 2. EXCEL EXPORT
# ═══════════════════════════════════════════════════════════════════

def generate_excel_export(
    output_path: str,
    records: List[StudentRecord],
    subject_stats: List[Dict[str, Any]],
):
    """Roster sheet (failing grades in red) plus a subject statistics sheet."""
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="0f172a", end_color="0f172a", fill_type="solid")
    red_fill = PatternFill(start_color="fadbd8", end_color="fadbd8", fill_type="solid")
    thin_border = Border(
        left=Side(style="thin"), right=Side(style="thin"),
        top=Side(style="thin"), bottom=Side(style="thin"),
    )

    def _style_sheet(ws, grade_columns=()):
        for cell in ws[1]:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            cell.border = thin_border

        for row in ws.iter_rows(min_row=2, max_row=ws.max_row):
            for cell in row:
                cell.border = thin_border
                cell.alignment = Alignment(horizontal="center")
            for col_idx in grade_columns:
                value = row[col_idx - 1].value
                if isinstance(value, (int, float)) and is_failing(value):
                    row[col_idx - 1].fill = red_fill

        ws.freeze_panes = "A2"

        for col_cells in ws.columns:
            max_len = max(len(str(cell.value or "")) for cell in col_cells)
            ws.column_dimensions[col_cells[0].column_letter].width = min(max_len + 4, 30)

    wb = Workbook()

    # ── Sheet 1: Roster ─────────────────────────────────────────────
    ws_roster = wb.active
    ws_roster.title = "Alunos"
    ws_roster.sheet_properties.tabColor = "0f172a"
    labels = {s["key"]: s["subject"] for s in subject_stats}
    ws_roster.append(["Nº", "Aluno", *[labels.get(k, k) for k in SUBJECT_KEYS], "Média"])
    for r in records:
        ws_roster.append([
            r["numero"], r["aluno"], *[r[k] for k in SUBJECT_KEYS], round_half_up(student_average(r)),
        ])
    _style_sheet(ws_roster, grade_columns=range(3, 3 + len(SUBJECT_KEYS) + 1))

    # ── Sheet 2: Subject statistics ─────────────────────────────────
    ws_stats = wb.create_sheet(title="Estatísticas")
    ws_stats.sheet_properties.tabColor = "22d3ee"
    ranges = [d["range"] for d in subject_stats[0]["distribution"]] if subject_stats else []
    ws_stats.append(["Disciplina", "Média", "Desvio Padrão", "Mín", "Máx", "Nº < 10", "% < 10", *ranges])
    for s in subject_stats:
        ws_stats.append([
            s["subject"], s["avg"], s["stdDev"], s["min"], s["max"],
            s["countBelowTen"], s["percentageBelowTen"],
            *[d["count"] for d in s["distribution"]],
        ])
    _style_sheet(ws_stats, grade_columns=(2,))

    wb.save(output_path)
