"""
EduStats Nexus — Class Grade Dashboard
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.grading import PASS_MARK
from routes.analyze import router as analyze_router
from routes.reports import router as reports_router
from routes.sheets import router as sheets_router

# Load environment
load_dotenv()

APP_NAME = os.getenv("APP_NAME", "EduStats Nexus")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="EduStats Nexus API",
    description=(
        "Class grade analytics — a Google Sheet roster is transcribed by AI, "
        "every statistic is computed deterministically."
    ),
    version="1.0.0",
)

# CORS — allow the React dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(sheets_router, prefix="/api/sheets", tags=["Sheets"])
app.include_router(analyze_router, prefix="/api/analyze", tags=["Analytics"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "app_name": APP_NAME,
        "pass_mark": PASS_MARK,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "app_name": APP_NAME,
        "pass_mark": PASS_MARK,
        "sheets_configured": bool(os.getenv("GOOGLE_API_KEY", "").strip()),
        "ai_configured": bool(os.getenv("GEMINI_API_KEY", "").strip()),
    }
