"""
Class Outcome Analytics
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from outcomes.chart import CHART_KEYS
from outcomes.classifier import APPROVAL_AVERAGE, FINAL_EXAM_PASS, REMEDIAL_AVERAGE
from routes.analytics import router as analytics_router

# Load environment
load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Class Outcome Analytics")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Class Outcome Analytics API",
    description=(
        "Per-period student outcome statistics (passed/failed by average, "
        "by final exam and by attendance) ready for charting."
    ),
    version="1.0.0",
)

# CORS — allow the frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "app_name": APP_NAME,
    }


@app.get("/api/config")
async def get_config():
    """Return grading thresholds and chart keys to the frontend."""
    return {
        "app_name": APP_NAME,
        "thresholds": {
            "approval_average": APPROVAL_AVERAGE,
            "remedial_average": REMEDIAL_AVERAGE,
            "final_exam_pass": FINAL_EXAM_PASS,
        },
        "chart_keys": CHART_KEYS,
    }
