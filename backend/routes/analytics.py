"""
Analytics routes — outcome classification and per-period series endpoints.
"""

import logging
import os
import tempfile
from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from outcomes.aggregator import aggregate
from outcomes.chart import chart_legend, project
from outcomes.classifier import classify_all
from outcomes.periods import build_series, list_subjects, series_totals
from outcomes.records import (
    RecordError,
    enrollments_from_payload,
    offerings_from_payload,
    offerings_from_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_UPLOAD_ROWS = int(os.getenv("MAX_UPLOAD_ROWS", "50000"))
UPLOAD_TYPES = (".csv", ".xlsx")


def _offerings_from_request(payload: dict):
    """Extract class offerings from request payload."""
    classes = payload.get("classes")
    if classes is None:
        raise HTTPException(400, "No data provided.")
    try:
        return offerings_from_payload(classes)
    except RecordError as e:
        logger.warning("Rejected classes payload: %s", e)
        raise HTTPException(400, str(e))


def _subject_from_request(payload: dict) -> str:
    subject = payload.get("subject")
    if not isinstance(subject, str) or not subject:
        raise HTTPException(400, "A subject is required.")
    return subject


def _series_response(subject: str, offerings) -> dict:
    series = build_series(subject, offerings)
    logger.info("Series for %r: %d period(s)", subject, len(series))
    return {
        "subject": subject,
        "series": [entry.to_dict() for entry in series],
        "chart": [record.to_dict() for record in project(series)],
        "totals": series_totals(series).to_dict(),
    }


@router.post("/classify")
async def classify_enrollments(payload: dict):
    """Outcome category of each enrollment plus the class statistics."""
    if "enrollments" not in payload:
        raise HTTPException(400, "No data provided.")
    try:
        enrollments = enrollments_from_payload(payload["enrollments"])
    except RecordError as e:
        logger.warning("Rejected enrollments payload: %s", e)
        raise HTTPException(400, str(e))

    categories = classify_all(enrollments)
    return {
        "categories": [c.value if c is not None else None for c in categories],
        "statistics": aggregate(enrollments).to_dict(),
    }


@router.post("/series")
async def series(payload: dict):
    """Chronological per-period statistics for one subject."""
    subject = _subject_from_request(payload)
    offerings = _offerings_from_request(payload)
    entries = build_series(subject, offerings)
    logger.info("Series for %r: %d period(s)", subject, len(entries))
    return {
        "subject": subject,
        "series": [entry.to_dict() for entry in entries],
        "totals": series_totals(entries).to_dict(),
    }


@router.post("/chart")
async def chart(payload: dict):
    """Chart-ready records (period + five outcome keys) for one subject."""
    subject = _subject_from_request(payload)
    offerings = _offerings_from_request(payload)
    records = project(build_series(subject, offerings))
    return {"subject": subject, "data": [r.to_dict() for r in records]}


@router.post("/subjects")
async def subjects(payload: dict):
    """Distinct subjects present in the submitted classes."""
    offerings = _offerings_from_request(payload)
    return {"subjects": list_subjects(offerings)}


@router.post("/upload")
async def upload(subject: str = Form(...), file: UploadFile = File(...)):
    """
    Upload a CSV or Excel file (one row per enrollment) and return the
    series and chart records for `subject`.
    """
    ext = Path(file.filename or "").suffix.lower()
    if ext not in UPLOAD_TYPES:
        raise HTTPException(400, f"Unsupported file type: {ext}. Use CSV or Excel (.xlsx).")

    with tempfile.NamedTemporaryFile(suffix=ext, delete=False) as tmp:
        save_path = Path(tmp.name)

    try:
        with open(save_path, "wb") as f:
            while True:
                chunk = await file.read(1024 * 1024)
                if not chunk:
                    break
                f.write(chunk)
        offerings = offerings_from_upload(str(save_path), max_rows=MAX_UPLOAD_ROWS)
    except Exception as e:
        logger.warning("Rejected upload %r: %s", file.filename, e)
        raise HTTPException(400, f"Failed to process upload '{file.filename}': {str(e)}")
    finally:
        save_path.unlink(missing_ok=True)

    result = _series_response(subject, offerings)
    result["filename"] = file.filename
    result["subjects"] = list_subjects(offerings)
    return result


@router.get("/categories")
async def categories():
    """Chart legend: display key, category and description."""
    return {"categories": chart_legend()}
