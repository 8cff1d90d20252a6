"""
records.py — Enrollment ingestion from uploads, DataFrames and JSON.

Supports:
- CSV and Excel (.xlsx) uploads
- Long-format tables: one row per student per class offering
- Nested JSON payloads: offerings with an `enrollments` list
- Case-insensitive column/key mapping, including the Portuguese field
  names used by the grade-entry system (mediaPreFinal, reprovadoPorFalta)

Missing grade cells default to 0.0 and a missing attendance flag to
False, matching how the classifier treats absent fields.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from outcomes.classifier import Enrollment
from outcomes.periods import ClassOffering

logger = logging.getLogger(__name__)


class RecordError(ValueError):
    """Input is structurally unusable (missing columns, wrong shapes)."""


# Column / key name variations, compared lowercased and stripped
COLUMN_ALIASES = {
    "subject": [
        "subject", "subject_name", "subject name", "discipline", "topic",
        "course", "disciplina",
    ],
    "year": [
        "year", "academic_year", "academic year", "ano",
    ],
    "semester": [
        "semester", "term", "semestre",
    ],
    "class": [
        "class", "class_name", "class name", "section", "turma", "code",
    ],
    "student_id": [
        "student_id", "studentid", "student id", "id", "registration",
        "matricula",
    ],
    "student_name": [
        "student_name", "studentname", "student name", "name", "full_name",
        "nome",
    ],
    "pre_final_average": [
        "pre_final_average", "prefinalaverage", "pre final average",
        "media_pre_final", "mediaprefinal", "average",
    ],
    "post_final_average": [
        "post_final_average", "postfinalaverage", "post final average",
        "media_pos_final", "mediaposfinal", "final_grade", "final grade",
    ],
    "failed_by_attendance": [
        "failed_by_attendance", "failedbyattendance", "failed by attendance",
        "reprovado_por_falta", "reprovadoporfalta",
    ],
}

ENROLLMENT_LIST_KEYS = ["enrollments", "students", "matriculas"]

REQUIRED_COLUMNS = ["subject", "year", "semester"]

TRUE_VALUES = {"true", "t", "1", "1.0", "yes", "y", "sim", "s", "x"}


# ── Value coercion ──────────────────────────────────────────────────

def _to_number(val) -> Optional[float]:
    """Parse a number (accepting a decimal comma) or return None."""
    if val is None:
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", ".")
        if not val:
            return None
    try:
        v = float(val)
    except (TypeError, ValueError, OverflowError):
        return None
    return None if np.isnan(v) or np.isinf(v) else v


def _to_int(val) -> Optional[int]:
    v = _to_number(val)
    if v is None:
        return None
    if not v.is_integer():
        logger.debug("Rejected non-whole number %r", val)
        return None
    return int(v)


def _to_bool(val) -> bool:
    if val is None:
        return False
    if isinstance(val, (bool, np.bool_)):
        return bool(val)
    if isinstance(val, (int, float, np.integer, np.floating)):
        return bool(not np.isnan(val) and val != 0)
    return str(val).strip().lower() in TRUE_VALUES


def _to_text(val) -> Optional[str]:
    if val is None or not pd.api.types.is_scalar(val):
        return None
    if not isinstance(val, str) and pd.isna(val):
        return None
    text = str(val).strip()
    return text or None


def _grade(val, field: str) -> float:
    v = _to_number(val)
    if v is None:
        logger.debug("Missing %s, defaulting to 0.0", field)
        return 0.0
    return v


# ── Column mapping ──────────────────────────────────────────────────

def suggest_column_mapping(columns: Sequence[Any]) -> Dict[str, Optional[str]]:
    """
    Map expected field names to actual column (or key) names.
    Returns: { field: actual_name_or_None }
    """
    cols_lower = {str(c).lower().strip(): c for c in columns}
    mapping: Dict[str, Optional[str]] = {}

    for field, aliases in COLUMN_ALIASES.items():
        matched = None
        for alias in aliases:
            if alias in cols_lower:
                matched = cols_lower[alias]
                break
        mapping[field] = matched

    return mapping


def _enrollment_from_mapping(row: Mapping[str, Any], mapping: Dict[str, Optional[str]]) -> Enrollment:
    def get(field):
        key = mapping.get(field)
        return row.get(key) if key is not None else None

    return Enrollment(
        pre_final_average=_grade(get("pre_final_average"), "pre_final_average"),
        post_final_average=_grade(get("post_final_average"), "post_final_average"),
        failed_by_attendance=_to_bool(get("failed_by_attendance")),
        student_id=_to_text(get("student_id")),
        student_name=_to_text(get("student_name")),
    )


# ── Tables ──────────────────────────────────────────────────────────

def parse_upload(file_path: str) -> Dict[str, pd.DataFrame]:
    """
    Parse an uploaded file and return a dict of {sheet_name: DataFrame}.
    For CSV files, returns {"Sheet1": df}.
    """
    path = Path(file_path)
    ext = path.suffix.lower()

    if ext == ".csv":
        df = pd.read_csv(file_path, dtype=str)
        return {"Sheet1": df}

    if ext == ".xlsx":
        xls = pd.ExcelFile(file_path, engine="openpyxl")
        sheets = {}
        for sheet_name in xls.sheet_names:
            df = pd.read_excel(xls, sheet_name=sheet_name, dtype=str)
            # Skip empty sheets
            if not df.empty and len(df.columns) > 1:
                sheets[sheet_name] = df
        if not sheets:
            raise ValueError("No valid sheets found in the Excel file.")
        return sheets

    raise ValueError(f"Unsupported file type: {ext}")


def offerings_from_frame(df: pd.DataFrame) -> List[ClassOffering]:
    """
    Group a long-format table (one row per enrollment) into class offerings.

    Rows are grouped by subject, year, semester and, when present, class
    name; offerings come out in first-seen order. Rows without a usable
    subject/year/semester are skipped.
    """
    mapping = suggest_column_mapping(df.columns)
    missing = [f for f in REQUIRED_COLUMNS if mapping.get(f) is None]
    if missing:
        raise RecordError(
            f"Required column(s) not found: {missing}. "
            f"Expected one of: {[COLUMN_ALIASES[f] for f in missing]}"
        )

    groups: Dict[Tuple[str, int, int, Optional[str]], List[Enrollment]] = {}
    skipped = 0
    for _, row in df.iterrows():
        subject = _to_text(row[mapping["subject"]])
        year = _to_int(row[mapping["year"]])
        semester = _to_int(row[mapping["semester"]])
        if subject is None or year is None or semester is None:
            skipped += 1
            continue
        name = _to_text(row[mapping["class"]]) if mapping.get("class") else None
        key = (subject, year, semester, name)
        groups.setdefault(key, []).append(_enrollment_from_mapping(row, mapping))

    if skipped:
        logger.warning("Skipped %d row(s) without subject/year/semester", skipped)

    return [
        ClassOffering(
            subject=subject,
            year=year,
            semester=semester,
            enrollments=tuple(enrollments),
            name=name,
        )
        for (subject, year, semester, name), enrollments in groups.items()
    ]


def offerings_from_upload(file_path: str, max_rows: Optional[int] = None) -> List[ClassOffering]:
    """Offerings of every sheet in an uploaded file, sheet by sheet."""
    sheets = parse_upload(file_path)
    total_rows = sum(len(df) for df in sheets.values())
    if max_rows is not None and total_rows > max_rows:
        raise RecordError(f"Upload has {total_rows} rows; the limit is {max_rows}.")

    offerings: List[ClassOffering] = []
    for sheet_name, df in sheets.items():
        sheet_offerings = offerings_from_frame(df)
        logger.debug("Sheet %r: %d offering(s)", sheet_name, len(sheet_offerings))
        offerings.extend(sheet_offerings)
    return offerings


# ── JSON payloads ───────────────────────────────────────────────────

def enrollments_from_payload(items: Any) -> List[Enrollment]:
    """Build enrollments from a list of dicts; None means no enrollments."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise RecordError("Enrollments must be a list.")

    enrollments = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise RecordError(f"Enrollment #{idx} must be an object.")
        enrollments.append(_enrollment_from_mapping(item, suggest_column_mapping(item.keys())))
    return enrollments


def offerings_from_payload(items: Any) -> List[ClassOffering]:
    """
    Build class offerings from JSON-like data:
    [{"subject": ..., "year": ..., "semester": ..., "enrollments": [...]}]
    """
    if not isinstance(items, list):
        raise RecordError("Classes must be a list.")

    offerings = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise RecordError(f"Class #{idx} must be an object.")
        mapping = suggest_column_mapping(item.keys())

        def get(field):
            key = mapping.get(field)
            return item.get(key) if key is not None else None

        subject = _to_text(get("subject"))
        year = _to_int(get("year"))
        semester = _to_int(get("semester"))
        if subject is None or year is None or semester is None:
            raise RecordError(f"Class #{idx} needs subject, year and semester.")

        keys_lower = {str(k).lower(): k for k in item.keys()}
        list_key = next((keys_lower[k] for k in ENROLLMENT_LIST_KEYS if k in keys_lower), None)
        enrollments = enrollments_from_payload(item.get(list_key) if list_key else None)

        offerings.append(ClassOffering(
            subject=subject,
            year=year,
            semester=semester,
            enrollments=tuple(enrollments),
            name=_to_text(get("class")),
        ))

    return offerings
