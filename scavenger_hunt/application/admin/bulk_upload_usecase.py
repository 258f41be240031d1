import pandas as pd
from typing import Dict, Optional
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.presentation.schemas.question_schema import QuestionCreate
from scavenger_hunt.core.exceptions import NotFoundError, ValidationError
from .question_admin_usecase import create_question
from sqlalchemy.orm import Session
import logging
import io

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["title", "type", "content"]


def _cell(row, column: str) -> Optional[str]:
    if column not in row or pd.isna(row[column]):
        return None
    value = str(row[column]).strip()
    return value or None


def _parse_options(raw: Optional[str]) -> Optional[Dict[str, str]]:
    """'a=Paris|b=Rome' -> {'a': 'Paris', 'b': 'Rome'}"""
    if not raw:
        return None
    options = {}
    for part in raw.split("|"):
        if "=" not in part:
            raise ValueError(f"Option '{part}' must look like key=label")
        key, label = part.split("=", 1)
        options[key.strip()] = label.strip()
    return options


def _parse_bool(raw: Optional[str]) -> bool:
    return (raw or "").lower() in ("1", "true", "yes", "y")


def process_bulk_upload(db: Session, file_content: bytes, filename: str, event_id: str, default_max_file_size: int):
    try:
        logger.info(f"Processing bulk question upload: {filename} for event {event_id}")
        if not EventRepository(db).get_by_id(event_id):
            raise NotFoundError("Event not found")

        if filename.endswith('.csv'):
            df = pd.read_csv(io.BytesIO(file_content))
        elif filename.endswith(('.xlsx', '.xls')):
            df = pd.read_excel(io.BytesIO(file_content))
        else:
            raise ValidationError("Unsupported file format. Please upload CSV or XLSX.")

        # Clean column names
        df.columns = [str(c).strip().lower() for c in df.columns]

        for col in REQUIRED_COLUMNS:
            if col not in df.columns:
                raise ValidationError(f"Missing required column: {col}")

        inserted = 0
        failed = 0
        errors = []

        for index, row in df.iterrows():
            try:
                threshold = _cell(row, "ai_threshold")
                data = QuestionCreate(
                    event_id=event_id,
                    title=_cell(row, "title") or "",
                    slug=_cell(row, "slug"),
                    type=(_cell(row, "type") or "").lower(),
                    content=_cell(row, "content") or "",
                    options=_parse_options(_cell(row, "options")),
                    expected_answer=_cell(row, "expected_answer"),
                    ai_threshold=int(float(threshold)) if threshold else 5,
                    hint_enabled=_parse_bool(_cell(row, "hint_enabled")),
                    image_description=_cell(row, "image_description"),
                )
                create_question(db, data, default_max_file_size)
                inserted += 1
            except Exception as e:
                db.rollback()
                failed += 1
                errors.append(f"Row {index + 2}: {str(e)}")

        logger.info(f"Bulk upload finished. Inserted: {inserted}, Failed: {failed}")
        return {
            "total_rows": len(df),
            "inserted": inserted,
            "failed": failed,
            "errors": errors
        }

    except Exception as e:
        logger.error(f"Bulk upload process failed: {e}", exc_info=True)
        raise
