from typing import List
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session
from scavenger_hunt.application.admin.bulk_upload_usecase import process_bulk_upload
from scavenger_hunt.application.admin.event_admin_usecase import check_slug, create_event
from scavenger_hunt.application.admin.metrics_usecase import compute_metrics, list_user_progress
from scavenger_hunt.application.admin.progress_backfill_usecase import backfill_completion
from scavenger_hunt.application.admin.question_admin_usecase import create_question, delete_question, list_questions
from scavenger_hunt.core.config import Settings
from scavenger_hunt.core.exceptions import ScavengerHuntError
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.presentation.api.errors import to_http_exception
from scavenger_hunt.presentation.dependencies import admin_required, get_app_settings, get_db
from scavenger_hunt.presentation.schemas.admin_schema import AdminMetricsOut, BackfillOut, UserProgressOut
from scavenger_hunt.presentation.schemas.bulk_question_schema import BulkUploadResponse
from scavenger_hunt.presentation.schemas.event_schema import EventCreate, EventOut, SlugCheckOut
from scavenger_hunt.presentation.schemas.question_schema import QuestionCreate, QuestionOut
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/events", response_model=List[EventOut])
def admin_list_events(db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    return EventRepository(db).list_events()


@router.post("/events", response_model=EventOut, status_code=201)
def add_event(data: EventCreate, db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    try:
        logger.info(f"Admin {admin['sub']} is creating event: {data.title}")
        return create_event(db, data)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/events/check-slug", response_model=SlugCheckOut)
def admin_check_slug(slug: str = Query(..., min_length=1), db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    return check_slug(db, slug)


@router.get("/questions", response_model=List[QuestionOut])
def admin_list_questions(
    event_id: str = Query(..., alias="eventId"),
    db: Session = Depends(get_db),
    admin: dict = Depends(admin_required),
):
    try:
        return list_questions(db, event_id)
    except ScavengerHuntError as e:
        raise to_http_exception(e)


@router.post("/questions", response_model=QuestionOut, status_code=201)
def add_question(
    data: QuestionCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(admin_required),
    settings: Settings = Depends(get_app_settings),
):
    try:
        logger.info(f"Admin {admin['sub']} is creating a {data.type} question for event: {data.event_id}")
        result = create_question(db, data, settings.DEFAULT_MAX_FILE_SIZE)
        logger.info(f"Question created successfully with ID: {result.id}")
        return result
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Unexpected error during question creation by admin {admin['sub']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/questions/{question_id}")
def remove_question(question_id: str, db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    try:
        return delete_question(db, question_id)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting question {question_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/questions/bulk-upload", response_model=BulkUploadResponse)
async def bulk_upload_questions(
    file: UploadFile = File(...),
    event_id: str = Form(..., alias="eventId"),
    db: Session = Depends(get_db),
    admin: dict = Depends(admin_required),
    settings: Settings = Depends(get_app_settings),
):
    logger.info(f"Admin {admin['sub']} initiated bulk upload for event: {event_id}")
    content = await file.read()
    try:
        result = process_bulk_upload(db, content, file.filename or "", event_id, settings.DEFAULT_MAX_FILE_SIZE)
        return BulkUploadResponse(**result)
    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except ValueError as e:
        logger.warning(f"Unreadable bulk upload file {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/users", response_model=List[UserProgressOut])
def admin_list_users(db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    return list_user_progress(db)


@router.get("/metrics", response_model=AdminMetricsOut)
def admin_metrics(db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    return compute_metrics(db)


@router.post("/progress/recompute", response_model=BackfillOut)
def admin_recompute_progress(db: Session = Depends(get_db), admin: dict = Depends(admin_required)):
    logger.info(f"Admin {admin['sub']} started a completion backfill")
    return backfill_completion(db)
