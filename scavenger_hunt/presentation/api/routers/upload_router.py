from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
import logging

from scavenger_hunt.core.config import Settings
from scavenger_hunt.core.exceptions import NotFoundError, ScavengerHuntError
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.storage.local_image_storage import LocalImageStorage, validate_image
from scavenger_hunt.presentation.api.errors import to_http_exception
from scavenger_hunt.presentation.dependencies import (
    get_app_settings,
    get_current_participant,
    get_db,
    get_image_storage,
)
from scavenger_hunt.presentation.schemas.answer_schema import UploadOut

router = APIRouter(prefix="/upload", tags=["Uploads"])
logger = logging.getLogger(__name__)


@router.post("/image", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    question_id: str = Form(..., alias="questionId"),
    user_id: str = Depends(get_current_participant),
    db: Session = Depends(get_db),
    storage: LocalImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_app_settings),
):
    """
    Stores a photo for an image question without grading it. The returned url
    can be submitted later through POST /answers as {"url": ...}.
    """
    try:
        progress = ProgressRepository(db).get_for_question(user_id, question_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        question = QuestionRepository(db).find_question(progress.event_id, question_id)
        if not question or question.type != "image":
            raise NotFoundError("Image question not found")

        data = await file.read()
        ext = validate_image(
            file.content_type,
            len(data),
            allowed_formats=question.allowed_formats,
            max_file_size=question.max_file_size or settings.DEFAULT_MAX_FILE_SIZE,
        )

        event = EventRepository(db).get_by_id(progress.event_id)
        if not event:
            raise NotFoundError("Event not found")

        url = storage.upload_image(data, ext, question.id, event.slug)
        return UploadOut(url=url)

    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception:
        logger.error(f"Image upload error for user_id={user_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
