from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session
import logging

from scavenger_hunt.application.answer_evaluator import AnswerEvaluator, EvaluationResult
from scavenger_hunt.application.registration_service import computed_status
from scavenger_hunt.core.config import Settings
from scavenger_hunt.core.exceptions import NotFoundError, ScavengerHuntError
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.storage.local_image_storage import LocalImageStorage, validate_image
from scavenger_hunt.presentation.api.errors import to_http_exception
from scavenger_hunt.presentation.dependencies import (
    get_answer_evaluator,
    get_app_settings,
    get_current_participant,
    get_db,
    get_image_storage,
)
from scavenger_hunt.presentation.schemas.answer_schema import (
    AnswerLookupOut,
    AnswerOut,
    AnswerSubmission,
    CompletionStats,
    EvaluationOut,
    ImageSubmission,
)

router = APIRouter(prefix="/answers", tags=["Answers"])
logger = logging.getLogger(__name__)


def _to_out(result: EvaluationResult) -> EvaluationOut:
    return EvaluationOut(
        status=result.status,
        ai_score=result.ai_score,
        explanation=result.explanation,
        applied=result.applied,
        completed=result.completed,
        stats=CompletionStats(
            correct_count=result.correct_count,
            total_questions=result.total_questions,
        ),
    )


@router.post("", response_model=EvaluationOut, status_code=status.HTTP_200_OK)
async def submit_answer(
    payload: AnswerSubmission,
    user_id: str = Depends(get_current_participant),
    db: Session = Depends(get_db),
    evaluator: AnswerEvaluator = Depends(get_answer_evaluator),
):
    """
    Grades a text, multiple-choice or already-uploaded image answer and stores it.
    """
    logger.info(f"Answer submitted by user_id={user_id} for question_id={payload.question_id}")
    try:
        progress = ProgressRepository(db).get_for_question(user_id, payload.question_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        submission = payload.submission
        if isinstance(submission, ImageSubmission):
            submission = submission.model_dump()

        result = await evaluator.evaluate_and_store(
            progress.id, payload.question_id, submission, retry=payload.retry
        )
        return _to_out(result)

    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception:
        logger.error(f"Answers API error for user_id={user_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.post("/image", response_model=EvaluationOut, status_code=status.HTTP_200_OK)
async def submit_image_answer(
    file: UploadFile = File(...),
    question_id: str = Form(..., alias="questionId"),
    retry: bool = Form(default=False),
    user_id: str = Depends(get_current_participant),
    db: Session = Depends(get_db),
    evaluator: AnswerEvaluator = Depends(get_answer_evaluator),
    storage: LocalImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_app_settings),
):
    """
    Uploads a photo for an image question and grades it in one step.
    The stored file is removed again if anything after the upload fails.
    """
    uploaded_url = None
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

        uploaded_url = storage.upload_image(data, ext, question.id, event.slug)
        result = await evaluator.evaluate_and_store(
            progress.id, question.id, {"url": uploaded_url}, retry=retry
        )
        return _to_out(result)

    except ScavengerHuntError as e:
        if uploaded_url:
            storage.cleanup_image(uploaded_url)
        raise to_http_exception(e)
    except Exception:
        logger.error(f"Image answer error for user_id={user_id}, question_id={question_id}", exc_info=True)
        if uploaded_url:
            storage.cleanup_image(uploaded_url)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("", response_model=AnswerLookupOut)
def get_answer(
    question_id: str = Query(..., alias="questionId"),
    user_id: str = Depends(get_current_participant),
    db: Session = Depends(get_db),
):
    """
    Returns the participant's stored answer for a question, or null.
    """
    try:
        answer = AnswerRepository(db).find_for_user(user_id, question_id)
        if not answer:
            return AnswerLookupOut(answer=None)

        return AnswerLookupOut(
            answer=AnswerOut(
                id=answer.id,
                progress_id=answer.progress_id,
                question_id=answer.question_id,
                submission=answer.submission,
                ai_score=answer.ai_score,
                status=answer.status,
                computed_status=computed_status(answer.status),
                created_at=answer.created_at,
            )
        )
    except Exception:
        logger.error(f"Answers GET API error for user_id={user_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
