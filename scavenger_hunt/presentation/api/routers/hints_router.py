from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from scavenger_hunt.application.hint_service import HintService
from scavenger_hunt.core.exceptions import NotFoundError, ScavengerHuntError
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.presentation.api.errors import to_http_exception
from scavenger_hunt.presentation.dependencies import get_current_participant, get_db, get_hint_service
from scavenger_hunt.presentation.schemas.hint_schema import HintOut, HintRequest

router = APIRouter(prefix="/hints", tags=["Hints"])
logger = logging.getLogger(__name__)


@router.post("", response_model=HintOut, status_code=status.HTTP_200_OK)
async def request_hint(
    payload: HintRequest,
    user_id: str = Depends(get_current_participant),
    db: Session = Depends(get_db),
    service: HintService = Depends(get_hint_service),
):
    """
    Returns an AI hint for a question; limited to a few per question.
    """
    try:
        progress = ProgressRepository(db).get_for_question(user_id, payload.question_id)
        if not progress:
            raise NotFoundError("No progress found for user")

        result = await service.request_hint(progress.id, payload.question_id)
        return HintOut(hint=result.hint, hint_count=result.hint_count, max_hints=result.max_hints)

    except ScavengerHuntError as e:
        raise to_http_exception(e)
    except Exception:
        logger.error(f"Hints API error for user_id={user_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
