from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.presentation.dependencies import get_db
from scavenger_hunt.presentation.schemas.event_schema import EventOut
from scavenger_hunt.presentation.schemas.question_schema import QuestionPublicOut
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])


@router.get("/events", response_model=List[EventOut])
def list_events(db: Session = Depends(get_db)):
    try:
        return EventRepository(db).list_events()
    except Exception as e:
        logger.error(f"Error fetching events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/events/{slug}", response_model=EventOut)
def get_event(slug: str, db: Session = Depends(get_db)):
    event = EventRepository(db).get_by_slug(slug)
    if not event:
        logger.warning(f"Event not found: {slug}")
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/questions/{slug}")
def get_question(slug: str, db: Session = Depends(get_db)):
    """Question (without its expected answer) together with its event."""
    question = QuestionRepository(db).get_by_slug(slug)
    if not question:
        logger.warning(f"Question not found: {slug}")
        raise HTTPException(status_code=404, detail="Question not found")

    return {
        "question": QuestionPublicOut.model_validate(question).model_dump(),
        "event": EventOut.model_validate(question.event).model_dump(),
    }
