from typing import List
from sqlalchemy.orm import Session
from scavenger_hunt.core.exceptions import ConflictError, NotFoundError
from scavenger_hunt.infrastructure.db.models import AnswerModel, HintStateModel, ProgressModel, QuestionModel
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.presentation.schemas.question_schema import QuestionCreate
from .slugs import slugify, unique_slug
import logging

logger = logging.getLogger(__name__)


def create_question(db: Session, data: QuestionCreate, default_max_file_size: int) -> QuestionModel:
    repo = QuestionRepository(db)
    event = EventRepository(db).get_by_id(data.event_id)
    if not event:
        raise NotFoundError("Event not found")

    if data.slug:
        slug = slugify(data.slug)
        if repo.slug_exists(slug):
            raise ConflictError(f"Slug '{slug}' is already taken")
    else:
        slug = unique_slug(f"{event.slug}-{data.title}", repo.slug_exists)

    question = QuestionModel(
        event_id=event.id,
        slug=slug,
        title=data.title,
        type=data.type,
        content=data.content,
        options=data.options,
        expected_answer=data.expected_answer,
        ai_threshold=data.ai_threshold,
        hint_enabled=data.hint_enabled,
    )
    if data.type == "image":
        question.image_description = data.image_description
        question.allowed_formats = data.allowed_formats or ["jpg", "png", "gif"]
        question.max_file_size = data.max_file_size or default_max_file_size

    return repo.save_question(question)


def list_questions(db: Session, event_id: str) -> List[QuestionModel]:
    if not EventRepository(db).get_by_id(event_id):
        raise NotFoundError("Event not found")
    return QuestionRepository(db).list_for_event(event_id)


def delete_question(db: Session, question_id: str) -> dict:
    repo = QuestionRepository(db)
    question = repo.get_by_id(question_id)
    if not question:
        raise NotFoundError("Question not found")
    title = question.title

    # keep stored orders consistent so completion stays reachable
    for progress in db.query(ProgressModel).filter(ProgressModel.event_id == question.event_id).all():
        if progress.question_order and question.id in progress.question_order:
            progress.question_order = [qid for qid in progress.question_order if qid != question.id]

    # sqlite does not enforce ON DELETE CASCADE; stale correct answers would still count
    db.query(AnswerModel).filter(AnswerModel.question_id == question.id).delete()
    db.query(HintStateModel).filter(HintStateModel.question_id == question.id).delete()
    repo.delete_question(question)
    return {"message": f"Question '{title}' deleted successfully"}
