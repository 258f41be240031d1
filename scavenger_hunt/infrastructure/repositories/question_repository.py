from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from ..db.models import QuestionModel

logger = logging.getLogger(__name__)


class QuestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_question(self, event_id: str, question_id: str) -> Optional[QuestionModel]:
        """
        A question only counts as found when it belongs to the given event.
        """
        logger.debug(f"Fetching question_id={question_id} for event_id={event_id}")
        question = (
            self.db.query(QuestionModel)
            .filter(QuestionModel.id == question_id, QuestionModel.event_id == event_id)
            .first()
        )
        if not question:
            logger.warning(f"Question not found: question_id={question_id}, event_id={event_id}")
        return question

    def get_by_id(self, question_id: str) -> Optional[QuestionModel]:
        return self.db.query(QuestionModel).filter(QuestionModel.id == question_id).first()

    def get_by_slug(self, slug: str) -> Optional[QuestionModel]:
        logger.debug(f"Fetching question by slug={slug}")
        return self.db.query(QuestionModel).filter(QuestionModel.slug == slug).first()

    def list_for_event(self, event_id: str) -> List[QuestionModel]:
        questions = (
            self.db.query(QuestionModel)
            .filter(QuestionModel.event_id == event_id)
            .order_by(QuestionModel.created_at.asc())
            .all()
        )
        logger.info(f"Found {len(questions)} questions for event_id={event_id}")
        return questions

    def list_ids_for_event(self, event_id: str) -> List[str]:
        rows = self.db.query(QuestionModel.id).filter(QuestionModel.event_id == event_id).all()
        return [row[0] for row in rows]

    def slug_exists(self, slug: str) -> bool:
        return self.db.query(QuestionModel.id).filter(QuestionModel.slug == slug).first() is not None

    def save_question(self, question: QuestionModel) -> QuestionModel:
        logger.info(f"Saving new question for event_id={question.event_id}")
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        logger.info(f"Successfully saved question_id={question.id} for event_id={question.event_id}")
        return question

    def delete_question(self, question: QuestionModel) -> None:
        logger.info(f"Deleting question_id={question.id}")
        self.db.delete(question)
        self.db.commit()
