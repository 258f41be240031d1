from typing import List, Optional
import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import ProgressModel, QuestionModel

logger = logging.getLogger(__name__)


class ProgressRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, progress_id: str) -> Optional[ProgressModel]:
        stmt = (
            select(ProgressModel)
            .where(ProgressModel.id == progress_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_user(self, user_id: str, event_id: Optional[str] = None) -> Optional[ProgressModel]:
        """
        The participant's progress for an event, or their most recent one when
        no event is given.
        """
        query = self.db.query(ProgressModel).filter(ProgressModel.user_id == user_id)
        if event_id:
            query = query.filter(ProgressModel.event_id == event_id)
        progress = query.order_by(ProgressModel.created_at.desc()).first()
        if progress is None:
            logger.info(f"No progress found for user_id={user_id}, event_id={event_id}")
        return progress

    def get_question_count(self, progress: ProgressModel) -> int:
        if progress.question_order:
            return len(progress.question_order)
        # Legacy rows without a stored order fall back to the event's questions
        stmt = select(func.count()).select_from(QuestionModel).where(QuestionModel.event_id == progress.event_id)
        return int(self.db.execute(stmt).scalar_one())

    def mark_completed(self, progress_id: str) -> bool:
        """
        Flip completed false -> true. Returns False when another request already did.
        """
        result = self.db.execute(
            update(ProgressModel)
            .where(ProgressModel.id == progress_id, ProgressModel.completed.is_(False))
            .values(completed=True)
        )
        flipped = result.rowcount == 1
        if flipped:
            logger.info(f"Progress progress_id={progress_id} marked completed")
        return flipped

    def create_or_reset(self, user_id: str, event_id: str, question_order: List[str]) -> ProgressModel:
        """
        Start a fresh hunt attempt: new question order, completed reset to False.
        """
        progress = (
            self.db.query(ProgressModel)
            .filter(ProgressModel.user_id == user_id, ProgressModel.event_id == event_id)
            .first()
        )
        try:
            if progress:
                progress.question_order = question_order
                progress.completed = False
                logger.info(f"Reset progress_id={progress.id} for user_id={user_id}, event_id={event_id}")
            else:
                progress = ProgressModel(
                    user_id=user_id,
                    event_id=event_id,
                    question_order=question_order,
                    completed=False,
                )
                self.db.add(progress)
            self.db.commit()
            self.db.refresh(progress)
            logger.info(f"Progress progress_id={progress.id} ready with {len(question_order)} questions")
            return progress
        except IntegrityError:
            # A concurrent registration created the row first
            self.db.rollback()
            progress = (
                self.db.query(ProgressModel)
                .filter(ProgressModel.user_id == user_id, ProgressModel.event_id == event_id)
                .first()
            )
            if progress is None:
                raise
            progress.question_order = question_order
            progress.completed = False
            self.db.commit()
            self.db.refresh(progress)
            return progress

    def get_for_question(self, user_id: str, question_id: str) -> Optional[ProgressModel]:
        """
        The participant's progress for the event a question belongs to; falls
        back to their latest progress when the question is unknown.
        """
        event_id = (
            self.db.query(QuestionModel.event_id)
            .filter(QuestionModel.id == question_id)
            .scalar()
        )
        return self.get_for_user(user_id, event_id)
