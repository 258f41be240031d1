from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..base import Base
from ._ids import new_id

ANSWER_STATUSES = ("pending", "correct", "incorrect")


class AnswerModel(Base):
    __tablename__ = "answers"

    id = Column(String(32), primary_key=True, default=new_id)
    progress_id = Column(String(32), ForeignKey("progress.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    submission = Column(JSON, nullable=True)  # raw string, or {"url": ...} for images
    ai_score = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    progress = relationship("ProgressModel", back_populates="answers")
    question = relationship("QuestionModel", back_populates="answers")

    __table_args__ = (
        UniqueConstraint("progress_id", "question_id", name="uq_answer_progress_question"),
    )
