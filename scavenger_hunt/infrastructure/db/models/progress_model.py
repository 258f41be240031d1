from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..base import Base
from ._ids import new_id


class ProgressModel(Base):
    __tablename__ = "progress"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(String(32), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    question_order = Column(JSON, nullable=True)  # shuffled list of question ids
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("UserModel", back_populates="progresses")
    event = relationship("EventModel", back_populates="progresses")
    answers = relationship("AnswerModel", back_populates="progress", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_progress_user_event"),
    )
