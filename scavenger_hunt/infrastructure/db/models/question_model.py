from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..base import Base
from ._ids import new_id

QUESTION_TYPES = ("text", "multiple_choice", "image")
DEFAULT_ALLOWED_FORMATS = ["jpg", "png", "gif"]


class QuestionModel(Base):
    __tablename__ = "questions"

    id = Column(String(32), primary_key=True, default=new_id)
    event_id = Column(String(32), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    title = Column(String, nullable=False)
    type = Column(String(20), nullable=False)  # text / multiple_choice / image
    content = Column(Text, nullable=False)
    options = Column(JSON, nullable=True)  # {"a": "Label", ...} for multiple_choice
    expected_answer = Column(Text, nullable=True)  # option key for multiple_choice
    ai_threshold = Column(Integer, nullable=False, default=5)
    hint_enabled = Column(Boolean, nullable=False, default=False)

    # image questions
    image_description = Column(Text, nullable=True)
    allowed_formats = Column(JSON, nullable=True)
    max_file_size = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("EventModel", back_populates="questions")
    answers = relationship("AnswerModel", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)
