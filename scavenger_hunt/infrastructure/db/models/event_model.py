from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..base import Base
from ._ids import new_id


class EventModel(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships with cascade delete
    questions = relationship("QuestionModel", back_populates="event", cascade="all, delete-orphan")
    progresses = relationship("ProgressModel", back_populates="event", cascade="all, delete-orphan")
