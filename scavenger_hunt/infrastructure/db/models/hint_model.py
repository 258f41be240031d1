from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from ..base import Base
from ._ids import new_id


class HintStateModel(Base):
    """Per (progress, question) hint counter, kept apart from the answer row."""

    __tablename__ = "hint_states"

    id = Column(String(32), primary_key=True, default=new_id)
    progress_id = Column(String(32), ForeignKey("progress.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    hint_count = Column(Integer, nullable=False, default=0)
    last_hint = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("progress_id", "question_id", name="uq_hint_progress_question"),
    )
