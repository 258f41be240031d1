from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .question_schema import QuestionPublicOut


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    event_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("eventId", "event_id"))


class RegisterOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    progress_id: str = Field(..., alias="progressId")
    event_id: str = Field(..., alias="eventId")


class StartProgressRequest(BaseModel):
    event_slug: str = Field(..., validation_alias=AliasChoices("eventSlug", "event_slug"))


class StartProgressOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    progress_id: str = Field(..., alias="progressId")
    question_order: List[str] = Field(..., alias="questionOrder")


class QuestionWithStatus(QuestionPublicOut):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    answered: bool = False
    computed_status: Literal["pending", "accepted", "rejected"] = Field(default="pending", alias="computedStatus")
    ai_score: Optional[int] = Field(default=None, alias="aiScore")
    submission: Any = None


class ProgressFlag(BaseModel):
    completed: bool


class ProgressStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed_count: int = Field(..., alias="completedCount")
    total_count: int = Field(..., alias="totalCount")


class ProgressOut(BaseModel):
    progress: ProgressFlag
    questions: List[QuestionWithStatus]
    stats: ProgressStats
