from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ImageSubmission(BaseModel):
    url: str


class AnswerSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(..., validation_alias=AliasChoices("questionId", "question_id"))
    # "answer" is accepted as a synonym, as older clients send it
    submission: Optional[Union[str, ImageSubmission]] = Field(
        default=None, validation_alias=AliasChoices("submission", "answer")
    )
    retry: bool = False


class CompletionStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    correct_count: int = Field(..., alias="correctCount")
    total_questions: int = Field(..., alias="totalQuestions")


class EvaluationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["correct", "incorrect"]
    ai_score: int = Field(..., alias="aiScore")
    explanation: str
    completed: bool
    stats: CompletionStats
    # False when a stored correct answer was kept instead of this submission
    applied: bool = True


class AnswerOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    progress_id: str = Field(..., alias="progressId")
    question_id: str = Field(..., alias="questionId")
    submission: Any = None
    ai_score: Optional[int] = Field(default=None, alias="aiScore")
    status: Literal["pending", "correct", "incorrect"]
    computed_status: Literal["pending", "accepted", "rejected"] = Field(..., alias="computedStatus")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class AnswerLookupOut(BaseModel):
    answer: Optional[AnswerOut] = None


class UploadOut(BaseModel):
    url: str
