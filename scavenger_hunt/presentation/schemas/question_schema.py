# question_schema.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

QuestionType = Literal["text", "multiple_choice", "image"]


class QuestionCreate(BaseModel):
    event_id: str
    title: str = Field(..., min_length=1)
    slug: Optional[str] = None
    type: QuestionType
    content: str = Field(..., min_length=1)
    options: Optional[Dict[str, str]] = None
    expected_answer: Optional[str] = None
    ai_threshold: int = Field(default=5, ge=0, le=10)
    hint_enabled: bool = False
    image_description: Optional[str] = None
    allowed_formats: Optional[List[str]] = None
    max_file_size: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_type_specific_fields(self):
        if self.type == "multiple_choice":
            if not self.options or len(self.options) < 2:
                raise ValueError("multiple_choice questions need at least 2 options")
            if not self.expected_answer or self.expected_answer not in self.options:
                raise ValueError("expected_answer must be one of the option keys")
        elif self.type == "text":
            if not self.expected_answer or not self.expected_answer.strip():
                raise ValueError("text questions need an expected_answer")
            self.options = None
        else:
            if not self.image_description or not self.image_description.strip():
                raise ValueError("image questions need an image_description")
            self.options = None
        return self


class QuestionPublicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    slug: str
    title: str
    type: QuestionType
    content: str
    options: Optional[Dict[str, str]] = None
    hint_enabled: bool
    image_description: Optional[str] = None
    allowed_formats: Optional[List[str]] = None
    max_file_size: Optional[int] = None


class QuestionOut(QuestionPublicOut):
    expected_answer: Optional[str] = None
    ai_threshold: int
    created_at: Optional[datetime] = None  # Admin sees everything
