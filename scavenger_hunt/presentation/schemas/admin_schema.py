from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AdminLogin(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProgressOut(BaseModel):
    id: str
    user_id: str
    name: str
    event_id: str
    event_title: str
    completed: bool
    completed_questions: int
    total_questions: int
    created_at: Optional[datetime] = None


class AdminMetricsOut(BaseModel):
    total_users: int
    completed_users: int
    completion_rate: float  # percentage
    top_users: List[UserProgressOut]


class BackfillOut(BaseModel):
    checked: int
    updated: int
