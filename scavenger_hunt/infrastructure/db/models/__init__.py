from .user_model import UserModel
from .event_model import EventModel
from .question_model import QuestionModel
from .progress_model import ProgressModel
from .answer_model import AnswerModel
from .hint_model import HintStateModel

__all__ = [
    "UserModel",
    "EventModel",
    "QuestionModel",
    "ProgressModel",
    "AnswerModel",
    "HintStateModel",
]
