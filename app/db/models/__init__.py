from app.db.models.base import Base
from app.db.models.courses import Course
from app.db.models.duel_results import DuelResult
from app.db.models.duels import Duel
from app.db.models.quiz_tests import QuizTest
from app.db.models.topics import Topic
from app.db.models.users import User

__all__ = [
    "Base",
    "Course",
    "Duel",
    "DuelResult",
    "QuizTest",
    "Topic",
    "User",
]
