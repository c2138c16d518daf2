from app.game.duels.service import DuelService
from app.game.duels.types import CourseSource, QuestionSource, QuizTestSource

__all__ = [
    "CourseSource",
    "DuelService",
    "QuestionSource",
    "QuizTestSource",
]
