"""
Université Quiz Models Package
"""

from app.models.grades import GradeRecord, SubjectList
from app.models.quiz import Badge, Question, Quiz, QuizSession, Score, UserBadge
from app.models.user import RefreshToken, User

__all__ = [
    "User", "RefreshToken",
    "Quiz", "Question", "QuizSession", "Score", "Badge", "UserBadge",
    "GradeRecord", "SubjectList",
]
