"""
Dashboard service
Global statistics, leaderboard and per-user progression
"""

from typing import Dict, List, Optional

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from app.models.quiz import Badge, Question, Quiz, QuizSession, Score, UserBadge
from app.models.user import User
from app.schemas.dashboard import Feedback, LeaderboardEntry, ProgressionResponse, StatsResponse

LEADERBOARD_SIZE = 50
FEEDBACK_COUNT = 5
XP_PER_LEVEL = 100


def level_for_xp(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def level_name(level: int) -> str:
    if level == 1:
        return "Débutant"
    if level < 5:
        return "Intermédiaire"
    return "Expert"


class DashboardService:
    @staticmethod
    def stats(db: Session) -> StatsResponse:
        avg_time = db.query(func.avg(QuizSession.completion_time)).scalar()

        year = extract("year", Score.completed_at)
        month = extract("month", Score.completed_at)
        monthly = (
            db.query(year.label("y"), month.label("m"), func.avg(Score.score))
            .group_by(year, month)
            .order_by(year, month)
            .all()
        )

        return StatsResponse(
            totalUsers=db.query(func.count(User.id)).scalar() or 0,
            totalQuiz=db.query(func.count(Quiz.id)).scalar() or 0,
            totalScores=db.query(func.count(Score.id)).scalar() or 0,
            avgTime=round(avg_time or 0),
            monthlyLabels=[f"{int(y):04d}-{int(m):02d}" for y, m, _ in monthly],
            monthlyScores=[round(avg or 0) for _, _, avg in monthly],
        )

    @staticmethod
    def leaderboard(db: Session, matiere: Optional[str] = None) -> List[LeaderboardEntry]:
        """Top users by cumulated score, optionally restricted to one subject"""
        total = func.coalesce(func.sum(Score.score), 0)
        query = (
            db.query(User.id, User.name, User.xp, total.label("score"))
            .outerjoin(Score, Score.user_id == User.id)
            .outerjoin(Quiz, Score.quiz_id == Quiz.id)
        )
        if matiere:
            query = query.filter(Quiz.matiere == matiere)
        rows = (
            query.group_by(User.id, User.name, User.xp)
            .order_by(total.desc(), User.id)
            .limit(LEADERBOARD_SIZE)
            .all()
        )

        badges = DashboardService._badges_by_user(db, [row.id for row in rows])
        return [
            LeaderboardEntry(
                rank=rank,
                name=row.name,
                score=int(row.score or 0),
                xp=row.xp or 0,
                badges=badges.get(row.id, []),
            )
            for rank, row in enumerate(rows, start=1)
        ]

    @staticmethod
    def progression(db: Session, user_id: int) -> ProgressionResponse:
        xp = db.query(User.xp).filter(User.id == user_id).scalar() or 0
        level = level_for_xp(xp)

        feedbacks = (
            db.query(Question.question, QuizSession.user_answer, QuizSession.correct, Question.explanation)
            .join(Question, QuizSession.question_id == Question.id)
            .filter(QuizSession.user_id == user_id)
            .order_by(QuizSession.completed_at.desc(), QuizSession.id.desc())
            .limit(FEEDBACK_COUNT)
            .all()
        )

        per_subject = (
            db.query(Quiz.matiere, func.avg(Score.score))
            .join(Quiz, Score.quiz_id == Quiz.id)
            .filter(Score.user_id == user_id)
            .group_by(Quiz.matiere)
            .order_by(Quiz.matiere)
            .all()
        )

        return ProgressionResponse(
            xp=xp,
            level=level,
            levelName=level_name(level),
            badges=DashboardService._badges_by_user(db, [user_id]).get(user_id, []),
            feedbacks=[
                Feedback(question=q, user_answer=answer, correct=correct, explanation=explanation)
                for q, answer, correct, explanation in feedbacks
            ],
            matiereLabels=[matiere for matiere, _ in per_subject],
            matiereScores=[round(avg or 0) for _, avg in per_subject],
        )

    @staticmethod
    def _badges_by_user(db: Session, user_ids: List[int]) -> Dict[int, List[str]]:
        if not user_ids:
            return {}
        rows = (
            db.query(UserBadge.user_id, Badge.name)
            .join(Badge, UserBadge.badge_id == Badge.id)
            .filter(UserBadge.user_id.in_(user_ids))
            .order_by(Badge.name)
            .all()
        )
        badges: Dict[int, List[str]] = {}
        for uid, name in rows:
            badges.setdefault(uid, []).append(name)
        return badges


dashboard_service = DashboardService()
