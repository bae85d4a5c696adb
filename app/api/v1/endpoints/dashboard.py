"""
Dashboard endpoints
Statistics, leaderboard, progression and the caller's own quizzes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.database import get_db
from app.schemas.auth import Identity
from app.schemas.dashboard import LeaderboardEntry, ProgressionResponse, StatsResponse
from app.schemas.grades import SuccessResponse
from app.schemas.quiz import QuizCreate, QuizCreated, QuizOut
from app.services.dashboard import dashboard_service
from app.services.quizzes import quiz_service

router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("/stats", response_model=StatsResponse)
def stats(db: Session = Depends(get_db)):
    return dashboard_service.stats(db)


@router.get("/classement", response_model=List[LeaderboardEntry])
def classement(
    matiere: Optional[str] = Query(None, max_length=100), db: Session = Depends(get_db)
):
    """Top 50 by cumulated score"""
    return dashboard_service.leaderboard(db, matiere)


@router.get("/progression", response_model=ProgressionResponse)
def progression(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return dashboard_service.progression(db, identity.id)


@router.get("/quizzes", response_model=List[QuizOut])
def list_quizzes(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Quizzes created by the caller"""
    return quiz_service.list_for_user(db, identity.id)


@router.post("/quizzes", response_model=QuizCreated, status_code=status.HTTP_201_CREATED)
def create_quiz(
    payload: QuizCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    quiz = quiz_service.create(db, payload, identity.id)
    return QuizCreated(id=quiz.id)


@router.put("/quizzes/{quiz_id}", response_model=SuccessResponse, response_model_exclude_none=True)
def update_quiz(
    quiz_id: int,
    payload: QuizCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Replace name, subject and questions of an owned quiz"""
    quiz_service.update(db, quiz_id, payload, identity.id)
    return SuccessResponse()


@router.delete("/quizzes/{quiz_id}", response_model=SuccessResponse, response_model_exclude_none=True)
def delete_quiz(
    quiz_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    quiz_service.delete(db, quiz_id, identity.id)
    return SuccessResponse()
