"""
Quiz submission endpoint
Answers with plain text, like the quiz page expects
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.database import get_db
from app.core.exceptions import QuizAppException
from app.middleware.rate_limit import limiter, quiz_limit
from app.schemas.auth import Identity
from app.schemas.quiz import QuizSubmission
from app.services.quizzes import grading_engine

router = APIRouter()


@router.post("/{quiz_name}", response_class=PlainTextResponse)
@limiter.limit(quiz_limit)
def submit_quiz(
    request: Request,
    quiz_name: str,
    payload: QuizSubmission,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Grade a submission: "Bonne(s) : n/total. Score enregistré." """
    try:
        result = grading_engine.submit(db, identity.id, quiz_name, payload.answers)
    except QuizAppException as e:
        return PlainTextResponse(e.message, status_code=e.status_code)
    return PlainTextResponse(result.message)
