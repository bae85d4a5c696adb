"""
Official results endpoints for students
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundException
from app.schemas.auth import Identity
from app.schemas.grades import ResultsLookupRequest, ResultsResponse
from app.services.grades import grade_aggregator

router = APIRouter()


@router.post("", response_model=ResultsResponse)
def lookup_by_code(
    payload: ResultsLookupRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Transcript for a student code"""
    if settings.RESULTS_REQUIRE_OWNERSHIP and not grade_aggregator.user_owns_code(
        db, identity.id, payload.code
    ):
        # Same answer as an unknown code
        raise NotFoundException("Aucun résultat pour ce code.")
    return ResultsResponse(results=grade_aggregator.lookup_by_student_code(db, payload.code))


@router.get("", response_model=ResultsResponse)
def my_results(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Transcript of the records linked to the caller's account"""
    return ResultsResponse(results=grade_aggregator.lookup_by_user(db, identity.id))
