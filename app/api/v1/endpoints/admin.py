"""
Admin panel endpoints
Everything but /login requires the admin bearer token
"""

import hmac
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_admin_token_store, require_admin
from app.core.config import settings
from app.core.database import get_db
from app.core.logging import LoggerFactory
from app.middleware.rate_limit import auth_limit, limiter
from app.schemas.grades import (
    AdminLoginRequest,
    AdminLoginResponse,
    ResultsResponse,
    SaveNotesRequest,
    StudentCodesResponse,
    SubjectListIn,
    SubjectListOut,
    SuccessResponse,
    UpdateFieldRequest,
    UpdateResultsRequest,
)
from app.services.admin import admin_service
from app.services.admin_tokens import AdminTokenStore
from app.services.grades import grade_aggregator

router = APIRouter()
security_logger = LoggerFactory.get_security_logger()


def admin_code_matches(code: str) -> bool:
    """Constant-time comparison; an unset ADMIN_CODE matches nothing"""
    if not settings.ADMIN_CODE:
        return False
    return hmac.compare_digest(code.encode("utf-8"), settings.ADMIN_CODE.encode("utf-8"))


@router.post("/login", response_model=AdminLoginResponse, response_model_exclude_none=True)
@limiter.limit(auth_limit)
def admin_login(
    request: Request,
    payload: AdminLoginRequest,
    store: AdminTokenStore = Depends(get_admin_token_store),
):
    """Exchange the admin code for a bearer token"""
    if not admin_code_matches(payload.code):
        security_logger.warning("Admin login failed")
        return AdminLoginResponse(success=False, message="Code invalide.")

    security_logger.info("Admin logged in")
    return AdminLoginResponse(success=True, token=store.issue())


@router.post("/logout", response_model=SuccessResponse, response_model_exclude_none=True)
def admin_logout(
    token: str = Depends(require_admin),
    store: AdminTokenStore = Depends(get_admin_token_store),
):
    store.revoke(token)
    return SuccessResponse()


@router.get("/matieres", response_model=List[SubjectListOut], dependencies=[Depends(require_admin)])
def list_matieres(db: Session = Depends(get_db)):
    """Subject catalogue for every (class year, period)"""
    return admin_service.list_subject_lists(db)


@router.post("/matieres", response_model=SubjectListOut, dependencies=[Depends(require_admin)])
def save_matieres(payload: SubjectListIn, db: Session = Depends(get_db)):
    return admin_service.upsert_subject_list(db, payload)


@router.get("/students", response_model=StudentCodesResponse, dependencies=[Depends(require_admin)])
def list_students(db: Session = Depends(get_db)):
    """Distinct student codes, sorted"""
    return StudentCodesResponse(students=admin_service.list_student_codes(db))


@router.get("/get-results", response_model=ResultsResponse, dependencies=[Depends(require_admin)])
def get_results(code: str = Query(..., min_length=1, max_length=50), db: Session = Depends(get_db)):
    return ResultsResponse(results=grade_aggregator.lookup_by_student_code(db, code))


@router.post(
    "/update-results",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def update_results(payload: UpdateResultsRequest, db: Session = Depends(get_db)):
    """Upsert the notes of one (class year, period) cell"""
    admin_service.update_results(db, payload)
    return SuccessResponse(message="Résultats enregistrés.")


@router.post(
    "/update-field",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def update_field(payload: UpdateFieldRequest, db: Session = Depends(get_db)):
    admin_service.update_field(db, payload)
    return SuccessResponse()


@router.delete(
    "/student/{code}",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def delete_student(code: str, db: Session = Depends(get_db)):
    """Remove every grade record of a student"""
    admin_service.delete_student(db, code)
    return SuccessResponse(message="Étudiant supprimé.")


@router.post(
    "/save-notes",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def save_notes(payload: SaveNotesRequest, db: Session = Depends(get_db)):
    """Legacy entry form: first year, first period"""
    admin_service.save_notes(db, payload)
    return SuccessResponse(message="Notes sauvées.")
