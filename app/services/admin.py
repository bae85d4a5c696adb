"""
Admin panel service
Write side of the official grades and the per-period subject catalogue
"""

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseException, NotFoundException, ValidationException
from app.core.security import normalize_email
from app.models.grades import GradeRecord, SubjectList
from app.models.user import User
from app.schemas.grades import (
    SaveNotesRequest,
    SubjectListIn,
    SubjectListOut,
    UpdateFieldRequest,
    UpdateResultsRequest,
)
from app.services.grades import CLASS_TITLES, PERIOD_TITLES, mean_of_notes, parse_level

logger = logging.getLogger(__name__)

SAVE_NOTES_SUBJECTS = ("Mathématiques", "Physique", "Informatique")


def coerce_note(value: Any) -> Optional[float]:
    """Turn a submitted grade into a number; blank means "not graded" """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationException("Note invalide.")
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        raise ValidationException("Note invalide.")


def clean_notes(notes: Dict[str, Any]) -> Dict[str, float]:
    cleaned = {}
    for matiere, value in notes.items():
        note = coerce_note(value)
        if note is not None and str(matiere).strip():
            cleaned[str(matiere).strip()] = note
    return cleaned


class AdminService:
    """Grade entry and subject catalogue management"""

    @staticmethod
    def list_subject_lists(db: Session) -> List[SubjectListOut]:
        rows = db.query(SubjectList).order_by(SubjectList.annee, SubjectList.periode).all()
        return [
            SubjectListOut(
                classe=CLASS_TITLES[row.annee],
                periode=PERIOD_TITLES[row.periode],
                matieres=list(row.matieres or []),
            )
            for row in rows
        ]

    @staticmethod
    def upsert_subject_list(db: Session, data: SubjectListIn) -> SubjectListOut:
        annee = parse_level(data.classe, "classe")
        periode = parse_level(data.periode, "periode")

        matieres = data.matieres
        if isinstance(matieres, str):
            try:
                matieres = json.loads(matieres)
            except ValueError:
                raise ValidationException("matieres invalides.")
        if not isinstance(matieres, list) or not all(isinstance(m, str) for m in matieres):
            raise ValidationException("matieres invalides.")
        matieres = [m.strip() for m in matieres if m.strip()]

        row = db.get(SubjectList, (annee, periode))
        if row is None:
            row = SubjectList(annee=annee, periode=periode)
            db.add(row)
        row.matieres = matieres
        AdminService._commit(db)

        return SubjectListOut(
            classe=CLASS_TITLES[annee], periode=PERIOD_TITLES[periode], matieres=matieres
        )

    @staticmethod
    def list_student_codes(db: Session) -> List[str]:
        rows = db.query(GradeRecord.code_etudiant).distinct().all()
        return sorted(code for (code,) in rows)

    @staticmethod
    def update_results(db: Session, data: UpdateResultsRequest) -> GradeRecord:
        """Upsert one cell; the stored average is recomputed from the notes"""
        code = data.code.strip()
        annee = parse_level(data.classe, "classe")
        periode = parse_level(data.periode, "periode")
        notes = clean_notes(data.notes)

        owner_id = None
        if data.email:
            owner = db.query(User).filter(User.email == normalize_email(data.email)).first()
            if owner is None:
                raise NotFoundException("Utilisateur introuvable.")
            owner_id = owner.id

        record = AdminService._get_or_create_cell(db, code, annee, periode)
        record.notes = notes
        record.moyenne = round(mean_of_notes(notes), 2)
        if data.academic_year is not None:
            record.academic_year = data.academic_year

        if data.option is not None or owner_id is not None:
            for other in AdminService._records_for(db, code) + [record]:
                if data.option is not None:
                    other.option = data.option
                if owner_id is not None:
                    other.user_id = owner_id

        AdminService._commit(db)
        logger.info("Grades updated", extra={"code": code, "annee": annee, "periode": periode})
        return record

    @staticmethod
    def update_field(db: Session, data: UpdateFieldRequest) -> None:
        code = data.code.strip()

        if data.field == "option":
            records = AdminService._records_for(db, code)
            if not records:
                raise NotFoundException("Étudiant introuvable.")
            for record in records:
                record.option = None if data.value is None else str(data.value)

        elif data.field == "academicYear":
            annee = parse_level(data.annee, "annee")
            records = [r for r in AdminService._records_for(db, code) if r.annee == annee]
            if not records:
                raise NotFoundException("Étudiant introuvable.")
            for record in records:
                record.academic_year = None if data.value is None else str(data.value)

        elif data.field == "note":
            annee = parse_level(data.annee, "annee")
            periode = parse_level(data.periode, "periode")
            if not data.matiere or not data.matiere.strip():
                raise ValidationException("matiere requise.")
            matiere = data.matiere.strip()

            record = AdminService._get_or_create_cell(db, code, annee, periode)
            notes = dict(record.notes or {})
            note = coerce_note(data.value)
            if note is None:
                notes.pop(matiere, None)
            else:
                notes[matiere] = note
            # Reassign so the JSON column is flagged dirty
            record.notes = notes
            record.moyenne = round(mean_of_notes(notes), 2)

        else:  # moyenne
            annee = parse_level(data.annee, "annee")
            periode = parse_level(data.periode, "periode")
            record = db.get(GradeRecord, (code, annee, periode))
            if record is None:
                raise NotFoundException("Étudiant introuvable.")
            moyenne = coerce_note(data.value)
            record.moyenne = 0 if moyenne is None else moyenne

        AdminService._commit(db)

    @staticmethod
    def delete_student(db: Session, code: str) -> int:
        deleted = (
            db.query(GradeRecord)
            .filter(GradeRecord.code_etudiant == code.strip())
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise NotFoundException("Étudiant introuvable.")
        AdminService._commit(db)
        logger.info("Student records deleted", extra={"code": code, "rows": deleted})
        return deleted

    @staticmethod
    def save_notes(db: Session, data: SaveNotesRequest) -> GradeRecord:
        """First-year, first-period entry with the three core subjects"""
        notes = dict(zip(SAVE_NOTES_SUBJECTS, (data.math, data.physique, data.info)))
        moyenne = data.moyenne if data.moyenne is not None else mean_of_notes(notes)

        record = AdminService._get_or_create_cell(db, data.code.strip(), 1, 1)
        record.notes = notes
        record.moyenne = round(moyenne, 2)
        AdminService._commit(db)
        return record

    @staticmethod
    def _records_for(db: Session, code: str) -> List[GradeRecord]:
        return db.query(GradeRecord).filter(GradeRecord.code_etudiant == code).all()

    @staticmethod
    def _get_or_create_cell(db: Session, code: str, annee: int, periode: int) -> GradeRecord:
        record = db.get(GradeRecord, (code, annee, periode))
        if record is not None:
            return record

        # New cells inherit the student's option and owner
        sibling = db.query(GradeRecord).filter(GradeRecord.code_etudiant == code).first()
        record = GradeRecord(
            code_etudiant=code,
            annee=annee,
            periode=periode,
            notes={},
            moyenne=0,
            option=sibling.option if sibling else None,
            user_id=sibling.user_id if sibling else None,
        )
        db.add(record)
        return record

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Admin write failed: {e}")
            raise DatabaseException()


admin_service = AdminService()
