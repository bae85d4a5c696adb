"""
Grade aggregation service

Builds a student's transcript (class year -> period -> subjects) from
grade_records and reconciles each stored average against its notes.
"""

import logging
from numbers import Real
from typing import Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ValidationException
from app.models.grades import GradeRecord
from app.models.user import User
from app.schemas.grades import PeriodResult, StudentResults, YearResult

logger = logging.getLogger(__name__)

LEVELS = (1, 2, 3)
CLASS_TITLES = {1: "1ère année", 2: "2ème année", 3: "3ème année"}
PERIOD_TITLES = {1: "1ère période", 2: "2ème période", 3: "3ème période"}

# Stored and recomputed averages may differ by this much before the stored one is distrusted
AVERAGE_TOLERANCE = 0.01


def is_numeric_note(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def mean_of_notes(notes: Optional[Dict]) -> float:
    """Mean of the numeric notes; other values are ignored, an empty set averages 0"""
    values = [float(v) for v in (notes or {}).values() if is_numeric_note(v)]
    if not values:
        return 0.0
    return sum(values) / len(values)


def reconcile_average(stored: Optional[float], notes: Optional[Dict]) -> float:
    """
    Return the average to report for a cell

    A missing or zero stored average, or one further than AVERAGE_TOLERANCE from
    the mean of the notes, is replaced by that mean rounded to 2 places.
    """
    mean = mean_of_notes(notes)
    if not stored or abs(stored - mean) > AVERAGE_TOLERANCE:
        return round(mean, 2)
    return stored


def parse_level(value: Union[int, str, None], kind: str = "classe") -> int:
    """
    Accept 1..3 as a number, a numeric string or a title ("2ème année", "3ème période")
    """
    if isinstance(value, bool) or value is None:
        raise ValidationException(f"{kind} invalide.")

    if isinstance(value, int):
        level = value
    else:
        text = str(value).strip()
        titles = {**{t: n for n, t in CLASS_TITLES.items()}, **{t: n for n, t in PERIOD_TITLES.items()}}
        if text.isdecimal():
            level = int(text)
        elif text in titles:
            level = titles[text]
        else:
            raise ValidationException(f"{kind} invalide.")

    if level not in LEVELS:
        raise ValidationException(f"{kind} invalide.")
    return level


class GradeAggregator:
    """Read side of the official grades"""

    def lookup_by_student_code(self, db: Session, code: str) -> StudentResults:
        code = code.strip()
        records = (
            db.query(GradeRecord)
            .filter(GradeRecord.code_etudiant == code)
            .order_by(GradeRecord.annee, GradeRecord.periode)
            .all()
        )
        if not records:
            raise NotFoundException("Aucun résultat pour ce code.")

        owner = None
        owner_ids = {r.user_id for r in records if r.user_id is not None}
        if owner_ids:
            owner = db.get(User, min(owner_ids))
        return self.build_results(records, owner)

    def lookup_by_user(self, db: Session, user_id: int) -> StudentResults:
        records = (
            db.query(GradeRecord)
            .filter(GradeRecord.user_id == user_id)
            .order_by(GradeRecord.annee, GradeRecord.periode, GradeRecord.code_etudiant)
            .all()
        )
        if not records:
            raise NotFoundException("Aucun résultat pour ce compte.")
        return self.build_results(records, db.get(User, user_id))

    def user_owns_code(self, db: Session, user_id: int, code: str) -> bool:
        return (
            db.query(GradeRecord.code_etudiant)
            .filter(GradeRecord.code_etudiant == code.strip(), GradeRecord.user_id == user_id)
            .first()
            is not None
        )

    @staticmethod
    def build_results(records: Iterable[GradeRecord], owner: Optional[User] = None) -> StudentResults:
        records = list(records)
        cells: Dict[Tuple[int, int], GradeRecord] = {}
        for record in records:
            cells.setdefault((record.annee, record.periode), record)

        years: List[YearResult] = []
        for annee in LEVELS:
            year_cells = [cells.get((annee, periode)) for periode in LEVELS]
            if not any(cell is not None and cell.notes for cell in year_cells):
                continue

            academic_year = next(
                (cell.academic_year for cell in year_cells if cell is not None and cell.academic_year),
                None,
            )
            periods = []
            for periode, cell in zip(LEVELS, year_cells):
                notes = dict(cell.notes or {}) if cell is not None else {}
                stored = cell.moyenne if cell is not None else None
                periods.append(
                    PeriodResult(
                        periode=periode,
                        title=PERIOD_TITLES[periode],
                        notes=notes,
                        moyenne=reconcile_average(stored, notes),
                    )
                )
            years.append(
                YearResult(
                    annee=annee,
                    academic_year=academic_year,
                    classe=CLASS_TITLES[annee],
                    periods=periods,
                )
            )

        if owner is not None and owner.option:
            option = owner.option
        elif records and records[0].option:
            option = records[0].option
        else:
            option = ""

        return StudentResults(option=option, years=years)


grade_aggregator = GradeAggregator()
