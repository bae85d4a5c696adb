"""
Official grade models for Université Quiz
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String

from app.core.database import Base
from app.core.security import utcnow


class GradeRecord(Base):
    """
    Grades of one student for one (class year, period) cell

    `notes` maps subject name to grade; `moyenne` is the stored average, which
    readers reconcile against the notes before returning it.
    """
    __tablename__ = "grade_records"

    code_etudiant = Column(String(50), primary_key=True)
    annee = Column(Integer, primary_key=True)  # 1..3
    periode = Column(Integer, primary_key=True)  # 1..3

    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    option = Column(String(100), nullable=True)
    academic_year = Column(String(20), nullable=True)  # e.g. "2024-2025"
    notes = Column(JSON, nullable=False, default=dict)
    moyenne = Column(Float, nullable=True, default=0)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class SubjectList(Base):
    """Subjects taught for a (class year, period), used by the admin panel"""
    __tablename__ = "subject_lists"

    annee = Column(Integer, primary_key=True)
    periode = Column(Integer, primary_key=True)
    matieres = Column(JSON, nullable=False, default=list)
