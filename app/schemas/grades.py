"""
Grade and admin panel schemas for Université Quiz
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PeriodResult(BaseModel):
    periode: int
    title: str
    notes: Dict[str, Any]
    moyenne: float


class YearResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    annee: int
    academic_year: Optional[str] = Field(None, alias="academicYear")
    classe: str
    periods: List[PeriodResult]


class StudentResults(BaseModel):
    """Transcript of one student: years ascending, each with all three periods"""
    option: str
    years: List[YearResult]


class ResultsResponse(BaseModel):
    success: bool = True
    results: StudentResults


class ResultsLookupRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)


class AdminLoginRequest(BaseModel):
    code: str = Field(..., max_length=256)


class AdminLoginResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    message: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class SaveNotesRequest(BaseModel):
    """Legacy first-year, first-period entry form"""
    code: str = Field(..., min_length=1, max_length=50)
    math: float
    physique: float
    info: float
    moyenne: Optional[float] = None


class SubjectListIn(BaseModel):
    classe: Union[int, str]
    periode: Union[int, str]
    # Either a list or its JSON encoding, as sent by the admin form
    matieres: Union[List[str], str]


class SubjectListOut(BaseModel):
    classe: str
    periode: str
    matieres: List[str]


class UpdateResultsRequest(BaseModel):
    """Upsert of one (class year, period) cell"""
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1, max_length=50)
    option: Optional[str] = None
    academic_year: Optional[str] = Field(None, alias="academicYear")
    classe: Union[int, str]
    periode: Union[int, str]
    notes: Dict[str, Any] = Field(default_factory=dict)
    email: Optional[str] = None


class UpdateFieldRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    field: Literal["option", "academicYear", "note", "moyenne"]
    value: Any = None
    annee: Optional[Union[int, str]] = None
    periode: Optional[Union[int, str]] = None
    matiere: Optional[str] = None


class StudentCodesResponse(BaseModel):
    success: bool = True
    students: List[str]
