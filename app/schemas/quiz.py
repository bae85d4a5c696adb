"""
Quiz schemas for Université Quiz
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class QuizSubmission(BaseModel):
    """Answers keyed by question key_name; values are option indexes"""
    answers: Dict[str, Any] = Field(default_factory=dict)


class QuizResult(BaseModel):
    correct: int
    total: int
    message: str


class QuestionIn(BaseModel):
    """Question as written by a quiz author"""
    key_name: Optional[str] = Field(None, max_length=100)
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_index: int = Field(..., validation_alias=AliasChoices("correct_index", "correct"))
    explanation: Optional[str] = ""

    @model_validator(mode="after")
    def check_correct_index(self):
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError("correct_index doit désigner une des options.")
        return self


class QuizCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    matiere: str = Field(..., min_length=1, max_length=100)
    questions: List[QuestionIn] = Field(..., min_length=1)


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key_name: str
    question: str
    options: List[str]
    correct_index: int
    explanation: Optional[str] = None


class QuizOut(BaseModel):
    """Quiz owned by the caller, with its questions"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    matiere: str
    questions_count: int
    questions: List[QuestionOut]


class QuizCreated(BaseModel):
    success: bool = True
    id: int
