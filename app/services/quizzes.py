"""
Quiz service
Grades submissions and manages the quizzes a user authors
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictException, DatabaseException, NotFoundException
from app.models.quiz import Question, Quiz, QuizSession, Score
from app.schemas.quiz import QuestionIn, QuestionOut, QuizCreate, QuizOut, QuizResult

logger = logging.getLogger(__name__)

UNANSWERED = "-1"
# No client-side timer yet, every answer is recorded with the same duration
PLACEHOLDER_COMPLETION_TIME = 10


def parse_answer(value: Any) -> Optional[int]:
    """Option index chosen by the user, or None when it is not a whole number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def result_message(correct: int, total: int) -> str:
    plural = "s" if correct > 1 else ""
    return f"Bonne{plural} : {correct}/{total}. Score enregistré."


class QuizGradingEngine:
    """Scores a submission and records it atomically"""

    def submit(self, db: Session, user_id: int, quiz_name: str, answers: Dict[str, Any]) -> QuizResult:
        """
        Score every question of the quiz and persist the attempt

        One audit row per question plus one score row are written in a single
        transaction; nothing is kept when any write fails.

        Raises:
            NotFoundException: unknown quiz name
            DatabaseException: the write failed and was rolled back
        """
        quiz = db.query(Quiz).filter(Quiz.name == quiz_name).first()
        if quiz is None:
            raise NotFoundException("Quiz inconnu.")

        questions = db.query(Question).filter(Question.quiz_id == quiz.id).order_by(Question.id).all()

        correct = 0
        try:
            for question in questions:
                raw = answers.get(question.key_name)
                # Audit column is String(50); grading uses the untruncated value
                user_answer = UNANSWERED if raw is None else str(raw).strip()[:50] or UNANSWERED
                is_correct = parse_answer(raw) == question.correct_index
                if is_correct:
                    correct += 1
                db.add(
                    QuizSession(
                        user_id=user_id,
                        quiz_id=quiz.id,
                        question_id=question.id,
                        user_answer=user_answer,
                        correct=is_correct,
                        completion_time=PLACEHOLDER_COMPLETION_TIME,
                    )
                )
            db.flush()
            db.add(self._summary_row(user_id, quiz.id, correct))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Quiz submission failed: {e}", extra={"quiz": quiz_name, "user_id": user_id})
            raise DatabaseException()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Quiz submitted",
            extra={"quiz": quiz_name, "user_id": user_id, "correct": correct, "total": len(questions)},
        )
        return QuizResult(correct=correct, total=len(questions), message=result_message(correct, len(questions)))

    @staticmethod
    def _summary_row(user_id: int, quiz_id: int, correct: int) -> Score:
        return Score(user_id=user_id, quiz_id=quiz_id, score=correct)


class QuizService:
    """CRUD on the quizzes a user created"""

    @staticmethod
    def list_for_user(db: Session, user_id: int) -> List[QuizOut]:
        quizzes = db.query(Quiz).filter(Quiz.created_by == user_id).order_by(Quiz.id).all()
        return [QuizService.to_out(quiz) for quiz in quizzes]

    @staticmethod
    def create(db: Session, data: QuizCreate, user_id: int) -> Quiz:
        quiz = Quiz(name=data.name.strip(), matiere=data.matiere.strip(), created_by=user_id)
        quiz.questions = QuizService._build_questions(data.questions)
        db.add(quiz)
        QuizService._commit(db)
        db.refresh(quiz)
        logger.info("Quiz created", extra={"quiz_id": quiz.id, "user_id": user_id})
        return quiz

    @staticmethod
    def update(db: Session, quiz_id: int, data: QuizCreate, user_id: int) -> Quiz:
        """Rename the quiz and replace all its questions"""
        quiz = QuizService._get_owned(db, quiz_id, user_id)
        quiz.name = data.name.strip()
        quiz.matiere = data.matiere.strip()
        quiz.questions.clear()
        # Old keys must be gone before replacements reuse them
        db.flush()
        quiz.questions.extend(QuizService._build_questions(data.questions))
        QuizService._commit(db)
        return quiz

    @staticmethod
    def delete(db: Session, quiz_id: int, user_id: int) -> None:
        quiz = QuizService._get_owned(db, quiz_id, user_id)
        db.query(QuizSession).filter(QuizSession.quiz_id == quiz.id).delete(synchronize_session=False)
        db.query(Score).filter(Score.quiz_id == quiz.id).delete(synchronize_session=False)
        db.delete(quiz)
        QuizService._commit(db)

    @staticmethod
    def to_out(quiz: Quiz) -> QuizOut:
        return QuizOut(
            id=quiz.id,
            name=quiz.name,
            matiere=quiz.matiere,
            questions_count=len(quiz.questions),
            questions=[QuestionOut.model_validate(q) for q in quiz.questions],
        )

    @staticmethod
    def _build_questions(questions: List[QuestionIn]) -> List[Question]:
        return [
            Question(
                key_name=(q.key_name or "").strip() or f"q{position}",
                question=q.question,
                options=list(q.options),
                correct_index=q.correct_index,
                explanation=q.explanation or "",
            )
            for position, q in enumerate(questions, start=1)
        ]

    @staticmethod
    def _get_owned(db: Session, quiz_id: int, user_id: int) -> Quiz:
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.created_by == user_id).first()
        if quiz is None:
            raise NotFoundException("Quiz introuvable.")
        return quiz

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictException("Nom de quiz ou clé de question déjà utilisé.")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Quiz write failed: {e}")
            raise DatabaseException()


grading_engine = QuizGradingEngine()
quiz_service = QuizService()
