from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.models.content_db.chapter_db import Chapter
from app.models.quiz_db.question_db import Question
from app.models.quiz_db.quiz_attempt_db import QuizAttempt
from app.models.quiz_db.quiz_db import Quiz


def get_active_quiz(db: Session, quiz_id: UUID) -> Optional[Quiz]:
    return (
        db.query(Quiz)
        .options(selectinload(Quiz.questions).selectinload(Question.answers))
        .filter(Quiz.id == quiz_id, Quiz.is_active.is_(True))
        .first()
    )


def get_quiz_by_chapter(db: Session, chapter_id: UUID) -> Optional[Quiz]:
    return db.query(Quiz).filter(Quiz.chapter_id == chapter_id).first()


def find_active_attempt(db: Session, user_id: UUID, quiz_id: UUID) -> Optional[QuizAttempt]:
    return (
        db.query(QuizAttempt)
        .filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.completed_at.is_(None),
        )
        .first()
    )


def get_user_attempt(db: Session, attempt_id: UUID, user_id: UUID, quiz_id: UUID) -> Optional[QuizAttempt]:
    return (
        db.query(QuizAttempt)
        .filter(
            QuizAttempt.id == attempt_id,
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id,
        )
        .first()
    )


def get_completed_attempt(db: Session, attempt_id: UUID, user_id: UUID) -> Optional[QuizAttempt]:
    return (
        db.query(QuizAttempt)
        .filter(
            QuizAttempt.id == attempt_id,
            QuizAttempt.user_id == user_id,
            QuizAttempt.completed_at.isnot(None),
        )
        .first()
    )


def complete_attempt(
    db: Session,
    attempt_id: UUID,
    completed_at: datetime,
    score: float,
    total_points: int,
    is_passed: bool,
    time_spent: int,
) -> bool:
    """Close an attempt only if it is still active.

    Returns False when another request already completed it.
    """
    updated = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.id == attempt_id, QuizAttempt.completed_at.is_(None))
        .update(
            {
                QuizAttempt.completed_at: completed_at,
                QuizAttempt.score: score,
                QuizAttempt.total_points: total_points,
                QuizAttempt.is_passed: is_passed,
                QuizAttempt.time_spent: time_spent,
            },
            synchronize_session="evaluate",
        )
    )
    return updated == 1


def list_completed_attempts(db: Session, user_id: UUID, quiz_id: Optional[UUID] = None) -> List[QuizAttempt]:
    query = db.query(QuizAttempt).filter(
        QuizAttempt.user_id == user_id,
        QuizAttempt.completed_at.isnot(None),
    )
    if quiz_id is not None:
        query = query.filter(QuizAttempt.quiz_id == quiz_id)
    return query.order_by(QuizAttempt.completed_at.desc()).all()


def list_completed_attempts_for_chapters(
    db: Session, user_id: UUID, chapter_ids: Sequence[UUID]
) -> List[QuizAttempt]:
    return (
        db.query(QuizAttempt)
        .join(Quiz, QuizAttempt.quiz_id == Quiz.id)
        .filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.completed_at.isnot(None),
            Quiz.chapter_id.in_(list(chapter_ids)),
        )
        .order_by(QuizAttempt.completed_at.asc())
        .all()
    )


def count_passed_quizzes(db: Session, user_id: UUID, quiz_ids: Sequence[UUID]) -> int:
    if not quiz_ids:
        return 0
    return (
        db.query(func.count(func.distinct(QuizAttempt.quiz_id)))
        .filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id.in_(list(quiz_ids)),
            QuizAttempt.is_passed.is_(True),
            QuizAttempt.completed_at.isnot(None),
        )
        .scalar()
    ) or 0


def get_course_quiz_ids(chapters: Sequence[Chapter]) -> List[UUID]:
    return [chapter.quiz.id for chapter in chapters if chapter.quiz is not None]
