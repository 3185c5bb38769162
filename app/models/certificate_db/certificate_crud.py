from typing import List, Optional, Set
from uuid import UUID
from sqlalchemy.orm import Session, joinedload

from app.models.certificate_db.certificate_db import Certificate
from app.models.certificate_db.course_completion_db import CourseCompletion
from app.models.content_db.chapter_db import Chapter
from app.models.quiz_db.quiz_attempt_db import QuizAttempt
from app.models.quiz_db.quiz_db import Quiz


def get_certificate_by_attempt(db: Session, attempt_id: UUID) -> Optional[Certificate]:
    return db.query(Certificate).filter(Certificate.attempt_id == attempt_id).first()


def get_user_certificate(db: Session, user_id: UUID, certificate_id: UUID) -> Optional[Certificate]:
    return (
        db.query(Certificate)
        .filter(Certificate.id == certificate_id, Certificate.user_id == user_id)
        .first()
    )


def list_user_certificates(db: Session, user_id: UUID) -> List[Certificate]:
    """All certificates of a user, earliest first, with the course chain loaded."""
    return (
        db.query(Certificate)
        .options(
            joinedload(Certificate.attempt)
            .joinedload(QuizAttempt.quiz)
            .joinedload(Quiz.chapter)
            .joinedload(Chapter.course)
        )
        .filter(Certificate.user_id == user_id)
        .order_by(Certificate.issued_at.asc(), Certificate.id.asc())
        .all()
    )


def get_course_completion(db: Session, user_id: UUID, course_id: UUID) -> Optional[CourseCompletion]:
    return (
        db.query(CourseCompletion)
        .filter(CourseCompletion.user_id == user_id, CourseCompletion.course_id == course_id)
        .first()
    )


def get_completed_course_ids(db: Session, user_id: UUID) -> Set[UUID]:
    rows = db.query(CourseCompletion.course_id).filter(CourseCompletion.user_id == user_id).all()
    return {row.course_id for row in rows}
