import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.certificate_db.certificate_crud import get_course_completion
from app.models.certificate_db.course_completion_db import CourseCompletion
from app.models.quiz_db.quiz_crud import count_passed_quizzes, get_course_quiz_ids
from app.models.quiz_db.quiz_db import Quiz

logger = logging.getLogger(__name__)


def record_course_completion(
    db: Session, user_id: UUID, quiz: Quiz, completed_at: datetime
) -> Optional[CourseCompletion]:
    """Mark the quiz's course complete once every chapter quiz is passed.

    Returns the completion row, or None while quizzes are still missing.
    Does not commit.
    """
    course = quiz.chapter.course
    quiz_ids = get_course_quiz_ids(course.chapters)
    if not quiz_ids or count_passed_quizzes(db, user_id, quiz_ids) < len(quiz_ids):
        return None

    existing = get_course_completion(db, user_id, course.id)
    if existing is not None:
        return existing

    completion = CourseCompletion(user_id=user_id, course_id=course.id, completed_at=completed_at)
    try:
        with db.begin_nested():
            db.add(completion)
    except IntegrityError:
        existing = get_course_completion(db, user_id, course.id)
        if existing is None:
            raise
        return existing

    logger.info("User %s completed course %s", user_id, course.id)
    return completion
