from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import Forbidden, InvalidState, NotFound
from app.models.content_db.chapter_db import Chapter
from app.models.content_db.course_db import Course
from app.models.content_db.topic_db import Topic
from app.models.quiz_db.quiz_crud import get_quiz_by_chapter
from app.schemas.quiz.quiz_base import FreePreviewOut, FreePreviewQuiz


def first_free_course(topic: Topic):
    """The first active course of the first active subtopic, by creation date."""
    subtopics = sorted((s for s in topic.subtopics if s.is_active), key=lambda s: s.created_at)
    if not subtopics:
        return None
    courses = sorted((c for c in subtopics[0].courses if c.is_active), key=lambda c: c.created_at)
    return courses[0] if courses else None


def start_free_preview(db: Session, chapter_id: UUID) -> FreePreviewOut:
    """Quiz content for anonymous visitors. Nothing is persisted or graded."""
    chapter = db.query(Chapter).filter(Chapter.id == chapter_id).first()
    if not chapter:
        raise NotFound("Chapter not found")

    course: Course = chapter.course
    free_course = first_free_course(course.subtopic.topic)
    if free_course is None or free_course.id != course.id:
        raise Forbidden("This quiz is not available for free preview")

    quiz = get_quiz_by_chapter(db, chapter.id)
    if not quiz:
        raise NotFound("No quiz found for this chapter")
    if not quiz.is_active:
        raise InvalidState("Quiz is not active")
    if not quiz.questions:
        raise InvalidState("This quiz has no questions")

    return FreePreviewOut(quiz=FreePreviewQuiz.model_validate(quiz))
