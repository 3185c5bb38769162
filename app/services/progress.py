"""Course-level views over a learner's attempts and certificates.

Read-only and computed per request. Certificates are deduplicated per
course for display only: the earliest one wins, later ones stay stored.
"""
from datetime import timedelta
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.certificate_db.certificate_crud import get_completed_course_ids, list_user_certificates
from app.models.certificate_db.certificate_db import Certificate
from app.models.quiz_db.quiz_crud import (
    count_passed_quizzes,
    get_course_quiz_ids,
    list_completed_attempts,
    list_completed_attempts_for_chapters,
)
from app.models.user_db.user_db import User
from app.schemas.certificate.certificate_base import CertificateListOut, CompletedCertificate, InProgressCourse
from app.schemas.quiz.results_base import ChapterQuizStatus
from app.services.certification import format_certificate_date
from app.services.grader import round_half_up


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def list_certificates(db: Session, user_id: UUID) -> List[Certificate]:
    """First-earned certificate per course, ordered by issue date."""
    seen_courses = set()
    certificates = []
    for certificate in list_user_certificates(db, user_id):
        course_id = certificate.attempt.quiz.chapter.course_id
        if course_id in seen_courses:
            continue
        seen_courses.add(course_id)
        certificates.append(certificate)
    return certificates


def list_in_progress(db: Session, user_id: UUID) -> List[InProgressCourse]:
    completed_course_ids = get_completed_course_ids(db, user_id)
    processed = set()
    in_progress = []

    for attempt in list_completed_attempts(db, user_id):
        course = attempt.quiz.chapter.course
        if course.id in completed_course_ids or course.id in processed:
            continue
        processed.add(course.id)

        quiz_ids = get_course_quiz_ids(course.chapters)
        passed = count_passed_quizzes(db, user_id, quiz_ids)
        if 0 < passed < len(quiz_ids):
            in_progress.append(InProgressCourse(
                id=course.id,
                title=f"{course.title} Certificate",
                description=f"Complete certification in {course.title}",
                progress=percentage(passed, len(quiz_ids)),
                chapters_completed=passed,
                total_chapters=len(quiz_ids),
                thumbnail=course.thumbnail,
            ))
    return in_progress


def overall_progress(completed_count: int, in_progress_count: int) -> int:
    return percentage(completed_count, completed_count + in_progress_count)


def _completed_entry(certificate: Certificate) -> CompletedCertificate:
    course = certificate.attempt.quiz.chapter.course
    topic = course.subtopic.topic if course.subtopic is not None else None
    description = f"Comprehensive certification in {course.title}"
    if topic is not None:
        description = f"{description} - {topic.title}"
    valid_until = certificate.issued_at + timedelta(days=settings.CERTIFICATE_VALIDITY_DAYS)

    return CompletedCertificate(
        id=certificate.id,
        course_id=course.id,
        title=f"{course.title} Certificate",
        issued_at=certificate.issued_at,
        completed_date=format_certificate_date(certificate.issued_at),
        score=round_half_up(certificate.attempt.score),
        description=description,
        issuer=settings.CERTIFICATE_ISSUER,
        valid_until=format_certificate_date(valid_until),
        thumbnail=course.thumbnail,
        certificate_url=certificate.certificate_url,
    )


def certificate_summary(db: Session, user: User) -> CertificateListOut:
    completed = [_completed_entry(certificate) for certificate in list_certificates(db, user.id)]
    in_progress = list_in_progress(db, user.id)
    return CertificateListOut(
        overall_progress=overall_progress(len(completed), len(in_progress)),
        completed=completed,
        in_progress=in_progress,
    )


def quiz_status_map(db: Session, user_id: UUID, chapter_ids: Sequence[UUID]) -> Dict[str, ChapterQuizStatus]:
    attempts = list_completed_attempts_for_chapters(db, user_id, chapter_ids)
    by_chapter = {}
    for attempt in attempts:
        by_chapter.setdefault(attempt.quiz.chapter_id, []).append(attempt)

    status_map = {}
    for chapter_id in chapter_ids:
        chapter_attempts = by_chapter.get(chapter_id, [])
        if not chapter_attempts:
            status_map[str(chapter_id)] = ChapterQuizStatus(passed=False)
            continue

        passed_attempt = next((a for a in chapter_attempts if a.is_passed), None)
        if passed_attempt is not None:
            status_map[str(chapter_id)] = ChapterQuizStatus(
                passed=True,
                score=passed_attempt.score,
                attempt_date=passed_attempt.completed_at,
            )
        else:
            status_map[str(chapter_id)] = ChapterQuizStatus(
                passed=False,
                score=max(a.score for a in chapter_attempts),
            )
    return status_map
