import logging
from datetime import datetime
from typing import Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidState, NotFound, RenderFailed
from app.models.certificate_db.certificate_crud import get_certificate_by_attempt, get_user_certificate
from app.models.certificate_db.certificate_db import Certificate
from app.models.quiz_db.quiz_attempt_db import QuizAttempt
from app.models.user_db.user_db import User
from app.services.certificate_renderer import CertificateDocument, CertificateRenderer
from app.services.grader import round_half_up

logger = logging.getLogger(__name__)


def format_certificate_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def issue_certificate(db: Session, user_id: UUID, attempt_id: UUID, issued_at: datetime) -> Tuple[Certificate, bool]:
    """Issue the certificate for a passed attempt, at most once.

    Returns ``(certificate, created)``. A repeated call for the same attempt
    returns the stored certificate with ``created=False``; the unique
    constraint on ``attempt_id`` settles concurrent inserts. Does not commit.
    """
    attempt = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.id == attempt_id, QuizAttempt.user_id == user_id)
        .first()
    )
    if attempt is None:
        raise NotFound("Quiz attempt not found")
    if attempt.completed_at is None or not attempt.is_passed:
        raise InvalidState("Only a completed, passed attempt can earn a certificate")

    existing = get_certificate_by_attempt(db, attempt_id)
    if existing is not None:
        return existing, False

    certificate = Certificate(user_id=user_id, attempt_id=attempt_id, issued_at=issued_at)
    try:
        with db.begin_nested():
            db.add(certificate)
    except IntegrityError:
        existing = get_certificate_by_attempt(db, attempt_id)
        if existing is None:
            raise
        logger.info("Certificate for attempt %s was issued concurrently", attempt_id)
        return existing, False

    logger.info("Issued certificate %s for attempt %s", certificate.id, attempt_id)
    return certificate, True


def build_certificate_document(certificate: Certificate, student_name: str, issuer: str) -> CertificateDocument:
    attempt = certificate.attempt
    return CertificateDocument(
        student_name=student_name,
        course_name=attempt.quiz.chapter.course.title,
        score=round_half_up(attempt.score),
        date=format_certificate_date(certificate.issued_at),
        issuer=issuer,
    )


def attach_rendered_document(
    certificate: Certificate, student_name: str, renderer: CertificateRenderer, issuer: str = None
) -> str:
    document = build_certificate_document(certificate, student_name, issuer or settings.CERTIFICATE_ISSUER)
    try:
        url = renderer.render(certificate.id, document)
    except Exception as exc:
        logger.exception("Rendering certificate %s failed", certificate.id)
        raise RenderFailed() from exc
    certificate.certificate_url = url
    return url


def render_certificate(db: Session, user: User, certificate_id: UUID, renderer: CertificateRenderer) -> Certificate:
    certificate = get_user_certificate(db, user.id, certificate_id)
    if certificate is None:
        raise NotFound("Certificate not found")

    attach_rendered_document(certificate, user.name, renderer)
    db.commit()
    db.refresh(certificate)
    return certificate
