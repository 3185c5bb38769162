"""Quiz attempt lifecycle: start, submit, review.

An attempt is ACTIVE while ``completed_at`` is NULL and COMPLETED once it
is set; a completed attempt is never reopened and a retake is a new row.
All writes of a submission (responses, attempt update, certificate,
course completion) are committed together or not at all.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import InternalError, InvalidState, NotFound, QuizEngineError, RenderFailed, TimeLimitExceeded
from app.models.certificate_db.certificate_crud import get_course_completion
from app.models.certificate_db.certificate_db import Certificate
from app.models.quiz_db.quiz_attempt_db import QuizAttempt
from app.models.quiz_db.quiz_crud import (
    complete_attempt,
    find_active_attempt,
    get_active_quiz,
    get_completed_attempt,
    get_user_attempt,
    list_completed_attempts,
)
from app.models.quiz_db.quiz_db import Quiz
from app.models.quiz_db.quiz_response_db import QuizResponse
from app.models.user_db.user_db import User
from app.schemas.quiz.quiz_base import QuizContent, ResponseIn, StartAttemptOut, SubmitAttemptIn, SubmitAttemptOut
from app.schemas.quiz.results_base import (
    AttemptHistoryItem,
    AttemptHistoryOut,
    AttemptResultOut,
    AttemptSummary,
    CertificateRef,
    GradedAnswer,
    QuizHeader,
    ResultQuestion,
    ResultQuiz,
    UserResponseOut,
)
from app.services.certificate_renderer import CertificateRenderer
from app.services.certification import attach_rendered_document, issue_certificate
from app.services.completion import record_course_completion
from app.services.grader import GradedResponse, compute_score, grade_response

logger = logging.getLogger(__name__)


def elapsed_minutes(elapsed: timedelta) -> int:
    return int(elapsed.total_seconds() // 60)


def is_time_exceeded(quiz: Quiz, elapsed: timedelta) -> bool:
    return bool(quiz.time_limit) and elapsed > timedelta(minutes=quiz.time_limit)


class AttemptEngine:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        renderer: Optional[CertificateRenderer] = None,
    ):
        self.db = db
        self.clock = clock
        self.renderer = renderer

    # Start

    def start_attempt(self, user: User, quiz_id: UUID) -> StartAttemptOut:
        quiz = get_active_quiz(self.db, quiz_id)
        if quiz is None:
            raise NotFound("Quiz not found or inactive")

        now = self.clock()
        attempt = find_active_attempt(self.db, user.id, quiz.id)
        if attempt is not None and is_time_exceeded(quiz, now - attempt.started_at):
            self._expire_attempt(attempt, now)
            attempt = None

        if attempt is None:
            attempt = self._create_attempt(user, quiz, now)

        return StartAttemptOut(
            attempt_id=attempt.id,
            started_at=attempt.started_at,
            time_limit=quiz.time_limit,
            quiz=QuizContent.model_validate(quiz),
        )

    def _create_attempt(self, user: User, quiz: Quiz, now: datetime) -> QuizAttempt:
        attempt = QuizAttempt(
            user_id=user.id,
            quiz_id=quiz.id,
            started_at=now,
            score=0.0,
            total_points=0,
            max_points=sum(question.points for question in quiz.questions),
            is_passed=False,
        )
        self.db.add(attempt)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the active attempt first.
            self.db.rollback()
            existing = find_active_attempt(self.db, user.id, quiz.id)
            if existing is None:
                logger.exception("Could not create attempt for user %s on quiz %s", user.id, quiz.id)
                raise InternalError("Could not start quiz attempt")
            logger.info("Reusing concurrently created attempt %s", existing.id)
            return existing

        self.db.refresh(attempt)
        logger.info("User %s started attempt %s on quiz %s", user.id, attempt.id, quiz.id)
        return attempt

    def _expire_attempt(self, attempt: QuizAttempt, now: datetime):
        try:
            complete_attempt(
                self.db,
                attempt.id,
                completed_at=now,
                score=0.0,
                total_points=0,
                is_passed=False,
                time_spent=elapsed_minutes(now - attempt.started_at),
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Expiring attempt %s failed", attempt.id)
            raise InternalError() from exc
        logger.info("Closed timed-out attempt %s", attempt.id)

    # Submit

    def submit_attempt(self, user: User, quiz_id: UUID, submission: SubmitAttemptIn) -> SubmitAttemptOut:
        attempt = get_user_attempt(self.db, submission.attempt_id, user.id, quiz_id)
        if attempt is None:
            raise NotFound("Active attempt not found")
        if not attempt.is_active:
            raise InvalidState("Attempt has already been submitted")

        quiz = attempt.quiz
        now = self.clock()
        elapsed = now - attempt.started_at
        if is_time_exceeded(quiz, elapsed):
            logger.info("Late submission for attempt %s refused", attempt.id)
            raise TimeLimitExceeded()

        graded = self._grade(quiz, submission.answers)
        total_points = sum(item.points_earned for item in graded)
        max_points = attempt.max_points
        score = compute_score(total_points, max_points)
        is_passed = score >= quiz.passing_score
        time_spent = elapsed_minutes(elapsed)
        passing_score = quiz.passing_score

        certificate = self._commit_submission(
            user, quiz, attempt, graded, now, score, total_points, is_passed, time_spent
        )
        logger.info(
            "Attempt %s scored %.2f (%s/%s points, passed=%s)",
            submission.attempt_id, score, total_points, max_points, is_passed,
        )

        certificate_url = None
        if certificate is not None and self.renderer is not None:
            certificate_url = self._render_issued(user, certificate)

        return SubmitAttemptOut(
            score=score,
            total_points=total_points,
            max_points=max_points,
            is_passed=is_passed,
            passing_score=passing_score,
            time_spent=time_spent,
            completed_at=now,
            certificate_generated=certificate is not None,
            certificate_url=certificate_url,
        )

    def _grade(self, quiz: Quiz, responses: Sequence[ResponseIn]) -> List[GradedResponse]:
        questions = {question.id: question for question in quiz.questions}
        graded = []
        seen = set()
        for response in responses:
            question = questions.get(response.question_id)
            if question is None or question.id in seen:
                continue
            seen.add(question.id)
            graded.append(grade_response(question, response.answer_id, response.text))
        return graded

    def _commit_submission(
        self,
        user: User,
        quiz: Quiz,
        attempt: QuizAttempt,
        graded: List[GradedResponse],
        now: datetime,
        score: float,
        total_points: int,
        is_passed: bool,
        time_spent: int,
    ) -> Optional[Certificate]:
        attempt_id = attempt.id
        certificate = None
        try:
            self.db.add_all([
                QuizResponse(
                    attempt_id=attempt_id,
                    question_id=item.question_id,
                    answer_id=item.answer_id,
                    selected_text=item.selected_text,
                    is_correct=item.is_correct,
                    points_earned=item.points_earned,
                )
                for item in graded
            ])
            self.db.flush()

            if not complete_attempt(
                self.db,
                attempt_id,
                completed_at=now,
                score=score,
                total_points=total_points,
                is_passed=is_passed,
                time_spent=time_spent,
            ):
                raise InvalidState("Attempt has already been submitted")

            if is_passed:
                certificate, _ = issue_certificate(self.db, user.id, attempt_id, now)
                record_course_completion(self.db, user.id, quiz, now)

            self.db.commit()
        except QuizEngineError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Submission of attempt %s failed", attempt_id)
            raise InternalError() from exc
        return certificate

    def _render_issued(self, user: User, certificate: Certificate) -> Optional[str]:
        certificate_id = None
        try:
            certificate_id = certificate.id
            url = attach_rendered_document(certificate, user.name, self.renderer)
            self.db.commit()
        except RenderFailed:
            logger.warning("Certificate %s issued without a rendered document", certificate_id)
            return None
        except SQLAlchemyError:
            # The submission is already committed; only the link is lost.
            self.db.rollback()
            logger.exception("Storing the document link of certificate %s failed", certificate_id)
            return None
        return url

    # Review

    def get_results(self, user: User, quiz_id: UUID, attempt_id: UUID) -> AttemptResultOut:
        attempt = get_completed_attempt(self.db, attempt_id, user.id)
        if attempt is None or attempt.quiz_id != quiz_id:
            raise NotFound("Quiz attempt not found")

        quiz = attempt.quiz
        responses = {response.question_id: response for response in attempt.responses}
        questions = []
        for question in quiz.questions:
            response = responses.get(question.id)
            questions.append(ResultQuestion(
                id=question.id,
                text=question.text,
                type=question.type,
                points=question.points,
                answers=[GradedAnswer.model_validate(answer) for answer in question.answers],
                user_response=UserResponseOut(
                    selected_answer_id=response.answer_id,
                    selected_text=response.selected_text,
                    is_correct=response.is_correct,
                    points_earned=response.points_earned,
                ) if response is not None else None,
            ))

        course_completed = False
        if attempt.is_passed:
            course_completed = get_course_completion(self.db, user.id, quiz.chapter.course_id) is not None

        return AttemptResultOut(
            attempt=AttemptSummary.model_validate(attempt),
            quiz=ResultQuiz.model_validate(quiz),
            questions=questions,
            certificate=CertificateRef.model_validate(attempt.certificate) if attempt.certificate else None,
            course_completed=course_completed,
        )

    def list_attempts(self, user: User, quiz_id: UUID) -> AttemptHistoryOut:
        attempts = list_completed_attempts(self.db, user.id, quiz_id)
        header = None
        if attempts:
            header = QuizHeader.model_validate(attempts[0].quiz)
        return AttemptHistoryOut(
            attempts=[AttemptHistoryItem.model_validate(attempt) for attempt in attempts],
            quiz=header,
        )
