from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from app.schemas.common.camel_model import CamelModel
from app.schemas.quiz.quiz_base import ChapterRef, CourseRef
from app.services.question_types import QuestionType


class CertificateRef(CamelModel):
    id: UUID
    issued_at: datetime
    certificate_url: Optional[str] = None


class AttemptSummary(CamelModel):
    id: UUID
    score: float
    total_points: int
    max_points: int
    is_passed: bool
    time_spent: Optional[int] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class AttemptHistoryItem(AttemptSummary):
    certificate: Optional[CertificateRef] = None


class ResultChapter(ChapterRef):
    course: CourseRef


class ResultQuiz(CamelModel):
    id: UUID
    title: str
    passing_score: int
    chapter: ResultChapter


class GradedAnswer(CamelModel):
    id: UUID
    text: str
    is_correct: bool


class UserResponseOut(CamelModel):
    selected_answer_id: Optional[UUID] = None
    selected_text: Optional[str] = None
    is_correct: bool
    points_earned: int


class ResultQuestion(CamelModel):
    id: UUID
    text: str
    type: QuestionType
    points: int
    answers: List[GradedAnswer]
    user_response: Optional[UserResponseOut] = None


class AttemptResultOut(CamelModel):
    attempt: AttemptSummary
    quiz: ResultQuiz
    questions: List[ResultQuestion]
    certificate: Optional[CertificateRef] = None
    course_completed: bool = False


class QuizHeader(CamelModel):
    title: str
    passing_score: int


class AttemptHistoryOut(CamelModel):
    attempts: List[AttemptHistoryItem]
    quiz: Optional[QuizHeader] = None


class QuizStatusIn(CamelModel):
    chapter_ids: List[UUID]


class ChapterQuizStatus(CamelModel):
    passed: bool
    score: Optional[float] = None
    attempt_date: Optional[datetime] = None


class QuizStatusOut(CamelModel):
    status_map: Dict[str, ChapterQuizStatus]
