from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import model_validator

from app.schemas.common.camel_model import CamelModel
from app.services.question_types import QuestionType


class AnswerOption(CamelModel):
    # No is_correct here: sent to the learner before grading.
    id: UUID
    text: str


class QuestionOut(CamelModel):
    id: UUID
    text: str
    type: QuestionType
    points: int
    answers: List[AnswerOption]


class QuizContent(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    questions: List[QuestionOut]


class StartAttemptOut(CamelModel):
    attempt_id: UUID
    started_at: datetime
    time_limit: Optional[int] = None
    quiz: QuizContent


class ResponseIn(CamelModel):
    question_id: UUID
    answer_id: Optional[UUID] = None
    text: Optional[str] = None

    @model_validator(mode="after")
    def require_answer_or_text(self):
        if self.answer_id is None and self.text is None:
            raise ValueError("each response needs an answerId or a text")
        return self


class SubmitAttemptIn(CamelModel):
    attempt_id: UUID
    answers: List[ResponseIn]


class SubmitAttemptOut(CamelModel):
    score: float
    total_points: int
    max_points: int
    is_passed: bool
    passing_score: int
    time_spent: Optional[int] = None
    completed_at: datetime
    certificate_generated: bool
    certificate_url: Optional[str] = None


class ChapterRef(CamelModel):
    id: UUID
    title: str


class CourseRef(CamelModel):
    id: UUID
    title: str


class FreePreviewChapter(ChapterRef):
    course: CourseRef


class FreePreviewQuiz(QuizContent):
    passing_score: int
    time_limit: Optional[int] = None
    chapter: FreePreviewChapter


class FreePreviewOut(CamelModel):
    quiz: FreePreviewQuiz
    is_free_preview: bool = True
    message: str = "Free preview quiz started. Results will not be saved."
