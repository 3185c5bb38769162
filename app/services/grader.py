"""Per-question grading.

Everything here works on plain attributes (``type``, ``points``,
``answers[].id/text/is_correct``) and never touches the session, so it can
run inside the submission transaction without side effects.
"""
import math
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from app.services.question_types import QuestionType


@dataclass(frozen=True)
class GradedResponse:
    question_id: UUID
    answer_id: Optional[UUID]
    selected_text: Optional[str]
    is_correct: bool
    points_earned: int


def _normalize(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text.strip().lower()


def _grade_multiple_choice(question, answer_id):
    selected = next((a for a in question.answers if a.id == answer_id), None)
    if selected is None:
        return False, None
    return bool(selected.is_correct), selected.text


def _grade_true_false(question, text):
    correct = next((a for a in question.answers if a.is_correct), None)
    if correct is None or text is None:
        return False
    return correct.text.lower() == text.lower()


def _grade_fill_in_blank(question, text):
    submitted = _normalize(text)
    if submitted is None:
        return False
    return any(_normalize(a.text) == submitted for a in question.answers if a.is_correct)


def grade_response(question, answer_id: Optional[UUID] = None, text: Optional[str] = None) -> GradedResponse:
    question_type = QuestionType(question.type)
    selected_answer_id = None

    if question_type == QuestionType.multiple_choice:
        selected_answer_id = answer_id
        is_correct, selected_text = _grade_multiple_choice(question, answer_id)
    elif question_type == QuestionType.true_false:
        selected_text = text
        is_correct = _grade_true_false(question, text)
    else:
        selected_text = text
        is_correct = _grade_fill_in_blank(question, text)

    return GradedResponse(
        question_id=question.id,
        answer_id=selected_answer_id,
        selected_text=selected_text,
        is_correct=is_correct,
        points_earned=question.points if is_correct else 0,
    )


def compute_score(total_points: int, max_points: int) -> float:
    if max_points <= 0:
        return 0.0
    return (total_points / max_points) * 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
