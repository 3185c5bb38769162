from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_attempt_engine
from app.core.security import get_current_user
from app.models.user_db.user_db import User
from app.schemas.quiz.quiz_base import FreePreviewOut, StartAttemptOut, SubmitAttemptIn, SubmitAttemptOut
from app.schemas.quiz.results_base import AttemptHistoryOut, AttemptResultOut, QuizStatusIn, QuizStatusOut
from app.services.attempt_engine import AttemptEngine
from app.services.preview import start_free_preview
from app.services.progress import quiz_status_map

quiz_router = APIRouter(prefix="/quiz", tags=["Quiz"])


@quiz_router.post("/check-status", response_model=QuizStatusOut)
def check_status(
    payload: QuizStatusIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return QuizStatusOut(status_map=quiz_status_map(db, current_user.id, payload.chapter_ids))


@quiz_router.post("/free/{chapter_id}/start", response_model=FreePreviewOut)
def free_preview(chapter_id: UUID, db: Session = Depends(get_db)):
    return start_free_preview(db, chapter_id)


@quiz_router.post("/{quiz_id}/attempt", response_model=StartAttemptOut)
def start_attempt(
    quiz_id: UUID,
    engine: AttemptEngine = Depends(get_attempt_engine),
    current_user: User = Depends(get_current_user)
):
    return engine.start_attempt(current_user, quiz_id)


@quiz_router.put("/{quiz_id}/attempt", response_model=SubmitAttemptOut)
def submit_attempt(
    quiz_id: UUID,
    submission: SubmitAttemptIn,
    engine: AttemptEngine = Depends(get_attempt_engine),
    current_user: User = Depends(get_current_user)
):
    return engine.submit_attempt(current_user, quiz_id, submission)


@quiz_router.get("/{quiz_id}/results", response_model=Union[AttemptResultOut, AttemptHistoryOut])
def get_results(
    quiz_id: UUID,
    attempt_id: Optional[UUID] = Query(None, alias="attemptId"),
    engine: AttemptEngine = Depends(get_attempt_engine),
    current_user: User = Depends(get_current_user)
):
    if attempt_id is None:
        return engine.list_attempts(current_user, quiz_id)
    return engine.get_results(current_user, quiz_id, attempt_id)
