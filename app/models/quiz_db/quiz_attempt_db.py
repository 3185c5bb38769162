import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)  # NULL while the attempt is active
    score = Column(Float, nullable=False, default=0)  # percent
    total_points = Column(Integer, nullable=False, default=0)
    max_points = Column(Integer, nullable=False, default=0)
    is_passed = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=True)  # minutes

    user = relationship("User")
    quiz = relationship("Quiz", back_populates="attempts")
    responses = relationship("QuizResponse", back_populates="attempt", cascade="all, delete-orphan")
    certificate = relationship("Certificate", back_populates="attempt", uselist=False, cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.completed_at is None


# At most one active attempt per (user, quiz).
Index(
    "uq_quiz_attempts_one_active",
    QuizAttempt.user_id,
    QuizAttempt.quiz_id,
    unique=True,
    postgresql_where=QuizAttempt.completed_at.is_(None),
    sqlite_where=QuizAttempt.completed_at.is_(None),
)
