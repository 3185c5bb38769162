import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = (
        CheckConstraint("passing_score BETWEEN 1 AND 100", name="ck_quizzes_passing_score"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    chapter_id = Column(Uuid, ForeignKey("chapters.id", ondelete="CASCADE"), unique=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, nullable=False, default=70)  # percent
    time_limit = Column(Integer, nullable=True)  # minutes
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    chapter = relationship("Chapter", back_populates="quiz")
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order_index",
        cascade="all, delete-orphan",
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan")
