import uuid
from sqlalchemy import Column, Text, Integer, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class QuizResponse(Base):
    __tablename__ = "quiz_responses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    attempt_id = Column(Uuid, ForeignKey("quiz_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    answer_id = Column(Uuid, nullable=True)
    selected_text = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)
    points_earned = Column(Integer, nullable=False, default=0)

    attempt = relationship("QuizAttempt", back_populates="responses")
    question = relationship("Question")
