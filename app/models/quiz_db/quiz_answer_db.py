import uuid
from sqlalchemy import Column, Text, ForeignKey, Integer, Boolean, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id = Column(Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)

    question = relationship("Question", back_populates="answers")
