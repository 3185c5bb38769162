import uuid
from sqlalchemy import Column, String, Text, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.services.question_types import QuestionType


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("quiz_id", "order_index", name="uq_questions_quiz_order"),
        CheckConstraint("points > 0", name="ck_questions_points_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    type = Column(String, nullable=False, default=QuestionType.multiple_choice.value)
    points = Column(Integer, nullable=False, default=1)
    order_index = Column(Integer, nullable=False)

    quiz = relationship("Quiz", back_populates="questions")
    answers = relationship(
        "QuizAnswer",
        back_populates="question",
        order_by="QuizAnswer.order_index",
        cascade="all, delete-orphan",
    )
