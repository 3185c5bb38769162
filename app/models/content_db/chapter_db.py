import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="chapters")
    # A chapter has at most one quiz (quiz.chapter_id is unique).
    quiz = relationship("Quiz", back_populates="chapter", uselist=False, cascade="all, delete-orphan")
