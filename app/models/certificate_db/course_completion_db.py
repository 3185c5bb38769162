import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class CourseCompletion(Base):
    __tablename__ = "course_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_completions_user_course"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    completed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    course = relationship("Course")
