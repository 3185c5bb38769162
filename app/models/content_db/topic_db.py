import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Topic(Base):
    __tablename__ = "topics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    subtopics = relationship(
        "Subtopic",
        back_populates="topic",
        order_by="Subtopic.created_at",
        cascade="all, delete-orphan",
    )


class Subtopic(Base):
    __tablename__ = "subtopics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    topic_id = Column(Uuid, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    topic = relationship("Topic", back_populates="subtopics")
    courses = relationship(
        "Course",
        back_populates="subtopic",
        order_by="Course.created_at",
        cascade="all, delete-orphan",
    )
