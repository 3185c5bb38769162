import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # One certificate per attempt, enforced by the database.
    attempt_id = Column(Uuid, ForeignKey("quiz_attempts.id", ondelete="CASCADE"), unique=True, nullable=False)
    issued_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    certificate_url = Column(String, nullable=True)

    user = relationship("User")
    attempt = relationship("QuizAttempt", back_populates="certificate")
