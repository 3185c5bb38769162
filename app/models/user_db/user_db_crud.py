from uuid import UUID
from sqlalchemy.orm import Session
from app.models.user_db.user_db import User


def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()
