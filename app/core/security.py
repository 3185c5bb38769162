import logging
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import Unauthorized
from app.models.user_db.user_db import User
from app.models.user_db.user_db_crud import get_user_by_id

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.AUTH_TOKEN_URL, auto_error=False)


# Token verification
def verify_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")


def verify_caller(token: Optional[str], db: Session) -> User:
    """Resolve a bearer token to the calling user.

    This is the only place token claims are read; every handler goes
    through ``get_current_user``.
    """
    if not token:
        raise Unauthorized("Missing bearer token")

    payload = verify_token(token)
    subject = payload.get("sub")
    if not subject:
        raise Unauthorized("Invalid token payload")

    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise Unauthorized("Invalid token payload")

    user = get_user_by_id(db, user_id)
    if not user:
        logger.info("Token subject %s does not match any user", user_id)
        raise Unauthorized("User not found")
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    return verify_caller(token, db)
