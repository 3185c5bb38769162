from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.models.user_db.user_db import User
from app.schemas.users.user_base import UserOut

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
