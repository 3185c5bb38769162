from pydantic import BaseModel
from uuid import UUID
from datetime import datetime


class UserOut(BaseModel):
    id: UUID
    email: str
    name: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
