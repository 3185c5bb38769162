from datetime import datetime
from typing import List, Optional
from uuid import UUID

from app.schemas.common.camel_model import CamelModel


class CompletedCertificate(CamelModel):
    id: UUID
    course_id: UUID
    title: str
    issued_at: datetime
    completed_date: str
    score: int
    description: str
    issuer: str
    valid_until: str
    thumbnail: Optional[str] = None
    certificate_url: Optional[str] = None


class InProgressCourse(CamelModel):
    id: UUID
    title: str
    description: str
    progress: int
    chapters_completed: int
    total_chapters: int
    estimated_completion: str = "Ongoing"
    thumbnail: Optional[str] = None


class CertificateListOut(CamelModel):
    overall_progress: int
    completed: List[CompletedCertificate]
    in_progress: List[InProgressCourse]


class RenderedCertificateOut(CamelModel):
    id: UUID
    certificate_url: str
