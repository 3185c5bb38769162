from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.services.attempt_engine import AttemptEngine
from app.services.certificate_renderer import CertificateRenderer, StaticLinkRenderer


def get_certificate_renderer() -> CertificateRenderer:
    return StaticLinkRenderer(settings.CERTIFICATE_BASE_URL)


def get_attempt_engine(
    db: Session = Depends(get_db),
    renderer: CertificateRenderer = Depends(get_certificate_renderer),
) -> AttemptEngine:
    return AttemptEngine(db, renderer=renderer)
