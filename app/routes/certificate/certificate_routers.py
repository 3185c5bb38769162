from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_certificate_renderer
from app.core.security import get_current_user
from app.models.user_db.user_db import User
from app.schemas.certificate.certificate_base import CertificateListOut, RenderedCertificateOut
from app.services.certificate_renderer import CertificateRenderer
from app.services.certification import render_certificate
from app.services.progress import certificate_summary

certificate_router = APIRouter(prefix="/certificates", tags=["Certificates"])


@certificate_router.get("", response_model=CertificateListOut)
def list_certificates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return certificate_summary(db, current_user)


@certificate_router.post("/{certificate_id}/render", response_model=RenderedCertificateOut)
def render(
    certificate_id: UUID,
    db: Session = Depends(get_db),
    renderer: CertificateRenderer = Depends(get_certificate_renderer),
    current_user: User = Depends(get_current_user)
):
    certificate = render_certificate(db, current_user, certificate_id, renderer)
    return RenderedCertificateOut(id=certificate.id, certificate_url=certificate.certificate_url)
