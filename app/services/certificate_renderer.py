from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class CertificateDocument:
    student_name: str
    course_name: str
    score: int
    date: str
    issuer: str


class CertificateRenderer:
    """Turns an issued certificate into a downloadable document.

    Implementations return the URL of the rendered file and may raise any
    exception; callers never roll back the certificate on failure.
    """

    def render(self, certificate_id: UUID, document: CertificateDocument) -> str:
        raise NotImplementedError


class StaticLinkRenderer(CertificateRenderer):
    """Points at a document served by the external PDF service."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def render(self, certificate_id: UUID, document: CertificateDocument) -> str:
        return f"{self.base_url}/{certificate_id}.pdf"
