from abc import ABC, abstractmethod

from app.extraction.models import ExtractionRequest, UploadedFile


class BaseExtractionClient(ABC):
    """Contract for provider-specific extraction AI clients."""

    @abstractmethod
    def generate_content(self, request: ExtractionRequest) -> str | None:
        """Return the provider response text, or None when it produced none."""

    @abstractmethod
    def upload_file(self, data: bytes, mime_type: str) -> UploadedFile:
        """Upload document bytes out of band and return the provider file reference."""
