import base64
import io

import httpx
from google import genai
from google.genai import errors, types

from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError, ExtractionNetworkError
from app.extraction.models import (
    ContentPart,
    ExtractionRequest,
    FilePart,
    InlinePart,
    UploadedFile,
)


class GeminiClientAdapter(BaseExtractionClient):
    """Extraction AI client adapter built on the Google Gen AI SDK."""

    def __init__(self, *, api_key: str, timeout_seconds: int) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout_seconds * 1000),
        )

    def generate_content(self, request: ExtractionRequest) -> str | None:
        try:
            response = self._client.models.generate_content(
                model=request.model,
                contents=[self._to_part(part) for part in request.contents],
                config=types.GenerateContentConfig(
                    response_mime_type=request.response_mime_type,
                    response_json_schema=request.response_schema,
                ),
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(f"AI provider network error: {exc}") from exc
        except errors.APIError as exc:
            raise ExtractionNetworkError(f"AI provider API error: {exc}") from exc
        return response.text

    def upload_file(self, data: bytes, mime_type: str) -> UploadedFile:
        try:
            uploaded = self._client.files.upload(
                file=io.BytesIO(data),
                config=types.UploadFileConfig(mime_type=mime_type),
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(f"AI provider network error: {exc}") from exc
        except errors.APIError as exc:
            raise ExtractionNetworkError(f"AI provider file upload error: {exc}") from exc
        return UploadedFile(
            uri=uploaded.uri,
            name=uploaded.name,
            size_bytes=uploaded.size_bytes,
            mime_type=uploaded.mime_type,
        )

    @staticmethod
    def _to_part(part: ContentPart) -> types.Part:
        if isinstance(part, InlinePart):
            return types.Part.from_bytes(
                data=base64.b64decode(part.data), mime_type=part.mime_type
            )
        if isinstance(part, FilePart):
            return types.Part.from_uri(file_uri=part.file_uri, mime_type=part.mime_type)
        if not part.text:
            raise ExtractionError("prompt text must not be empty")
        return types.Part.from_text(text=part.text)
