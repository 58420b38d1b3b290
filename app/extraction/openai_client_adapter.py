from typing import Any

import httpx
import openai

from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError, ExtractionNetworkError
from app.extraction.models import (
    ContentPart,
    ExtractionRequest,
    FilePart,
    InlinePart,
    UploadedFile,
)

_UPLOAD_FILE_NAME = "document.pdf"


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction AI client adapter built on the OpenAI chat API with file inputs."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def generate_content(self, request: ExtractionRequest) -> str | None:
        try:
            response = self._client.chat.completions.create(
                model=request.model,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "extraction_result",
                        "strict": False,
                        "schema": request.response_schema,
                    },
                },
                messages=[
                    {
                        "role": "user",
                        "content": [self._to_content(part) for part in request.contents],
                    },
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ExtractionError("AI returned no choices")
        return response.choices[0].message.content

    def upload_file(self, data: bytes, mime_type: str) -> UploadedFile:
        try:
            uploaded = self._client.files.create(
                file=(_UPLOAD_FILE_NAME, data, mime_type),
                purpose="user_data",
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(f"AI provider file upload error: {exc}") from exc
        return UploadedFile(
            uri=None,
            name=uploaded.id,
            size_bytes=uploaded.bytes,
            mime_type=mime_type,
        )

    @staticmethod
    def _to_content(part: ContentPart) -> dict[str, Any]:
        if isinstance(part, InlinePart):
            return {
                "type": "file",
                "file": {
                    "filename": _UPLOAD_FILE_NAME,
                    "file_data": f"data:{part.mime_type};base64,{part.data}",
                },
            }
        if isinstance(part, FilePart):
            return {"type": "file", "file": {"file_id": part.file_uri}}
        return {"type": "text", "text": part.text}
