"""AI-powered structured data extraction from scanned documents."""

import base64
import json

from pydantic import BaseModel, ValidationError

from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError
from app.extraction.models import (
    PDF_MIME_TYPE,
    ContentPart,
    ExtractionRequest,
    FilePart,
    InlinePart,
    TextPart,
)
from app.extraction.schemas import TrafficFineNotice
from app.logging.logger import Log

INLINE_REQUEST_LIMIT_BYTES = 20 * 1024 * 1024


def estimate_inline_request_bytes(document_size: int, prompt: str) -> int:
    """Estimate the inline request size: base64-expanded document plus prompt bytes."""
    return (document_size * 4 + 2) // 3 + len(prompt.encode("utf-8"))


class DocumentExtractor:
    """Sends a document to the extraction provider and validates the JSON it returns.

    Documents whose estimated inline request exceeds the inline limit are
    uploaded through the provider's file API first and referenced by URI.
    """

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        default_prompt: str,
        inline_limit_bytes: int = INLINE_REQUEST_LIMIT_BYTES,
        mime_type: str = PDF_MIME_TYPE,
    ) -> None:
        self._client = client
        self._model = model
        self._default_prompt = default_prompt
        self._inline_limit_bytes = inline_limit_bytes
        self._mime_type = mime_type

    def extract(
        self,
        document: bytes,
        prompt: str | None = None,
        schema: type[BaseModel] = TrafficFineNotice,
    ) -> BaseModel:
        """Extract structured data from *document* bytes.

        Raises:
            ExtractionError: when the upload yields no file reference, the
                provider returns nothing, or the response is not valid JSON
                for *schema*.
        """
        prompt_text = prompt if prompt is not None else self._default_prompt
        estimated = estimate_inline_request_bytes(len(document), prompt_text)
        use_file_api = estimated > self._inline_limit_bytes
        Log.info(
            f"Extraction request sizing: document={len(document)}B "
            f"estimated={estimated}B limit={self._inline_limit_bytes}B "
            f"file_api={use_file_api}"
        )

        document_part = (
            self._upload_document(document) if use_file_api else self._inline_document(document)
        )
        request = ExtractionRequest(
            model=self._model,
            contents=[document_part, TextPart(text=prompt_text)],
            response_schema=schema.model_json_schema(),
        )

        raw_response = self._client.generate_content(request)
        if not raw_response:
            raise ExtractionError("no response from extraction service")
        Log.debug(f"Extraction raw response:\n{raw_response}")

        return self._parse_response(raw_response, schema)

    def _upload_document(self, document: bytes) -> ContentPart:
        Log.info(f"Uploading {len(document)}B document through the file API")
        uploaded = self._client.upload_file(document, self._mime_type)
        file_uri = uploaded.uri or uploaded.name
        if not file_uri:
            raise ExtractionError("file upload returned no file URI")
        Log.info(f"File upload complete: uri={file_uri} size={uploaded.size_bytes}")
        return FilePart(file_uri=file_uri, mime_type=self._mime_type)

    def _inline_document(self, document: bytes) -> ContentPart:
        data = base64.b64encode(document).decode("ascii")
        Log.debug(f"Inline document payload prepared: base64_length={len(data)}")
        return InlinePart(data=data, mime_type=self._mime_type)

    @staticmethod
    def _parse_response(raw: str, schema: type[BaseModel]) -> BaseModel:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            return schema.model_validate(json.loads(cleaned))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ExtractionError(f"extraction service returned invalid JSON: {exc}") from exc
