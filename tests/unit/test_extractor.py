import base64
import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError
from app.extraction.extractor import (
    INLINE_REQUEST_LIMIT_BYTES,
    DocumentExtractor,
    estimate_inline_request_bytes,
)
from app.extraction.models import (
    JSON_MIME_TYPE,
    PDF_MIME_TYPE,
    FilePart,
    InlinePart,
    TextPart,
    UploadedFile,
)
from app.extraction.schemas import TrafficFineNotice


def _make_extractor(
    payload: dict[str, Any] | None = None,
    inline_limit_bytes: int = INLINE_REQUEST_LIMIT_BYTES,
    prompt: str = "Extract the fine.",
) -> tuple[DocumentExtractor, MagicMock]:
    client = MagicMock(spec=BaseExtractionClient)
    client.generate_content.return_value = json.dumps(payload) if payload is not None else None
    client.upload_file.return_value = UploadedFile(
        uri="https://files.example/abc", name="files/abc", size_bytes=3, mime_type=PDF_MIME_TYPE
    )
    extractor = DocumentExtractor(
        client=client,
        model="model-x",
        default_prompt=prompt,
        inline_limit_bytes=inline_limit_bytes,
    )
    return extractor, client


class TestEstimateInlineRequestBytes:
    def test_base64_expansion_rounds_up(self) -> None:
        assert estimate_inline_request_bytes(1, "") == 2
        assert estimate_inline_request_bytes(3, "") == 4
        assert estimate_inline_request_bytes(4, "") == 6

    def test_counts_prompt_utf8_bytes(self) -> None:
        assert estimate_inline_request_bytes(0, "é") == 2

    def test_fifteen_mib_is_exactly_the_limit(self) -> None:
        assert estimate_inline_request_bytes(15 * 1024 * 1024, "") == INLINE_REQUEST_LIMIT_BYTES


class TestInlineVersusUpload:
    def test_small_document_is_sent_inline(
        self, sample_pdf_bytes: bytes, notice_payload: dict[str, Any]
    ) -> None:
        extractor, client = _make_extractor(notice_payload)

        extractor.extract(sample_pdf_bytes)

        client.upload_file.assert_not_called()
        request = client.generate_content.call_args.args[0]
        document_part, prompt_part = request.contents
        assert isinstance(document_part, InlinePart)
        assert base64.b64decode(document_part.data) == sample_pdf_bytes
        assert document_part.mime_type == PDF_MIME_TYPE
        assert prompt_part == TextPart(text="Extract the fine.")

    def test_estimate_equal_to_limit_stays_inline(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload, inline_limit_bytes=5, prompt="p")

        extractor.extract(b"abc")

        client.upload_file.assert_not_called()
        assert isinstance(client.generate_content.call_args.args[0].contents[0], InlinePart)

    def test_estimate_one_over_limit_uses_upload(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload, inline_limit_bytes=5, prompt="pp")

        extractor.extract(b"abc")

        client.upload_file.assert_called_once_with(b"abc", PDF_MIME_TYPE)
        document_part = client.generate_content.call_args.args[0].contents[0]
        assert document_part == FilePart(file_uri="https://files.example/abc", mime_type=PDF_MIME_TYPE)

    def test_upload_falls_back_to_file_name(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload, inline_limit_bytes=1)
        client.upload_file.return_value = UploadedFile(uri=None, name="file-123")

        extractor.extract(b"abc")

        document_part = client.generate_content.call_args.args[0].contents[0]
        assert document_part.file_uri == "file-123"

    def test_upload_without_reference_fails(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload, inline_limit_bytes=1)
        client.upload_file.return_value = UploadedFile()

        with pytest.raises(ExtractionError, match="file upload returned no file URI"):
            extractor.extract(b"abc")
        client.generate_content.assert_not_called()


class TestRequestShape:
    def test_requests_json_with_schema(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload)

        extractor.extract(b"abc")

        request = client.generate_content.call_args.args[0]
        assert request.model == "model-x"
        assert request.response_mime_type == JSON_MIME_TYPE
        assert request.response_schema == TrafficFineNotice.model_json_schema()

    def test_per_call_prompt_overrides_default(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor(notice_payload)

        extractor.extract(b"abc", prompt="Other prompt")

        assert client.generate_content.call_args.args[0].contents[1] == TextPart(text="Other prompt")


class TestResponseParsing:
    def test_returns_validated_model(self, notice_payload: dict[str, Any]) -> None:
        extractor, _client = _make_extractor(notice_payload)

        result = extractor.extract(b"abc")

        assert isinstance(result, TrafficFineNotice)
        assert result.fine_identifiers.fine_number == "1234567890"
        assert result.penalty.base_amount_eur == 135

    def test_strips_markdown_fences(self, notice_payload: dict[str, Any]) -> None:
        extractor, client = _make_extractor()
        client.generate_content.return_value = f"```json\n{json.dumps(notice_payload)}\n```"

        result = extractor.extract(b"abc")

        assert result.location.city == "Paris"

    @pytest.mark.parametrize("response", [None, ""])
    def test_empty_response(self, response: str | None) -> None:
        extractor, client = _make_extractor()
        client.generate_content.return_value = response

        with pytest.raises(ExtractionError, match="no response from extraction service"):
            extractor.extract(b"abc")

    def test_invalid_json(self) -> None:
        extractor, client = _make_extractor()
        client.generate_content.return_value = "{not json"

        with pytest.raises(ExtractionError, match="returned invalid JSON"):
            extractor.extract(b"abc")

    def test_schema_violation(self, notice_payload: dict[str, Any]) -> None:
        del notice_payload["penalty"]
        extractor, _client = _make_extractor(notice_payload)

        with pytest.raises(ExtractionError, match="returned invalid JSON"):
            extractor.extract(b"abc")
