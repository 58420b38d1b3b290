from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.extraction.exceptions import ExtractionNetworkError
from app.extraction.gemini_client_adapter import GeminiClientAdapter
from app.extraction.models import ExtractionRequest, FilePart, InlinePart, TextPart


def _make_adapter() -> tuple[GeminiClientAdapter, MagicMock]:
    mock_client = MagicMock()
    with patch(
        "app.extraction.gemini_client_adapter.genai.Client",
        return_value=mock_client,
    ):
        adapter = GeminiClientAdapter(api_key="k", timeout_seconds=30)
    return adapter, mock_client


def _make_request() -> ExtractionRequest:
    return ExtractionRequest(
        model="gemini-x",
        contents=[InlinePart(data="YWJj"), TextPart(text="Extract")],
        response_schema={"type": "object"},
    )


class TestGeminiClientAdapter:
    def test_passes_timeout_in_milliseconds(self) -> None:
        with patch("app.extraction.gemini_client_adapter.genai.Client") as mock_cls:
            GeminiClientAdapter(api_key="k", timeout_seconds=30)

        http_options = mock_cls.call_args.kwargs["http_options"]
        assert http_options.timeout == 30000

    def test_returns_response_text(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.models.generate_content.return_value = MagicMock(text='{"ok": true}')

        assert adapter.generate_content(_make_request()) == '{"ok": true}'

        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-x"
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].response_json_schema == {"type": "object"}
        inline, text = kwargs["contents"]
        assert inline.inline_data.data == b"abc"
        assert inline.inline_data.mime_type == "application/pdf"
        assert text.text == "Extract"

    def test_file_part_is_sent_by_uri(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.models.generate_content.return_value = MagicMock(text="{}")
        request = ExtractionRequest(
            model="gemini-x",
            contents=[FilePart(file_uri="https://files/abc"), TextPart(text="Extract")],
        )

        adapter.generate_content(request)

        part = mock_client.models.generate_content.call_args.kwargs["contents"][0]
        assert part.file_data.file_uri == "https://files/abc"

    def test_upload_returns_file_reference(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.files.upload.return_value = MagicMock(
            uri="https://files/abc", size_bytes=3, mime_type="application/pdf"
        )
        mock_client.files.upload.return_value.name = "files/abc"

        uploaded = adapter.upload_file(b"abc", "application/pdf")

        assert uploaded.uri == "https://files/abc"
        assert uploaded.name == "files/abc"
        assert uploaded.size_bytes == 3
        config = mock_client.files.upload.call_args.kwargs["config"]
        assert config.mime_type == "application/pdf"

    def test_raises_network_error_on_timeout(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.models.generate_content.side_effect = httpx.TimeoutException("timeout")

        with pytest.raises(ExtractionNetworkError, match="network error"):
            adapter.generate_content(_make_request())

    def test_raises_network_error_on_upload_failure(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.files.upload.side_effect = httpx.ConnectError("refused")

        with pytest.raises(ExtractionNetworkError):
            adapter.upload_file(b"abc", "application/pdf")
