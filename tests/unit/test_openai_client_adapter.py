from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from app.extraction.exceptions import ExtractionError, ExtractionNetworkError
from app.extraction.models import ExtractionRequest, FilePart, InlinePart, TextPart
from app.extraction.openai_client_adapter import OpenAIClientAdapter


def _make_mock_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def _make_adapter() -> tuple[OpenAIClientAdapter, MagicMock]:
    mock_client = MagicMock()
    with patch(
        "app.extraction.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
    return adapter, mock_client


def _make_request() -> ExtractionRequest:
    return ExtractionRequest(
        model="gpt-x",
        contents=[InlinePart(data="YWJj"), TextPart(text="Extract")],
        response_schema={"type": "object"},
    )


class TestOpenAIClientAdapter:
    def test_returns_content(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.chat.completions.create.return_value = _make_mock_response('{"ok": true}')

        assert adapter.generate_content(_make_request()) == '{"ok": true}'

    def test_sends_file_and_schema(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.chat.completions.create.return_value = _make_mock_response("{}")

        adapter.generate_content(_make_request())

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-x"
        assert kwargs["response_format"]["json_schema"]["schema"] == {"type": "object"}
        file_part, text_part = kwargs["messages"][0]["content"]
        assert file_part["file"]["file_data"] == "data:application/pdf;base64,YWJj"
        assert text_part == {"type": "text", "text": "Extract"}

    def test_uploaded_file_is_referenced_by_id(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.chat.completions.create.return_value = _make_mock_response("{}")
        request = ExtractionRequest(
            model="gpt-x", contents=[FilePart(file_uri="file-1"), TextPart(text="Extract")]
        )

        adapter.generate_content(request)

        content = mock_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert content[0] == {"type": "file", "file": {"file_id": "file-1"}}

    def test_upload_returns_file_id_as_name(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.files.create.return_value = MagicMock(id="file-1", bytes=3)

        uploaded = adapter.upload_file(b"abc", "application/pdf")

        assert uploaded.uri is None
        assert uploaded.name == "file-1"
        assert uploaded.size_bytes == 3
        mock_client.files.create.assert_called_once_with(
            file=("document.pdf", b"abc", "application/pdf"), purpose="user_data"
        )

    def test_raises_error_for_no_choices(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.chat.completions.create.return_value = MagicMock(choices=[])

        with pytest.raises(ExtractionError, match="no choices"):
            adapter.generate_content(_make_request())

    def test_raises_network_error_on_connection_failure(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(ExtractionNetworkError, match="network error"):
            adapter.generate_content(_make_request())

    def test_raises_network_error_on_timeout(self) -> None:
        adapter, mock_client = _make_adapter()
        mock_client.files.create.side_effect = httpx.TimeoutException("timeout")

        with pytest.raises(ExtractionNetworkError, match="network error"):
            adapter.upload_file(b"abc", "application/pdf")
