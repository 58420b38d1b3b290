from dataclasses import dataclass, field

PDF_MIME_TYPE = "application/pdf"
JSON_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class InlinePart:
    """Document bytes carried inside the request, base64-encoded."""

    data: str
    mime_type: str = PDF_MIME_TYPE


@dataclass(frozen=True)
class FilePart:
    """Reference to a document previously uploaded to the provider."""

    file_uri: str
    mime_type: str = PDF_MIME_TYPE


@dataclass(frozen=True)
class TextPart:
    """Prompt text."""

    text: str


ContentPart = InlinePart | FilePart | TextPart


@dataclass(frozen=True)
class ExtractionRequest:
    """Provider-neutral structured extraction request."""

    model: str
    contents: list[ContentPart]
    response_mime_type: str = JSON_MIME_TYPE
    response_schema: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadedFile:
    """Provider response to an out-of-band file upload."""

    uri: str | None = None
    name: str | None = None
    size_bytes: int | None = None
    mime_type: str | None = None
