class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class RecordNotMatchedError(ProcessorError):
    """Raised when a status update matched no record by id or file name."""


class MissingStoragePathError(ProcessorError):
    """Raised when the matched record has no file_url to download."""


class ExtractionValidationError(ProcessorError):
    """Raised when extracted data fails field normalization."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Invalid extracted data: {'; '.join(errors)}")
        self.errors = errors
