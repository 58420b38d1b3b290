class QueueError(Exception):
    """Base exception for job queue errors."""


class JobNotFoundError(QueueError):
    """Raised when a job id has no stored job."""


class InvalidJobPayloadError(QueueError):
    """Raised when a queued payload cannot be turned into a JobRequest."""
