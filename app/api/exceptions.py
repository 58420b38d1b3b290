class WebhookError(Exception):
    """Base exception for webhook requests rejected before enqueue."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class WebhookPayloadError(WebhookError):
    """Raised when the webhook body does not describe a valid job."""

    status_code = 400


class WebhookSignatureError(WebhookError):
    """Raised when the webhook signature is missing, invalid, or cannot be checked."""

    status_code = 401
