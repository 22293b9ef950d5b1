"""Error taxonomy shared by the quote engine and its adapters."""


class QuoteError(Exception):
    """Base class; ``status_code`` is what the HTTP layer answers with."""

    status_code = 500
    default_message = 'Quote operation failed'

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ValidationError(QuoteError):
    status_code = 400
    default_message = 'Invalid quote data'


class NotFoundError(QuoteError):
    status_code = 404
    default_message = 'Quote not found'


class PersistenceError(QuoteError):
    status_code = 503
    default_message = 'The quote store rejected the operation'


class StorageError(QuoteError):
    status_code = 502
    default_message = 'Attachment upload failed'


class MessagingError(QuoteError):
    status_code = 502
    default_message = 'Message delivery failed'
