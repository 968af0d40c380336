"""Domain errors raised by the ledger and cap table services"""


class AppError(Exception):
    """Base error for domain/application exceptions."""


class ValidationError(AppError):
    """Required field missing or value out of its allowed range."""


class NotFoundError(AppError):
    """Referenced startup or record does not exist."""


class PersistenceError(AppError):
    """Backing store rejected or failed to complete a read or write."""


class AttachmentUploadError(AppError):
    """Attachment file or cloud-drive link failed validation or storage."""


class ReconciliationDriftWarning(UserWarning):
    """Cached total funding differed from the sum of investment records."""
