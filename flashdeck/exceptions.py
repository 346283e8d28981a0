from typing import Optional


class FlashdeckError(Exception):
    """Base exception for flashdeck errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class RecordIOError(FlashdeckError):
    """Raised when a deck record or temporary file cannot be read or written."""

    pass


class CorruptRecordError(FlashdeckError):
    """Raised when a record exists but fails structural parsing."""

    pass


class InterchangeError(FlashdeckError):
    """Base exception for import/export precondition failures."""

    pass


class UnsupportedContainerError(InterchangeError):
    """Raised when an archive holds no recognised collection database."""

    pass


class EmptyContainerError(InterchangeError):
    """Raised when an archive yields no importable cards."""

    pass


class UnknownFormatError(InterchangeError):
    """Raised when the format of an import file cannot be determined."""

    pass


class NothingToExportError(InterchangeError):
    """Raised when an export is requested for an empty deck selection."""

    pass


class SchemaError(InterchangeError):
    """Indicates an error building or querying an embedded collection
    database."""

    pass
