"""
Typed exception hierarchy for the stock kernel.

Every exception carries a ``code`` class attribute (machine-readable) and
keeps its context as attributes rather than only in the message, so a
caller can catch by type and log structured data.

    StockKernelError (base)
    |
    +-- RecordError
    |   +-- MalformedDateError
    |   +-- MalformedDocumentError
    |
    +-- ConfigurationError
        +-- InvalidSettingError

Category        | Code                 | When Raised
----------------|----------------------|-----------------------------------------
Record          | MALFORMED_DATE       | Record date cannot be parsed
                | MALFORMED_DOCUMENT   | Stored document has an unusable shape
----------------|----------------------|-----------------------------------------
Configuration   | INVALID_SETTING      | Settings file holds an invalid value

Record errors are data-quality problems. The engines catch them per
record, log them, and carry on; they never reach presentation callers.
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Record-related exceptions


class RecordError(StockKernelError):
    """Base exception for problems with a stored source record."""

    code: str = "RECORD_ERROR"


class MalformedDateError(RecordError):
    """A record date could not be interpreted as an instant."""

    code: str = "MALFORMED_DATE"

    def __init__(self, value: object, field: str = "date"):
        self.value = value
        self.field = field
        super().__init__(f"Cannot parse {field} from {value!r}")


class MalformedDocumentError(RecordError):
    """A stored document does not have the shape of its record type."""

    code: str = "MALFORMED_DOCUMENT"

    def __init__(self, document_type: str, reason: str):
        self.document_type = document_type
        self.reason = reason
        super().__init__(f"Malformed {document_type} document: {reason}")


# Configuration exceptions


class ConfigurationError(StockKernelError):
    """Base exception for inventory settings problems."""

    code: str = "CONFIGURATION_ERROR"


class InvalidSettingError(ConfigurationError):
    """A settings key holds a value outside its allowed range."""

    code: str = "INVALID_SETTING"

    def __init__(self, key: str, value: object, reason: str = ""):
        self.key = key
        self.value = value
        message = f"Invalid setting {key}={value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
