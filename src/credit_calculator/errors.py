"""Error types raised by the credit calculator core."""

from typing import Optional


class CreditCalculatorError(Exception):
    """Base class for all credit calculator errors."""


class MalformedDocumentError(CreditCalculatorError):
    """A fact dictionary document could not be parsed as XML."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class DocumentFetchError(CreditCalculatorError):
    """A fact dictionary document could not be fetched or read."""

    def __init__(self, location: str, cause: Exception):
        super().__init__(f"Failed to load {location}: {cause}")
        self.location = location
        self.cause = cause


class MissingInputError(CreditCalculatorError):
    """A required form field was not supplied."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Missing required input: {field}")
        self.field = field


class InvalidInputError(CreditCalculatorError):
    """A form field was supplied with a value that cannot be used."""

    def __init__(self, field: str, value, reason: str):
        super().__init__(f"Invalid value for {field}: {value!r} ({reason})")
        self.field = field
        self.value = value


class EvaluationError(CreditCalculatorError):
    """The fact graph failed while a fact was being written or read."""

    def __init__(self, path: str, cause: Exception, operation: str = "get"):
        super().__init__(f"Error during {operation} of {path}: {cause}")
        self.path = path
        self.cause = cause
        self.operation = operation


class UnrecognizedResultError(CreditCalculatorError):
    """A fact graph result had a shape the normalizer does not understand."""

    def __init__(self, raw):
        super().__init__(f"Unrecognized fact graph result: {raw!r}")
        self.raw = raw
