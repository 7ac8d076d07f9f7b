"""Credit Calculator - EITC and CTC eligibility from fact dictionaries."""

from credit_calculator.dictionary import (
    FactEntry,
    RuleDocument,
    duplicate_paths,
    merge_dictionaries,
    read_document,
)
from credit_calculator.eligibility import (
    CreditInputs,
    CreditResults,
    EligibilityDecision,
    Summary,
    evaluate,
    format_currency,
    summarize,
)
from credit_calculator.engine import FactGraph, ReplayFactGraph, load_engine_factory
from credit_calculator.errors import (
    CreditCalculatorError,
    DocumentFetchError,
    EvaluationError,
    InvalidInputError,
    MalformedDocumentError,
    MissingInputError,
    UnrecognizedResultError,
)
from credit_calculator.normalize import INCOMPLETE, DecodedResult, ResultKind, decode, normalize
from credit_calculator.session import CalculatorSession

__version__ = "0.1.0"
__all__ = [
    # Dictionary merging
    "FactEntry",
    "RuleDocument",
    "duplicate_paths",
    "merge_dictionaries",
    "read_document",
    # Result normalization
    "INCOMPLETE",
    "DecodedResult",
    "ResultKind",
    "decode",
    "normalize",
    # Eligibility
    "CreditInputs",
    "CreditResults",
    "EligibilityDecision",
    "Summary",
    "evaluate",
    "format_currency",
    "summarize",
    # Engine and session
    "FactGraph",
    "ReplayFactGraph",
    "load_engine_factory",
    "CalculatorSession",
    # Errors
    "CreditCalculatorError",
    "DocumentFetchError",
    "EvaluationError",
    "InvalidInputError",
    "MalformedDocumentError",
    "MissingInputError",
    "UnrecognizedResultError",
]
