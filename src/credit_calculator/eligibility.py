"""Drive the fact graph with form inputs and summarize credit eligibility."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from credit_calculator.engine import FactGraph
from credit_calculator.errors import (
    EvaluationError,
    InvalidInputError,
    MissingInputError,
)
from credit_calculator.normalize import normalize

# Writable facts
FILING_STATE_PATH = "/filingState"
FILING_STATUS_PATH = "/filingStatus"
PRIMARY_TAX_ID_PATH = "/primaryFilerTaxId"
SECONDARY_TAX_ID_PATH = "/secondaryFilerTaxId"
NUM_QUALIFYING_CHILDREN_PATH = "/numQualifyingChildren"

# Informational derived facts
ADJUSTED_GROSS_INCOME_PATH = "/adjustedGrossIncome"
EITC_INCOME_LIMIT_PATH = "/eitcIncomeLimit"

MARRIED_FILING_JOINTLY = "MarriedFilingJointly"
NO_TAX_ID = "Neither"
MARYLAND = "MD"

DISCLAIMER_NOTE = (
    "This estimate is based on simplified tax rules and is not a tool for "
    "determining actual tax credit eligibility."
)
ITIN_MARYLAND_NOTE = "ITIN holders qualify for Maryland EITC but not Federal EITC."
NOT_QUALIFIED_REASON = (
    "Based on your tax ID type and filing status, you do not meet the "
    "preliminary requirements for these credits."
)


@dataclass(frozen=True)
class Credit:
    """A credit and the facts that decide it."""

    key: str
    label: str
    id_check_path: str
    amount_path: str
    state: Optional[str] = None  # None for federal credits

    def applies_to(self, filing_state: Optional[str]) -> bool:
        return self.state is None or self.state == filing_state


FEDERAL_EITC = Credit(
    key="federal_eitc",
    label="Federal EITC",
    id_check_path="/filersHaveValidIdsForFederalEitc",
    amount_path="/federalEitcMaxAmount",
)
FEDERAL_CTC = Credit(
    key="federal_ctc",
    label="Federal Refundable CTC",
    id_check_path="/filersHaveValidIdsForFederalCtc",
    amount_path="/federalCtcMaxRefundableAmount",
)
MARYLAND_EITC = Credit(
    key="md_eitc",
    label="Maryland EITC",
    id_check_path="/filersHaveValidIdsForMdEitc",
    amount_path="/mdEitcAmount",
    state=MARYLAND,
)

CREDITS = (FEDERAL_EITC, FEDERAL_CTC, MARYLAND_EITC)


def is_true(value: Any) -> bool:
    """True for a normalized ``True`` or ``"true"``."""
    return value is True or (isinstance(value, str) and value == "true")


def is_false(value: Any) -> bool:
    return value is False or (isinstance(value, str) and value == "false")


def as_amount(value: Any) -> Union[int, float]:
    """Coerce a normalized amount to a number; anything unusable is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return value
    return 0


def format_currency(value: Union[int, float]) -> str:
    """Format a dollar amount with no cents, e.g. ``$7,152``."""
    amount = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def check_label(value: Any) -> str:
    """Display text for an eligibility check result."""
    if is_true(value):
        return "Eligible ✓"
    if is_false(value):
        return "Ineligible ✗"
    return "-"


@dataclass
class CreditInputs:
    """Answers from the credit calculator form."""

    filing_state: Optional[str] = None
    filing_status: Optional[str] = None
    primary_tax_id: Optional[str] = None
    secondary_tax_id: Optional[str] = None
    num_qualifying_children: Any = 0

    @classmethod
    def from_form(cls, form: Mapping) -> "CreditInputs":
        """Build inputs from form field names (``filingState`` etc.)."""
        return cls(
            filing_state=form.get("filingState"),
            filing_status=form.get("filingStatus"),
            primary_tax_id=form.get("primaryFilerTaxId", form.get("primaryTaxId")),
            secondary_tax_id=form.get(
                "secondaryFilerTaxId", form.get("secondaryTaxId")
            ),
            num_qualifying_children=form.get("numQualifyingChildren", 0),
        )

    @property
    def is_joint(self) -> bool:
        return self.filing_status == MARRIED_FILING_JOINTLY

    def validate(self) -> None:
        """Check required fields.

        Raises:
            MissingInputError: Naming the first missing required field.
            InvalidInputError: If the child count is not a non-negative integer.
        """
        required = (
            ("filingState", self.filing_state, "Please select a state"),
            ("filingStatus", self.filing_status, "Please select a filing status"),
            ("primaryFilerTaxId", self.primary_tax_id, "Please select your tax ID type"),
        )
        for name, value, message in required:
            if not value:
                raise MissingInputError(name, message)
        self.children_count()

    def children_count(self) -> int:
        value = self.num_qualifying_children
        if value is None or value == "":
            return 0
        if isinstance(value, bool):
            raise InvalidInputError("numQualifyingChildren", value, "not a number")
        try:
            count = int(value)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(
                "numQualifyingChildren", value, "not a whole number"
            ) from e
        if isinstance(value, float) and count != value:
            raise InvalidInputError("numQualifyingChildren", value, "not a whole number")
        if count < 0:
            raise InvalidInputError("numQualifyingChildren", value, "must not be negative")
        return count

    def secondary_id(self) -> str:
        """Spouse tax ID; only joint filers have one."""
        if self.is_joint:
            return self.secondary_tax_id or NO_TAX_ID
        return NO_TAX_ID

    def fact_writes(self) -> List[Tuple[str, Any]]:
        """Validate and return the (path, value) writes in the order applied."""
        self.validate()
        return [
            (FILING_STATE_PATH, self.filing_state),
            (FILING_STATUS_PATH, self.filing_status),
            (PRIMARY_TAX_ID_PATH, self.primary_tax_id),
            (SECONDARY_TAX_ID_PATH, self.secondary_id()),
            (NUM_QUALIFYING_CHILDREN_PATH, self.children_count()),
        ]


@dataclass
class EligibilityDecision:
    """Normalized id check and amount for one credit."""

    credit: Credit
    id_check: Any
    amount: Any

    @property
    def passed(self) -> bool:
        return is_true(self.id_check)

    @property
    def amount_value(self) -> Union[int, float]:
        return as_amount(self.amount)

    def qualifies(self, filing_state: Optional[str]) -> bool:
        return self.credit.applies_to(filing_state) and self.passed


@dataclass
class CreditResults:
    """Everything read back from the fact graph for one evaluation."""

    filing_state: str
    decisions: List[EligibilityDecision]
    adjusted_gross_income: Any = None
    eitc_income_limit: Any = None

    def decision(self, key: str) -> EligibilityDecision:
        for d in self.decisions:
            if d.credit.key == key:
                return d
        raise KeyError(key)


@dataclass
class CreditLine:
    label: str
    amount: Union[int, float]

    @property
    def formatted(self) -> str:
        return format_currency(self.amount)


@dataclass
class CheckLine:
    label: str
    value: Any

    @property
    def status(self) -> str:
        return check_label(self.value)


@dataclass
class Summary:
    """Render-ready outcome of one evaluation."""

    filing_state: str
    qualifies: bool
    lines: List[CreditLine] = field(default_factory=list)
    total: Union[int, float] = 0
    notes: List[str] = field(default_factory=list)
    checks: List[CheckLine] = field(default_factory=list)
    adjusted_gross_income: Any = None
    eitc_income_limit: Any = None

    @property
    def formatted_total(self) -> str:
        return format_currency(self.total)

    def line(self, label: str) -> Optional[CreditLine]:
        for line in self.lines:
            if line.label == label:
                return line
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filing_state": self.filing_state,
            "qualifies": self.qualifies,
            "credits": [
                {"label": l.label, "amount": l.amount, "formatted": l.formatted}
                for l in self.lines
            ],
            "total": self.total,
            "formatted_total": self.formatted_total,
            "notes": list(self.notes),
            "checks": [
                {"label": c.label, "value": c.value, "status": c.status}
                for c in self.checks
            ],
            "adjusted_gross_income": self.adjusted_gross_income,
            "eitc_income_limit": self.eitc_income_limit,
        }


def _read(engine: FactGraph, path: str) -> Any:
    try:
        return normalize(engine.get(path))
    except Exception as e:
        raise EvaluationError(path, e, "get") from e


def write_inputs(engine: FactGraph, inputs: CreditInputs) -> None:
    """Validate the inputs, then write every one of them to the graph."""
    writes = inputs.fact_writes()
    for path, value in writes:
        try:
            engine.set(path, value)
        except Exception as e:
            raise EvaluationError(path, e, "set") from e


def read_results(engine: FactGraph, filing_state: str) -> CreditResults:
    """Read and normalize every credit output from the graph."""
    decisions = [
        EligibilityDecision(
            credit=credit,
            id_check=_read(engine, credit.id_check_path),
            amount=_read(engine, credit.amount_path),
        )
        for credit in CREDITS
    ]
    return CreditResults(
        filing_state=filing_state,
        decisions=decisions,
        adjusted_gross_income=_read(engine, ADJUSTED_GROSS_INCOME_PATH),
        eitc_income_limit=_read(engine, EITC_INCOME_LIMIT_PATH),
    )


def summarize(results: CreditResults) -> Summary:
    """Aggregate normalized results into a Summary."""
    state = results.filing_state
    qualifying = [d for d in results.decisions if d.qualifies(state)]

    checks = [
        CheckLine(d.credit.label, d.id_check)
        for d in results.decisions
        if d.credit.applies_to(state)
    ]
    summary = Summary(
        filing_state=state,
        qualifies=bool(qualifying),
        checks=checks,
        adjusted_gross_income=results.adjusted_gross_income,
        eitc_income_limit=results.eitc_income_limit,
    )

    if not qualifying:
        summary.notes.append(NOT_QUALIFIED_REASON)
        return summary

    for d in qualifying:
        amount = d.amount_value
        if amount > 0:
            summary.lines.append(CreditLine(d.credit.label, amount))
            summary.total += amount

    summary.notes.append(DISCLAIMER_NOTE)
    federal_eitc = results.decision(FEDERAL_EITC.key)
    maryland_eitc = results.decision(MARYLAND_EITC.key)
    if state == MARYLAND and maryland_eitc.passed and not federal_eitc.passed:
        summary.notes.append(ITIN_MARYLAND_NOTE)

    return summary


def evaluate(
    engine: FactGraph, inputs: Union[CreditInputs, Mapping]
) -> Summary:
    """Run one eligibility evaluation against a loaded fact graph.

    Args:
        engine: Fact graph loaded from the combined dictionary
        inputs: CreditInputs, or a mapping keyed by form field name

    Returns:
        A new Summary

    Raises:
        MissingInputError: A required field is missing; nothing was written.
        InvalidInputError: A field is unusable; nothing was written.
        EvaluationError: The graph failed on a write or read.
    """
    if isinstance(inputs, Mapping):
        inputs = CreditInputs.from_form(inputs)
    write_inputs(engine, inputs)
    results = read_results(engine, inputs.filing_state)
    return summarize(results)
