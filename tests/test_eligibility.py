"""Tests for eligibility evaluation and summaries."""

import pytest

from credit_calculator import (
    CreditInputs,
    EvaluationError,
    InvalidInputError,
    MissingInputError,
    evaluate,
    format_currency,
)
from credit_calculator import eligibility
from credit_calculator.eligibility import (
    DISCLAIMER_NOTE,
    ITIN_MARYLAND_NOTE,
    NOT_QUALIFIED_REASON,
    as_amount,
    check_label,
)

COLORADO_FORM = {
    "filingState": "CO",
    "filingStatus": "Single",
    "primaryFilerTaxId": "SSN",
    "secondaryFilerTaxId": "Neither",
    "numQualifyingChildren": 2,
}

MARYLAND_ITIN_FORM = {
    "filingState": "MD",
    "filingStatus": "Single",
    "primaryFilerTaxId": "ITIN",
    "numQualifyingChildren": 2,
}


class TestEvaluateScenarios:
    def test_colorado_single_ssn(self, make_graph, colorado_results):
        summary = evaluate(make_graph(colorado_results), COLORADO_FORM)

        assert summary.qualifies
        assert summary.total == 10552
        assert [l.label for l in summary.lines] == ["Federal EITC", "Federal Refundable CTC"]
        assert summary.line("Maryland EITC") is None
        assert summary.formatted_total == "$10,552"
        assert summary.notes == [DISCLAIMER_NOTE]

    def test_maryland_itin(self, make_graph, maryland_itin_results):
        summary = evaluate(make_graph(maryland_itin_results), MARYLAND_ITIN_FORM)

        assert summary.qualifies
        assert summary.total == 3576
        assert [l.label for l in summary.lines] == ["Maryland EITC"]
        assert ITIN_MARYLAND_NOTE in summary.notes

    def test_maryland_with_ssn_has_no_itin_note(self, make_graph, colorado_results):
        form = dict(COLORADO_FORM, filingState="MD")
        summary = evaluate(make_graph(colorado_results), form)

        assert summary.total == 7152 + 3400 + 3576
        assert summary.line("Maryland EITC").formatted == "$3,576"
        assert ITIN_MARYLAND_NOTE not in summary.notes

    def test_maryland_check_ignored_outside_maryland(self, make_graph, maryland_itin_results):
        form = dict(MARYLAND_ITIN_FORM, filingState="CO")
        summary = evaluate(make_graph(maryland_itin_results), form)

        assert not summary.qualifies
        assert summary.total == 0
        assert summary.lines == []
        assert summary.notes == [NOT_QUALIFIED_REASON]

    def test_string_results_and_wrappers(self, make_graph):
        results = {
            "/filersHaveValidIdsForFederalEitc": {"v": "true"},
            "/filersHaveValidIdsForFederalCtc": "false",
            "/federalEitcMaxAmount": {"v": {"unscaled": {"low": 432800}, "scale": 2}},
            "/federalCtcMaxRefundableAmount": "1700",
        }
        summary = evaluate(make_graph(results), dict(COLORADO_FORM, numQualifyingChildren=1))

        assert summary.qualifies
        assert summary.total == 4328
        assert [l.label for l in summary.lines] == ["Federal EITC"]

    def test_zero_amount_credit_not_listed(self, make_graph, colorado_results):
        colorado_results["/federalCtcMaxRefundableAmount"] = 0
        summary = evaluate(make_graph(colorado_results), dict(COLORADO_FORM, numQualifyingChildren=0))

        assert [l.label for l in summary.lines] == ["Federal EITC"]

    def test_incomplete_results_do_not_qualify(self, make_graph):
        summary = evaluate(make_graph({}), COLORADO_FORM)

        assert not summary.qualifies
        assert summary.formatted_total == "$0"
        assert [c.status for c in summary.checks] == ["-", "-"]

    def test_checks_include_maryland_only_in_maryland(self, make_graph, maryland_itin_results):
        summary = evaluate(make_graph(maryland_itin_results), MARYLAND_ITIN_FORM)
        assert [(c.label, c.status) for c in summary.checks] == [
            ("Federal EITC", "Ineligible ✗"),
            ("Federal Refundable CTC", "Ineligible ✗"),
            ("Maryland EITC", "Eligible ✓"),
        ]

    def test_informational_values(self, make_graph, colorado_results):
        summary = evaluate(make_graph(colorado_results), COLORADO_FORM)
        assert summary.adjusted_gross_income == 25000
        assert summary.eitc_income_limit == 62688

    def test_to_dict(self, make_graph, colorado_results):
        data = evaluate(make_graph(colorado_results), COLORADO_FORM).to_dict()
        assert data["qualifies"] is True
        assert data["total"] == 10552
        assert data["credits"][0] == {
            "label": "Federal EITC",
            "amount": 7152,
            "formatted": "$7,152",
        }


class TestFactWrites:
    def test_writes_in_order_before_reads(self, make_graph, colorado_results):
        graph = make_graph(colorado_results)
        evaluate(graph, COLORADO_FORM)

        assert graph.writes == [
            ("/filingState", "CO"),
            ("/filingStatus", "Single"),
            ("/primaryFilerTaxId", "SSN"),
            ("/secondaryFilerTaxId", "Neither"),
            ("/numQualifyingChildren", 2),
        ]
        kinds = [kind for kind, _ in graph.calls]
        assert kinds == ["set"] * 5 + ["get"] * (len(kinds) - 5)

    def test_secondary_id_forced_for_non_joint(self, make_graph):
        graph = make_graph()
        evaluate(graph, dict(COLORADO_FORM, secondaryFilerTaxId="SSN"))
        assert ("/secondaryFilerTaxId", "Neither") in graph.writes

    def test_secondary_id_kept_for_joint(self, make_graph):
        graph = make_graph()
        form = dict(COLORADO_FORM, filingStatus="MarriedFilingJointly", secondaryFilerTaxId="ITIN")
        evaluate(graph, form)
        assert ("/secondaryFilerTaxId", "ITIN") in graph.writes

    def test_secondary_id_defaults_for_joint(self, make_graph):
        graph = make_graph()
        form = {
            "filingState": "CO",
            "filingStatus": "MarriedFilingJointly",
            "primaryFilerTaxId": "SSN",
        }
        evaluate(graph, form)
        assert ("/secondaryFilerTaxId", "Neither") in graph.writes
        assert ("/numQualifyingChildren", 0) in graph.writes

    def test_form_string_child_count(self, make_graph):
        graph = make_graph()
        evaluate(graph, dict(COLORADO_FORM, numQualifyingChildren="3"))
        assert ("/numQualifyingChildren", 3) in graph.writes

    def test_short_tax_id_field_names(self, make_graph, maryland_itin_results):
        form = {
            "filingState": "MD",
            "filingStatus": "Single",
            "primaryTaxId": "ITIN",
            "secondaryTaxId": "Neither",
            "numQualifyingChildren": 2,
        }
        graph = make_graph(maryland_itin_results)
        summary = evaluate(graph, form)

        assert ("/primaryFilerTaxId", "ITIN") in graph.writes
        assert summary.total == 3576

    def test_accepts_credit_inputs(self, make_graph, colorado_results):
        inputs = CreditInputs(
            filing_state="CO",
            filing_status="Single",
            primary_tax_id="SSN",
            num_qualifying_children=2,
        )
        assert evaluate(make_graph(colorado_results), inputs).total == 10552


class TestValidation:
    @pytest.mark.parametrize("field", ["filingState", "filingStatus", "primaryFilerTaxId"])
    def test_missing_required_field_writes_nothing(self, make_graph, field):
        graph = make_graph()
        form = dict(COLORADO_FORM)
        del form[field]

        with pytest.raises(MissingInputError) as exc_info:
            evaluate(graph, form)
        assert exc_info.value.field == field
        assert len(graph.writes) == 0
        assert graph.calls == []

    def test_empty_string_is_missing(self, make_graph):
        with pytest.raises(MissingInputError):
            evaluate(make_graph(), dict(COLORADO_FORM, filingState=""))

    @pytest.mark.parametrize("children", [-1, "two", 1.5, True])
    def test_invalid_child_count(self, make_graph, children):
        graph = make_graph()
        with pytest.raises(InvalidInputError):
            evaluate(graph, dict(COLORADO_FORM, numQualifyingChildren=children))
        assert graph.writes == []


class TestEvaluationErrors:
    def test_write_failure_wraps_path(self, make_graph):
        graph = make_graph(fail_on="/filingStatus")
        with pytest.raises(EvaluationError) as exc_info:
            evaluate(graph, COLORADO_FORM)

        assert exc_info.value.path == "/filingStatus"
        assert exc_info.value.operation == "set"
        assert isinstance(exc_info.value.cause, ValueError)

    def test_result_decoding_failure_wraps_path(self, make_graph, colorado_results, monkeypatch):
        def broken(raw):
            raise TypeError("bad result")

        monkeypatch.setattr(eligibility, "normalize", broken)
        with pytest.raises(EvaluationError) as exc_info:
            evaluate(make_graph(colorado_results), COLORADO_FORM)

        assert exc_info.value.path == "/filersHaveValidIdsForFederalEitc"
        assert isinstance(exc_info.value.cause, TypeError)

    def test_keyed_lookup_result_is_not_an_amount(self, make_graph, colorado_results):
        class KeyedLookup:
            def get(self, key):
                return 7152

        colorado_results["/federalEitcMaxAmount"] = KeyedLookup()
        summary = evaluate(make_graph(colorado_results), COLORADO_FORM)

        assert summary.total == 3400
        assert summary.line("Federal EITC") is None

    def test_read_failure_wraps_path(self, make_graph, colorado_results):
        graph = make_graph(colorado_results, fail_on="/mdEitcAmount")
        with pytest.raises(EvaluationError) as exc_info:
            evaluate(graph, COLORADO_FORM)

        assert exc_info.value.path == "/mdEitcAmount"
        assert exc_info.value.operation == "get"
        assert exc_info.value.__cause__ is exc_info.value.cause


class TestFormatting:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "$0"),
            (649, "$649"),
            (7152, "$7,152"),
            (10552.0, "$10,552"),
            (1234.5, "$1,235"),
            (-5, "-$5"),
            (1000000, "$1,000,000"),
        ],
    )
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_check_label(self):
        assert check_label(True) == "Eligible ✓"
        assert check_label("true") == "Eligible ✓"
        assert check_label(False) == "Ineligible ✗"
        assert check_label("false") == "Ineligible ✗"
        assert check_label("Incomplete") == "-"
        assert check_label(None) == "-"

    def test_as_amount(self):
        assert as_amount(3400) == 3400
        assert as_amount("1700.5") == 1700.5
        assert as_amount("Incomplete") == 0
        assert as_amount({"foo": 1}) == 0
        assert as_amount(True) == 0
        assert as_amount(float("nan")) == 0
        assert as_amount(float("inf")) == 0
        assert as_amount("-Infinity") == 0

    def test_infinite_amount_not_listed(self, make_graph, colorado_results):
        colorado_results["/federalEitcMaxAmount"] = "Infinity"
        summary = evaluate(make_graph(colorado_results), COLORADO_FORM)

        assert summary.total == 3400
        assert summary.formatted_total == "$3,400"
