"""Shared fixtures for credit calculator tests."""

import json

import pytest

from credit_calculator.engine import FactGraph


class FakeFactGraph(FactGraph):
    """Fact graph returning canned results and recording every call."""

    def __init__(self, results=None, fail_on=None):
        self.results = dict(results or {})
        self.fail_on = fail_on
        self.writes = []
        self.calls = []

    def set(self, path, value):
        self.calls.append(("set", path))
        if path == self.fail_on:
            raise ValueError(f"Cannot set {path}")
        self.writes.append((path, value))

    def get(self, path):
        self.calls.append(("get", path))
        if path == self.fail_on:
            raise RuntimeError(f"Cannot derive {path}")
        return self.results.get(path)

    def to_json(self):
        return json.dumps({"writes": self.writes})


@pytest.fixture
def make_graph():
    return FakeFactGraph


@pytest.fixture
def colorado_results():
    """Single SSN filer with two children."""
    return {
        "/filersHaveValidIdsForFederalEitc": True,
        "/filersHaveValidIdsForFederalCtc": True,
        "/filersHaveValidIdsForMdEitc": True,
        "/federalEitcMaxAmount": 7152,
        "/federalCtcMaxRefundableAmount": 3400,
        "/mdEitcAmount": 3576,
        "/adjustedGrossIncome": 25000,
        "/eitcIncomeLimit": 62688,
    }


@pytest.fixture
def maryland_itin_results():
    """Single ITIN filer in Maryland with two children."""
    return {
        "/filersHaveValidIdsForFederalEitc": False,
        "/filersHaveValidIdsForFederalCtc": False,
        "/filersHaveValidIdsForMdEitc": True,
        "/federalEitcMaxAmount": 0,
        "/federalCtcMaxRefundableAmount": 0,
        "/mdEitcAmount": 3576,
        "/adjustedGrossIncome": 25000,
    }


def module_xml(facts, version=None, root="FactDictionaryModule"):
    """Build a fact dictionary module with the given (path, name) facts."""
    meta = f"<Meta><Version>{version}</Version></Meta>" if version else ""
    body = "".join(
        f'<Fact path="{path}"><Name>{name}</Name></Fact>' for path, name in facts
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<{root}>{meta}<Facts>{body}</Facts></{root}>"
    )


@pytest.fixture
def make_module():
    return module_xml
