"""Configuration for loading fact dictionaries and the fact graph engine."""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import List, Optional

import yaml

DEFAULT_SOURCES = [
    "credit-calc.xml",  # Shared demographics
    "federal-eitc.xml",
    "federal-ctc.xml",
    "md-eitc.xml",
]


@dataclass
class CalculatorConfig:
    """Where the fact dictionaries live and which engine loads them."""

    facts_location: str = "facts"  # Directory or base URL
    sources: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    engine: Optional[str] = None  # "module:callable"
    timeout: float = 30.0  # Seconds, per document fetch
    max_workers: int = 4

    @classmethod
    def from_yaml(cls, path) -> "CalculatorConfig":
        """Load configuration from a YAML file.

        Unknown keys are rejected so typos do not silently fall back to
        defaults.
        """
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_env(cls, base: Optional["CalculatorConfig"] = None) -> "CalculatorConfig":
        """Overlay CREDIT_CALC_* environment variables on a base config."""
        config = base or cls()
        overrides = {}

        facts = os.environ.get("CREDIT_CALC_FACTS")
        if facts:
            overrides["facts_location"] = facts
        engine = os.environ.get("CREDIT_CALC_ENGINE")
        if engine:
            overrides["engine"] = engine
        timeout = os.environ.get("CREDIT_CALC_TIMEOUT")
        if timeout:
            overrides["timeout"] = float(timeout)

        return replace(config, **overrides)
