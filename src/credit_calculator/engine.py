"""Fact graph interface and adapters."""

import importlib
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

EngineFactory = Callable[[str], "FactGraph"]


class FactGraph(ABC):
    """A loaded fact graph.

    The graph resolves derived facts from the writable facts set on it.
    Implementations wrap a real rule engine; this package only drives it.
    """

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        """Write a value to a writable fact.

        Raises whatever the underlying engine raises for an unknown path or a
        value of the wrong type.
        """
        pass

    @abstractmethod
    def get(self, path: str) -> Any:
        """Read the current result of a fact, or None if it is incomplete."""
        pass

    @abstractmethod
    def to_json(self) -> str:
        """Serialize the full fact state as a JSON string."""
        pass


def load_engine_factory(spec: str) -> EngineFactory:
    """Import an engine factory from a ``module:callable`` spec.

    The callable takes the combined dictionary XML and returns a FactGraph.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Engine spec must look like 'module:callable', got {spec!r}")
    module = importlib.import_module(module_name)
    factory = module
    for part in attr.split("."):
        factory = getattr(factory, part)
    if not callable(factory):
        raise TypeError(f"{spec} is not callable")
    return factory


class ReplayFactGraph(FactGraph):
    """Fact graph that answers reads from recorded results.

    Writes are recorded in order and otherwise ignored; no rules are
    evaluated. Useful for reproducing a result set captured from a real
    engine.
    """

    def __init__(self, results: Optional[Dict[str, Any]] = None):
        self.results: Dict[str, Any] = dict(results or {})
        self.writes: List[Tuple[str, Any]] = []

    @classmethod
    def from_file(cls, path) -> "ReplayFactGraph":
        """Load recorded results from a YAML or JSON mapping of path to result."""
        path = Path(path)
        with open(path) as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping of fact path to result")
        return cls(data)

    def set(self, path: str, value: Any) -> None:
        self.writes.append((path, value))

    def get(self, path: str) -> Any:
        return self.results.get(path)

    def to_json(self) -> str:
        state = {path: value for path, value in self.writes}
        state.update(self.results)
        return json.dumps(state, default=str)
