"""Calculator session: one merged dictionary and the fact graph loaded from it."""

import json
import threading
from typing import Mapping, Optional, Sequence, Union

from credit_calculator.config import CalculatorConfig
from credit_calculator.dictionary import merge_dictionaries
from credit_calculator.eligibility import CreditInputs, Summary, evaluate
from credit_calculator.engine import EngineFactory, FactGraph, load_engine_factory
from credit_calculator.sources import load_sources


class CalculatorSession:
    """Owns a loaded fact graph and runs evaluations against it.

    Evaluations on one session run one at a time. A failed evaluation leaves
    ``last_summary`` as it was.
    """

    def __init__(self, documents: Sequence[str], engine_factory: EngineFactory):
        """Merge the documents and load a fact graph from them.

        Args:
            documents: Fact dictionary XML documents, shared module first
            engine_factory: Callable taking the combined XML, returning a FactGraph
        """
        self.dictionary_xml = merge_dictionaries(*documents)
        self.engine_factory = engine_factory
        self.graph: FactGraph = engine_factory(self.dictionary_xml)
        self.last_summary: Optional[Summary] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: CalculatorConfig,
        engine_factory: Optional[EngineFactory] = None,
    ) -> "CalculatorSession":
        """Fetch the configured documents and build a session."""
        if engine_factory is None:
            if not config.engine:
                raise ValueError("No engine configured (set CREDIT_CALC_ENGINE)")
            engine_factory = load_engine_factory(config.engine)
        return cls(load_sources(config), engine_factory)

    def evaluate(self, inputs: Union[CreditInputs, Mapping]) -> Summary:
        with self._lock:
            summary = evaluate(self.graph, inputs)
            self.last_summary = summary
            return summary

    def reset(self) -> None:
        """Replace the fact graph with a fresh one and clear results."""
        with self._lock:
            self.graph = self.engine_factory(self.dictionary_xml)
            self.last_summary = None

    def graph_json(self) -> str:
        """Pretty-printed fact graph state."""
        with self._lock:
            raw = self.graph.to_json()
        return json.dumps(json.loads(raw), indent=2)
