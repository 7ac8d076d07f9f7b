"""Combine fact dictionary modules into a single fact dictionary.

Each credit keeps its facts in its own ``FactDictionaryModule`` document. The
fact graph loads exactly one ``FactDictionary``, so the modules are merged:
the first document supplies ``Meta`` and the base ``Facts`` section, and the
facts of every later document are appended to it in order.
"""

import copy
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree as ET

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from credit_calculator.errors import MalformedDocumentError

MODULE_TAG = "FactDictionaryModule"
DICTIONARY_TAG = "FactDictionary"
META_TAG = "Meta"
FACTS_TAG = "Facts"
FACT_TAG = "Fact"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

Source = Union[str, bytes]


@dataclass
class FactEntry:
    """A single ``Fact`` from a dictionary document."""

    path: Optional[str]
    name: Optional[str]
    element: ET.Element = field(repr=False)


@dataclass
class RuleDocument:
    """Parsed view of a fact dictionary or module."""

    root_tag: str
    meta: Optional[ET.Element] = field(default=None, repr=False)
    facts: List[FactEntry] = field(default_factory=list)

    @property
    def is_module(self) -> bool:
        return self.root_tag == MODULE_TAG

    @property
    def version(self) -> Optional[str]:
        if self.meta is None:
            return None
        return self.meta.findtext("Version")

    @property
    def fact_paths(self) -> List[Optional[str]]:
        return [f.path for f in self.facts]


def parse_document(source: Source, index: int = 0) -> ET.Element:
    """Parse one dictionary document and return its root element.

    Raises:
        MalformedDocumentError: If the document is not well-formed XML.
    """
    try:
        return DefusedET.fromstring(source)
    except (ET.ParseError, DefusedXmlException) as e:
        raise MalformedDocumentError(
            f"Document {index} is not well-formed XML: {e}", index=index
        ) from e


def read_document(source: Source, index: int = 0) -> RuleDocument:
    """Parse a dictionary document into a ``RuleDocument``."""
    root = parse_document(source, index)
    facts_section = root.find(FACTS_TAG)
    facts = []
    if facts_section is not None:
        for element in facts_section:
            facts.append(
                FactEntry(
                    path=element.get("path"),
                    name=element.findtext("Name"),
                    element=element,
                )
            )
    return RuleDocument(root_tag=root.tag, meta=root.find(META_TAG), facts=facts)


def merge_dictionaries(*sources: Source) -> str:
    """Merge fact dictionary documents into one serialized ``FactDictionary``.

    ``Meta`` comes from the first document only. Facts from later documents
    are deep-copied and appended to the first document's ``Facts`` section,
    left to right. Duplicate paths are kept; see ``duplicate_paths``.

    Args:
        *sources: One or more XML documents.

    Returns:
        The combined document as an XML string.

    Raises:
        ValueError: If no documents are given.
        MalformedDocumentError: If any document cannot be parsed.
    """
    if not sources:
        raise ValueError("At least one fact dictionary document is required")

    roots = [parse_document(source, i) for i, source in enumerate(sources)]
    base = roots[0]

    base_facts = base.find(FACTS_TAG)
    if base_facts is None:
        base_facts = ET.SubElement(base, FACTS_TAG)

    for root in roots[1:]:
        facts = root.find(FACTS_TAG)
        if facts is None:
            continue
        for fact in facts:
            base_facts.append(copy.deepcopy(fact))

    # Renaming in place keeps children and attributes
    if base.tag == MODULE_TAG:
        base.tag = DICTIONARY_TAG

    return XML_DECLARATION + ET.tostring(base, encoding="unicode")


def duplicate_paths(*sources: Source) -> Dict[str, int]:
    """Return fact paths that appear more than once across the documents."""
    counts: Counter = Counter()
    for i, source in enumerate(sources):
        counts.update(p for p in read_document(source, i).fact_paths if p)
    return {path: n for path, n in counts.items() if n > 1}
