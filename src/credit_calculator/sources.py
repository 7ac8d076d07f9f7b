"""Fetch fact dictionary documents from disk or over HTTP."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence

import requests

from credit_calculator.config import CalculatorConfig
from credit_calculator.errors import DocumentFetchError


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def resolve_locations(config: CalculatorConfig) -> List[str]:
    """Join the configured facts location with each source name."""
    base = config.facts_location
    if is_url(base):
        base = base.rstrip("/")
        return [f"{base}/{name}" for name in config.sources]
    return [str(Path(base) / name) for name in config.sources]


def fetch_document(location: str, timeout: float = 30.0) -> str:
    """Fetch a single document as text.

    Raises:
        DocumentFetchError: If the request fails or the file cannot be read.
    """
    if is_url(location):
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DocumentFetchError(location, e) from e
        return response.text

    try:
        return Path(location).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentFetchError(location, e) from e


def fetch_documents(
    locations: Sequence[str], timeout: float = 30.0, max_workers: int = 4
) -> List[str]:
    """Fetch documents concurrently, returning them in the given order.

    The first failure (in input order) is raised once every fetch finished.
    Failures are not retried.
    """
    if not locations:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(locations)))) as executor:
        futures = [executor.submit(fetch_document, loc, timeout) for loc in locations]
        return [future.result() for future in futures]


def load_sources(config: CalculatorConfig) -> List[str]:
    """Fetch every configured fact dictionary document."""
    return fetch_documents(
        resolve_locations(config), timeout=config.timeout, max_workers=config.max_workers
    )
