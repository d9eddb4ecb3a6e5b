"""
Base classes and interfaces for headline providers.

This module defines the contract that all headline providers must follow,
plus the field helpers shared by the JSON-based adapters.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol

from biznews.models import Article, Headlines


class HeadlineProvider(Protocol):
    """
    Protocol for headline providers.

    Classes implementing this protocol fetch the provider's current top
    headlines and normalize them into a list of Article objects, in the
    order the provider returned them.
    """

    def fetch_top_headlines(self) -> List[Article]:
        """Fetches and normalizes the current top headlines."""


class SummarizingProvider(HeadlineProvider, Protocol):
    """A provider whose responses carry their own result counts."""

    def fetch_headlines(self) -> Headlines:
        """Fetches headlines along with the provider-supplied summary."""


def copy_present(
    raw: Mapping[str, Any], article: Dict[str, Any], mapping: Mapping[str, str]
) -> None:
    """Copies raw[src] to article[dst] for every src key present in raw."""
    for src, dst in mapping.items():
        if src in raw:
            article[dst] = raw[src]


def resolve_source(value: Any) -> Optional[str]:
    """Resolves a source field that is either a string or a nested object."""
    if isinstance(value, Mapping):
        domain = value.get("domain")
        if domain is not None:
            return domain
        return value.get("name")
    return value
