"""
LLM Service Module.

This module provides the RelevanceFilter class, which interfaces with the OpenAI
chat completions API to keep only the headlines that matter to businesses.
"""

import json

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from biznews.errors import ConfigurationError
from biznews.models import Article, FilterResult

logger = logging.getLogger(__name__)

SEQUENCE = "sequence"
KEYED = "keyed"
MALFORMED = "malformed"


class KeyedSelection(BaseModel):
    """Model reply shaped as {"articles": [...]}."""

    model_config = ConfigDict(extra="allow")

    articles: List[Dict[str, Any]]


_SEQUENCE_ADAPTER = TypeAdapter(List[Dict[str, Any]])


@dataclass(frozen=True)
class ParsedSelection:
    """Tagged result of parsing the model reply."""

    kind: str
    articles: List[Dict[str, Any]] = field(default_factory=list)
    reason: Optional[str] = None


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    # Strip Markdown code blocks some models wrap JSON in
    if cleaned.startswith("```"):
        parts = cleaned.split("\n", 1)
        cleaned = parts[1] if len(parts) > 1 else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def parse_selection(text: Optional[str]) -> ParsedSelection:
    """Parses and validates the model reply without raising."""
    try:
        parsed = json.loads(_strip_code_fence(text or "") or "{}")
    except ValueError as e:
        return ParsedSelection(MALFORMED, reason=f"invalid JSON: {e}")

    try:
        if isinstance(parsed, list):
            return ParsedSelection(SEQUENCE, _SEQUENCE_ADAPTER.validate_python(parsed))
        if isinstance(parsed, dict):
            keyed = KeyedSelection.model_validate(parsed)
            return ParsedSelection(KEYED, keyed.articles)
    except ValidationError as e:
        return ParsedSelection(MALFORMED, reason=f"unexpected shape: {e.error_count()} errors")

    return ParsedSelection(MALFORMED, reason=f"unexpected {type(parsed).__name__}")


class RelevanceFilter:
    """
    Selects business-relevant headlines with an OpenAI chat model.

    filter() never raises. A missing API key is reported as an error result;
    an unusable model reply or a failed call yields an empty article list.
    """

    _SYSTEM_PROMPT = (
        "Read the following data and return only the articles that can affect "
        "existing businesses or create new business opportunities."
    )

    _USER_PROMPT = (
        "Return strictly valid JSON containing the articles selected from the "
        "provided input: either an object with an 'articles' array or a JSON "
        "array directly. Input JSON is an object with an 'articles' array. Every "
        "selected item must be an article object copied from the input, "
        "preserving its original fields. Do not write new articles.\n\n"
        "Input:\n\n{articles_json}"
    )

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        client: Optional[OpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        if client is None and api_key:
            client = OpenAI(api_key=api_key)
        self.client = client

    def _get_client(self) -> OpenAI:
        if not self.api_key or self.client is None:
            raise ConfigurationError("Missing OPENAI_API_KEY")
        return self.client

    def build_messages(self, articles: List[Article]) -> List[Dict[str, str]]:
        """Returns the two-message prompt for the given articles."""
        articles_json = json.dumps({"articles": articles})
        return [
            {"role": "system", "content": self._SYSTEM_PROMPT},
            {
                "role": "user",
                "content": self._USER_PROMPT.format(articles_json=articles_json),
            },
        ]

    def filter(self, articles: List[Article]) -> FilterResult:
        """Asks the model which articles are business relevant."""
        try:
            client = self._get_client()
        except ConfigurationError as e:
            logger.error("Relevance filter not configured: %s", e)
            return FilterResult.failed(str(e))

        logger.info("Asking %s to filter %d articles...", self.model, len(articles))
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(articles),  # type: ignore[arg-type]
                temperature=0,
                response_format={"type": "json_object"},
            )
            content = completion.choices[0].message.content if completion.choices else None
        except OpenAIError as e:
            logger.error("OpenAI API error: %s", e)
            return FilterResult.ok([])
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Relevance filter call failed: %s", e)
            return FilterResult.ok([])

        selection = parse_selection(content if isinstance(content, str) else None)

        if selection.kind == MALFORMED:
            logger.warning("Discarding model reply (%s).", selection.reason)
            return FilterResult.ok([])

        logger.info(
            "Relevance filter kept %d of %d articles.",
            len(selection.articles),
            len(articles),
        )
        return FilterResult.ok(selection.articles)
