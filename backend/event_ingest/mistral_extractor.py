"""
Mistral Event Extractor

Sends cleaned page HTML to Mistral through its OpenAI-compatible
chat-completions endpoint and returns the raw event dicts it finds.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from . import settings
from .cost_tracker import CostTracker
from .errors import ExtractionError
from .html_cleaner import HtmlCleaner
from .logging_utils import get_logger, is_debug
from .prompts import EVENT_EXTRACTION_USER_PROMPT, build_system_prompt


class MistralExtractor:
    """
    Extracts partial events (no id/timestamps) from HTML.

    Usage:
        extractor = MistralExtractor(cost_tracker=CostTracker())
        raw_events = await extractor.extract_events(html)
    """

    def __init__(
        self,
        cost_tracker: CostTracker,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ):
        """
        Args:
            cost_tracker: Receives token usage of every successful call.
            client: OpenAI-compatible async client. Built from MISTRAL_* env vars if None.
            model: Chat model name (default: MISTRAL_MODEL or mistral-small-latest).
        """
        self.logger = get_logger(__name__)
        self.cost_tracker = cost_tracker
        self.model = model or settings.mistral_model()

        if client is None:
            api_key = settings.mistral_api_key()
            if not api_key:
                self.logger.warning("MISTRAL_API_KEY not set. LLM extraction will fail.")
            client = AsyncOpenAI(base_url=settings.mistral_base_url(), api_key=api_key or "missing")
        self.client = client

    async def extract_events(self, html: str) -> list[dict[str, Any]]:
        """
        Extract events from raw page HTML.

        Returns:
            The list under the "events" key; [] if that key is not a list.

        Raises:
            ExtractionError: API call failed, the reply was empty or not JSON.
        """
        cleaned = HtmlCleaner.extract_main_content(html)
        if is_debug():
            self.logger.debug("Cleaned HTML: %s -> %s chars", len(html), len(cleaned))

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_system_prompt()},
                    {"role": "user", "content": EVENT_EXTRACTION_USER_PROMPT.format(html=cleaned)},
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except OpenAIError as e:
            self.logger.error("Mistral request failed: %s", e)
            raise ExtractionError(f"Mistral request failed: {e}", model=self.model) from e

        usage = response.usage
        if usage is not None:
            self.cost_tracker.track_usage(self.model, usage.prompt_tokens, usage.completion_tokens)

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("Empty response from Mistral API", model=self.model)

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            self.logger.warning("JSON parse error: %s", e)
            raise ExtractionError(f"Invalid JSON from Mistral API: {e}", model=self.model) from e

        events = parsed.get("events") if isinstance(parsed, dict) else None
        if not isinstance(events, list):
            return []

        self.logger.debug("Mistral extraction found %s events", len(events))
        return events
