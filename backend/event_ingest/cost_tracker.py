"""
In-memory tracking of LLM token usage and cost per model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .logging_utils import get_logger


# USD per 1M tokens
MODEL_PRICING: dict[str, dict[str, float]] = {
    "mistral-small-latest": {"input": 0.075, "output": 0.2},
    "mistral-small-2409": {"input": 0.075, "output": 0.2},
    "gemini-2.0-flash": {"input": 0.1, "output": 0.4},
    "deepseek-chat": {"input": 0.27, "output": 1.1},
}


@dataclass
class TokenUsage:
    input: int = 0
    output: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output


class CostTracker:
    """
    Accumulates cost since process start (or the last reset).

    Models without a pricing entry are logged and ignored.
    """

    def __init__(self, pricing: Optional[dict[str, dict[str, float]]] = None):
        self.pricing = pricing if pricing is not None else MODEL_PRICING
        self.logger = get_logger(__name__)
        self._costs: dict[str, float] = {}
        self._usage: dict[str, TokenUsage] = {}

    def track_usage(self, model: str, input_tokens: int, output_tokens: int) -> None:
        pricing = self.pricing.get(model)
        if pricing is None:
            self.logger.warning("No pricing information for model: %s", model)
            return

        cost = (input_tokens / 1_000_000) * pricing["input"] + (output_tokens / 1_000_000) * pricing["output"]
        self._costs[model] = self._costs.get(model, 0.0) + cost

        usage = self._usage.setdefault(model, TokenUsage())
        usage.input += input_tokens
        usage.output += output_tokens

        self.logger.info(
            "%s: +$%.4f (input: %s, output: %s, total: $%.2f)",
            model, cost, input_tokens, output_tokens, self._costs[model],
        )

    def get_monthly_costs(self) -> dict[str, float]:
        return dict(self._costs)

    def get_total_cost(self) -> float:
        return sum(self._costs.values())

    def get_token_usage(self) -> dict[str, dict[str, int]]:
        return {
            model: {"input": usage.input, "output": usage.output, "total": usage.total}
            for model, usage in self._usage.items()
        }

    def reset_monthly_costs(self) -> None:
        self._costs.clear()
        self._usage.clear()
        self.logger.info("Monthly costs reset")
