"""LLM Router: picks a provider and model for a task type and calls it via litellm.

Candidates are tried in order: the task's preferred provider first, then
``llm.provider_priority``. Each candidate gets MAX_RETRIES attempts before
the router moves on, and a provider that exhausts them sits out a cooldown.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import litellm

from core.config import Config

logger = logging.getLogger(__name__)

# Suppress litellm's verbose logging
litellm.suppress_debug_info = True


@dataclass
class LLMResponse:
    """Text reply and usage for one completion."""

    content: str | None
    model_used: str
    provider: str
    input_tokens: int
    output_tokens: int
    cost_estimate: float


@dataclass
class CostTracker:
    """Spend counters for budget enforcement.

    ``daily_total`` starts over when the local date changes. ``task_total``
    is reset by the caller at the start of each task.
    """

    daily_total: float = 0.0
    task_total: float = 0.0
    day: date = field(default_factory=date.today)

    def _roll_day(self) -> None:
        today = date.today()
        if today != self.day:
            self.day = today
            self.daily_total = 0.0

    def record(self, cost: float) -> None:
        self._roll_day()
        self.daily_total += cost
        self.task_total += cost

    def reset_task(self) -> None:
        self.task_total = 0.0

    def within_budget(self, daily_limit: float, task_limit: float) -> bool:
        self._roll_day()
        return self.daily_total < daily_limit and self.task_total < task_limit


class LLMRouter:
    """Routes completion calls across the configured providers."""

    # Seconds a failed provider is left out of rotation
    HEALTH_RECOVERY_SECONDS = 60
    MAX_RETRIES = 3
    RETRY_DELAYS = [2, 5, 10]  # seconds between attempts

    def __init__(self, config: Config) -> None:
        self._config = config
        self._cost_tracker = CostTracker()
        self._failed_at: dict[str, float] = {}

    @property
    def cost_tracker(self) -> CostTracker:
        return self._cost_tracker

    def _mark_unhealthy(self, provider: str) -> None:
        self._failed_at[provider] = time.time()

    def _is_healthy(self, provider: str) -> bool:
        failed_at = self._failed_at.get(provider)
        if failed_at is None:
            return True
        if time.time() - failed_at < self.HEALTH_RECOVERY_SECONDS:
            return False
        logger.info(f"Provider {provider} back in rotation after cooldown")
        del self._failed_at[provider]
        return True

    def candidates(self, task_type: str) -> Iterator[tuple[str, str]]:
        """Yield usable ``(provider, model)`` pairs for *task_type*, best first."""
        routing = self._config.llm.routing.get(task_type)
        order = list(self._config.llm.provider_priority)
        if routing and routing.preferred_provider:
            order.insert(0, routing.preferred_provider)

        seen: set[str] = set()
        for name in order:
            if name in seen:
                continue
            seen.add(name)
            cfg = self._config.llm.providers.get(name)
            if not (cfg and cfg.enabled and self._is_healthy(name)):
                continue
            model = self._resolve_model(name, task_type)
            if model:
                yield name, model

    def _resolve_model(self, provider: str, task_type: str) -> str | None:
        """Per-task ``routing.models[provider]``, else the provider's default_model."""
        routing = self._config.llm.routing.get(task_type)
        if routing and routing.models.get(provider):
            return routing.models[provider]
        cfg = self._config.llm.providers.get(provider)
        return cfg.default_model if cfg and cfg.default_model else None

    async def complete(
        self,
        messages: list[dict[str, Any]],
        task_type: str = "simple",
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Run one completion on the first candidate that answers."""
        budget = self._config.llm.budget
        if not self._cost_tracker.within_budget(
            budget.daily_limit_usd, budget.per_task_limit_usd
        ):
            raise RuntimeError(
                f"Budget exceeded. Daily: ${self._cost_tracker.daily_total:.2f}, "
                f"Task: ${self._cost_tracker.task_total:.2f}"
            )

        last_error: Exception | None = None
        for provider, model in self.candidates(task_type):
            logger.info(f"Routing task_type={task_type} to {provider}/{model}")
            try:
                return await self._call_with_retries(
                    provider, model, messages, temperature, task_type
                )
            except Exception as e:
                last_error = e
                logger.warning(f"{provider}/{model} gave up, trying next provider: {e}")

        if last_error is not None:
            raise RuntimeError(
                f"All LLM providers failed. Last error: {last_error}"
            ) from last_error
        raise RuntimeError(
            "No LLM provider available. Configure llm.providers in config.yaml."
        )

    async def _call_with_retries(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, Any]],
        temperature: float,
        task_type: str,
    ) -> LLMResponse:
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                return await self._call_litellm(provider, model, messages, temperature, task_type)
            except Exception as e:
                if attempt == self.MAX_RETRIES:
                    logger.error(f"{provider}/{model} failed {attempt} times: {e}")
                    self._mark_unhealthy(provider)
                    raise
                delay = self.RETRY_DELAYS[min(attempt - 1, len(self.RETRY_DELAYS) - 1)]
                logger.warning(
                    f"{provider}/{model} attempt {attempt}/{self.MAX_RETRIES} failed: {e}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
        raise RuntimeError("Unreachable")  # pragma: no cover

    @staticmethod
    def _litellm_model(provider: str, model: str) -> str:
        if provider == "openrouter":
            return f"openrouter/{model}"
        if provider == "ollama" and not model.startswith("ollama/"):
            return f"ollama/{model}"
        return model

    async def _call_litellm(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, Any]],
        temperature: float,
        task_type: str,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": self._litellm_model(provider, model),
            "messages": messages,
            "temperature": temperature,
        }
        cfg = self._config.llm.providers.get(provider)
        if cfg and cfg.api_key:
            kwargs["api_key"] = cfg.api_key
        if cfg and cfg.base_url:
            kwargs["api_base"] = cfg.base_url

        response = await litellm.acompletion(**kwargs)

        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0
        cost = float(getattr(response, "_hidden_params", {}).get("response_cost", 0) or 0)
        self._cost_tracker.record(cost)
        logger.debug(
            f"{provider}/{model} ({task_type}): {input_tokens} in, "
            f"{output_tokens} out, ${cost:.4f}"
        )

        return LLMResponse(
            content=response.choices[0].message.content,
            model_used=model,
            provider=provider,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_estimate=cost,
        )
