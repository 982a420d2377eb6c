"""Shared test fixtures for ChainScout tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from core.balance.networks import NetworkRegistry
from core.config import (
    BalanceConfig,
    BudgetConfig,
    Config,
    LLMConfig,
    NetworkConfig,
    ProviderConfig,
    RoutingConfig,
    WalletConfig,
)
from core.router import LLMResponse, LLMRouter

TEST_PRIVATE_KEY = "0x" + "11" * 32
OWNER = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


def _llm_reply(content: str | None) -> LLMResponse:
    """Build an LLMResponse as returned by LLMRouter.complete()."""
    return LLMResponse(
        content=content,
        model_used="qwen2.5:7b",
        provider="ollama",
        input_tokens=10,
        output_tokens=5,
        cost_estimate=0.0,
    )


@pytest.fixture
def owner() -> str:
    """A checksummed EVM address used as the queried owner."""
    return OWNER


@pytest.fixture
def llm_reply():
    return _llm_reply


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Minimal config for testing."""
    return Config(
        agent_name="TestScout",
        llm=LLMConfig(
            providers={
                "ollama": ProviderConfig(enabled=True, base_url="http://localhost:11434"),
            },
            provider_priority=["ollama"],
            routing={
                "simple": RoutingConfig(
                    preferred_provider="ollama", models={"ollama": "qwen2.5:7b"}
                ),
            },
            budget=BudgetConfig(daily_limit_usd=10.0, per_task_limit_usd=2.0),
        ),
        wallet=WalletConfig(private_key=TEST_PRIVATE_KEY, rpc_timeout_seconds=5.0),
        networks=[NetworkConfig(name="ethereum"), NetworkConfig(name="base")],
        balance=BalanceConfig(recent_message_limit=5),
        project_root=tmp_path,
    )


@pytest.fixture
def registry(test_config: Config, monkeypatch: pytest.MonkeyPatch) -> NetworkRegistry:
    monkeypatch.delenv("ETHEREUM_PROVIDER_ETHEREUM", raising=False)
    monkeypatch.delenv("ETHEREUM_PROVIDER_BASE", raising=False)
    return NetworkRegistry.from_config(test_config.networks)


@pytest.fixture
def router() -> AsyncMock:
    """Stand-in for LLMRouter; set ``router.complete.return_value`` per test."""
    r = AsyncMock(spec=LLMRouter)
    r.complete.return_value = _llm_reply(
        f'```json\n{{"chain": "ethereum", "address": "{OWNER}", "token": null}}\n```'
    )
    return r
