"""Configuration system for ChainScout.

Loads config.yaml, validates required fields, and provides typed access.
Supports environment variable overrides for API keys and the wallet key.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""

    api_key: str = ""
    enabled: bool = False
    base_url: str = ""
    default_model: str = ""


@dataclass
class RoutingConfig:
    """Per-task-type routing preferences."""

    preferred_provider: str = ""
    models: dict[str, str] = field(default_factory=dict)  # provider -> model


@dataclass
class BudgetConfig:
    """Budget limits for LLM spending."""

    daily_limit_usd: float = 10.0
    per_task_limit_usd: float = 2.0


@dataclass
class LLMConfig:
    """All LLM-related configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    provider_priority: list[str] = field(default_factory=list)
    routing: dict[str, RoutingConfig] = field(default_factory=dict)
    budget: BudgetConfig = field(default_factory=BudgetConfig)


@dataclass
class NetworkConfig:
    """One configured EVM network. Empty fields fall back to well-known defaults."""

    name: str
    chain_id: int | None = None
    rpc_url: str = ""
    native_symbol: str = ""
    decimals: int | None = None


@dataclass
class WalletConfig:
    """Credentials and transport settings for the network client."""

    private_key: str = ""
    rpc_timeout_seconds: float = 30.0


@dataclass
class BalanceConfig:
    """Balance query pipeline settings."""

    recent_message_limit: int = 10
    task_type: str = "simple"


@dataclass
class Config:
    """Top-level ChainScout configuration."""

    agent_name: str = "ChainScout"
    llm: LLMConfig = field(default_factory=LLMConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    networks: list[NetworkConfig] = field(
        default_factory=lambda: [NetworkConfig(name="ethereum"), NetworkConfig(name="base")]
    )
    balance: BalanceConfig = field(default_factory=BalanceConfig)
    project_root: Path = field(default_factory=Path.cwd)


def _parse_provider(data: dict[str, Any]) -> ProviderConfig:
    """Parse a provider config section."""
    return ProviderConfig(
        api_key=data.get("api_key", ""),
        enabled=data.get("enabled", False),
        base_url=data.get("base_url", ""),
        default_model=data.get("default_model", ""),
    )


def _parse_routing(data: dict[str, Any]) -> RoutingConfig:
    """Parse a routing config section.

    ``preferred_model`` is accepted as shorthand for a single-entry
    ``models`` map keyed by ``preferred_provider``.
    """
    models: dict[str, str] = dict(data.get("models") or {})
    prov = data.get("preferred_provider", "")
    if not models and prov and data.get("preferred_model"):
        models[prov] = data["preferred_model"]

    return RoutingConfig(preferred_provider=prov, models=models)


def _parse_networks(raw: list[Any] | None) -> list[NetworkConfig]:
    """Parse the networks list.

    Entries are either bare names (``- base``) or mappings with a ``name``
    key and optional ``chain_id`` / ``rpc_url`` / ``native_symbol`` /
    ``decimals`` overrides.
    """
    if raw is None:
        return Config().networks

    networks: list[NetworkConfig] = []
    for entry in raw:
        if isinstance(entry, str):
            networks.append(NetworkConfig(name=entry))
            continue
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError(f"Invalid network entry: {entry!r}")
        networks.append(
            NetworkConfig(
                name=str(entry["name"]),
                chain_id=entry.get("chain_id"),
                rpc_url=entry.get("rpc_url", ""),
                native_symbol=entry.get("native_symbol", ""),
                decimals=entry.get("decimals"),
            )
        )
    return networks


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides for API keys and credentials."""
    env_key = os.environ.get("OPENROUTER_API_KEY")
    if env_key and "openrouter" in config.llm.providers:
        config.llm.providers["openrouter"].api_key = env_key
        config.llm.providers["openrouter"].enabled = True

    env_key = os.environ.get("EVM_PRIVATE_KEY")
    if env_key:
        config.wallet.private_key = env_key


def load_config(config_path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, checks CHAINSCOUT_CONFIG
                     env var, then falls back to ./config.yaml.

    Returns:
        Populated Config dataclass.
    """
    if config_path is None:
        env_path = os.environ.get("CHAINSCOUT_CONFIG")
        if env_path:
            config_path = Path(env_path)
        else:
            config_path = Path.cwd() / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        config = Config(project_root=config_path.parent)
        _apply_env_overrides(config)
        return config

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    agent = raw.get("agent", {})

    # Parse LLM section
    llm_raw = raw.get("llm", {})

    providers: dict[str, ProviderConfig] = {}
    for name, pdata in llm_raw.get("providers", {}).items():
        providers[name] = _parse_provider(pdata or {})

    routing: dict[str, RoutingConfig] = {}
    for task_type, rdata in llm_raw.get("routing", {}).items():
        routing[task_type] = _parse_routing(rdata or {})

    budget_raw = llm_raw.get("budget", {})
    llm_config = LLMConfig(
        providers=providers,
        provider_priority=llm_raw.get("provider_priority", []),
        routing=routing,
        budget=BudgetConfig(
            daily_limit_usd=budget_raw.get("daily_limit_usd", 10.0),
            per_task_limit_usd=budget_raw.get("per_task_limit_usd", 2.0),
        ),
    )

    wallet_raw = raw.get("wallet", {})
    wallet_config = WalletConfig(
        private_key=wallet_raw.get("private_key", ""),
        rpc_timeout_seconds=wallet_raw.get("rpc_timeout_seconds", 30.0),
    )

    balance_raw = raw.get("balance", {})
    balance_config = BalanceConfig(
        recent_message_limit=balance_raw.get("recent_message_limit", 10),
        task_type=balance_raw.get("task_type", "simple"),
    )

    config = Config(
        agent_name=agent.get("name", "ChainScout"),
        llm=llm_config,
        wallet=wallet_config,
        networks=_parse_networks(raw.get("networks")),
        balance=balance_config,
        project_root=config_path.parent,
    )

    _apply_env_overrides(config)
    return config
