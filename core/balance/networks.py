"""NetworkRegistry — the set of EVM networks balance queries may target.

Built once from configuration at startup and read-only afterwards.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from core.balance.errors import UnknownNetworkError
from core.config import NetworkConfig

logger = logging.getLogger(__name__)

# Well-known chain configuration
_CHAIN_DEFAULTS: dict[str, dict[str, Any]] = {
    "ethereum": {"chain_id": 1, "rpc_url": "https://eth.llamarpc.com"},
    "sepolia": {"chain_id": 11155111, "rpc_url": "https://rpc.sepolia.org"},
    "base": {"chain_id": 8453, "rpc_url": "https://mainnet.base.org"},
    "base-sepolia": {"chain_id": 84532, "rpc_url": "https://sepolia.base.org"},
    "optimism": {"chain_id": 10, "rpc_url": "https://mainnet.optimism.io"},
    "arbitrum": {"chain_id": 42161, "rpc_url": "https://arb1.arbitrum.io/rpc"},
    "polygon": {
        "chain_id": 137,
        "rpc_url": "https://polygon-rpc.com",
        "native_symbol": "POL",
    },
}


@dataclass(frozen=True)
class NetworkDescriptor:
    """Connection parameters for one network."""

    name: str
    chain_id: int
    rpc_url: str
    native_symbol: str = "ETH"
    decimals: int = 18


def normalize_name(name: str) -> str:
    """Canonical registry key: chain names are matched case-insensitively."""
    return name.strip().lower()


def rpc_env_var(name: str) -> str:
    """Environment variable that overrides the RPC endpoint of *name*."""
    return "ETHEREUM_PROVIDER_" + name.upper().replace("-", "_")


def _descriptor_from_config(net: NetworkConfig) -> NetworkDescriptor:
    name = normalize_name(net.name)
    defaults = _CHAIN_DEFAULTS.get(name, {})
    chain_id = net.chain_id if net.chain_id is not None else defaults.get("chain_id")
    rpc_url = os.environ.get(rpc_env_var(name)) or net.rpc_url or defaults.get("rpc_url")

    if chain_id is None or not rpc_url:
        raise ValueError(
            f"Network '{name}' is not a well-known chain; "
            f"both chain_id and rpc_url must be configured"
        )

    return NetworkDescriptor(
        name=name,
        chain_id=int(chain_id),
        rpc_url=rpc_url,
        native_symbol=net.native_symbol or defaults.get("native_symbol", "ETH"),
        decimals=net.decimals if net.decimals is not None else 18,
    )


class NetworkRegistry:
    """Immutable name -> NetworkDescriptor lookup."""

    def __init__(self, networks: list[NetworkDescriptor]) -> None:
        self._networks: dict[str, NetworkDescriptor] = {}
        for net in networks:
            key = normalize_name(net.name)
            if key in self._networks:
                raise ValueError(f"Duplicate network: {net.name}")
            self._networks[key] = net

    @classmethod
    def from_config(cls, networks: list[NetworkConfig]) -> NetworkRegistry:
        """Build the registry from the ``networks`` config section."""
        registry = cls([_descriptor_from_config(n) for n in networks])
        logger.info(f"Network registry loaded: {', '.join(registry.list_networks())}")
        return registry

    def list_networks(self) -> list[str]:
        """Configured network names, in configuration order."""
        return [net.name for net in self._networks.values()]

    def get(self, name: str) -> NetworkDescriptor | None:
        return self._networks.get(normalize_name(name))

    def resolve(self, name: str) -> NetworkDescriptor:
        """Look up *name*, raising UnknownNetworkError with the valid names."""
        net = self.get(name)
        if net is None:
            raise UnknownNetworkError(name, self.list_networks())
        return net

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[NetworkDescriptor]:
        return iter(self._networks.values())

    def __len__(self) -> int:
        return len(self._networks)
