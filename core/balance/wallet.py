"""WalletProvider — EVM network client used by the balance pipeline.

Holds the signer account derived from the configured private key and one
*active* network at a time. Balances are read with raw JSON-RPC
``eth_getBalance`` calls over httpx.

The active network is mutable state: callers that share an instance
across concurrent queries must serialize ``switch_chain`` + fetch
(see ``BalanceExecutor``).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx
from eth_account import Account
from eth_utils import is_address

from core.balance.errors import RetrievalError, UnsupportedNetworkError
from core.balance.networks import NetworkDescriptor, NetworkRegistry

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0


def format_units(wei: int | str, decimals: int = 18) -> str:
    """Render a base-unit integer in display units (``1500000000000000000`` -> ``1.5``)."""
    value = Decimal(int(wei)) / (Decimal(10) ** decimals)
    return format(value.normalize(), "f")


class WalletProvider:
    """Single-active-network EVM client."""

    def __init__(
        self,
        private_key: str,
        registry: NetworkRegistry,
        chain: str | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        if not len(registry):
            raise ValueError("WalletProvider needs at least one configured network")
        self._registry = registry
        self._account = Account.from_key(private_key)
        self._timeout = timeout
        self._network: NetworkDescriptor = registry.resolve(chain or registry.list_networks()[0])

    # ------------------------------------------------------------------
    # Active network
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain(self) -> str:
        return self._network.name

    @property
    def network(self) -> NetworkDescriptor:
        return self._network

    def switch_chain(self, name: str) -> None:
        """Make *name* the network that subsequent calls target."""
        net = self._registry.get(name)
        if net is None:
            raise UnsupportedNetworkError(f"Unsupported chain: {name}")
        if net.name != self._network.name:
            logger.debug(f"Switching active chain {self._network.name} -> {net.name}")
        self._network = net

    def get_wallet_details(self) -> dict[str, Any]:
        """Return wallet address and active chain info."""
        return {
            "address": self.address,
            "chain": self._network.name,
            "chain_id": self._network.chain_id,
        }

    # ------------------------------------------------------------------
    # Balance
    # ------------------------------------------------------------------

    async def get_wallet_balance(self, address: str) -> str:
        """Native balance of *address* on the active chain, in wei."""
        if not isinstance(address, str) or not is_address(address):
            raise RetrievalError(f"Invalid address: {address!r}")

        result = await self._rpc_call("eth_getBalance", [address, "latest"])
        try:
            return str(int(result, 16))
        except (TypeError, ValueError) as e:
            raise RetrievalError(f"Could not decode balance {result!r}: {e}") from e

    async def _rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a JSON-RPC call to the active network's endpoint."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._network.rpc_url,
                    json=payload,
                    headers={"User-Agent": "ChainScout/0.1"},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise RetrievalError(f"RPC request to {self._network.name} failed: {e}") from e
        except ValueError as e:
            raise RetrievalError(f"RPC response from {self._network.name} is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise RetrievalError(f"Malformed RPC response: {data!r}")
        if data.get("error"):
            err = data["error"]
            msg = err.get("message", str(err)) if isinstance(err, dict) else str(err)
            raise RetrievalError(f"RPC error: {msg}")
        return data.get("result")


def wallet_info_provider(wallet: WalletProvider) -> str:
    """Describe the agent wallet for the extraction prompt. No network I/O."""
    net = wallet.network
    return (
        f"EVM Wallet Address: {wallet.address}\n"
        f"Current chain: {net.name} (chain id {net.chain_id}, native {net.native_symbol})"
    )
