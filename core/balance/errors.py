"""Error taxonomy for the balance query pipeline."""

from __future__ import annotations

from typing import Any


class BalanceError(Exception):
    """Base class for balance query failures."""


class UnknownNetworkError(BalanceError):
    """Requested chain is not in the network registry."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = list(available)
        super().__init__(
            f"The chain {name} not configured yet. Add the chain or choose one "
            f"from configured: {', '.join(self.available)}"
        )

    def to_payload(self) -> dict[str, Any]:
        return {"error": str(self), "chain": self.name, "available": self.available}


class ExtractionError(BalanceError):
    """Extraction engine reply could not be turned into a query."""


class MissingCredentialsError(BalanceError):
    """Wallet credentials are not configured."""


class BalanceQueryFailed(BalanceError):
    """A validated query failed while talking to the network."""

    def __init__(self, cause: str) -> None:
        self.cause = cause
        super().__init__(f"Query Balance failed: {cause}")


class WalletError(BalanceError):
    """Base class for network client failures."""


class UnsupportedNetworkError(WalletError):
    """Network client cannot switch to the requested chain."""


class RetrievalError(WalletError):
    """Balance fetch failed (transport, RPC or decoding)."""
