"""Typed values flowing through the balance query pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Explicit sentinel for "the chain's native asset" (never None, never an address)
NATIVE_TOKEN = "native"

# Untrusted extraction engine output; only QueryResolver.validate() consumes it
ExtractedQuery = dict[str, Any]


@dataclass(frozen=True)
class BalanceQuery:
    """A validated balance query. ``chain`` is known to the registry."""

    chain: str
    address: str
    token: str = NATIVE_TOKEN


@dataclass(frozen=True)
class BalanceResult:
    """Native balance of ``address`` on ``chain``, ``amount`` in base units."""

    chain: str
    address: str
    amount: str
    tokens: tuple[dict[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "address": self.address,
            "amount": self.amount,
            "tokens": list(self.tokens),
        }


@dataclass
class ConversationState:
    """Conversation context handed to the resolver.

    ``messages`` uses the chat format ``{"role": ..., "content": ...}``.
    """

    messages: list[dict[str, Any]] = field(default_factory=list)
    wallet_info: str = ""

    def render_messages(self, limit: int = 10) -> str:
        """Render the most recent *limit* messages as ``role: content`` lines."""
        recent = self.messages[-limit:] if limit > 0 else []
        return "\n".join(
            f"{m.get('role', 'user')}: {m.get('content', '')}" for m in recent
        )
