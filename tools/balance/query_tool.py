"""query_balance — answer "what is the balance of 0x... on <chain>" requests.

Runs the balance pipeline (QueryResolver -> BalanceExecutor) for one
conversation and turns every outcome into a user-facing text plus a
structured payload. Never raises past ``run()``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any

from core.balance.errors import BalanceError, MissingCredentialsError, UnknownNetworkError
from core.balance.executor import BalanceExecutor
from core.balance.models import ConversationState
from core.balance.networks import NetworkRegistry
from core.balance.resolver import QueryResolver
from core.balance.wallet import WalletProvider, wallet_info_provider
from core.config import Config
from tools.base import BaseTool, PermissionLevel, ToolResult

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of one balance action, ready for any delivery channel."""

    success: bool
    text: str
    content: dict[str, Any] = field(default_factory=dict)


ResultCallback = Callable[[ActionResult], Awaitable[None] | None]


class BalanceQueryTool(BaseTool):
    """Get the native balance of an address on a configured chain."""

    similes = ["QUERY_BALANCE"]
    examples = [
        [
            {"role": "assistant", "content": "I'll help you query your ETH balance."},
            {
                "role": "user",
                "content": "query 0x742d35Cc6634C0532925a3b844Bc454e4438f44e ETH balance",
            },
        ],
    ]

    def __init__(
        self,
        config: Config,
        router: Any,
        registry: NetworkRegistry,
        wallet_factory: Callable[[], WalletProvider] | None = None,
    ) -> None:
        self._config = config
        self._router = router
        self._registry = registry
        self._resolver = QueryResolver(
            router,
            registry,
            recent_message_limit=config.balance.recent_message_limit,
            task_type=config.balance.task_type,
        )
        self._wallet_factory = wallet_factory or self._default_wallet

    @property
    def name(self) -> str:
        return "query_balance"

    @property
    def description(self) -> str:
        return "Get balance tokens by addresses on the chain"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The user's balance request in natural language",
                },
                "messages": {
                    "type": "array",
                    "description": "Earlier conversation turns ({role, content})",
                },
            },
            "required": ["prompt"],
        }

    @property
    def permission_level(self) -> PermissionLevel:
        return PermissionLevel.SAFE

    def validate(self) -> bool:
        """Credentials must be configured before any query is attempted."""
        key = self._config.wallet.private_key
        return isinstance(key, str) and key.startswith("0x")

    def _default_wallet(self) -> WalletProvider:
        return WalletProvider(
            self._config.wallet.private_key,
            self._registry,
            timeout=self._config.wallet.rpc_timeout_seconds,
        )

    async def run(self, state: ConversationState) -> ActionResult:
        if not self.validate():
            err = MissingCredentialsError("EVM_PRIVATE_KEY is not configured")
            logger.warning(f"Balance query refused: {err}")
            return ActionResult(
                success=False,
                text=f"Error get balance: {err}",
                content={"error": str(err)},
            )

        try:
            # Each query is one task for the LLM budget
            self._router.cost_tracker.reset_task()

            # One wallet per query; its active chain is never shared
            wallet = self._wallet_factory()
            if not state.wallet_info:
                state = replace(state, wallet_info=wallet_info_provider(wallet))

            query = await self._resolver.resolve(state)
            result = await BalanceExecutor(wallet).execute(query)
        except BalanceError as e:
            logger.error(f"Error during get balance: {e}")
            content: dict[str, Any] = {"error": str(e)}
            if isinstance(e, UnknownNetworkError):
                content["available"] = e.available
            return ActionResult(success=False, text=f"Error get balance: {e}", content=content)
        except Exception as e:
            logger.exception("Unexpected error during get balance")
            return ActionResult(
                success=False, text=f"Error get balance: {e}", content={"error": str(e)}
            )

        return ActionResult(
            success=True,
            text=(
                f"Successfully query balance {query.address} ({query.token} tokens on "
                f"{query.chain}. Amount: {result.amount}"
            ),
            content={
                "success": True,
                "amount": result.amount,
                "address": result.address,
                "chain": result.chain,
            },
        )

    async def handle(
        self, state: ConversationState, callback: ResultCallback | None = None
    ) -> bool:
        """Run the action and hand the result to *callback*, if any."""
        outcome = await self.run(state)
        if callback:
            delivered = callback(outcome)
            if isinstance(delivered, Awaitable):
                await delivered
        return outcome.success

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        messages = list(params.get("messages") or [])
        prompt = params.get("prompt")
        if prompt:
            messages.append({"role": "user", "content": prompt})

        outcome = await self.run(ConversationState(messages=messages))
        if outcome.success:
            return ToolResult(success=True, data={"text": outcome.text, **outcome.content})
        data = {"text": outcome.text}
        if "available" in outcome.content:
            data["available"] = outcome.content["available"]
        return ToolResult(success=False, data=data, error=outcome.content.get("error"))
