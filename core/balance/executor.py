"""BalanceExecutor — runs a validated query against the network client."""

from __future__ import annotations

import asyncio
import logging

from core.balance.errors import BalanceQueryFailed
from core.balance.models import BalanceQuery, BalanceResult
from core.balance.wallet import WalletProvider

logger = logging.getLogger(__name__)


class BalanceExecutor:
    """Switches the wallet to the query's chain and reads the native balance.

    ``switch_chain`` + ``get_wallet_balance`` run under one lock so queries
    sharing this executor's wallet never observe each other's active chain.
    """

    def __init__(self, wallet: WalletProvider) -> None:
        self._wallet = wallet
        self._lock = asyncio.Lock()

    async def execute(self, query: BalanceQuery) -> BalanceResult:
        logger.info(f"query balance: {query.address} ({query.token} tokens on {query.chain})")
        async with self._lock:
            try:
                self._wallet.switch_chain(query.chain)
                amount = await self._wallet.get_wallet_balance(query.address)
            except Exception as e:
                logger.warning(f"Balance query on {query.chain} failed: {e}")
                raise BalanceQueryFailed(str(e)) from e

        return BalanceResult(
            chain=query.chain,
            address=query.address,
            amount=amount or "0",
            tokens=(),
        )
