"""QueryResolver tests — prompt composition, extraction parsing, validation gate."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from core.balance.errors import ExtractionError, UnknownNetworkError
from core.balance.models import NATIVE_TOKEN, BalanceQuery, ConversationState
from core.balance.networks import NetworkRegistry
from core.balance.resolver import QueryResolver, parse_json_object
from core.balance.templates import BALANCE_TEMPLATE, compose_context
from core.config import NetworkConfig


@pytest.fixture
def resolver(router: AsyncMock, registry: NetworkRegistry) -> QueryResolver:
    return QueryResolver(router, registry, recent_message_limit=3)


def _state(*texts: str, wallet_info: str = "") -> ConversationState:
    return ConversationState(
        messages=[{"role": "user", "content": t} for t in texts], wallet_info=wallet_info
    )


# ---------------------------------------------------------------------------
# Prompt composition
# ---------------------------------------------------------------------------


class TestBuildPrompt:
    def test_lists_configured_chains(self, resolver: QueryResolver) -> None:
        prompt = resolver.build_prompt(_state("balance?"))
        assert '"chain": "ethereum"|"base"' in prompt
        assert "SUPPORTED_CHAINS" not in prompt

    def test_includes_messages_and_wallet_info(self, resolver: QueryResolver) -> None:
        prompt = resolver.build_prompt(
            _state("hi", "what's on 0xabc?", wallet_info="EVM Wallet Address: 0xme")
        )
        assert "user: what's on 0xabc?" in prompt
        assert "EVM Wallet Address: 0xme" in prompt
        assert "{{" not in prompt

    def test_only_recent_messages(self, resolver: QueryResolver) -> None:
        prompt = resolver.build_prompt(_state("one", "two", "three", "four"))
        assert "user: one" not in prompt
        assert "user: four" in prompt

    def test_compose_context_unknown_placeholder_renders_empty(self) -> None:
        assert compose_context("a{{missing}}b", {}) == "ab"
        assert "{{recentMessages}}" in BALANCE_TEMPLATE


# ---------------------------------------------------------------------------
# Extraction parsing
# ---------------------------------------------------------------------------


class TestParseJsonObject:
    def test_fenced_block(self) -> None:
        content = 'Sure!\n```json\n{"chain": "base", "address": "0x1"}\n```\nDone.'
        assert parse_json_object(content) == {"chain": "base", "address": "0x1"}

    def test_bare_object(self) -> None:
        assert parse_json_object('{"chain": "base"}') == {"chain": "base"}

    def test_no_object(self) -> None:
        with pytest.raises(ExtractionError):
            parse_json_object("I could not find an address.")

    def test_invalid_json(self) -> None:
        with pytest.raises(ExtractionError):
            parse_json_object("{chain: base,}")

    def test_array_rejected(self) -> None:
        with pytest.raises(ExtractionError):
            parse_json_object('```json\n["base"]\n```')


class TestExtract:
    @pytest.mark.asyncio
    async def test_calls_router_with_prompt(
        self, resolver: QueryResolver, router: AsyncMock, owner: str
    ) -> None:
        raw = await resolver.extract("PROMPT")
        assert raw == {"chain": "ethereum", "address": owner, "token": None}

        kwargs = router.complete.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "PROMPT"}]
        assert kwargs["task_type"] == "simple"
        assert kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_empty_reply(
        self, resolver: QueryResolver, router: AsyncMock, llm_reply: Any
    ) -> None:
        router.complete.return_value = llm_reply(None)
        with pytest.raises(ExtractionError):
            await resolver.extract("PROMPT")


# ---------------------------------------------------------------------------
# Validation gate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_null_token_becomes_native(self, resolver: QueryResolver, owner: str) -> None:
        query = resolver.validate({"chain": "ethereum", "address": owner, "token": None})
        assert query == BalanceQuery(chain="ethereum", address=owner, token=NATIVE_TOKEN)

    def test_absent_token_becomes_native(self, resolver: QueryResolver, owner: str) -> None:
        query = resolver.validate({"chain": "base", "address": owner})
        assert query.token == NATIVE_TOKEN
        assert query.token is not None

    def test_explicit_token_kept(self, resolver: QueryResolver, owner: str) -> None:
        query = resolver.validate({"chain": "base", "address": owner, "token": "USDC"})
        assert query.token == "USDC"

    def test_idempotent(self, resolver: QueryResolver, owner: str) -> None:
        raw = {"chain": "base", "address": owner, "token": None}
        assert resolver.validate(raw) == resolver.validate(raw)
        assert raw == {"chain": "base", "address": owner, "token": None}

    def test_chain_name_normalized(self, resolver: QueryResolver, owner: str) -> None:
        assert resolver.validate({"chain": " Base ", "address": owner}).chain == "base"

    def test_mixed_case_configured_network(
        self, router: AsyncMock, owner: str
    ) -> None:
        registry = NetworkRegistry.from_config(
            [NetworkConfig(name="Unichain", chain_id=130, rpc_url="https://mainnet.unichain.org")]
        )
        resolver = QueryResolver(router, registry)
        assert '"unichain"' in resolver.build_prompt(_state("balance?"))
        for chain in ("Unichain", "unichain", "UNICHAIN"):
            assert resolver.validate({"chain": chain, "address": owner}).chain == "unichain"

    def test_unknown_chain(self, resolver: QueryResolver, owner: str) -> None:
        with pytest.raises(UnknownNetworkError) as exc_info:
            resolver.validate({"chain": "unichain", "address": owner})
        assert exc_info.value.available == ["ethereum", "base"]

    def test_missing_chain(self, resolver: QueryResolver, owner: str) -> None:
        with pytest.raises(UnknownNetworkError):
            resolver.validate({"address": owner})

    def test_missing_address(self, resolver: QueryResolver) -> None:
        with pytest.raises(ExtractionError, match="address"):
            resolver.validate({"chain": "base", "address": ""})

    def test_address_format_not_checked(self, resolver: QueryResolver) -> None:
        assert resolver.validate({"chain": "base", "address": "0xABC"}).address == "0xABC"

    def test_extra_fields_dropped(self, resolver: QueryResolver, owner: str) -> None:
        query = resolver.validate({"chain": "base", "address": owner, "amount": "999"})
        assert not hasattr(query, "amount")


class TestResolve:
    @pytest.mark.asyncio
    async def test_end_to_end(self, resolver: QueryResolver, owner: str) -> None:
        query = await resolver.resolve(_state(f"query {owner} ETH balance"))
        assert query == BalanceQuery(chain="ethereum", address=owner, token=NATIVE_TOKEN)

    @pytest.mark.asyncio
    async def test_unknown_chain_raised_after_extraction(
        self, resolver: QueryResolver, router: AsyncMock, llm_reply: Any, owner: str
    ) -> None:
        router.complete.return_value = llm_reply(
            f'{{"chain": "unichain", "address": "{owner}"}}'
        )
        with pytest.raises(UnknownNetworkError, match="unichain"):
            await resolver.resolve(_state("balance on unichain"))
        router.complete.assert_awaited_once()
