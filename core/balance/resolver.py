"""QueryResolver — turns conversation state into a validated BalanceQuery.

Pipeline: compose the extraction prompt, ask the LLM for a JSON object,
then pass that untrusted object through ``validate()``, the only place
where chain names are checked against the registry.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from core.balance.errors import ExtractionError
from core.balance.models import NATIVE_TOKEN, BalanceQuery, ConversationState, ExtractedQuery
from core.balance.networks import NetworkRegistry
from core.balance.templates import BALANCE_TEMPLATE, SUPPORTED_CHAINS, compose_context

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.S)


def parse_json_object(content: str) -> ExtractedQuery:
    """Pull the first JSON object out of an LLM reply.

    Prefers a fenced ```json block and falls back to the outermost braces.
    """
    match = _JSON_FENCE.search(content)
    if match:
        candidate = match.group(1)
    else:
        start = content.find("{")
        end = content.rfind("}") + 1
        if start < 0 or end <= start:
            raise ExtractionError(f"No JSON object in extraction reply: {content[:200]!r}")
        candidate = content[start:end]

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Extraction reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("Extraction reply is not a JSON object")
    return data


class QueryResolver:
    """Builds the extraction prompt, calls the LLM, validates the answer."""

    def __init__(
        self,
        router: Any,
        registry: NetworkRegistry,
        template: str = BALANCE_TEMPLATE,
        recent_message_limit: int = 10,
        task_type: str = "simple",
    ) -> None:
        self._router = router
        self._registry = registry
        self._template = template
        self._recent_message_limit = recent_message_limit
        self._task_type = task_type

    def build_prompt(self, state: ConversationState) -> str:
        context = compose_context(
            self._template,
            {
                "recentMessages": state.render_messages(self._recent_message_limit),
                "walletInfo": state.wallet_info,
            },
        )
        chains = "|".join(f'"{name}"' for name in self._registry.list_networks())
        return context.replace(SUPPORTED_CHAINS, chains)

    async def extract(self, prompt: str) -> ExtractedQuery:
        """Run the extraction engine. The returned dict is untrusted."""
        response = await self._router.complete(
            messages=[{"role": "user", "content": prompt}],
            task_type=self._task_type,
            temperature=0.0,
        )
        return parse_json_object(response.content or "")

    def validate(self, raw: ExtractedQuery) -> BalanceQuery:
        """Validate extraction output and produce a BalanceQuery.

        Raises UnknownNetworkError for chains outside the registry. The
        address format is left to the network client.
        """
        chain = raw.get("chain")
        net = self._registry.resolve("" if chain is None else str(chain))

        address = raw.get("address")
        if not isinstance(address, str) or not address.strip():
            raise ExtractionError("No address found in the request")

        token = raw.get("token")
        if not isinstance(token, str) or not token.strip():
            token = NATIVE_TOKEN

        return BalanceQuery(chain=net.name, address=address.strip(), token=token.strip())

    async def resolve(self, state: ConversationState) -> BalanceQuery:
        prompt = self.build_prompt(state)
        raw = await self.extract(prompt)
        logger.debug(f"Extracted balance query: {raw}")
        return self.validate(raw)
