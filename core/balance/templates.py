"""Prompt templates for balance query extraction."""

from __future__ import annotations

import re
from typing import Any

# Replaced with the configured network names, e.g. "ethereum"|"base"
SUPPORTED_CHAINS = "SUPPORTED_CHAINS"

BALANCE_TEMPLATE = """Given the recent messages and wallet information below:

{{recentMessages}}

{{walletInfo}}

Extract the following information about the requested balance query:
- Chain to query: Must be one of the supported chains listed below
- Owner address: Must be a valid Ethereum address starting with "0x"
- Token symbol or address (if not native token): Optional, leave as null for the native token

Respond with a JSON markdown block containing only the extracted values. All fields except 'token' are required:

```json
{
    "chain": SUPPORTED_CHAINS,
    "address": string,
    "token": string | null
}
```
"""

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def compose_context(template: str, values: dict[str, Any]) -> str:
    """Fill ``{{key}}`` placeholders from *values*; unknown keys render empty."""
    return _PLACEHOLDER.sub(lambda m: str(values.get(m.group(1), "") or ""), template)
