"""Read access to chain data through an Ethereum JSON-RPC provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from blockdash.config import Settings
from blockdash.hex import hex_or_none

logger = logging.getLogger(__name__)


class ChainClientError(RuntimeError):
    pass


@dataclass(frozen=True)
class Block:
    number: int
    timestamp: int
    miner: str | None = None
    hash: str | None = None
    parent_hash: str | None = None
    gas_used: int | None = None
    gas_limit: int | None = None
    transactions: tuple[Any, ...] = field(default_factory=tuple)


def _quantity(value: Any) -> int | None:
    """Parse a JSON-RPC quantity given as int, decimal string or 0x-prefixed hex."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    return int(value)


def block_from_rpc(data: Mapping[str, Any]) -> Block:
    """Build a Block from a web3 block mapping (camelCase keys, HexBytes values)."""
    try:
        return Block(
            number=int(data["number"]),
            timestamp=int(data["timestamp"]),
            miner=hex_or_none(data.get("miner")),
            hash=hex_or_none(data.get("hash")),
            parent_hash=hex_or_none(data.get("parentHash")),
            gas_used=_quantity(data.get("gasUsed")),
            gas_limit=_quantity(data.get("gasLimit")),
            transactions=tuple(data.get("transactions") or ()),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ChainClientError(f"Malformed block payload: {exc}") from exc


class ChainClient:
    def __init__(self, rpc_url: str | None, timeout: float = 10.0, w3: AsyncWeb3 | None = None):
        self.timeout = timeout
        if w3 is None and rpc_url:
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self._w3 = w3

    @classmethod
    def from_settings(cls, settings: Settings) -> ChainClient:
        return cls(settings.rpc_url, timeout=settings.request_timeout_seconds)

    def _require_w3(self) -> AsyncWeb3:
        # Missing credentials surface per request, never at construction.
        if self._w3 is None:
            raise ChainClientError("ALCHEMY_API_KEY is not set")
        return self._w3

    async def get_block_number(self) -> int:
        w3 = self._require_w3()
        try:
            return int(await asyncio.wait_for(w3.eth.block_number, self.timeout))
        except Exception as exc:
            raise ChainClientError(f"Failed to fetch block number: {exc}") from exc

    async def get_block_by_tag(self, tag: str = "latest") -> Block:
        w3 = self._require_w3()
        try:
            data = await asyncio.wait_for(w3.eth.get_block(tag), self.timeout)
        except Exception as exc:
            raise ChainClientError(f"Failed to fetch block {tag!r}: {exc}") from exc
        if data is None:
            raise ChainClientError(f"Block {tag!r} not found")
        return block_from_rpc(data)

    async def close(self) -> None:
        """Release the provider's cached HTTP sessions."""
        if self._w3 is None:
            return
        try:
            await self._w3.provider.disconnect()
        except Exception:
            logger.warning("Failed to close provider session", exc_info=True)
