"""Hex and bytes conversion utilities."""

from __future__ import annotations

from collections.abc import Mapping


def to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def hex_or_none(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    return str(value)


def transaction_label(tx: object) -> str:
    """Display string for one entry of a block's transaction list.

    Blocks fetched without full transactions carry hashes; full blocks carry
    mappings, in which case the transaction hash is shown.
    """
    if isinstance(tx, Mapping):
        return hex_or_none(tx.get("hash")) or "-"
    return hex_or_none(tx) or "-"
