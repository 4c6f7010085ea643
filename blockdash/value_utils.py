from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from blockdash.hex import transaction_label


PREVIEW_LIMIT = 5


def _to_int(value: object) -> int:
    return int(value.strip()) if isinstance(value, str) else int(value)


def format_gas_value(value: object) -> str:
    if not value:
        return "-"
    gas = _to_int(value)
    if gas == 0:
        return "-"
    return f"{gas:,}"


def _gas_pair(block: object) -> tuple[int, int] | None:
    if block is None:
        return None
    gas_used = getattr(block, "gas_used", None)
    gas_limit = getattr(block, "gas_limit", None)
    if gas_used in (None, "") or not gas_limit:
        return None
    used, limit = _to_int(gas_used), _to_int(gas_limit)
    if limit == 0:
        return None
    return used, limit


def gas_usage_percentage(block: object) -> str:
    pair = _gas_pair(block)
    if pair is None:
        return "0%"
    used, limit = pair
    return f"{used / limit * 100:.2f}%"


def gas_usage_ratio(block: object) -> float:
    pair = _gas_pair(block)
    if pair is None:
        return 0.0
    used, limit = pair
    return min(1.0, max(0.0, used / limit))


def format_block_number(value: int | None) -> str:
    if value is None:
        return "-"
    return f"#{value:,}"


@dataclass(frozen=True)
class TransactionPreview:
    shown: tuple[str, ...]
    total: int

    @property
    def remaining(self) -> int:
        return max(0, self.total - len(self.shown))

    @property
    def is_empty(self) -> bool:
        return self.total == 0


def transaction_preview(transactions: Sequence[object] | None, limit: int = PREVIEW_LIMIT) -> TransactionPreview:
    txs = list(transactions or ())
    return TransactionPreview(
        shown=tuple(transaction_label(tx) for tx in txs[:limit]),
        total=len(txs),
    )
