"""Pure mapping from view state to the dashboard's visual tree.

The tree holds display strings only; drawing it is left to the page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from zoneinfo import ZoneInfo

from blockdash.chain_client import Block
from blockdash.time_utils import format_timestamp
from blockdash.value_utils import (
    TransactionPreview,
    format_block_number,
    format_gas_value,
    gas_usage_percentage,
    gas_usage_ratio,
    transaction_preview,
)
from blockdash.view_state import Failed, Loading, ViewState

LOADING_TEXT = "Loading blockchain data..."
NO_TRANSACTIONS_TEXT = "No transactions in this block"


class Mode(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    DATA = "data"


@dataclass(frozen=True)
class BlockPanel:
    block_number: str
    timestamp: str
    miner: str
    transaction_count: str
    gas_used: str
    gas_limit: str
    gas_percentage: str
    gas_ratio: float
    block_hash: str
    parent_hash: str
    stale: bool = False

    @property
    def gas_caption(self) -> str:
        return f"{self.gas_used} / {self.gas_limit} ({self.gas_percentage})"


@dataclass(frozen=True)
class TransactionPanel:
    preview: TransactionPreview

    @property
    def heading(self) -> str:
        if self.preview.is_empty:
            return NO_TRANSACTIONS_TEXT
        return f"Showing the first {len(self.preview.shown)} of {self.preview.total} transactions in this block:"

    @property
    def remainder(self) -> str | None:
        if self.preview.remaining == 0:
            return None
        return f"...and {self.preview.remaining} more transactions"


@dataclass(frozen=True)
class DashboardView:
    mode: Mode
    loading_text: str | None = None
    error: str | None = None
    block_panel: BlockPanel | None = None
    transaction_panel: TransactionPanel | None = None
    footer: str | None = None
    notices: tuple[str, ...] = field(default_factory=tuple)


def block_panel(block: Block, block_number: int | None, tz: ZoneInfo, stale: bool = False) -> BlockPanel:
    count = len(block.transactions)
    return BlockPanel(
        block_number=format_block_number(block_number if block_number is not None else block.number),
        timestamp=format_timestamp(block.timestamp, tz),
        miner=block.miner or "-",
        transaction_count=f"{count} transactions",
        gas_used=format_gas_value(block.gas_used),
        gas_limit=format_gas_value(block.gas_limit),
        gas_percentage=gas_usage_percentage(block),
        gas_ratio=gas_usage_ratio(block),
        block_hash=block.hash or "-",
        parent_hash=block.parent_hash or "-",
        stale=stale,
    )


def footer_text(interval_seconds: float) -> str:
    return f"Data updates automatically every {interval_seconds:g} seconds"


def render_view(
    state: ViewState,
    tz: ZoneInfo = ZoneInfo("CET"),
    interval_seconds: float = 15.0,
    show_stale: bool = True,
) -> DashboardView:
    block = state.block
    if block is None and not isinstance(state, Failed):
        return DashboardView(mode=Mode.LOADING, loading_text=LOADING_TEXT)

    # a retry in flight keeps showing the failure it is retrying
    failure = state.last_error if isinstance(state, Loading) else state.error
    if failure is not None:
        if block is None or not show_stale:
            return DashboardView(mode=Mode.ERROR, error=failure)
        panel = block_panel(block, state.block_number, tz, stale=True)
        return DashboardView(
            mode=Mode.ERROR,
            error=failure,
            block_panel=panel,
            transaction_panel=TransactionPanel(transaction_preview(block.transactions)),
            footer=footer_text(interval_seconds),
            notices=(f"Showing last known block {panel.block_number}.",),
        )

    return DashboardView(
        mode=Mode.DATA,
        block_panel=block_panel(block, state.block_number, tz),
        transaction_panel=TransactionPanel(transaction_preview(block.transactions)),
        footer=footer_text(interval_seconds),
    )
