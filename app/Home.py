"""Main Streamlit entrypoint for the Ethereum block dashboard.

All data on this page comes from the latest block reported by the node
provider, refreshed in the background on a fixed interval.
"""

import atexit
import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from blockdash.chain_client import ChainClient
from blockdash.config import get_settings
from blockdash.logging_utils import configure_logging
from blockdash.polling import PollingController
from blockdash.render import BlockPanel, DashboardView, Mode, TransactionPanel, render_view
from blockdash.runtime import DashboardRuntime


@st.cache_resource(show_spinner=False)
def get_runtime() -> DashboardRuntime:
    settings = get_settings()
    configure_logging(settings.log_level)
    controller = PollingController(
        ChainClient.from_settings(settings),
        interval=settings.refresh_interval_seconds,
    )
    runtime = DashboardRuntime(controller)
    runtime.start()
    atexit.register(runtime.stop)
    return runtime


def draw_block_panel(panel: BlockPanel) -> None:
    with st.container(border=True):
        left, right = st.columns([3, 1])
        left.subheader("Current Block" + (" (stale)" if panel.stale else ""))
        right.markdown(f"### `{panel.block_number}`")

        c1, c2 = st.columns(2)
        with c1:
            st.caption("Timestamp")
            st.write(panel.timestamp)
            st.caption("Miner")
            st.code(panel.miner, language=None)
            st.caption("Transaction Count")
            st.write(panel.transaction_count)
        with c2:
            st.caption("Gas Used / Gas Limit")
            st.progress(panel.gas_ratio)
            st.write(panel.gas_caption)
            st.caption("Block Hash")
            st.code(panel.block_hash, language=None)
            st.caption("Parent Hash")
            st.code(panel.parent_hash, language=None)


def draw_transaction_panel(panel: TransactionPanel) -> None:
    with st.container(border=True):
        st.subheader("Transaction Preview")
        if panel.preview.is_empty:
            st.info(panel.heading)
            return
        st.write(panel.heading)
        for tx in panel.preview.shown:
            st.code(tx, language=None)
        if panel.remainder:
            st.caption(panel.remainder)


def draw(view: DashboardView) -> None:
    if view.mode is Mode.LOADING:
        st.info(view.loading_text)
        return
    if view.error:
        st.error(view.error)
    for notice in view.notices:
        st.warning(notice)
    if view.block_panel is not None:
        draw_block_panel(view.block_panel)
    if view.transaction_panel is not None:
        draw_transaction_panel(view.transaction_panel)
    if view.footer:
        st.caption(view.footer)


st.set_page_config(page_title="Ethereum Block Explorer", layout="wide")
settings = get_settings()
runtime = get_runtime()

st.title("Ethereum Block Explorer")
st.caption("Real-time Ethereum blockchain information")


@st.fragment(run_every=settings.ui_refresh_seconds)
def dashboard() -> None:
    draw(
        render_view(
            runtime.snapshot(),
            tz=settings.tz,
            interval_seconds=settings.refresh_interval_seconds,
            show_stale=settings.show_stale_on_error,
        )
    )


dashboard()
