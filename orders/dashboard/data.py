"""
Dashboard Data Layer
====================

One ShippingDesk per browser session, kept in st.session_state so draft
edits survive reruns. The reconciliation summary is cached on the order
frame and recomputed whenever the desk reloads.

Convention: Polars for all transforms. Convert to pandas only at plot time.
"""

import polars as pl
import plotly.graph_objects as go
import streamlit as st

from shared.logging_config import setup_logging

from orders.reconciliation import add_balances, summarize
from orders.shipping import ShippingDesk
from orders.store import CACHE_PATH, LocalOrderStore, TableOrderStore


CARRIER_COLORS = {
    "JT": "#d62728",
    "POSTA": "#1f77b4",
    "NONE": "#7f7f7f",
}


def init_desk() -> ShippingDesk:
    """
    Return the session's desk, creating it on first use.

    The sidebar toggle switches between the warehouse table and the local
    snapshot; switching rebuilds the desk.
    """
    use_local = st.sidebar.toggle(
        "Local snapshot only",
        value=False,
        help=f"Read and write {CACHE_PATH.name} instead of the warehouse table",
    )

    if st.session_state.get("desk_local") != use_local or "desk" not in st.session_state:
        setup_logging()
        store = LocalOrderStore() if use_local else TableOrderStore()
        st.session_state["desk"] = ShippingDesk(store)
        st.session_state["desk_local"] = use_local

    if st.sidebar.button("Reload orders"):
        st.session_state["desk"].refresh()

    return st.session_state["desk"]


@st.cache_data
def carrier_summary(df: pl.DataFrame) -> pl.DataFrame:
    return summarize(add_balances(df))


def format_money(value) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f} EGP"


def apply_chart_layout(fig: go.Figure, has_legend: bool = True) -> go.Figure:
    """Apply consistent layout settings to prevent label cutoff."""
    fig.update_xaxes(automargin=True)
    fig.update_yaxes(automargin=True)
    top_margin = 80 if has_legend else 50
    fig.update_layout(
        margin=dict(l=10, r=10, t=top_margin, b=10),
        autosize=True,
    )
    return fig
