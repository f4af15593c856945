"""
Shipping Desk Dashboard
=======================

Streamlit page for dispatching orders: pick a carrier per order, check the
live remaining preview, save. POSTA orders go through a fee confirmation
form. The second tab lists dispatched orders and their shipping status.

Run with:
    streamlit run orders/dashboard/ShippingDesk.py
"""

import plotly.graph_objects as go
import streamlit as st
from pydantic import ValidationError

from carriers import ShippingCompany
from orders.dashboard.data import (
    CARRIER_COLORS,
    apply_chart_layout,
    carrier_summary,
    format_money,
    init_desk,
)
from orders.models import (
    AlreadyDispatchedError,
    InvalidAmountError,
    MissingCarrierError,
    ShippingStatus,
)
from orders.shipping import ManualFeeConfirmation
from orders.store import orders_to_frame

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Shipping Desk",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.title("Shipping Desk")

desk = init_desk()
search = st.sidebar.text_input("Search", placeholder="Name, order id or city")

COMPANIES = [c.value for c in ShippingCompany]
STATUSES = [s.value for s in ShippingStatus]

tab_pending, tab_assigned, tab_summary = st.tabs(["Pending", "Assigned", "Summary"])

# =============================================================================
# POSTA CONFIRMATION
# =============================================================================

confirmation = st.session_state.get("confirmation")
if confirmation is not None:
    with st.form("posta_fee"):
        st.subheader(f"POSTA fee for {confirmation.order_id}")
        net_fee = st.text_input("Net fee (receipt)", value=f"{confirmation.net_fee:g}")
        profit = st.text_input("Profit", value=f"{confirmation.profit:g}")
        col1, col2 = st.columns(2)
        save = col1.form_submit_button("Save dispatch", type="primary")
        cancel = col2.form_submit_button("Cancel")

    if save:
        try:
            conf = ManualFeeConfirmation(
                order_id=confirmation.order_id, net_fee=net_fee, profit=profit
            )
            order = desk.confirm_manual_fee(conf)
        except ValidationError as e:
            st.error(f"Invalid amount: {e.errors()[0]['msg']}")
        except AlreadyDispatchedError as e:
            st.session_state.pop("confirmation")
            st.error(str(e))
        else:
            st.session_state.pop("confirmation")
            st.success(f"{order.id} dispatched with POSTA, remaining {format_money(order.remaining)}")
            st.rerun()
    elif cancel:
        st.session_state.pop("confirmation")
        st.rerun()

# =============================================================================
# PENDING
# =============================================================================

with tab_pending:
    pending = desk.pending(search)
    if not pending:
        st.info("No orders waiting for a carrier.")

    for order in pending:
        draft = desk.draft(order.id)
        with st.container(border=True):
            st.markdown(f"**{order.customer_name}** · {order.city} · `{order.id}`")
            st.caption(
                f"Total {format_money(order.total_amount)} · Paid {format_money(order.paid)}"
            )

            col_company, col_weight, col_profit, col_preview, col_action = st.columns([2, 1, 1, 2, 1])

            company = col_company.selectbox(
                "Carrier",
                COMPANIES,
                index=COMPANIES.index(draft.company.value),
                key=f"company_{order.id}",
            )
            if company != draft.company.value:
                desk.select_company(order.id, company)
                st.rerun()

            weight = col_weight.text_input(
                "Weight (kg)",
                value=f"{draft.weight:g}",
                key=f"weight_{order.id}",
                disabled=draft.company == ShippingCompany.POSTA,
            )
            profit = col_profit.text_input(
                "Profit",
                value=f"{draft.profit:g}",
                key=f"profit_{order.id}_{draft.company.value}",
            )
            try:
                desk.set_weight(order.id, weight)
                desk.set_profit(order.id, profit)
            except (InvalidAmountError, ValidationError):
                col_preview.warning("Weight and profit must be numbers")
            else:
                col_preview.metric("Remaining", format_money(desk.preview_remaining(order.id)))

            if col_action.button("Dispatch", key=f"dispatch_{order.id}"):
                try:
                    result = desk.execute_dispatch(order.id)
                except MissingCarrierError as e:
                    st.error(str(e))
                else:
                    if isinstance(result, ManualFeeConfirmation):
                        st.session_state["confirmation"] = result
                    st.rerun()

# =============================================================================
# ASSIGNED
# =============================================================================

with tab_assigned:
    assigned = desk.assigned(search)
    if not assigned:
        st.info("No dispatched orders.")

    for order in assigned:
        with st.container(border=True):
            col_info, col_money, col_status = st.columns([3, 2, 2])
            col_info.markdown(
                f"**{order.customer_name}** · {order.city} · `{order.id}`  \n"
                f"{order.shipping_company.value} · {order.weight:g} kg"
            )
            col_money.markdown(
                f"Fee {format_money(order.shipping_fee)} + profit {format_money(order.shipping_profit)}  \n"
                f"**Remaining {format_money(order.remaining)}**"
            )
            status = col_status.selectbox(
                "Shipping status",
                STATUSES,
                index=STATUSES.index(order.shipping_status.value),
                key=f"status_{order.id}",
            )
            if status != order.shipping_status.value:
                desk.set_status(order.id, status)
                st.rerun()

# =============================================================================
# SUMMARY
# =============================================================================

with tab_summary:
    summary = carrier_summary(orders_to_frame(desk.orders))
    if len(summary) == 0:
        st.info("No orders yet.")
        st.stop()

    col1, col2, col3 = st.columns(3)
    col1.metric("Outstanding", format_money(summary["outstanding"].sum()))
    col2.metric("Shipping cost", format_money(summary["shipping_cost"].sum()))
    col3.metric("Shipping profit", format_money(summary["shipping_profit"].sum()))

    pdf = summary.to_pandas()
    fig = go.Figure()
    for metric in ["collected", "outstanding", "shipping_cost", "shipping_profit"]:
        fig.add_trace(go.Bar(x=pdf["shipping_company"], y=pdf[metric], name=metric.replace("_", " ").title()))
    fig.update_layout(
        barmode="group",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
    )
    st.plotly_chart(apply_chart_layout(fig), use_container_width=True)

    fig = go.Figure(go.Pie(
        labels=pdf["shipping_company"],
        values=pdf["orders"],
        marker=dict(colors=[CARRIER_COLORS.get(c, "#7f7f7f") for c in pdf["shipping_company"]]),
        hole=0.4,
    ))
    fig.update_layout(title="Orders by carrier")
    st.plotly_chart(apply_chart_layout(fig, has_legend=False), use_container_width=True)

    st.dataframe(summary, use_container_width=True)
