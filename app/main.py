"""
Streamlit Frontend for Simple Finances

The dashboard a user opens every morning:
1. Net worth with assets / liabilities
2. Accounts grouped by bank and type
3. Recent activity
4. Last 30 days of spending, per account
5. Detected subscriptions

DESIGN PRINCIPLES:
1. Read-only: nothing here can move money
2. Amounts are rounded only for display
3. Connection problems are shown, never hidden
"""

import asyncio

import streamlit as st

from simple_finances.config import validate_all_settings
from simple_finances.models.report import DashboardSnapshot
from simple_finances.orchestrator import (
    DashboardFlow,
    NotConnectedError,
    create_app_components,
)
from simple_finances.services.session import SessionStoreError
from simple_finances.services.simplefin import SimpleFINError


# Page configuration
st.set_page_config(
    page_title="Simple Finances",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stat-card {
        padding: 20px;
        border-radius: 10px;
        background-color: #f7f9fc;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
    .big-number.danger {
        color: #dc3545;
    }
    .asset { color: #28a745; font-weight: 600; }
    .liability { color: #dc3545; font-weight: 600; }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_flow() -> DashboardFlow:
    """Get or create the dashboard flow (cached)."""
    return create_app_components()


def money(value: float, decimals: int = 0) -> str:
    return f"${value:,.{decimals}f}"


def demo_requested() -> bool:
    return st.query_params.get("demo") == "true"


def main():
    """Main application entry point."""
    flow = get_flow()
    demo = demo_requested()

    try:
        connected = flow.is_connected
    except SessionStoreError as e:
        st.error(f"Saved session could not be read: {e}")
        connected = False

    if not connected and not demo:
        render_login_page(flow)
        return

    st.sidebar.title("💵 Simple Finances")
    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Home", "🕑 Activity", "🏦 Accounts", "⚙️ Settings"],
        index=0,
    )
    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Refresh"):
        st.session_state.pop("snapshot", None)
    if st.sidebar.button("🚪 Log out"):
        run_async(flow.disconnect())
        st.session_state.pop("snapshot", None)
        st.query_params.clear()
        st.rerun()

    snapshot = load_snapshot(flow, demo)
    if snapshot is None:
        return

    if snapshot.is_demo:
        st.info("Showing demo data. Log out to connect a real account.")
    for message in snapshot.aggregator_errors:
        st.warning(f"⚠️ {message}")

    if page == "🏠 Home":
        render_home_page(snapshot)
    elif page == "🕑 Activity":
        render_activity_page(snapshot)
    elif page == "🏦 Accounts":
        render_accounts_page(snapshot)
    elif page == "⚙️ Settings":
        render_settings_page(flow)


def load_snapshot(flow: DashboardFlow, demo: bool):
    """Refresh once per browser session; the refresh button forces another."""
    if "snapshot" not in st.session_state:
        with st.spinner("Syncing your accounts..."):
            try:
                st.session_state.snapshot = run_async(flow.refresh(demo=demo))
            except NotConnectedError:
                st.rerun()
            except SimpleFINError as e:
                st.error(f"❌ Failed to sync data: {e}")
                return None
    return st.session_state.snapshot


def render_login_page(flow: DashboardFlow):
    """Render the setup-token form."""
    st.title("💵 Simple Finances")
    st.markdown(
        "Paste a **SimpleFIN setup token** to connect your accounts. "
        "Access is read-only."
    )

    with st.expander("How do I get a setup token?"):
        st.markdown("""
        1. Sign in to the SimpleFIN Bridge and connect your banks
        2. Create a new app connection and copy the setup token
        3. Paste it below. It can only be used once.
        """)

    with st.form("login"):
        setup_token = st.text_input("Setup token", type="password")
        submitted = st.form_submit_button("Connect", type="primary")

    if submitted and setup_token:
        with st.spinner("Claiming token..."):
            try:
                run_async(flow.connect(setup_token.strip()))
                st.rerun()
            except SimpleFINError as e:
                st.error(f"❌ {e}")

    st.markdown("---")
    st.markdown("Just looking? [Open the demo](?demo=true)")


def render_home_page(snapshot: DashboardSnapshot):
    """Net worth, spending and subscriptions."""
    report = snapshot.report
    col1, col2 = st.columns([3, 2])

    with col1:
        danger = " danger" if report.net_worth < 0 else ""
        st.markdown(f"""
        <div class="stat-card">
            <h3>NET WORTH</h3>
            <div class="big-number{danger}">{money(report.net_worth)}</div>
            <p>Assets <span class="asset">{money(report.assets)}</span>
            &nbsp;·&nbsp; Liabilities <span class="liability">{money(report.liabilities)}</span></p>
        </div>
        """, unsafe_allow_html=True)

        st.subheader("Last 30 days")
        st.markdown(f'<div class="big-number">{money(report.spending_30d)}</div>',
                    unsafe_allow_html=True)
        for name, amount in sorted(
            report.spending_by_account.items(),
            key=lambda item: item[1],
            reverse=True,
        ):
            st.markdown(f"- {name}: **{money(amount)}**")

    with col2:
        st.subheader("Subscriptions")
        if not report.subscriptions:
            st.markdown("_No recurring charges detected._")
        for sub in report.subscriptions:
            st.markdown(f"**{sub.description}** · {money(sub.amount)} · {sub.count}×")


def render_activity_page(snapshot: DashboardSnapshot):
    """Most recent transactions across all accounts."""
    st.title("🕑 Recent Activity")
    if not snapshot.activity:
        st.markdown("No activity found.")
        return

    for item in snapshot.activity:
        if item.amount is None:
            amount_text = "?"
        else:
            sign = "+" if item.is_credit else "-"
            amount_text = f"{sign}{money(abs(item.amount), 2)}"
        posted = item.posted_at.strftime("%d %b %Y")
        st.markdown(f"**{item.description}** &nbsp; {amount_text}  \n{posted} · {item.account_name}")


def render_accounts_page(snapshot: DashboardSnapshot):
    """Accounts grouped by institution, then type."""
    st.title("🏦 Accounts")
    for institution in snapshot.institutions:
        st.subheader(institution.name)
        for group in institution.groups:
            st.caption(group.account_type.value)
            for account in group.accounts:
                balance = "n/a" if account.balance is None else money(account.balance, 2)
                st.markdown(f"- {account.name}: **{balance}**")


def render_settings_page(flow: DashboardFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    session = flow.current_session()
    if session is None:
        st.info("Not connected (demo data).")
    elif session.from_environment:
        st.success("✅ Connected via SIMPLEFIN_ACCESS_URL")
    else:
        st.success(f"✅ Connected since {session.created_at:%d %b %Y}")

    status = validate_all_settings()

    sections = [
        ("SimpleFIN", "simplefin"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} settings - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} settings - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
