"""
Streamlit Frontend for FinFree

The screen a single user opens every day to log money and see how far
they are from being debt-free.

DESIGN PRINCIPLES:
1. Nothing is shown until the saved state has been loaded
2. Every action reports what happened, including unsaved changes
3. Clear error messages in simple language
4. Every figure comes from the latest committed state

The store is built once per session and handed to each page; there is
no global store.
"""

import math
from datetime import date
from decimal import Decimal

import streamlit as st

from finfree.audit import AuditLogger, configure_logging
from finfree.config import get_settings, validate_all_settings
from finfree.models import CommitResult, CommitStatus, FundName, HydrationStatus, TransactionKind
from finfree.reports import build_dashboard
from finfree.services.storage import InMemoryStorage, JsonFileStorage
from finfree.store import FinancialStore
from finfree.validation import TransactionValidator


# Page configuration
st.set_page_config(
    page_title="FinFree",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


KIND_LABELS = {
    TransactionKind.EXPENSE: "Expense",
    TransactionKind.INCOME: "Income",
    TransactionKind.DEBT_PAYMENT: "Debt Payment",
    TransactionKind.INSTALLMENT_PAYMENT: "EMI Payment",
    TransactionKind.SAVINGS_CONTRIBUTION: "Savings",
}


def format_money(amount) -> str:
    if isinstance(amount, float) and math.isinf(amount):
        return "Never"
    return f"₹{Decimal(str(amount)):,.0f}"


def format_months(months: float) -> str:
    return "Never at this payment" if math.isinf(months) else f"{int(months)} months"


@st.cache_resource
def get_store() -> FinancialStore:
    """Build and hydrate the store once per server process."""
    settings = get_settings()
    configure_logging(settings.app.log_level)
    audit_logger = AuditLogger(trail_size=settings.app.audit_trail_size)

    try:
        settings.storage.directory.mkdir(parents=True, exist_ok=True)
        storage = JsonFileStorage()
    except OSError as e:
        st.error(f"Storage directory is not writable, changes will not be kept: {e}")
        storage = InMemoryStorage()

    store = FinancialStore(storage, settings=settings, audit_logger=audit_logger)
    result = store.hydrate()
    if result.status == HydrationStatus.REJECTED:
        st.warning(
            "Your saved data could not be loaded, so the app started fresh. "
            f"A copy was kept as '{store.rejected_key}'. Details: {result.error}"
        )
    return store


def show_result(result: CommitResult, success_message: str) -> None:
    """Tell the user what an action did."""
    if result.status == CommitStatus.COMMITTED:
        st.success(success_message)
    elif result.status == CommitStatus.WRITE_FAILED:
        st.warning(f"{success_message}, but it could not be saved to this device: {result.error}")
    elif result.status == CommitStatus.REJECTED:
        st.error("Please fix the following:")
        for issue in result.issues:
            st.markdown(f"- {issue.message}")
    else:
        st.info(result.error or "Nothing to change.")

    for issue in result.issues:
        if result.status != CommitStatus.REJECTED and issue.severity == "warning":
            st.warning(issue.message)


def main():
    """Main application entry point."""
    store = get_store()

    if not store.hydrated:
        st.info("Loading your data...")
        st.stop()

    # Sidebar navigation
    st.sidebar.title("💰 FinFree")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "➕ Add Transaction", "💳 EMIs", "🎯 Goals", "⚙️ Settings"],
        index=0,
    )

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(store)
    elif page == "➕ Add Transaction":
        render_add_page(store)
    elif page == "💳 EMIs":
        render_installments_page(store)
    elif page == "🎯 Goals":
        render_goals_page(store)
    elif page == "⚙️ Settings":
        render_settings_page(store)


def render_dashboard_page(store: FinancialStore):
    """Render the dashboard page."""
    st.title("📊 Dashboard")

    summary = build_dashboard(store.state, get_settings().plan, date.today())

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Freedom Score", f"{summary.freedom_score}%")
    col2.metric("Debt Balance", format_money(summary.debt_balance))
    col3.metric("Net Worth", format_money(summary.net_worth))
    col4.metric("Savings Rate", f"{summary.month.savings_rate:.0%}")

    st.markdown(f"**Phase {summary.phase}: {summary.phase_name}**")

    st.markdown("---")
    st.markdown("### This Month")
    col1, col2, col3 = st.columns(3)
    col1.metric("Lifestyle Left", format_money(summary.lifestyle_remaining))
    col2.metric("Daily Limit", format_money(summary.daily_limit))
    col3.metric("Days Left", summary.days_remaining)

    if summary.budget:
        st.dataframe(
            [
                {
                    "Category": line.category.replace("_", " ").title(),
                    "Budget": format_money(line.budgeted),
                    "Spent": format_money(line.spent),
                    "Left": format_money(line.remaining),
                    "Used": f"{line.percentage:.0f}%",
                }
                for line in summary.budget
            ],
            use_container_width=True,
        )

    st.markdown("---")
    st.markdown("### Debt Payoff")
    col1, col2 = st.columns(2)
    col1.metric("Time to Zero", format_months(summary.months_to_payoff))
    col2.metric("Interest Still to Pay", format_money(summary.total_interest))
    if summary.payoff_schedule:
        with st.expander("📅 Payoff Schedule"):
            st.dataframe(
                [row.model_dump() for row in summary.payoff_schedule],
                use_container_width=True,
            )

    st.markdown("---")
    st.markdown("### Financial Independence")
    col1, col2, col3 = st.columns(3)
    col1.metric("FIRE Number", format_money(summary.fire_number))
    col2.metric("Progress", f"{summary.fire_progress:.1f}%")
    col3.metric(
        "Years to FIRE",
        "Never at this rate" if math.isinf(summary.years_to_fire) else f"{summary.years_to_fire:.1f}",
    )
    st.line_chart({"Net worth": [point.value for point in summary.projection]})

    st.markdown("---")
    st.markdown("### Recent Transactions")
    recent = store.recent_transactions(limit=10)
    if not recent:
        st.info("No transactions yet. Use 'Add Transaction' to log your first one.")
    for txn in recent:
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(f"**{txn.description or txn.category}** · {KIND_LABELS[txn.kind]}")
        col2.markdown(f"{format_money(txn.amount)} · {txn.timestamp:%d %b %Y}")
        if col3.button("🗑️", key=f"delete-{txn.id}"):
            show_result(store.delete_transaction(txn.id), "Transaction deleted")


def render_add_page(store: FinancialStore):
    """Render the add transaction page."""
    st.title("➕ Add Transaction")

    settings = get_settings()
    validator = TransactionValidator(settings.app)

    with st.form("add-transaction"):
        kind = st.selectbox(
            "Type",
            options=list(TransactionKind),
            format_func=lambda k: KIND_LABELS[k],
        )
        amount = st.text_input("Amount (₹)", placeholder="e.g. 1200")

        if kind == TransactionKind.SAVINGS_CONTRIBUTION:
            category = st.selectbox(
                "Fund",
                options=[fund.value for fund in FundName],
                format_func=lambda v: v.replace("_", " ").title(),
            )
        elif kind == TransactionKind.EXPENSE:
            category = st.selectbox(
                "Category",
                options=list(settings.plan.lifestyle_budget) + ["other"],
                format_func=lambda v: v.replace("_", " ").title(),
            )
        else:
            category = kind.value

        description = st.text_input("Description (optional)")
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("💾 Save", type="primary")

    if submitted:
        data = {
            "amount": amount,
            "kind": kind.value,
            "category": category,
            "description": description,
            "timestamp": when,
        }
        validation = validator.validate(data)
        if not validation.is_valid:
            st.error(validator.get_user_friendly_summary(validation))
            return

        if kind == TransactionKind.DEBT_PAYMENT:
            result = store.record_debt_payment(amount, description or "Debt Payment", timestamp=when)
        else:
            result = store.add_transaction(**data)
        show_result(result, "Transaction saved")


def render_installments_page(store: FinancialStore):
    """Render the installments (EMI) page."""
    st.title("💳 EMIs")

    state = store.state
    if not state.installments:
        st.info("No EMIs tracked.")

    for installment in state.installments:
        with st.container(border=True):
            st.markdown(f"**{installment.name}** · {format_money(installment.amount)}/month")
            st.progress(
                installment.paid_installments / installment.total_installments,
                text=f"{installment.paid_installments}/{installment.total_installments} paid",
            )
            st.caption(
                f"{installment.start_period} → {installment.end_period} · "
                f"{format_money(installment.outstanding)} outstanding"
            )
            col1, col2 = st.columns(2)
            if col1.button(
                "✅ Record Payment",
                key=f"pay-{installment.id}",
                disabled=installment.is_complete,
            ):
                show_result(store.record_installment_payment(installment.id), "Payment recorded")
            if col2.button("🗑️ Remove", key=f"remove-{installment.id}"):
                show_result(store.delete_installment(installment.id), "EMI removed")

    st.markdown("---")
    st.markdown("### Add EMI")
    with st.form("add-installment"):
        name = st.text_input("Name", placeholder="e.g. Phone EMI")
        amount = st.text_input("Monthly amount (₹)")
        col1, col2 = st.columns(2)
        total = col1.number_input("Total installments", min_value=1, value=12, step=1)
        paid = col2.number_input("Already paid", min_value=0, value=0, step=1)
        col1, col2 = st.columns(2)
        start = col1.text_input("Start (YYYY-MM)", value=date.today().strftime("%Y-%m"))
        end = col2.text_input("End (YYYY-MM)")
        submitted = st.form_submit_button("💾 Add EMI", type="primary")

    if submitted:
        show_result(
            store.add_installment(
                name=name,
                amount=amount,
                total_installments=int(total),
                paid_installments=int(paid),
                start_period=start,
                end_period=end,
            ),
            "EMI added",
        )


def render_goals_page(store: FinancialStore):
    """Render the goals and fund balances page."""
    st.title("🎯 Goals")

    summary = build_dashboard(store.state, get_settings().plan, date.today())
    for goal in store.state.goals:
        progress = summary.goal_progress.get(goal.id, 0.0)
        st.markdown(f"**{goal.name}** {'🎉' if goal.completed else ''}")
        st.progress(
            progress,
            text=f"{format_money(goal.current_amount)} of {format_money(goal.target_amount)}",
        )
        st.caption(f"Target date: {goal.target_date:%d %B %Y}")

    st.markdown("---")
    st.markdown("### Update Balances")
    state = store.state
    with st.form("balances"):
        debt = st.number_input("Debt balance (₹)", min_value=0.0, value=float(state.debt_balance), step=1000.0)
        funds = {
            fund: st.number_input(
                f"{fund.value.replace('_', ' ').title()} (₹)",
                min_value=0.0,
                value=float(state.fund_balance(fund)),
                step=1000.0,
            )
            for fund in FundName
        }
        submitted = st.form_submit_button("💾 Save Balances", type="primary")

    if submitted:
        result = store.set_debt_balance(Decimal(str(debt)))
        if result.status != CommitStatus.NOOP:
            show_result(result, "Debt balance updated")
        for fund, value in funds.items():
            result = store.set_fund_balance(fund, Decimal(str(value)))
            if result.status != CommitStatus.NOOP:
                show_result(result, f"{fund.value.replace('_', ' ').title()} updated")


def render_settings_page(store: FinancialStore):
    """Render the settings page."""
    st.title("⚙️ Settings")

    state = store.state

    st.markdown("### Budget")
    with st.form("lifestyle-cap"):
        cap = st.number_input(
            "Monthly lifestyle cap (₹)", min_value=0.0, value=float(state.lifestyle_cap), step=500.0
        )
        if st.form_submit_button("💾 Save"):
            show_result(store.update_lifestyle_cap(Decimal(str(cap))), "Lifestyle cap updated")

    st.markdown("### Projection Assumptions")
    with st.form("projection-settings"):
        withdrawal = st.number_input(
            "Withdrawal rate", min_value=0.01, max_value=0.2, value=state.settings.withdrawal_rate, step=0.005
        )
        expected = st.number_input(
            "Expected annual return", min_value=-0.5, max_value=0.5, value=state.settings.expected_return, step=0.005
        )
        col1, col2 = st.columns(2)
        age = col1.number_input("Current age", min_value=0, max_value=120, value=state.settings.current_age)
        retire = col2.number_input(
            "Retirement age", min_value=0, max_value=120, value=state.settings.target_retirement_age
        )
        if st.form_submit_button("💾 Save"):
            show_result(
                store.update_settings(
                    withdrawal_rate=withdrawal,
                    expected_return=expected,
                    current_age=int(age),
                    target_retirement_age=int(retire),
                ),
                "Settings updated",
            )

    st.markdown("---")
    st.markdown("### Backup")
    st.download_button(
        "⬇️ Export Data",
        data=store.export_json(),
        file_name=store.export_filename(),
        mime="application/json",
    )

    st.markdown("### Reset")
    st.warning("This deletes every transaction and EMI and restores the plan defaults.")
    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("🔄 Reset to Defaults", disabled=not confirm):
        show_result(store.reset_to_defaults(), "Everything was reset")

    st.markdown("---")
    st.markdown("### Configuration Status")

    status = validate_all_settings()
    sections = [
        ("Storage", "storage"),
        ("Plan", "plan"),
        ("App", "app"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    with st.expander("🧾 Recent Activity"):
        for event in store.audit_logger.recent_events(limit=20):
            st.markdown(f"- `{event.timestamp:%Y-%m-%d %H:%M}` {event.description}")


if __name__ == "__main__":
    main()
