"""
Streamlit Frontend for BizManager

This is the screen a shop owner uses every day to record credits and
debits across accounts and locations.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Indian formats everywhere (₹10,00,000.00, dd/mm/yyyy)
3. Clear error messages next to the field that caused them
4. Visual feedback for all operations
5. No hidden actions

Storage failures are caught here and shown as a generic error; the
details go to the structured log.
"""

import asyncio
from datetime import date

import streamlit as st

from bizmanager.activity import configure_logging
from bizmanager.auth import PlaceholderAuth
from bizmanager.config import get_settings, validate_all_settings
from bizmanager.csv_io import (
    SAMPLE_FILENAME,
    CsvImportError,
    export_filename,
    sample_csv,
    summary_export_rows,
    to_csv,
    transaction_export_rows,
)
from bizmanager.formatting import (
    format_currency,
    format_currency_compact,
    format_date,
    format_date_display,
    format_datetime,
)
from bizmanager.models.records import (
    AccountCreate,
    LocationCreate,
    TransactionFilters,
    TransactionForm,
    TransactionType,
)
from bizmanager.orchestrator import AppComponents, create_app_components
from bizmanager.services.storage import ConnectionError, StorageError
from bizmanager.state import AppState, ClientStateStore
from bizmanager.validation import validation_summary


# Page configuration
st.set_page_config(
    page_title="BizManager",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .credit { color: #28a745; font-weight: bold; }
    .debit { color: #dc3545; font-weight: bold; }
    .commission { color: #fd7e14; font-weight: bold; }
</style>
""", unsafe_allow_html=True)


GENERIC_ERROR = "Something went wrong talking to the data store. Please try again."


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_client_store() -> ClientStateStore:
    return ClientStateStore(get_settings().app.client_state_path)


@st.cache_resource
def get_components(credentials_path, spreadsheet_id) -> AppComponents:
    """Get or create application components (cached per connection)."""
    return create_app_components(
        use_storage=True,
        credentials_path=credentials_path,
        spreadsheet_id=spreadsheet_id,
    )


def current_components() -> AppComponents:
    client_state = get_client_store().load()
    return get_components(
        client_state.storage_credentials_path,
        client_state.storage_spreadsheet_id,
    )


def get_app_state() -> AppState:
    if "app_state" not in st.session_state:
        st.session_state.app_state = AppState()
    return st.session_state.app_state


def refresh_directory(components: AppComponents, state: AppState) -> None:
    state.set_accounts(run_async(components.directory_flow.list_accounts()))
    state.set_locations(run_async(components.directory_flow.list_locations()))


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)
    components = current_components()
    state = get_app_state()
    auth = PlaceholderAuth(get_client_store(), activity_logger=components.activity_logger)

    state.set_authenticated(auth.is_authenticated)
    if not state.is_authenticated:
        render_login_page(auth)
        return

    try:
        refresh_directory(components, state)
    except StorageError:
        st.error(GENERIC_ERROR)

    # Sidebar navigation
    st.sidebar.title("📒 BizManager")
    st.sidebar.markdown("---")

    location_options = [None] + [l.id for l in state.locations]
    state.set_selected_location(st.sidebar.selectbox(
        "Location",
        options=location_options,
        format_func=lambda x: "All Locations" if x is None else state.get_location_name(x),
    ))

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "💸 Transactions",
            "👥 Accounts",
            "📍 Locations",
            "📈 Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Logout"):
        run_async(auth.logout())
        st.rerun()

    if not components.uses_remote_storage:
        st.sidebar.warning("Google Sheets is not configured. Data is kept in memory only.")

    # Route to appropriate page
    try:
        if page == "📊 Dashboard":
            render_dashboard_page(components, state)
        elif page == "💸 Transactions":
            render_transactions_page(components, state)
        elif page == "👥 Accounts":
            render_accounts_page(components, state)
        elif page == "📍 Locations":
            render_locations_page(components, state)
        elif page == "📈 Reports":
            render_reports_page(components, state)
        elif page == "⚙️ Settings":
            render_settings_page(components)
    except StorageError:
        st.error(GENERIC_ERROR)


def render_login_page(auth: PlaceholderAuth):
    """Render the login page."""
    st.title("📒 BizManager")
    st.markdown("Sign in to manage your books.")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        if run_async(auth.login(username, password)):
            st.rerun()
        else:
            st.error("Invalid username or password")


def render_dashboard_page(components: AppComponents, state: AppState):
    """Render today's KPIs and the weekly account breakdown."""
    st.title("📊 Dashboard")
    st.caption(format_date_display(date.today()))

    stats = run_async(components.report_flow.load_dashboard(
        location_id=state.selected_location_id,
    ))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Today's Credits", format_currency_compact(stats.today_credits))
    col2.metric("Today's Debits", format_currency_compact(stats.today_debits))
    col3.metric("Net Balance", format_currency(stats.net_balance))
    col4.metric("Today's Commission", format_currency(stats.today_commissions))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Transactions", stats.total_transactions)
    col2.metric("Active Accounts (7 days)", stats.active_accounts)
    col3.metric("Locations", stats.total_locations)
    col4.metric("This Month", format_currency_compact(stats.monthly_total))

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Today")
        st.write(f"**Average transaction:** {format_currency(stats.avg_transaction_amount)}")
        st.write(f"**Weekly average (net/day):** {format_currency(stats.weekly_average)}")
        if stats.top_account.is_empty:
            st.write("**Top account:** No transactions")
        else:
            st.write(
                f"**Top account:** {stats.top_account.name} "
                f"({format_currency(stats.top_account.amount)})"
            )
    with col2:
        st.subheader("Top Accounts (7 days)")
        if stats.account_distribution:
            st.bar_chart({a.name: a.total for a in stats.account_distribution})
        else:
            st.info("No transactions in the last 7 days.")


def _filter_controls(state: AppState, prefix: str) -> TransactionFilters:
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        account_id = st.selectbox(
            "Account",
            options=[None] + [a.id for a in state.accounts],
            format_func=lambda x: "All Accounts" if x is None else state.get_account_name(x),
            key=f"{prefix}_account",
        )
    with col2:
        kind = st.selectbox(
            "Type",
            options=[None] + list(TransactionType),
            format_func=lambda x: "All Types" if x is None else x.value.title(),
            key=f"{prefix}_type",
        )
    with col3:
        date_from = st.date_input("From", value=None, key=f"{prefix}_from")
    with col4:
        date_to = st.date_input("To", value=None, key=f"{prefix}_to")

    return TransactionFilters(
        location_id=state.selected_location_id,
        account_id=account_id,
        type=kind,
        date_from=date_from,
        date_to=date_to,
    )


def render_transactions_page(components: AppComponents, state: AppState):
    """Render the transaction list, entry form and CSV tools."""
    st.title("💸 Transactions")

    if "page_number" not in st.session_state:
        st.session_state.page_number = 1
    if "editing_id" not in st.session_state:
        st.session_state.editing_id = None

    filters = _filter_controls(state, "txn")
    search = st.text_input("Search by transaction number or description")
    page_size = get_settings().app.page_size
    filters = filters.model_copy(update={
        "search": search or None,
        "page": st.session_state.page_number,
        "limit": page_size,
    })

    page = run_async(components.transaction_flow.load_page(filters))
    state.set_transactions(page.data)

    render_transaction_form(components, state)

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        csv_text = to_csv(transaction_export_rows(page.data))
        if csv_text:
            st.download_button(
                "⬇️ Export CSV",
                data=csv_text,
                file_name=export_filename("transactions"),
                mime="text/csv",
            )
    with col2:
        render_import_section(components, state)

    st.markdown("---")
    if not page.data:
        st.info("No transactions found.")
        return

    for t in page.data:
        cols = st.columns([2, 2, 2, 2, 2, 3, 1, 1])
        cols[0].write(t.transaction_no)
        cols[1].write(format_date(t.date))
        css = "credit" if t.is_credit else "debit"
        cols[2].markdown(
            f'<span class="{css}">{format_currency(t.amount_value)}</span>',
            unsafe_allow_html=True,
        )
        cols[3].markdown(
            f'<span class="commission">{format_currency(t.commission_value)}</span>',
            unsafe_allow_html=True,
        )
        cols[4].write(t.account_name)
        cols[5].write(t.description or "")
        if cols[6].button("✏️", key=f"edit_{t.id}"):
            st.session_state.editing_id = t.id
            st.rerun()
        if cols[7].button("🗑️", key=f"delete_{t.id}"):
            run_async(components.transaction_flow.delete(t.id))
            st.success("Transaction deleted")
            st.rerun()

    total_pages = page.total_pages(page_size)
    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("◀ Previous", disabled=st.session_state.page_number <= 1):
            st.session_state.page_number -= 1
            st.rerun()
    with col2:
        st.caption(f"Page {st.session_state.page_number} of {total_pages} ({page.count} transactions)")
    with col3:
        if st.button("Next ▶", disabled=st.session_state.page_number >= total_pages):
            st.session_state.page_number += 1
            st.rerun()


def render_transaction_form(components: AppComponents, state: AppState):
    editing_id = st.session_state.editing_id
    existing = next((t for t in state.transactions if t.id == editing_id), None)
    initial = TransactionForm.from_transaction(existing) if existing else TransactionForm(
        date=date.today(),
        location_id=state.selected_location_id,
    )

    title = "✏️ Edit Transaction" if existing else "➕ Add Transaction"
    with st.expander(title, expanded=existing is not None):
        with st.form("transaction_form"):
            col1, col2 = st.columns(2)
            with col1:
                transaction_no = st.text_input(
                    "Transaction No",
                    value=initial.transaction_no,
                    help="Leave blank to generate one",
                )
                txn_date = st.date_input("Date", value=initial.date)
                amount = st.text_input("Amount (₹)", value=initial.amount)
                commission = st.text_input("Commission (₹)", value=initial.commission)
            with col2:
                kinds = [t.value for t in TransactionType]
                kind = st.selectbox("Type", kinds, index=kinds.index(initial.type))
                account_ids = [None] + [a.id for a in state.accounts]
                account_id = st.selectbox(
                    "Account",
                    account_ids,
                    index=account_ids.index(initial.account_id) if initial.account_id in account_ids else 0,
                    format_func=lambda x: "Select account" if x is None else state.get_account_name(x),
                )
                location_ids = [None] + [l.id for l in state.locations]
                location_id = st.selectbox(
                    "Location",
                    location_ids,
                    index=location_ids.index(initial.location_id) if initial.location_id in location_ids else 0,
                    format_func=lambda x: "Select location" if x is None else state.get_location_name(x),
                )
                description = st.text_area("Description", value=initial.description)

            submitted = st.form_submit_button("💾 Save", type="primary")

        if existing and st.button("Cancel editing"):
            st.session_state.editing_id = None
            st.rerun()

    if not submitted:
        return

    form = TransactionForm(
        transaction_no=transaction_no,
        date=txn_date,
        amount=amount,
        commission=commission,
        type=kind,
        account_id=account_id,
        location_id=location_id,
        description=description,
    )
    saved, result = run_async(components.transaction_flow.save(form, editing_id=editing_id))
    if saved is None:
        st.error(validation_summary(result))
        return

    st.session_state.editing_id = None
    st.success(f"Saved {saved.transaction_no}")
    st.rerun()


def render_import_section(components: AppComponents, state: AppState):
    with st.expander("⬆️ Import CSV"):
        st.download_button(
            "Download sample CSV",
            data=sample_csv(),
            file_name=SAMPLE_FILENAME,
            mime="text/csv",
        )
        uploaded = st.file_uploader("Choose a CSV file", type=["csv"])
        if not uploaded:
            return

        text = uploaded.getvalue().decode("utf-8", errors="replace")
        try:
            preview = components.import_flow.preview(text)
        except CsvImportError as e:
            st.error(str(e))
            return

        st.caption("Preview")
        st.dataframe(preview, use_container_width=True)

        if st.button("Import", type="primary"):
            with st.spinner("Importing transactions..."):
                summary = run_async(components.import_flow.run(
                    text, state.accounts, state.locations
                ))
            if summary.success_count > 0:
                st.success(summary.message)
            else:
                st.error(summary.message)


def _directory_page(title: str, items, save, delete, extra_label: str, extra_attr: str, model):
    st.title(title)

    with st.form(f"{title}_form", clear_on_submit=True):
        name = st.text_input("Name")
        extra = st.text_input(extra_label)
        if st.form_submit_button("➕ Add", type="primary"):
            if not name.strip():
                st.error("Name is required")
            else:
                run_async(save(model(**{"name": name, extra_attr: extra or None})))
                st.rerun()

    if not items:
        st.info("Nothing here yet.")
        return

    for item in items:
        cols = st.columns([3, 3, 2, 1])
        cols[0].write(item.name)
        cols[1].write(getattr(item, extra_attr) or "")
        cols[2].caption(format_datetime(item.created_at))
        if cols[3].button("🗑️", key=f"delete_{item.id}"):
            run_async(delete(item.id))
            st.rerun()


def render_accounts_page(components: AppComponents, state: AppState):
    flow = components.directory_flow
    _directory_page(
        "👥 Accounts",
        state.accounts,
        flow.save_account,
        flow.delete_account,
        "Phone number",
        "phone_number",
        AccountCreate,
    )


def render_locations_page(components: AppComponents, state: AppState):
    flow = components.directory_flow
    _directory_page(
        "📍 Locations",
        state.locations,
        flow.save_location,
        flow.delete_location,
        "Address",
        "address",
        LocationCreate,
    )


def _export_button(label: str, rows, report_name: str):
    csv_text = to_csv(summary_export_rows(rows))
    if csv_text:
        st.download_button(
            f"⬇️ Export {label}",
            data=csv_text,
            file_name=export_filename(report_name),
            mime="text/csv",
            key=f"export_{report_name}",
        )


def render_reports_page(components: AppComponents, state: AppState):
    """Render the report summaries with CSV exports."""
    st.title("📈 Reports")

    filters = _filter_controls(state, "report")
    report = run_async(components.report_flow.load_report(filters))
    totals = report.totals

    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Total Credits", format_currency(totals.total_credits))
    col2.metric("Total Debits", format_currency(totals.total_debits))
    col3.metric("Net Balance", format_currency(totals.net_balance))
    col4.metric("Total Commission", format_currency(totals.total_commissions))
    col5.metric("Transactions", totals.total_transactions)

    st.markdown("---")
    st.subheader("💰 Commission Report")
    _export_button("Commission", report.commission_summary, "commission-report")
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Commission", format_currency(totals.total_commissions))
    col2.metric("Accounts with Commission", len(report.commission_summary))
    col3.metric("Commission Transactions", report.commission_transaction_count)
    st.dataframe(
        [
            {
                "Account": c.account_name,
                "Total Commission": format_currency(c.total_commission),
                "Transactions": c.transaction_count,
                "Average Commission": format_currency(c.avg_commission),
                "% of Total": f"{c.share_of(totals.total_commissions):.1f}%",
            }
            for c in report.commission_summary
        ],
        use_container_width=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Account Summary")
        _export_button("Accounts", report.account_summary, "account-summary")
        st.dataframe(
            [
                {
                    "Account": a.account_name,
                    "Credits": format_currency(a.credits),
                    "Debits": format_currency(a.debits),
                    "Net": format_currency(a.net),
                }
                for a in report.account_summary
            ],
            use_container_width=True,
        )
    with col2:
        st.subheader("Location Summary")
        _export_button("Locations", report.location_summary, "location-summary")
        st.dataframe(
            [
                {
                    "Location": l.location_name,
                    "Credits": format_currency(l.credits),
                    "Debits": format_currency(l.debits),
                    "Net": format_currency(l.net),
                }
                for l in report.location_summary
            ],
            use_container_width=True,
        )

    st.subheader("Daily Summary")
    _export_button("Daily", report.daily_summary, "daily-summary")
    st.dataframe(
        [
            {
                "Date": format_date(d.date),
                "Credits": format_currency(d.credits),
                "Debits": format_currency(d.debits),
                "Net": format_currency(d.net),
                "Commission": format_currency(d.commission),
                "Count": d.count,
            }
            for d in report.daily_summary
        ],
        use_container_width=True,
    )


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()
    sections = [
        ("Google Sheets (Storage)", "storage"),
        ("Login", "auth"),
        ("Application", "app"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Storage Connection")
    store = get_client_store()
    client_state = store.load()
    with st.form("storage_overrides"):
        credentials_path = st.text_input(
            "Service account credentials file",
            value=client_state.storage_credentials_path or "",
        )
        spreadsheet_id = st.text_input(
            "Spreadsheet ID",
            value=client_state.storage_spreadsheet_id or "",
        )
        col1, col2 = st.columns(2)
        save = col1.form_submit_button("💾 Save", type="primary")
        reset = col2.form_submit_button("↩️ Use defaults")

    if save:
        store.set_storage_overrides(credentials_path, spreadsheet_id)
        st.success("Connection settings saved.")
        st.rerun()
    if reset:
        store.clear_storage_overrides()
        st.rerun()

    if st.button("🔌 Test connection"):
        if components.sheets_client is None:
            st.error("❌ Google Sheets is not configured")
        else:
            try:
                components.sheets_client.test_connection()
                st.success("✅ Connected to Google Sheets")
            except ConnectionError as e:
                st.error(f"❌ {e}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your settings. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
