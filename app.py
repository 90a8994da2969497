"""
Customer Ledger - Streamlit Application
Record money given to and taken from customers, filter by name and date,
and export the filtered list to Excel or PDF.
"""

import streamlit as st
import pandas as pd
import logging
from datetime import date
from dotenv import load_dotenv

from config import get_settings
from db_engine import create_db_engine, init_db
from exceptions import EncodingError, StorageError, ValidationError
from models import TransactionKind
from repositories import TransactionRepository
from services import ExportFormat, LedgerService, LedgerView

# Load environment variables
load_dotenv()

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Configure Streamlit page
st.set_page_config(
    page_title="Customer Ledger",
    page_icon="📒",
    layout="wide"
)


@st.cache_resource
def get_ledger_service() -> LedgerService:
    """Create the engine, repository and service once per server process."""
    engine = create_db_engine(settings.database_url, settings.db_echo)
    init_db(engine)
    return LedgerService(TransactionRepository(engine), report_title=settings.report_title)


def money(value: float) -> str:
    return f"{settings.currency_label}{value:.2f}"


# ==================== SECTIONS ====================
def render_filters() -> tuple:
    """Render the name search and date filter in the sidebar."""
    st.sidebar.title("🔍 Filter")

    name_filter = st.sidebar.text_input("Search by name", key="name_filter")

    use_date = st.sidebar.checkbox("Filter by date", key="use_date_filter")
    date_filter = None
    if use_date:
        date_filter = st.sidebar.date_input("Date", value=date.today(), key="date_filter")

    return name_filter, date_filter


def render_summary(view: LedgerView):
    """Render totals for the filtered transactions."""
    st.subheader("📊 Summary")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total Given", money(view.summary.total_given))
    with col2:
        st.metric("Total Taken", money(view.summary.total_taken))
    with col3:
        st.metric("Balance", money(view.summary.balance))


def render_transactions(view: LedgerView, total: int):
    """Render the filtered transaction list, newest first."""
    st.subheader("📜 Transactions")
    st.caption(f"{view.criteria.describe()} - showing {len(view.transactions)} of {total}")

    if view.is_empty:
        st.info("No transactions found")
        return

    df = pd.DataFrame([
        {
            "Name": tx.name,
            "Amount": f"{tx.amount:.2f}",
            "Type": f"{tx.kind.value} ({tx.kind.alias})",
            "Date": tx.date_str,
        }
        for tx in view.transactions
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)


def render_add_form(service: LedgerService):
    """Render the form that records a new transaction."""
    st.subheader("➕ Add Transaction")

    with st.form("add_transaction_form", clear_on_submit=False):
        col1, col2, col3 = st.columns([3, 2, 2])

        with col1:
            name = st.text_input("Customer Name", key="new_tx_name")
        with col2:
            amount = st.text_input("Amount", key="new_tx_amount")
        with col3:
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                format_func=lambda k: f"{k.value} ({k.alias})",
                key="new_tx_kind"
            )

        submitted = st.form_submit_button("Add", use_container_width=True)

    if submitted:
        try:
            tx = service.add_transaction(name, amount, kind)
        except ValidationError as e:
            st.warning(f"⚠️ {e}")
        except StorageError as e:
            logger.error(f"Add transaction failed: {e}")
            st.error(f"❌ Could not save transaction: {e}")
        else:
            st.success(f"✅ Recorded {tx.kind.value.lower()} of {money(tx.amount)} for {tx.name}")
            st.rerun()


def render_export(service: LedgerService, view: LedgerView):
    """Render download buttons for the filtered transactions."""
    st.subheader("📤 Export")

    col1, col2 = st.columns(2)
    for col, fmt, label in ((col1, ExportFormat.XLSX, "Export to Excel"), (col2, ExportFormat.PDF, "Export to PDF")):
        with col:
            try:
                artifact = service.export_view(view, fmt)
            except EncodingError as e:
                st.error(f"❌ {label} failed: {e}")
                continue
            st.download_button(
                label,
                data=artifact.content,
                file_name=artifact.filename,
                mime=artifact.mime_type,
                use_container_width=True,
                key=f"download_{fmt.value}"
            )


# ==================== MAIN APP ====================
def main():
    """Main application entry point."""
    st.title("📒 Customer Ledger")

    service = get_ledger_service()
    name_filter, date_filter = render_filters()

    try:
        view = service.get_view(name_filter=name_filter, date_filter=date_filter)
        total = service.count_transactions()
    except StorageError as e:
        logger.error(f"Loading transactions failed: {e}")
        st.error(f"❌ Could not load transactions: {e}")
        return

    render_summary(view)
    render_transactions(view, total)
    render_add_form(service)
    render_export(service, view)


if __name__ == "__main__":
    main()
