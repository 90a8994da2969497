"""
Ledger service - the entry points used by the presentation layer.
Validates user input, stores transactions, and builds filtered views
and export artifacts.
"""

import asyncio
import logging
import math
from datetime import date, datetime
from typing import List, Optional, Union

import pydantic

from exceptions import ValidationError
from models import Transaction, TransactionKind
from models.transaction import DATE_FORMAT
from repositories import TransactionRepository
from services.aggregation import LedgerView, TransactionFilter, summarize
from services.export import DEFAULT_TITLE, ExportArtifact, ExportFormat, build_artifact

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


def parse_amount(value: Union[str, int, float]) -> float:
    """
    Parse a user-entered amount.

    Raises:
        ValidationError: if the amount is missing, unparsable, non-finite or not positive
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError("Amount is required.")
    try:
        amount = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Amount is not a number: {value!r}") from None
    if not math.isfinite(amount):
        raise ValidationError("Amount must be a finite number.")
    if amount <= 0:
        raise ValidationError("Amount must be positive.")
    return amount


def parse_date_filter(value: DateLike) -> Optional[date]:
    """
    Normalize a date filter to a date.
    Accepts a date, YYYY-MM-DD text, or None/empty text for no filter.

    Raises:
        ValidationError: if the text is not a valid date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Invalid date {text!r}. Use YYYY-MM-DD.") from None


class LedgerService:
    """
    Service for recording and reporting customer transactions.
    The repository is injected; the service holds no other state.
    """

    def __init__(self, repository: TransactionRepository, report_title: str = DEFAULT_TITLE):
        self._repository = repository
        self._report_title = report_title

    def add_transaction(
        self,
        name: str,
        amount: Union[str, int, float],
        kind: Union[TransactionKind, str],
        on: Optional[date] = None
    ) -> Transaction:
        """
        Validate and store a new transaction.

        Args:
            name: Customer name
            amount: Positive amount, as a number or numeric text
            kind: TransactionKind or a label ("Credit"/"Take", "Debit"/"Give")
            on: Transaction date (default: today)

        Returns:
            The stored Transaction with its assigned id

        Raises:
            ValidationError: if any input is invalid; nothing is stored
            StorageError: if the database write fails
        """
        if not name or not str(name).strip():
            raise ValidationError("Name is required.")
        parsed_amount = parse_amount(amount)
        try:
            parsed_kind = TransactionKind.parse(kind)
        except ValueError as e:
            raise ValidationError(str(e)) from None

        fields = {'name': name, 'amount': parsed_amount, 'kind': parsed_kind}
        if on is not None:
            fields['date'] = on
        try:
            transaction = Transaction(**fields)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid transaction: {e}") from e

        transaction_id = self._repository.insert(transaction)
        return transaction.with_id(transaction_id)

    def count_transactions(self) -> int:
        """Number of stored transactions, ignoring filters."""
        return self._repository.count()

    def list_transactions(
        self,
        name_filter: Optional[str] = None,
        date_filter: DateLike = None
    ) -> List[Transaction]:
        """Filtered transactions, newest first."""
        return self._repository.fetch_all(
            name_filter=name_filter or None,
            date_filter=parse_date_filter(date_filter),
        )

    def get_view(
        self,
        name_filter: Optional[str] = None,
        date_filter: DateLike = None
    ) -> LedgerView:
        """
        Filtered transactions together with their totals.
        Totals cover only the filtered records.
        """
        criteria = TransactionFilter(name=name_filter or None, on_date=parse_date_filter(date_filter))
        transactions = self._repository.fetch_all(
            name_filter=criteria.name,
            date_filter=criteria.on_date,
        )
        return LedgerView(
            transactions=transactions,
            summary=summarize(transactions),
            criteria=criteria,
        )

    def export(
        self,
        fmt: Union[ExportFormat, str],
        name_filter: Optional[str] = None,
        date_filter: DateLike = None
    ) -> ExportArtifact:
        """
        Export the current filtered view.

        Raises:
            ValidationError: if fmt or date_filter is invalid
            StorageError: if the records cannot be read
            EncodingError: if the report cannot be built
        """
        export_format = self._parse_format(fmt)
        view = self.get_view(name_filter=name_filter, date_filter=date_filter)
        return self.export_view(view, export_format)

    def export_view(self, view: LedgerView, fmt: Union[ExportFormat, str]) -> ExportArtifact:
        """Encode an already fetched view."""
        export_format = self._parse_format(fmt)
        artifact = build_artifact(
            export_format,
            view.transactions,
            view.summary,
            title=self._report_title,
        )
        logger.info(f"Built {artifact.filename} with {len(view.transactions)} transactions")
        return artifact

    async def export_async(
        self,
        fmt: Union[ExportFormat, str],
        name_filter: Optional[str] = None,
        date_filter: DateLike = None
    ) -> ExportArtifact:
        """
        Like export(), but the database read and the encoding both run in a
        worker thread so the event loop is never blocked. The records are
        read before encoding starts.
        """
        export_format = self._parse_format(fmt)
        view = await asyncio.to_thread(self.get_view, name_filter, date_filter)
        return await asyncio.to_thread(self.export_view, view, export_format)

    @staticmethod
    def _parse_format(fmt: Union[ExportFormat, str]) -> ExportFormat:
        try:
            return ExportFormat(str(fmt.value if isinstance(fmt, ExportFormat) else fmt).lower())
        except ValueError:
            raise ValidationError(f"Unsupported export format: {fmt!r}") from None
