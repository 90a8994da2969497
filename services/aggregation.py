"""
Filtering and aggregation of ledger transactions.
Pure functions: nothing here touches the database.
"""

from typing import Iterable, List, Optional
from datetime import date
from dataclasses import dataclass

from models import Transaction, TransactionKind


@dataclass(frozen=True)
class TransactionFilter:
    """
    Optional name/date predicates, combined with AND.
    The same semantics are applied in SQL by TransactionRepository.fetch_all.
    """
    name: Optional[str] = None  # case-insensitive substring
    on_date: Optional[date] = None  # exact calendar date

    @property
    def is_empty(self) -> bool:
        return not self.name and self.on_date is None

    def matches(self, transaction: Transaction) -> bool:
        if self.name and self.name.casefold() not in transaction.name.casefold():
            return False
        if self.on_date is not None and transaction.date != self.on_date:
            return False
        return True

    def describe(self) -> str:
        """One-line description for display, e.g. above a filtered table."""
        if self.is_empty:
            return "All transactions"
        parts = []
        if self.name:
            parts.append(f"name contains \"{self.name}\"")
        if self.on_date is not None:
            parts.append(f"dated {self.on_date.isoformat()}")
        return "Transactions where " + " and ".join(parts)


@dataclass(frozen=True)
class LedgerSummary:
    """Totals over a filtered set of transactions."""
    total_credit: float = 0.0
    total_debit: float = 0.0
    balance: float = 0.0

    @property
    def total_taken(self) -> float:
        return self.total_credit

    @property
    def total_given(self) -> float:
        return self.total_debit


@dataclass(frozen=True)
class LedgerView:
    """What the UI shows: the filtered transactions and their totals."""
    transactions: List[Transaction]
    summary: LedgerSummary
    criteria: TransactionFilter = TransactionFilter()

    @property
    def is_empty(self) -> bool:
        return not self.transactions


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: TransactionFilter
) -> List[Transaction]:
    """Return the transactions matching criteria, preserving order."""
    if criteria.is_empty:
        return list(transactions)
    return [tx for tx in transactions if criteria.matches(tx)]


def summarize(transactions: Iterable[Transaction]) -> LedgerSummary:
    """
    Compute credit, debit and balance totals.

    Callers pass the already filtered subset; totals never include
    records outside it.

    Args:
        transactions: Transactions to total

    Returns:
        LedgerSummary rounded to 2 decimal places (all zero when empty)
    """
    total_credit = 0.0
    total_debit = 0.0
    for tx in transactions:
        if tx.kind is TransactionKind.CREDIT:
            total_credit += tx.amount
        elif tx.kind is TransactionKind.DEBIT:
            total_debit += tx.amount

    return LedgerSummary(
        total_credit=round(total_credit, 2),
        total_debit=round(total_debit, 2),
        balance=round(total_credit - total_debit, 2),
    )
