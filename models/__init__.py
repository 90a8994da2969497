"""
Data models for the customer ledger.
The domain model and its SQLModel table row are both exported here.
"""

from models.transaction import Transaction, TransactionKind, TransactionRecord

__all__ = [
    'Transaction',
    'TransactionKind',
    'TransactionRecord',
]
