"""
Repositories package for the customer ledger.
Provides the data access layer for all database operations.
"""

from repositories.transaction_repository import TransactionRepository

__all__ = [
    'TransactionRepository',
]
