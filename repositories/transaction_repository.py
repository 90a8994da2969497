"""
Transaction Repository - data access layer for the `transactions` table.
Append-only: records are inserted and read back, never updated or deleted.
"""

import logging
import threading
from typing import Optional, List
from datetime import date

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from exceptions import StorageError, ValidationError
from models import Transaction, TransactionRecord

logger = logging.getLogger(__name__)


class TransactionRepository:
    """
    Repository for Transaction persistence.

    Constructed with an engine owned by the application. A single lock
    serializes inserts and fetches so no read sees a half-written insert.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._lock = threading.Lock()

    def insert(self, transaction: Transaction) -> int:
        """
        Persist a new transaction.

        Args:
            transaction: Transaction without an id

        Returns:
            The id assigned by the database

        Raises:
            ValidationError: if the transaction already carries an id
            StorageError: if the database rejects the write
        """
        if transaction.id is not None:
            raise ValidationError(f"Transaction already persisted with id {transaction.id}")

        record = TransactionRecord.from_domain(transaction)
        with self._lock, Session(self._engine) as session:
            try:
                session.add(record)
                session.commit()
                session.refresh(record)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to insert transaction for {transaction.name!r}: {e}")
                raise StorageError(f"Could not save transaction: {e}") from e

        logger.info(f"Inserted transaction {record.id} ({record.type} {record.amount:.2f})")
        return record.id

    def fetch_all(
        self,
        name_filter: Optional[str] = None,
        date_filter: Optional[date] = None
    ) -> List[Transaction]:
        """
        Retrieve transactions, newest first.

        Args:
            name_filter: Case-insensitive substring of the name; empty or None matches all
            date_filter: Exact calendar date; None matches all

        Returns:
            Matching transactions ordered by id descending

        Raises:
            StorageError: if the query fails or a stored row is corrupt
        """
        statement = select(TransactionRecord)
        if name_filter:
            # casefold() is registered on every connection by db_engine
            statement = statement.where(
                func.instr(func.casefold(TransactionRecord.name), name_filter.casefold()) > 0
            )
        if date_filter is not None:
            statement = statement.where(TransactionRecord.date == date_filter.isoformat())
        statement = statement.order_by(TransactionRecord.id.desc())

        with self._lock, Session(self._engine) as session:
            try:
                records = session.exec(statement).all()
            except SQLAlchemyError as e:
                logger.error(f"Failed to fetch transactions: {e}")
                raise StorageError(f"Could not load transactions: {e}") from e
            return [self._to_domain(record) for record in records]

    def count(self) -> int:
        """Number of stored transactions."""
        with self._lock, Session(self._engine) as session:
            try:
                return session.exec(select(func.count()).select_from(TransactionRecord)).one()
            except SQLAlchemyError as e:
                logger.error(f"Failed to count transactions: {e}")
                raise StorageError(f"Could not count transactions: {e}") from e

    @staticmethod
    def _to_domain(record: TransactionRecord) -> Transaction:
        try:
            return record.to_domain()
        except ValueError as e:
            logger.error(f"Corrupt transaction row {record.id}: {e}")
            raise StorageError(f"Stored transaction {record.id} is invalid: {e}") from e
