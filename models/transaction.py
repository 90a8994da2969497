"""
Transaction model - a named credit or debit entry in the ledger.

Transaction is the immutable domain object handed to services, the UI and
the export encoders. TransactionRecord is the row stored in the
`transactions` table; conversion between the two lives only here.
"""

import datetime as dt
import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import SQLModel
from sqlmodel import Field as ColumnField

DATE_FORMAT = "%Y-%m-%d"


class TransactionKind(str, Enum):
    """Direction of a transaction. Values are the labels stored in the database."""
    CREDIT = "Credit"  # money taken from the customer
    DEBIT = "Debit"    # money given to the customer

    @property
    def alias(self) -> str:
        """The Take/Give wording of the same kind."""
        return "Take" if self is TransactionKind.CREDIT else "Give"

    @classmethod
    def parse(cls, value) -> "TransactionKind":
        """
        Parse a kind from an enum member or a label in either terminology.

        Accepts "Credit"/"Take" and "Debit"/"Give", case-insensitively.

        Raises:
            ValueError: if the label is not recognised
        """
        if isinstance(value, cls):
            return value
        label = str(value).strip().lower()
        if label in ("credit", "take"):
            return cls.CREDIT
        if label in ("debit", "give"):
            return cls.DEBIT
        raise ValueError(f"Unknown transaction kind: {value!r}")


class Transaction(BaseModel):
    """A single ledger entry. Frozen: persisted records are never modified."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    kind: TransactionKind
    date: dt.date = Field(default_factory=dt.date.today)

    @field_validator('amount')
    @classmethod
    def amount_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('kind', mode='before')
    @classmethod
    def parse_kind(cls, v):
        return TransactionKind.parse(v)

    @property
    def date_str(self) -> str:
        """Date rendered as YYYY-MM-DD."""
        return self.date.strftime(DATE_FORMAT)

    def with_id(self, transaction_id: int) -> "Transaction":
        """Return a copy carrying the id assigned by the store."""
        return self.model_copy(update={'id': transaction_id})


class TransactionRecord(SQLModel, table=True):
    """Row in the `transactions` table."""
    __tablename__ = "transactions"
    # AUTOINCREMENT keeps SQLite from ever handing out a previously used id
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = ColumnField(default=None, primary_key=True)
    name: str = ColumnField(index=True)
    amount: float
    type: str  # TransactionKind value
    date: str = ColumnField(index=True)  # YYYY-MM-DD

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionRecord":
        return cls(
            id=transaction.id,
            name=transaction.name,
            amount=transaction.amount,
            type=transaction.kind.value,
            date=transaction.date_str,
        )

    def to_domain(self) -> Transaction:
        """
        Convert the row back to a domain object.

        Raises:
            ValueError: if the stored row is not a valid transaction
        """
        return Transaction(
            id=self.id,
            name=self.name,
            amount=self.amount,
            kind=TransactionKind.parse(self.type),
            date=dt.datetime.strptime(self.date, DATE_FORMAT).date(),
        )
