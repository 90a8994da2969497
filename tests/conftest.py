"""
Shared fixtures: a file-backed SQLite ledger per test.
"""

from datetime import date

import pytest

from db_engine import create_db_engine, dispose_engine, init_db
from models import Transaction, TransactionKind
from repositories import TransactionRepository
from services import LedgerService


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'transactions.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_db_engine(db_url, echo=False)
    init_db(engine)
    yield engine
    dispose_engine(engine)


@pytest.fixture
def repository(engine):
    return TransactionRepository(engine)


@pytest.fixture
def service(repository):
    return LedgerService(repository)


@pytest.fixture
def alice():
    return Transaction(name="Alice", amount=50, kind=TransactionKind.CREDIT, date=date(2024, 1, 1))


@pytest.fixture
def bob():
    return Transaction(name="Bob", amount=20, kind=TransactionKind.DEBIT, date=date(2024, 1, 2))
