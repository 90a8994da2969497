"""
Tests for TransactionRepository against a real SQLite file.
"""

import pytest
from datetime import date

from sqlalchemy import text

from db_engine import create_db_engine, dispose_engine, init_db
from exceptions import StorageError, ValidationError
from models import Transaction, TransactionKind
from repositories import TransactionRepository


def make_tx(name, amount=10, kind=TransactionKind.CREDIT, on=date(2024, 1, 1)):
    return Transaction(name=name, amount=amount, kind=kind, date=on)


class TestInsert:
    """Tests for insert()."""

    def test_insert_assigns_id_and_preserves_fields(self, repository, alice):
        tx_id = repository.insert(alice)

        stored = repository.fetch_all()
        assert len(stored) == 1
        assert stored[0] == alice.with_id(tx_id)

    def test_ids_strictly_increase(self, repository):
        ids = [repository.insert(make_tx(f"Customer {i}")) for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_rejects_persisted_record(self, repository, alice):
        tx_id = repository.insert(alice)
        with pytest.raises(ValidationError):
            repository.insert(alice.with_id(tx_id))
        assert repository.count() == 1

    def test_ids_never_reused(self, engine, repository):
        first = repository.insert(make_tx("Alice"))
        second = repository.insert(make_tx("Bob"))
        # Rows are never deleted by the app; simulate an external delete
        with engine.begin() as conn:
            conn.execute(text("DELETE FROM transactions WHERE id = :id"), {"id": second})
        third = repository.insert(make_tx("Carol"))
        assert third > second > first

    def test_constraint_violation_raises_storage_error(self, repository):
        # model_construct skips validation, so the NOT NULL column sees None
        broken = Transaction.model_construct(
            id=None, name=None, amount=5.0, kind=TransactionKind.CREDIT, date=date(2024, 1, 1)
        )
        with pytest.raises(StorageError):
            repository.insert(broken)
        assert repository.count() == 0

    def test_survives_restart(self, db_url, repository, alice, bob):
        repository.insert(alice)
        repository.insert(bob)

        engine = create_db_engine(db_url, echo=False)
        init_db(engine)
        try:
            reopened = TransactionRepository(engine)
            assert [tx.name for tx in reopened.fetch_all()] == ["Bob", "Alice"]
        finally:
            dispose_engine(engine)


class TestFetchAll:
    """Tests for fetch_all() filtering and ordering."""

    @pytest.fixture
    def populated(self, repository):
        repository.insert(make_tx("Alice", 50, TransactionKind.CREDIT, date(2024, 1, 1)))
        repository.insert(make_tx("Bob", 20, TransactionKind.DEBIT, date(2024, 1, 2)))
        repository.insert(make_tx("alan", 5, TransactionKind.DEBIT, date(2024, 1, 2)))
        repository.insert(make_tx("Carol", 7, TransactionKind.CREDIT, date(2024, 1, 1)))
        return repository

    def test_no_filters_returns_all_newest_first(self, populated):
        result = populated.fetch_all()
        assert [tx.name for tx in result] == ["Carol", "alan", "Bob", "Alice"]
        assert [tx.id for tx in result] == sorted((tx.id for tx in result), reverse=True)

    def test_name_filter_is_case_insensitive_substring(self, populated):
        result = populated.fetch_all(name_filter="A")
        assert [tx.name for tx in result] == ["Carol", "alan", "Alice"]

    def test_empty_name_filter_matches_all(self, populated):
        assert len(populated.fetch_all(name_filter="")) == 4

    def test_name_filter_treats_wildcards_literally(self, populated):
        assert populated.fetch_all(name_filter="%") == []
        assert populated.fetch_all(name_filter="_") == []

    def test_name_filter_folds_unicode_case(self, repository):
        repository.insert(make_tx("ÉMILE"))
        repository.insert(make_tx("Straße"))
        assert [tx.name for tx in repository.fetch_all(name_filter="émile")] == ["ÉMILE"]
        assert [tx.name for tx in repository.fetch_all(name_filter="STRASSE")] == ["Straße"]

    def test_date_filter_exact_match(self, populated):
        result = populated.fetch_all(date_filter=date(2024, 1, 2))
        assert [tx.name for tx in result] == ["alan", "Bob"]

    def test_filters_combine_with_and(self, populated):
        result = populated.fetch_all(name_filter="al", date_filter=date(2024, 1, 1))
        assert [tx.name for tx in result] == ["Alice"]

    def test_unmatched_filters_return_empty(self, populated):
        assert populated.fetch_all(name_filter="zed") == []
        assert populated.fetch_all(date_filter=date(1999, 12, 31)) == []

    def test_fetch_is_idempotent(self, populated):
        first = populated.fetch_all(name_filter="a", date_filter=date(2024, 1, 2))
        second = populated.fetch_all(name_filter="a", date_filter=date(2024, 1, 2))
        assert first == second

    def test_empty_store(self, repository):
        assert repository.fetch_all() == []
        assert repository.count() == 0


class TestCorruption:
    """Tests for rows the domain model cannot load."""

    def test_corrupt_row_raises_storage_error(self, engine, repository):
        with engine.begin() as conn:
            conn.execute(text(
                "INSERT INTO transactions (name, amount, type, date) "
                "VALUES ('Mallory', 10.0, 'Loan', '2024-01-01')"
            ))
        with pytest.raises(StorageError):
            repository.fetch_all()

    def test_missing_table_raises_storage_error(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'empty.db'}", echo=False)
        try:
            with pytest.raises(StorageError):
                TransactionRepository(engine).fetch_all()
        finally:
            dispose_engine(engine)


class TestInMemoryEngine:
    """The in-memory URL shares one connection across sessions."""

    def test_in_memory_round_trip(self, alice):
        engine = create_db_engine("sqlite://", echo=False)
        init_db(engine)
        try:
            repo = TransactionRepository(engine)
            tx_id = repo.insert(alice)
            assert repo.fetch_all() == [alice.with_id(tx_id)]
        finally:
            dispose_engine(engine)
