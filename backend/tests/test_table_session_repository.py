"""
Tests for the table session repository (persistence gateway).
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ordering_api.models import Base, TableSessionRecord
from ordering_api.repositories.table_session import SessionFilters, TableSessionRepository
from ordering_api.services.domain.order_merge import merge_submission, new_session
from ordering_api.services.domain.receipts import issue_receipt, mark_paid
from shared.infrastructure.db import atomic_commit
from shared.utils.exceptions import ConcurrencyError
from factories import make_item, make_wings


def persist(db, session):
    """Insert a new aggregate and return the reloaded one."""
    repo = TableSessionRepository(db)
    record = repo.add(session)
    atomic_commit(db, "test")
    return repo.to_aggregate(repo.find_by_id(record.id))


class TestMapping:
    """Round trip between the aggregate and its rows."""

    def test_add_and_reload(self, db_session):
        session, _ = merge_submission(new_session(2), [make_wings(), make_item("Fries", 5900, 2)])

        loaded = persist(db_session, session)

        assert loaded.id is not None
        assert loaded.version == 1
        assert loaded.table_number == 2
        assert [line.name for line in loaded.lines] == ["Unliwings", "Fries"]
        assert all(line.id is not None for line in loaded.lines)
        assert loaded.promotional_line.selected_flavors == ["BBQ", "Garlic"]
        assert loaded.submissions[0].submission_number == 1
        assert loaded.submissions[0].items[1].quantity == 2
        assert loaded.grand_total_cents == session.grand_total_cents
        assert loaded.created_at.tzinfo is not None

    def test_apply_updates_lines_and_appends_submissions(self, db_session):
        repo = TableSessionRepository(db_session)
        first, _ = merge_submission(new_session(2), [make_wings(), make_item("Fries")])
        loaded = persist(db_session, first)

        record = repo.find_open_by_table(2)
        updated, _ = merge_submission(
            repo.to_aggregate(record), [make_wings(("Teriyaki",)), make_item("Fries", quantity=2)]
        )
        repo.apply(record, updated)
        atomic_commit(db_session, "test")

        reloaded = repo.to_aggregate(repo.find_by_id(loaded.id))
        assert len(reloaded.lines) == 2
        assert reloaded.promotional_line.flavor_history == [["BBQ", "Garlic"]]
        assert reloaded.promotional_line.sequence_number == 2
        assert next(l for l in reloaded.lines if l.name == "Fries").quantity == 3
        assert [s.submission_number for s in reloaded.submissions] == [1, 2]
        assert reloaded.version == 2


class TestLookups:
    """Tests for the query methods."""

    def test_find_open_by_table_ignores_paid(self, db_session):
        session, _ = merge_submission(new_session(1), [make_item()])
        session = mark_paid(issue_receipt(session, "R000000001"))
        persist(db_session, session)

        repo = TableSessionRepository(db_session)
        assert repo.find_open_by_table(1) is None
        assert repo.find_last_paid_by_table(1).receipt_number == "R000000001"

    def test_filters(self, db_session):
        open_one, _ = merge_submission(new_session(1), [make_item()])
        awaiting, _ = merge_submission(new_session(2), [make_item()])
        awaiting = issue_receipt(awaiting, "R000000002")
        paid, _ = merge_submission(new_session(3), [make_item()])
        paid = mark_paid(issue_receipt(paid, "R000000003"))
        for session in (open_one, awaiting, paid):
            persist(db_session, session)

        repo = TableSessionRepository(db_session)

        assert {r.table_number for r in repo.find_all(SessionFilters(is_paid=False))} == {1, 2}
        assert [r.table_number for r in repo.find_all(SessionFilters(awaiting_payment=True))] == [2]
        assert [r.table_number for r in repo.find_all(SessionFilters(table_number=3))] == [3]
        assert repo.count(SessionFilters(is_paid=True)) == 1
        assert repo.count() == 3


class TestConstraints:
    """Tests for the uniqueness and CHECK guarantees."""

    def test_second_open_session_for_table_rejected(self, db_session):
        first, _ = merge_submission(new_session(4), [make_item()])
        persist(db_session, first)

        second, _ = merge_submission(new_session(4), [make_item("Rice")])
        TableSessionRepository(db_session).add(second)

        with pytest.raises(ConcurrencyError):
            atomic_commit(db_session, "create")

    def test_new_session_allowed_after_payment(self, db_session):
        first, _ = merge_submission(new_session(4), [make_item()])
        persist(db_session, mark_paid(issue_receipt(first, "R000000004")))

        second, _ = merge_submission(new_session(4), [make_item("Rice")])
        loaded = persist(db_session, second)

        assert loaded.is_paid is False

    def test_receipt_number_is_unique(self, db_session):
        one, _ = merge_submission(new_session(1), [make_item()])
        two, _ = merge_submission(new_session(2), [make_item()])
        persist(db_session, issue_receipt(one, "R000000009"))

        TableSessionRepository(db_session).add(issue_receipt(two, "R000000009"))

        with pytest.raises(ConcurrencyError) as exc_info:
            atomic_commit(db_session, "issue_receipt")
        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_check_violation_is_not_a_concurrency_error(self, db_session):
        """A CHECK failure is a bug, not a lost race: it must not be retried."""
        session, _ = merge_submission(new_session(3), [make_item()])
        session.lines[0].quantity = 0
        TableSessionRepository(db_session).add(session)

        with pytest.raises(IntegrityError):
            atomic_commit(db_session, "create")
        assert TableSessionRepository(db_session).find_open_by_table(3) is None


class TestOptimisticConcurrency:
    """Two writers on the same row: the second one loses."""

    @pytest.fixture
    def file_engine(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'ordering.db'}",
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(bind=engine)
        yield engine
        engine.dispose()

    def test_stale_write_raises_concurrency_error(self, file_engine):
        Session = sessionmaker(bind=file_engine, autoflush=False)

        with Session() as setup:
            session, _ = merge_submission(new_session(2), [make_item()])
            persist(setup, session)

        with Session() as db_a, Session() as db_b:
            repo_a = TableSessionRepository(db_a)
            repo_b = TableSessionRepository(db_b)
            record_a = repo_a.find_open_by_table(2)
            record_b = repo_b.find_open_by_table(2)

            updated_a, _ = merge_submission(repo_a.to_aggregate(record_a), [make_item("Rice")])
            updated_b, _ = merge_submission(repo_b.to_aggregate(record_b), [make_item("Soda")])

            repo_a.apply(record_a, updated_a)
            atomic_commit(db_a, "writer_a")

            repo_b.apply(record_b, updated_b)
            with pytest.raises(ConcurrencyError):
                atomic_commit(db_b, "writer_b")

        with Session() as check:
            record = check.query(TableSessionRecord).one()
            assert record.version == 2
            assert [s.submission_number for s in record.submissions] == [1, 2]
            assert [item.name for item in record.submissions[1].items] == ["Rice"]
