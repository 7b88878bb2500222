"""Tests for ApplicantCounter: increment, recount, live count, stats."""

from unittest.mock import patch

import pytest

from applicant_tracking.core.errors import NotFoundError, StorageError
from applicant_tracking.core.schemas import Application, Opportunity
from applicant_tracking.stores.sqlite import SQLiteRecordStore
from applicant_tracking.tracking.counter import ApplicantCounter


@pytest.fixture
def store(tmp_path) -> SQLiteRecordStore:  # type: ignore[no-untyped-def]
    return SQLiteRecordStore.from_path(tmp_path / "test.db")


def _seed(store: SQLiteRecordStore, cached: int = 0, applications: int = 0) -> Opportunity:
    """Insert an opportunity with a given cached count and number of applications."""
    opp = Opportunity(title="Founding Engineer", applicant_count=cached)
    store.insert_opportunity(opp)
    for i in range(applications):
        store.insert_application(Application(opportunity_id=opp.id, motivation=f"#{i}"))
    return opp


def _cached(store: SQLiteRecordStore, opportunity_id: str) -> int:
    opp = store.get_opportunity(opportunity_id)
    assert opp is not None
    return opp.applicant_count


# ---------------------------------------------------------------------------
# increment
# ---------------------------------------------------------------------------


class TestIncrement:
    def test_from_zero(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store)
        assert ApplicantCounter(store).increment(opp.id) == 1
        assert _cached(store, opp.id) == 1

    def test_n_increments_add_n(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=4)
        counter = ApplicantCounter(store)
        for _ in range(5):
            counter.increment(opp.id)
        assert _cached(store, opp.id) == 9

    def test_negative_cache_restarts_from_zero(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store)
        store.connection.execute(
            "UPDATE opportunities SET applicant_count = -3 WHERE id = ?", (opp.id,)
        )
        store.connection.commit()
        assert _cached(store, opp.id) == -3
        assert ApplicantCounter(store).increment(opp.id) == 1
        assert _cached(store, opp.id) == 1

    def test_never_below_zero(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=-1)
        counter = ApplicantCounter(store)
        results = [counter.increment(opp.id) for _ in range(4)]
        assert results == [1, 2, 3, 4]
        assert _cached(store, opp.id) == 4

    def test_does_not_query_applications(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=0, applications=3)
        with patch.object(store, "count_applications") as count:
            ApplicantCounter(store).increment(opp.id)
        count.assert_not_called()
        assert _cached(store, opp.id) == 1

    def test_missing_opportunity(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(NotFoundError):
            ApplicantCounter(store).increment("missing")

    def test_row_removed_between_read_and_write(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store)
        with patch.object(store, "update_applicant_count", return_value=False):
            with pytest.raises(NotFoundError):
                ApplicantCounter(store).increment(opp.id)

    def test_storage_error_propagates(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store)
        with patch.object(store, "update_applicant_count", side_effect=StorageError("locked")):
            with pytest.raises(StorageError):
                ApplicantCounter(store).increment(opp.id)
        assert _cached(store, opp.id) == 0


# ---------------------------------------------------------------------------
# recount
# ---------------------------------------------------------------------------


class TestRecount:
    def test_fixes_undercount(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=1, applications=3)
        assert ApplicantCounter(store).recount(opp.id) == 3
        assert _cached(store, opp.id) == 3

    def test_fixes_overcount(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=10, applications=2)
        assert ApplicantCounter(store).recount(opp.id) == 2
        assert _cached(store, opp.id) == 2

    def test_missing_opportunity_mutates_nothing(self, store: SQLiteRecordStore) -> None:
        other = _seed(store, cached=7)
        with patch.object(store, "update_applicant_count") as update:
            with pytest.raises(NotFoundError):
                ApplicantCounter(store).recount("missing")
        update.assert_not_called()
        assert _cached(store, other.id) == 7


# ---------------------------------------------------------------------------
# live_count / stats
# ---------------------------------------------------------------------------


class TestLiveCountAndStats:
    def test_live_count_ignores_cache(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=9, applications=2)
        assert ApplicantCounter(store).live_count(opp.id) == 2
        assert _cached(store, opp.id) == 9

    def test_live_count_missing(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(NotFoundError):
            ApplicantCounter(store).live_count("missing")

    def test_stats(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store, cached=1, applications=2)
        stats = ApplicantCounter(store).stats(opp.id)
        assert stats.cached_count == 1
        assert stats.total_applications == 2
        assert stats.latest_application_at is not None
        assert stats.in_sync is False

    def test_stats_no_applications(self, store: SQLiteRecordStore) -> None:
        opp = _seed(store)
        stats = ApplicantCounter(store).stats(opp.id)
        assert stats.total_applications == 0
        assert stats.latest_application_at is None
        assert stats.in_sync is True
