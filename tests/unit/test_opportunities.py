"""Tests for opportunity posting, deactivation and application listing."""

from datetime import datetime, timedelta

import pytest

from applicant_tracking.core.errors import NotFoundError, ValidationError
from applicant_tracking.core.schemas import Application
from applicant_tracking.stores.sqlite import SQLiteRecordStore
from applicant_tracking.tracking.opportunities import (
    applications_for,
    deactivate_opportunity,
    post_opportunity,
)


@pytest.fixture
def store(tmp_path) -> SQLiteRecordStore:  # type: ignore[no-untyped-def]
    return SQLiteRecordStore.from_path(tmp_path / "test.db")


class TestPostOpportunity:
    def test_creates_active_with_zero_count(self, store: SQLiteRecordStore) -> None:
        opp = post_opportunity(
            store,
            "  ML Research Intern ",
            opportunity_type="research",
            location="Remote",
            compensation_type="paid",
            compensation_amount=2500.0,
            created_by="founder-1",
        )
        loaded = store.get_opportunity(opp.id)
        assert loaded == opp
        assert opp.title == "ML Research Intern"
        assert opp.applicant_count == 0
        assert opp.is_active is True

    def test_blank_optional_fields_become_none(self, store: SQLiteRecordStore) -> None:
        opp = post_opportunity(store, "Intern", location="", opportunity_type="")
        assert opp.location is None
        assert opp.opportunity_type is None

    def test_blank_title(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            post_opportunity(store, "   ")
        assert exc_info.value.field == "title"
        assert store.list_opportunities() == []

    def test_negative_compensation(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            post_opportunity(store, "Intern", compensation_amount=-1)
        assert exc_info.value.field == "compensation_amount"


class TestDeactivate:
    def test_soft_delete_keeps_row(self, store: SQLiteRecordStore) -> None:
        opp = post_opportunity(store, "Intern")
        deactivate_opportunity(store, opp.id)
        loaded = store.get_opportunity(opp.id)
        assert loaded is not None
        assert loaded.is_active is False
        assert store.list_opportunities() == []

    def test_missing(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(NotFoundError):
            deactivate_opportunity(store, "missing")


class TestApplicationsFor:
    def test_newest_first(self, store: SQLiteRecordStore) -> None:
        opp = post_opportunity(store, "Intern")
        now = datetime.now()
        older = Application(
            opportunity_id=opp.id, motivation="first", submitted_at=now - timedelta(minutes=5),
        )
        newer = Application(opportunity_id=opp.id, motivation="second", submitted_at=now)
        store.insert_application(older)
        store.insert_application(newer)
        assert [a.motivation for a in applications_for(store, opp.id)] == ["second", "first"]

    def test_missing(self, store: SQLiteRecordStore) -> None:
        with pytest.raises(NotFoundError):
            applications_for(store, "missing")
