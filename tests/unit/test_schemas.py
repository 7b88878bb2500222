"""Tests for core data models and the error types that wrap them."""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from applicant_tracking.core.errors import (
    NotFoundError,
    PartialFailure,
    TrackingError,
    ValidationError,
)
from applicant_tracking.core.schemas import (
    Application,
    ApplicationStats,
    CountMismatch,
    Opportunity,
    ReconcileReport,
)


def _report(**kw: object) -> ReconcileReport:
    now = datetime.now()
    defaults: dict[str, object] = {"repaired": False, "started_at": now, "finished_at": now}
    defaults.update(kw)
    return ReconcileReport(**defaults)  # type: ignore[arg-type]


class TestOpportunity:
    def test_defaults(self) -> None:
        o = Opportunity(title="Growth Intern")
        assert o.applicant_count == 0
        assert o.is_active is True
        assert o.id
        assert o.id != Opportunity(title="Growth Intern").id

    def test_frozen(self) -> None:
        o = Opportunity(title="Growth Intern")
        with pytest.raises(PydanticValidationError):
            o.applicant_count = 3  # type: ignore[misc]

    def test_negative_stored_count_loads(self) -> None:
        """A corrupted cache must still load so the reconciler can repair it."""
        o = Opportunity(title="Growth Intern", applicant_count=-1)
        assert o.applicant_count == -1


class TestApplication:
    def test_defaults(self) -> None:
        a = Application(opportunity_id="o-1", motivation="Hello")
        assert a.resume is None
        assert a.applicant_id is None
        assert isinstance(a.submitted_at, datetime)


class TestCountMismatch:
    def test_difference_positive_when_undercounted(self) -> None:
        m = CountMismatch(opportunity_id="o", cached_count=1, true_count=3)
        assert m.difference == 2

    def test_difference_negative_when_overcounted(self) -> None:
        m = CountMismatch(opportunity_id="o", cached_count=5, true_count=3)
        assert m.difference == -2


class TestReconcileReport:
    def test_ok_without_failures(self) -> None:
        report = _report(checked=["a", "b"])
        assert report.ok is True
        report.raise_for_failures()

    def test_raise_for_failures(self) -> None:
        report = _report(checked=["a"], failed={"b": "database is locked"})
        assert report.ok is False
        with pytest.raises(PartialFailure) as exc_info:
            report.raise_for_failures()
        assert exc_info.value.report is report
        assert "1 of 2" in str(exc_info.value)
        assert "b" in str(exc_info.value)


class TestApplicationStats:
    def test_in_sync(self) -> None:
        stats = ApplicationStats(opportunity_id="o", cached_count=2, total_applications=2)
        assert stats.in_sync is True

    def test_out_of_sync(self) -> None:
        stats = ApplicationStats(opportunity_id="o", cached_count=1, total_applications=2)
        assert stats.in_sync is False


class TestErrors:
    def test_validation_error_names_field(self) -> None:
        e = ValidationError("motivation", "must not be empty")
        assert e.field == "motivation"
        assert str(e) == "motivation: must not be empty"
        assert isinstance(e, ValueError)
        assert isinstance(e, TrackingError)

    def test_not_found_error(self) -> None:
        e = NotFoundError("o-42")
        assert e.opportunity_id == "o-42"
        assert "o-42" in str(e)
        assert isinstance(e, LookupError)
