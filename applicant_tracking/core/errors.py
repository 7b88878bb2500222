"""Error taxonomy for the applicant accounting subsystem."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from applicant_tracking.core.schemas import ReconcileReport


class TrackingError(Exception):
    """Base class for all applicant accounting errors."""


class ValidationError(TrackingError, ValueError):
    """Bad input. Raised before any write happens."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(TrackingError, LookupError):
    """The referenced opportunity does not exist (or is no longer active)."""

    def __init__(self, opportunity_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Opportunity not found: {opportunity_id}")
        self.opportunity_id = opportunity_id


class StorageError(TrackingError):
    """Transient record store failure. Safe to retry."""


class PartialFailure(TrackingError):
    """A batch run finished but some opportunities could not be processed."""

    def __init__(self, report: ReconcileReport) -> None:
        failed = ", ".join(sorted(report.failed))
        super().__init__(
            f"{len(report.failed)} of {len(report.checked) + len(report.failed)} "
            f"opportunities failed: {failed}"
        )
        self.report = report
