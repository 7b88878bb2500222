"""Core data models for applicant accounting."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from applicant_tracking.core.errors import PartialFailure


def new_id() -> str:
    return str(uuid4())


class Opportunity(BaseModel):
    """A posted internship, job or research listing.

    ``applicant_count`` is a cache of the number of Application rows that
    reference this opportunity. It may drift; the reconciler repairs it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    opportunity_type: str | None = None
    location: str | None = None
    compensation_type: str | None = None
    compensation_amount: float | None = Field(default=None, ge=0)
    applicant_count: int = 0
    created_by: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Application(BaseModel):
    """A single submission against one opportunity. Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    opportunity_id: str
    motivation: str
    resume: str | None = None
    applicant_id: str | None = None
    submitted_at: datetime = Field(default_factory=datetime.now)


class ApplicationPayload(BaseModel):
    """Raw submission input, checked by the recorder before anything is written."""

    model_config = ConfigDict(frozen=True)

    motivation: str = ""
    resume: str | None = None
    applicant_id: str | None = None


class Submission(BaseModel):
    """Outcome of a successful submission.

    ``count_updated`` is False when the application was stored but the
    best-effort counter increment failed.
    """

    model_config = ConfigDict(frozen=True)

    application: Application
    count_updated: bool


class CountMismatch(BaseModel):
    """Cached vs. authoritative applicant count for one opportunity."""

    model_config = ConfigDict(frozen=True)

    opportunity_id: str
    title: str = ""
    cached_count: int
    true_count: int

    @property
    def difference(self) -> int:
        """Signed drift: positive when the cache undercounts."""
        return self.true_count - self.cached_count


class ReconcileReport(BaseModel):
    """Summary of a verify or sync run.

    ``checked`` holds every opportunity that was processed successfully,
    ``failed`` maps skipped opportunity ids to the error that stopped them.
    """

    model_config = ConfigDict(frozen=True)

    repaired: bool
    checked: list[str] = Field(default_factory=list)
    mismatches: list[CountMismatch] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    started_at: datetime
    finished_at: datetime

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        """Raise PartialFailure if any opportunity was skipped."""
        if self.failed:
            raise PartialFailure(self)


class ApplicationStats(BaseModel):
    """Application statistics for a single opportunity."""

    model_config = ConfigDict(frozen=True)

    opportunity_id: str
    cached_count: int
    total_applications: int
    latest_application_at: datetime | None = None

    @property
    def in_sync(self) -> bool:
        return self.cached_count == self.total_applications
