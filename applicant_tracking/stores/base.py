"""Abstract base class for record stores."""

from abc import ABC, abstractmethod
from datetime import datetime

from applicant_tracking.core.schemas import Application, Opportunity


class RecordStore(ABC):
    """Row storage for opportunities and applications.

    Implementations raise StorageError for any backend failure, including
    timeouts. They never raise NotFoundError; lookups return None and
    updates report whether a row matched.
    """

    @abstractmethod
    def insert_opportunity(self, opportunity: Opportunity) -> None:
        """Persist a new opportunity."""

    @abstractmethod
    def get_opportunity(self, opportunity_id: str) -> Opportunity | None:
        """Fetch one opportunity by id, active or not."""

    @abstractmethod
    def list_opportunities(self, active_only: bool = True) -> list[Opportunity]:
        """Return opportunities, newest first."""

    @abstractmethod
    def update_applicant_count(self, opportunity_id: str, count: int) -> bool:
        """Overwrite the cached count. Returns False if the id matched nothing."""

    @abstractmethod
    def set_active(self, opportunity_id: str, active: bool) -> bool:
        """Set the soft-delete flag. Returns False if the id matched nothing."""

    @abstractmethod
    def insert_application(self, application: Application) -> None:
        """Persist a new application."""

    @abstractmethod
    def count_applications(self, opportunity_id: str) -> int:
        """Authoritative number of applications referencing an opportunity."""

    @abstractmethod
    def list_applications(self, opportunity_id: str) -> list[Application]:
        """Applications referencing an opportunity, newest first."""

    @abstractmethod
    def latest_application_at(self, opportunity_id: str) -> datetime | None:
        """Submission time of the most recent application, if any."""

    def close(self) -> None:
        """Release backend resources. Default is a no-op."""
