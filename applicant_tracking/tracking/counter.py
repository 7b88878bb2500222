"""Applicant counter: maintains the cached applicant_count on opportunities.

Two ways to move the cache:
  - increment: cheap, best-effort, +1 on the cached value after a submission
  - recount:   authoritative, counts Application rows and writes the result

There is no locking. Concurrent increments can race and lose updates;
CountReconciler repairs that drift.
"""

import logging

from applicant_tracking.core.errors import NotFoundError
from applicant_tracking.core.schemas import ApplicationStats, Opportunity
from applicant_tracking.stores.base import RecordStore

logger = logging.getLogger(__name__)


class ApplicantCounter:
    """Reads and writes the denormalized applicant count.

    Usage::

        counter = ApplicantCounter(store)
        counter.increment(opportunity_id)   # after a submission
        counter.recount(opportunity_id)     # when the cache is suspect
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def increment(self, opportunity_id: str) -> int:
        """Add one to the cached count and return the new value."""
        opp = self._require(opportunity_id)
        new_count = max(opp.applicant_count, 0) + 1
        self._write(opportunity_id, new_count)
        logger.debug(
            "Incremented applicant count for %s: %d -> %d",
            opportunity_id, opp.applicant_count, new_count,
        )
        return new_count

    def recount(self, opportunity_id: str) -> int:
        """Count applications, store the result as the cached count and return it."""
        opp = self._require(opportunity_id)
        true_count = self._store.count_applications(opportunity_id)
        self._write(opportunity_id, true_count)
        if true_count != opp.applicant_count:
            logger.info(
                "Recounted %s: cached %d, actual %d",
                opportunity_id, opp.applicant_count, true_count,
            )
        return true_count

    def live_count(self, opportunity_id: str) -> int:
        """Authoritative count straight from the application records. Writes nothing."""
        self._require(opportunity_id)
        return self._store.count_applications(opportunity_id)

    def stats(self, opportunity_id: str) -> ApplicationStats:
        opp = self._require(opportunity_id)
        return ApplicationStats(
            opportunity_id=opportunity_id,
            cached_count=opp.applicant_count,
            total_applications=self._store.count_applications(opportunity_id),
            latest_application_at=self._store.latest_application_at(opportunity_id),
        )

    def _require(self, opportunity_id: str) -> Opportunity:
        opp = self._store.get_opportunity(opportunity_id)
        if opp is None:
            raise NotFoundError(opportunity_id)
        return opp

    def _write(self, opportunity_id: str, count: int) -> None:
        # The row can vanish between read and write if it is removed externally.
        if not self._store.update_applicant_count(opportunity_id, count):
            raise NotFoundError(opportunity_id)
