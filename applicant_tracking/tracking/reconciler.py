"""Count reconciler: finds and repairs drift in cached applicant counts.

Runs opportunity by opportunity with no global transaction. A crash mid-run
leaves the processed opportunities corrected and the rest for the next run.
A failure on one opportunity is recorded in the report and skipped.
"""

import json
import logging
from datetime import datetime

from applicant_tracking.core.errors import NotFoundError, StorageError
from applicant_tracking.core.schemas import CountMismatch, Opportunity, ReconcileReport
from applicant_tracking.stores.base import RecordStore

logger = logging.getLogger(__name__)


class CountReconciler:
    """Compares cached counts with application records and optionally repairs them.

    Usage::

        reconciler = CountReconciler(store)
        report = reconciler.verify()       # read-only
        report = reconciler.sync_all()     # fix every active opportunity
        report.raise_for_failures()
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def verify(self) -> ReconcileReport:
        """Report mismatches for every active opportunity without writing anything."""
        return self._run(repair=False)

    def sync_all(self) -> ReconcileReport:
        """Overwrite every active opportunity's cached count with the true count."""
        return self._run(repair=True)

    def resolve_one(self, opportunity_id: str) -> CountMismatch | None:
        """Repair a single opportunity.

        Returns the mismatch that was corrected, or None if the count was
        already right.

        Raises:
            NotFoundError: If the opportunity does not exist.
            StorageError: If the count or write fails.
        """
        opp = self._store.get_opportunity(opportunity_id)
        if opp is None:
            raise NotFoundError(opportunity_id)
        return self._check(opp, repair=True)

    def _run(self, repair: bool) -> ReconcileReport:
        started_at = datetime.now()
        # Listing failures abort the run; there is nothing to iterate yet.
        opportunities = self._store.list_opportunities(active_only=True)

        checked: list[str] = []
        mismatches: list[CountMismatch] = []
        failed: dict[str, str] = {}

        for opp in opportunities:
            try:
                mismatch = self._check(opp, repair=repair)
            except (StorageError, NotFoundError) as e:
                logger.warning("Skipping opportunity %s: %s", opp.id, e)
                failed[opp.id] = str(e)
                continue
            checked.append(opp.id)
            if mismatch is not None:
                mismatches.append(mismatch)

        report = ReconcileReport(
            repaired=repair,
            checked=checked,
            mismatches=mismatches,
            failed=failed,
            started_at=started_at,
            finished_at=datetime.now(),
        )
        logger.info(
            "%s: %d checked, %d mismatched, %d failed",
            "Sync" if repair else "Verify",
            len(checked), len(mismatches), len(failed),
        )
        return report

    def _check(self, opp: Opportunity, repair: bool) -> CountMismatch | None:
        true_count = self._store.count_applications(opp.id)
        if true_count == opp.applicant_count:
            return None

        mismatch = CountMismatch(
            opportunity_id=opp.id,
            title=opp.title,
            cached_count=opp.applicant_count,
            true_count=true_count,
        )
        logger.info(
            "Count mismatch for %s ('%s'): cached %d, actual %d (%+d)",
            opp.id, opp.title, mismatch.cached_count, true_count, mismatch.difference,
        )
        if repair and not self._store.update_applicant_count(opp.id, true_count):
            raise NotFoundError(opp.id)
        return mismatch


def export_report_json(report: ReconcileReport) -> str:
    """Export a reconcile report as a JSON string."""
    data = {
        "repaired": report.repaired,
        "checked": len(report.checked),
        "started_at": report.started_at.isoformat(),
        "finished_at": report.finished_at.isoformat(),
        "mismatches": [
            {
                "opportunity_id": m.opportunity_id,
                "title": m.title,
                "cached_count": m.cached_count,
                "true_count": m.true_count,
                "difference": m.difference,
            }
            for m in report.mismatches
        ],
        "failed": report.failed,
    }
    return json.dumps(data, indent=2)
