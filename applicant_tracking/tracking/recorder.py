"""Application recorder: validates and stores one application per submission.

Submission flow:
  1. Validate payload (motivation, resume type/size) -- no I/O yet
  2. Opportunity must exist and be active
  3. Insert the Application row (the source of truth)
  4. Best-effort counter increment; failures are logged, never rolled back
"""

import logging

from applicant_tracking.core.config import ResumeConfig
from applicant_tracking.core.errors import NotFoundError, StorageError, ValidationError
from applicant_tracking.core.schemas import Application, ApplicationPayload, Submission
from applicant_tracking.stores.base import RecordStore
from applicant_tracking.tracking.counter import ApplicantCounter
from applicant_tracking.tracking.resume import validate_resume

logger = logging.getLogger(__name__)


def validate_payload(payload: ApplicationPayload, resume_config: ResumeConfig) -> None:
    """Raise ValidationError naming the first offending field."""
    if not payload.motivation.strip():
        raise ValidationError("motivation", "please tell the team why you are applying")
    if payload.resume:
        validate_resume(payload.resume, resume_config)


class ApplicationRecorder:
    """Persists applications and nudges the applicant counter."""

    def __init__(
        self,
        store: RecordStore,
        resume_config: ResumeConfig | None = None,
        counter: ApplicantCounter | None = None,
    ) -> None:
        self._store = store
        self._resume_config = resume_config or ResumeConfig()
        self._counter = counter or ApplicantCounter(store)

    def submit(self, opportunity_id: str, payload: ApplicationPayload) -> Submission:
        """Record a new application against an opportunity.

        Raises:
            ValidationError: Bad payload. Nothing was written.
            NotFoundError: Opportunity missing or inactive. Nothing was written.
            StorageError: The insert did not commit. Safe to retry.
        """
        validate_payload(payload, self._resume_config)

        opp = self._store.get_opportunity(opportunity_id)
        if opp is None or not opp.is_active:
            raise NotFoundError(opportunity_id)

        application = Application(
            opportunity_id=opportunity_id,
            motivation=payload.motivation.strip(),
            resume=payload.resume or None,
            applicant_id=payload.applicant_id,
        )
        self._store.insert_application(application)
        logger.info(
            "Recorded application %s for opportunity %s", application.id, opportunity_id,
        )

        return Submission(
            application=application,
            count_updated=self._bump_count(opportunity_id),
        )

    def _bump_count(self, opportunity_id: str) -> bool:
        # The application row is already committed; a stale count is repaired
        # by CountReconciler, so this never fails the submission.
        try:
            self._counter.increment(opportunity_id)
        except (StorageError, NotFoundError) as e:
            logger.warning(
                "Applicant count for %s not incremented, left for reconciliation: %s",
                opportunity_id, e,
            )
            return False
        return True
