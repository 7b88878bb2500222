"""Opportunity posting, soft deletion and application listing."""

import logging

from applicant_tracking.core.errors import NotFoundError, ValidationError
from applicant_tracking.core.schemas import Application, Opportunity
from applicant_tracking.stores.base import RecordStore

logger = logging.getLogger(__name__)


def post_opportunity(
    store: RecordStore,
    title: str,
    *,
    description: str = "",
    opportunity_type: str | None = None,
    location: str | None = None,
    compensation_type: str | None = None,
    compensation_amount: float | None = None,
    created_by: str | None = None,
) -> Opportunity:
    """Create a new active opportunity with an applicant count of zero."""
    if not title.strip():
        raise ValidationError("title", "must not be empty")
    if compensation_amount is not None and compensation_amount < 0:
        raise ValidationError("compensation_amount", "must not be negative")

    opp = Opportunity(
        title=title.strip(),
        description=description.strip(),
        opportunity_type=opportunity_type or None,
        location=location or None,
        compensation_type=compensation_type or None,
        compensation_amount=compensation_amount,
        created_by=created_by,
    )
    store.insert_opportunity(opp)
    logger.info("Posted opportunity %s ('%s')", opp.id, opp.title)
    return opp


def deactivate_opportunity(store: RecordStore, opportunity_id: str) -> None:
    """Soft-delete an opportunity. Its applications are kept."""
    if not store.set_active(opportunity_id, False):
        raise NotFoundError(opportunity_id)
    logger.info("Deactivated opportunity %s", opportunity_id)


def applications_for(store: RecordStore, opportunity_id: str) -> list[Application]:
    """Applications submitted to an opportunity, newest first."""
    if store.get_opportunity(opportunity_id) is None:
        raise NotFoundError(opportunity_id)
    return store.list_applications(opportunity_id)
