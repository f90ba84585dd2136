"""Listing status updates used when a placement is confirmed."""
import logging
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import update
from sqlmodel import Session, col

from teamfinder.models import ListingKind, ListingStatus
from teamfinder.models.listing import LISTING_MODELS

logger = logging.getLogger(__name__)


class ListingStore(Protocol):
    """What the lifecycle manager needs from the listing service.

    Both mark operations are idempotent: marking a listing that is already
    in the target status, or that no longer exists, succeeds silently.
    """

    def mark_filled(self, vacancy_id: str) -> bool: ...

    def mark_inactive(self, kind: ListingKind, listing_id: str) -> bool: ...


class SqlListingStore:
    """ListingStore over the listing tables in the shared database."""

    def __init__(self, session: Session):
        self.session = session

    def mark_filled(self, vacancy_id: str) -> bool:
        return self._set_status(ListingKind.VACANCY, vacancy_id, ListingStatus.FILLED)

    def mark_inactive(self, kind: ListingKind, listing_id: str) -> bool:
        if kind is ListingKind.VACANCY:
            raise ValueError("Vacancies are closed with mark_filled")
        return self._set_status(kind, listing_id, ListingStatus.INACTIVE)

    def _set_status(
        self, kind: ListingKind, listing_id: str, status: ListingStatus
    ) -> bool:
        """Returns True if the status actually changed."""
        model = LISTING_MODELS[kind]
        statement = (
            update(model)
            .where(col(model.id) == listing_id)
            .where(col(model.status) != status)
            .values(status=status, updated_at=datetime.now(UTC))
        )
        result = self.session.connection().execute(statement)
        self.session.commit()

        if result.rowcount:
            logger.info(f"Marked {kind.value} {listing_id} as {status.value}")
            return True

        if self.session.get(model, listing_id) is None:
            logger.warning(f"{kind.value} {listing_id} not found, nothing to update")
        else:
            logger.debug(f"{kind.value} {listing_id} already {status.value}")
        return False
