"""Listing deactivation once a completion is confirmed."""
import logging

from sqlmodel import Session

from teamfinder.completions.listings import ListingStore, SqlListingStore
from teamfinder.completions.store import CompletionStore
from teamfinder.models import ListingKind, MatchCompletion

logger = logging.getLogger(__name__)


class ListingLifecycleManager:
    """Closes the listing a confirmed completion came from.

    The coordinator calls ``finalize`` exactly once per record, right after
    the confirmed transition commits. ``finalize`` is idempotent, so the
    reconciliation job may call it again for the same record.
    """

    def __init__(self, listings: ListingStore):
        self.listings = listings
        self._deactivate = {
            ListingKind.VACANCY: listings.mark_filled,
            ListingKind.PLAYER_AVAILABILITY: lambda listing_id: listings.mark_inactive(
                ListingKind.PLAYER_AVAILABILITY, listing_id
            ),
            ListingKind.CHILD_AVAILABILITY: lambda listing_id: listings.mark_inactive(
                ListingKind.CHILD_AVAILABILITY, listing_id
            ),
        }

    def finalize(self, record: MatchCompletion) -> bool:
        """
        Deactivate the record's linked listing.

        Returns True if a listing changed status, False if there was
        nothing to do (no linked listing, already closed, or gone).
        """
        ref = record.listing_ref()
        if ref is None:
            logger.info(f"Completion {record.id} has no linked listing")
            return False
        kind, listing_id = ref
        return self._deactivate[kind](listing_id)


def reconcile_confirmed_listings(
    session: Session, manager: ListingLifecycleManager | None = None
) -> int:
    """
    Re-apply finalize for confirmed completions whose listing is still active.

    A confirmed record with an active listing means a finalize call failed
    after the confirmed transition committed. Each one found is logged as a
    warning and repaired.

    Returns the number of listings repaired.
    """
    if manager is None:
        manager = ListingLifecycleManager(SqlListingStore(session))

    repaired = 0
    for record in CompletionStore(session).confirmed_with_active_listing():
        kind, listing_id = record.listing_ref()
        logger.warning(
            f"Completion {record.id} is confirmed but {kind.value} "
            f"{listing_id} is still active, re-applying finalize"
        )
        if manager.finalize(record):
            repaired += 1
    return repaired
