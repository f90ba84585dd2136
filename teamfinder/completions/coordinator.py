"""Creation and two-party confirmation of match completions.

A completion is reported by one of the two roles the match type requires,
with that role's flag already set. The counterpart then confirms. The
confirmation that sets the last required flag moves the record to
confirmed and triggers listing deactivation.

Both transitions go through guarded updates in ``CompletionStore``; only
the call whose update changed the row acts on it. That keeps duplicate
clicks and concurrent requests from confirming twice or closing a listing
twice without any in-process locking.
"""
import logging
from uuid import UUID

from teamfinder.completions.lifecycle import ListingLifecycleManager
from teamfinder.completions.store import CompletionStore
from teamfinder.core import errors
from teamfinder.models import (
    Actor,
    CompletionCreate,
    ConfirmResult,
    MatchCompletion,
    MatchType,
    Role,
    required_confirmers,
)
from teamfinder.models.completion import CONFIRMATION_FLAGS, PARTICIPANT_FIELDS

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ("player_name", "team_name", "position", "age_group", "league")

# Participant and listing columns each match type may populate
_ALLOWED_PARTICIPANTS = {
    MatchType.PLAYER_TO_TEAM: {"coach_id", "player_id"},
    MatchType.CHILD_TO_TEAM: {"coach_id", "parent_id"},
}
_ALLOWED_LISTINGS = {
    MatchType.PLAYER_TO_TEAM: {"vacancy_id", "availability_id"},
    MatchType.CHILD_TO_TEAM: {"vacancy_id", "child_availability_id"},
}


class ConfirmationCoordinator:
    """Owns the pending -> confirmed state machine for completion records."""

    def __init__(self, store: CompletionStore, lifecycle: ListingLifecycleManager):
        self.store = store
        self.lifecycle = lifecycle

    def create_completion(self, data: CompletionCreate, actor: Actor) -> MatchCompletion:
        """
        Record a placement reported by ``actor``.

        The actor must hold one of the two required roles for the match
        type. Their participant slot is filled with their id and their flag
        starts true; the other role's flag starts false and can only be set
        by that party through ``confirm_completion``.
        """
        _validate_create(data, actor)

        values = data.model_dump()
        values[PARTICIPANT_FIELDS[actor.role]] = actor.id
        values[CONFIRMATION_FLAGS[actor.role]] = True
        for field in SNAPSHOT_FIELDS:
            values[field] = values[field].strip()

        record = self.store.add(MatchCompletion(**values))
        logger.info(
            f"Completion {record.id} ({record.match_type.value}) created by "
            f"{actor.role.value} {actor.id}"
        )
        return record

    def confirm_completion(self, completion_id: UUID, actor: Actor) -> ConfirmResult:
        """
        Record ``actor``'s confirmation and confirm the record if it was the last.

        Raises NotFoundError, AuthorizationError (wrong role, not the
        stored participant, or already holding another role in the match)
        or ConflictError (role already confirmed).
        Listing deactivation runs only in the call that moved the record
        to confirmed.
        """
        record = self.store.get(completion_id)
        if record is None:
            raise errors.NotFoundError("Match completion not found")

        required = record.required_confirmers()
        if actor.role not in required:
            raise errors.AuthorizationError(
                f"{actor.role.value} cannot confirm a {record.match_type.value} match"
            )

        bound_id = record.participant_id(actor.role)
        if bound_id is not None and bound_id != actor.id:
            raise errors.AuthorizationError("You are not a participant in this match")
        if actor.id in record.participant_ids() and bound_id != actor.id:
            raise errors.AuthorizationError(
                "You already take part in this match under another role"
            )

        if not self.store.claim_confirmation(completion_id, actor.role, actor.id):
            # Nothing changed; work out why for the caller
            record = self.store.get(completion_id)
            if record.participant_id(actor.role) != actor.id:
                raise errors.AuthorizationError("You are not a participant in this match")
            raise errors.ConflictError("already confirmed")

        logger.info(
            f"Completion {completion_id} confirmed by {actor.role.value} {actor.id}"
        )

        record = self.store.get(completion_id)
        all_confirmed = record.all_confirmed()
        if all_confirmed and self.store.mark_confirmed(completion_id, required):
            record = self.store.get(completion_id)
            logger.info(f"Completion {completion_id} is now confirmed by all parties")
            self.lifecycle.finalize(record)

        return ConfirmResult(
            completion_status=record.completion_status,
            all_confirmed=all_confirmed,
        )


def _validate_create(data: CompletionCreate, actor: Actor) -> None:
    required = required_confirmers(data.match_type)
    if actor.role not in required:
        raise errors.RoleNotEligibleError(
            f"{actor.role.value} cannot report a {data.match_type.value} match"
        )

    missing = [f for f in SNAPSHOT_FIELDS if not getattr(data, f).strip()]
    if missing:
        raise errors.ValidationError(f"Missing required fields: {', '.join(missing)}")

    listing_fields = [
        f
        for f in ("vacancy_id", "availability_id", "child_availability_id")
        if getattr(data, f) is not None
    ]
    if len(listing_fields) > 1:
        raise errors.ValidationError("At most one linked listing may be given")
    for field in listing_fields:
        if field not in _ALLOWED_LISTINGS[data.match_type]:
            raise errors.ValidationError(
                f"{field} is not valid for a {data.match_type.value} match"
            )

    for role in Role:
        field = PARTICIPANT_FIELDS[role]
        value = getattr(data, field)
        if value is None:
            continue
        if field not in _ALLOWED_PARTICIPANTS[data.match_type]:
            raise errors.ValidationError(
                f"{field} is not valid for a {data.match_type.value} match"
            )
        if role is actor.role and value != actor.id:
            raise errors.ValidationError(f"{field} must be your own id")
        if role is not actor.role and value == actor.id:
            raise errors.ValidationError(
                f"{field} must name the other party, not yourself"
            )
