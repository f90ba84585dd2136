"""Persistence for match completion records.

The two state transitions of the workflow are single guarded UPDATE
statements. Each returns whether *this* call changed a row; that row count
is the only signal a caller may use to decide it performed the transition.
"""
import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from teamfinder.models import CompletionStatus, ListingStatus, MatchCompletion, Role
from teamfinder.models.completion import (
    CONFIRMATION_FLAGS,
    LISTING_FIELDS,
    PARTICIPANT_FIELDS,
)
from teamfinder.models.listing import LISTING_MODELS

logger = logging.getLogger(__name__)


class CompletionStore:
    """Completion records backed by a SQLModel session.

    Every write commits immediately so the guarded updates are durable
    before the caller acts on their result.
    """

    def __init__(self, session: Session):
        self.session = session

    def add(self, record: MatchCompletion) -> MatchCompletion:
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def get(self, completion_id: UUID) -> MatchCompletion | None:
        record = self.session.get(MatchCompletion, completion_id)
        if record is not None:
            # Other sessions may have changed the row since it was loaded
            self.session.refresh(record)
        return record

    def claim_confirmation(
        self, completion_id: UUID, role: Role, actor_id: str
    ) -> bool:
        """
        Set the role's confirmation flag if it is still false.

        Binds the role's participant id to ``actor_id`` when it was null.
        The update only matches while the flag is false and the participant
        is unset or already ``actor_id``, and while no other role of the
        record is held by ``actor_id``. Of any number of concurrent callers
        at most one gets True.
        """
        flag = getattr(MatchCompletion, CONFIRMATION_FLAGS[role])
        participant = getattr(MatchCompletion, PARTICIPANT_FIELDS[role])
        statement = (
            update(MatchCompletion)
            .where(col(MatchCompletion.id) == completion_id)
            .where(flag == False)  # noqa: E712
            .where(or_(participant.is_(None), participant == actor_id))
        )
        for other in Role:
            if other is role:
                continue
            other_participant = getattr(MatchCompletion, PARTICIPANT_FIELDS[other])
            statement = statement.where(
                or_(other_participant.is_(None), other_participant != actor_id)
            )
        statement = statement.values(
            {
                CONFIRMATION_FLAGS[role]: True,
                PARTICIPANT_FIELDS[role]: actor_id,
                "updated_at": datetime.now(UTC),
            }
        )
        return self._execute_guarded(statement)

    def mark_confirmed(self, completion_id: UUID, required: frozenset[Role]) -> bool:
        """
        Move a pending record to confirmed if every required flag is set.

        Stamps ``completed_at``. Returns True only for the single caller
        whose update took effect.
        """
        now = datetime.now(UTC)
        statement = (
            update(MatchCompletion)
            .where(col(MatchCompletion.id) == completion_id)
            .where(col(MatchCompletion.completion_status) == CompletionStatus.PENDING)
        )
        for role in required:
            flag = getattr(MatchCompletion, CONFIRMATION_FLAGS[role])
            statement = statement.where(flag == True)  # noqa: E712
        statement = statement.values(
            completion_status=CompletionStatus.CONFIRMED,
            completed_at=now,
            updated_at=now,
        )
        return self._execute_guarded(statement)

    def save(self, record: MatchCompletion) -> MatchCompletion:
        record.updated_at = datetime.now(UTC)
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def for_participant(self, user_id: str) -> list[MatchCompletion]:
        """All records naming ``user_id`` as coach, player or parent, newest first."""
        statement = (
            select(MatchCompletion)
            .where(
                or_(
                    col(MatchCompletion.coach_id) == user_id,
                    col(MatchCompletion.player_id) == user_id,
                    col(MatchCompletion.parent_id) == user_id,
                )
            )
            .order_by(col(MatchCompletion.created_at).desc())
        )
        return list(self.session.exec(statement).all())

    def public_stories(
        self, limit: int, offset: int
    ) -> tuple[list[MatchCompletion], int]:
        """Confirmed, public records with a story, latest completion first."""
        conditions = (
            col(MatchCompletion.completion_status) == CompletionStatus.CONFIRMED,
            col(MatchCompletion.public_story) == True,  # noqa: E712
            col(MatchCompletion.success_story).is_not(None),
        )
        total = self.session.exec(
            select(func.count(col(MatchCompletion.id))).where(*conditions)
        ).one()
        statement = (
            select(MatchCompletion)
            .where(*conditions)
            .order_by(
                col(MatchCompletion.completed_at).desc(), col(MatchCompletion.id)
            )
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.exec(statement).all()), total

    def confirmed_with_active_listing(self) -> list[MatchCompletion]:
        """Confirmed records whose linked listing is still active."""
        still_active = []
        for kind, field in LISTING_FIELDS.items():
            listing = LISTING_MODELS[kind]
            still_active.append(
                select(col(listing.id))
                .where(col(listing.id) == getattr(MatchCompletion, field))
                .where(col(listing.status) == ListingStatus.ACTIVE)
                .exists()
            )
        statement = (
            select(MatchCompletion)
            .where(col(MatchCompletion.completion_status) == CompletionStatus.CONFIRMED)
            .where(or_(*still_active))
        )
        return list(self.session.exec(statement).all())

    def _execute_guarded(self, statement) -> bool:
        result = self.session.connection().execute(statement)
        self.session.commit()
        return result.rowcount == 1
