"""Match completion model: the jointly confirmed record of a placement.

This module defines the MatchCompletion table and its API schemas. A
completion is created by one party to a placement (a coach, a player, or a
parent acting for a child) and becomes confirmed once the counterpart
agrees. Confirmed records are a permanent audit trail: they are never
deleted, and only the success story fields change after confirmation.

Which two roles must confirm is fixed by the match type::

    player_to_team -> {Coach, Player}
    child_to_team  -> {Coach, Parent/Guardian}

Each role owns one boolean flag column and one participant id column. The
lookup tables below are keyed by ``Role`` and cover every member, so
services never pick a column by string.
"""

from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import StrictInt
from sqlmodel import Field, SQLModel

from teamfinder.models.listing import ListingKind


class MatchType(str, Enum):
    PLAYER_TO_TEAM = "player_to_team"
    CHILD_TO_TEAM = "child_to_team"


class CompletionStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class Role(str, Enum):
    COACH = "Coach"
    PLAYER = "Player"
    PARENT = "Parent/Guardian"


REQUIRED_CONFIRMERS: dict[MatchType, frozenset[Role]] = {
    MatchType.PLAYER_TO_TEAM: frozenset({Role.COACH, Role.PLAYER}),
    MatchType.CHILD_TO_TEAM: frozenset({Role.COACH, Role.PARENT}),
}

CONFIRMATION_FLAGS: dict[Role, str] = {
    Role.COACH: "coach_confirmed",
    Role.PLAYER: "player_confirmed",
    Role.PARENT: "parent_confirmed",
}

PARTICIPANT_FIELDS: dict[Role, str] = {
    Role.COACH: "coach_id",
    Role.PLAYER: "player_id",
    Role.PARENT: "parent_id",
}

LISTING_FIELDS: dict[ListingKind, str] = {
    ListingKind.VACANCY: "vacancy_id",
    ListingKind.PLAYER_AVAILABILITY: "availability_id",
    ListingKind.CHILD_AVAILABILITY: "child_availability_id",
}


def required_confirmers(match_type: MatchType) -> frozenset[Role]:
    """Roles whose confirmation moves a record of this type to confirmed."""
    return REQUIRED_CONFIRMERS[match_type]


class CompletionSnapshot(SQLModel):
    """Descriptive fields copied from the listing when the record is created.

    These are a snapshot, not a live join: later edits to the listing or
    the user profiles do not change a completion record.
    """
    player_name: str
    team_name: str
    position: str
    age_group: str
    league: str
    start_date: date | None = None


class MatchCompletion(CompletionSnapshot, table=True):
    """A placement outcome awaiting or holding confirmation from both parties.

    Attributes:
        id: Unique identifier (UUID).
        match_type: "player_to_team" or "child_to_team". Determines the
            required confirmers.
        vacancy_id: Linked team vacancy, if the match came from one.
        availability_id: Linked player availability posting.
        child_availability_id: Linked child availability posting. At most
            one of the three listing references is set.
        coach_id: Coach participant.
        player_id: Player participant (player_to_team only).
        parent_id: Parent or guardian participant (child_to_team only).
            A null participant id is bound by that role's first confirmation
            and never changes afterwards.
        coach_confirmed: Coach has confirmed. Flags only go false -> true.
        player_confirmed: Player has confirmed.
        parent_confirmed: Parent has confirmed.
        completion_status: "pending" until every required role confirms,
            then "confirmed" for good.
        success_story: Free text written after confirmation.
        rating: 1-5 rating written after confirmation.
        feedback: Private feedback written after confirmation.
        public_story: Whether the success story may be shown publicly.
        created_at: When the record was reported.
        updated_at: Last change of any kind.
        completed_at: When the record became confirmed.
    """
    __tablename__ = "match_completions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    match_type: MatchType

    vacancy_id: str | None = Field(default=None, index=True)
    availability_id: str | None = Field(default=None, index=True)
    child_availability_id: str | None = Field(default=None, index=True)

    coach_id: str | None = Field(default=None, index=True)
    player_id: str | None = Field(default=None, index=True)
    parent_id: str | None = Field(default=None, index=True)

    coach_confirmed: bool = Field(default=False)
    player_confirmed: bool = Field(default=False)
    parent_confirmed: bool = Field(default=False)
    completion_status: CompletionStatus = Field(
        default=CompletionStatus.PENDING, index=True
    )

    success_story: str | None = None
    rating: int | None = None
    feedback: str | None = None
    public_story: bool = Field(default=False)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = Field(default=None, index=True)

    def required_confirmers(self) -> frozenset[Role]:
        return required_confirmers(self.match_type)

    def is_confirmed_by(self, role: Role) -> bool:
        return getattr(self, CONFIRMATION_FLAGS[role])

    def all_confirmed(self) -> bool:
        """True when every required role has confirmed.

        Flags outside the required set are ignored.
        """
        return all(self.is_confirmed_by(role) for role in self.required_confirmers())

    def participant_id(self, role: Role) -> str | None:
        return getattr(self, PARTICIPANT_FIELDS[role])

    def participant_ids(self) -> set[str]:
        ids = (self.coach_id, self.player_id, self.parent_id)
        return {i for i in ids if i is not None}

    def listing_ref(self) -> tuple[ListingKind, str] | None:
        """The one linked listing, or None if the record references none."""
        for kind, field in LISTING_FIELDS.items():
            listing_id = getattr(self, field)
            if listing_id is not None:
                return kind, listing_id
        return None


class CompletionCreate(CompletionSnapshot):
    """Request body for reporting a completed placement."""
    match_type: MatchType
    vacancy_id: str | None = None
    availability_id: str | None = None
    child_availability_id: str | None = None
    coach_id: str | None = None
    player_id: str | None = None
    parent_id: str | None = None


class CompletionRead(CompletionSnapshot):
    """A completion record as returned to its participants."""
    id: UUID
    match_type: MatchType
    vacancy_id: str | None
    availability_id: str | None
    child_availability_id: str | None
    coach_id: str | None
    player_id: str | None
    parent_id: str | None
    coach_confirmed: bool
    player_confirmed: bool
    parent_confirmed: bool
    completion_status: CompletionStatus
    success_story: str | None
    rating: int | None
    feedback: str | None
    public_story: bool
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None


class ConfirmResult(SQLModel):
    completion_status: CompletionStatus
    all_confirmed: bool


class StoryUpdate(SQLModel):
    """Partial update of the post-confirmation annotation.

    Only fields present in the request are applied.
    """
    success_story: str | None = None
    rating: StrictInt | None = None
    feedback: str | None = None
    public_story: bool | None = None


class CompletionSummary(SQLModel):
    """Dashboard counters for one participant."""
    pending: int
    confirmed: int
    awaiting_my_confirmation: int
    average_rating: float | None
