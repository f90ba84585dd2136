"""Listing models for vacancies and availability postings.

Listings are owned by the listing CRUD side of the marketplace. This
service only needs enough of each table to deactivate a listing once the
placement it advertised has been confirmed, so the models carry an id, a
title, the poster and a status.
"""

from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class ListingKind(str, Enum):
    """The three kinds of posting a completion record can point at."""
    VACANCY = "vacancy"
    PLAYER_AVAILABILITY = "player_availability"
    CHILD_AVAILABILITY = "child_availability"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    FILLED = "filled"  # vacancies only
    EXPIRED = "expired"  # vacancies only
    INACTIVE = "inactive"  # availability postings only
    PAUSED = "paused"  # child availability only


class TeamVacancy(SQLModel, table=True):
    """A team's advertised open position.

    Attributes:
        id: Identifier assigned by the listing service.
        title: Display title, usually the team name.
        posted_by: User id of the coach who posted the vacancy.
        status: One of "active", "filled" or "expired". Confirming a
            completion linked to the vacancy marks it "filled".
        updated_at: Last status change.
    """
    __tablename__ = "team_vacancies"

    id: str = Field(primary_key=True)
    title: str
    posted_by: str | None = None
    status: ListingStatus = Field(default=ListingStatus.ACTIVE)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PlayerAvailability(SQLModel, table=True):
    """A player's posting that they are looking for a team.

    Attributes:
        id: Identifier assigned by the listing service.
        title: Display title, usually the player's name.
        posted_by: User id of the player.
        status: "active" or "inactive".
        updated_at: Last status change.
    """
    __tablename__ = "player_availability"

    id: str = Field(primary_key=True)
    title: str
    posted_by: str | None = None
    status: ListingStatus = Field(default=ListingStatus.ACTIVE)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChildAvailability(SQLModel, table=True):
    """A parent's posting on behalf of a child looking for a team.

    Attributes:
        id: Identifier assigned by the listing service.
        title: Display title, usually the child's name.
        posted_by: User id of the parent or guardian.
        status: "active", "inactive" or "paused".
        updated_at: Last status change.
    """
    __tablename__ = "child_player_availability"

    id: str = Field(primary_key=True)
    title: str
    posted_by: str | None = None
    status: ListingStatus = Field(default=ListingStatus.ACTIVE)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


LISTING_MODELS: dict[ListingKind, type[SQLModel]] = {
    ListingKind.VACANCY: TeamVacancy,
    ListingKind.PLAYER_AVAILABILITY: PlayerAvailability,
    ListingKind.CHILD_AVAILABILITY: ChildAvailability,
}
