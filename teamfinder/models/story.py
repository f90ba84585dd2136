"""Public projection of confirmed success stories.

Only the descriptive snapshot and the story itself are exposed; participant
ids and private feedback stay on the completion record.
"""

from datetime import date, datetime

from sqlmodel import SQLModel


class PublicStory(SQLModel):
    player_name: str
    team_name: str
    position: str
    age_group: str
    league: str
    start_date: date | None = None
    success_story: str
    rating: int | None = None
    created_at: datetime
    completed_at: datetime


class PublicStoryPage(SQLModel):
    """One page of public stories plus the total for pagination."""
    stories: list[PublicStory]
    total: int
