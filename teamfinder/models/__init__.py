from teamfinder.models.actor import Actor
from teamfinder.models.completion import (
    CompletionCreate,
    CompletionRead,
    CompletionStatus,
    CompletionSummary,
    ConfirmResult,
    MatchCompletion,
    MatchType,
    Role,
    StoryUpdate,
    required_confirmers,
)
from teamfinder.models.listing import (
    ChildAvailability,
    ListingKind,
    ListingStatus,
    PlayerAvailability,
    TeamVacancy,
)
from teamfinder.models.story import PublicStory, PublicStoryPage

__all__ = [
    "Actor",
    "ChildAvailability",
    "CompletionCreate",
    "CompletionRead",
    "CompletionStatus",
    "CompletionSummary",
    "ConfirmResult",
    "ListingKind",
    "ListingStatus",
    "MatchCompletion",
    "MatchType",
    "PlayerAvailability",
    "PublicStory",
    "PublicStoryPage",
    "Role",
    "StoryUpdate",
    "TeamVacancy",
    "required_confirmers",
]
