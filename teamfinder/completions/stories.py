"""Success stories and participant views of completion records."""
import logging
from uuid import UUID

from teamfinder.completions.store import CompletionStore
from teamfinder.core import errors
from teamfinder.core.config import settings
from teamfinder.models import (
    Actor,
    CompletionStatus,
    CompletionSummary,
    MatchCompletion,
    PublicStory,
    PublicStoryPage,
    StoryUpdate,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def add_story(
    store: CompletionStore, completion_id: UUID, actor: Actor, fields: StoryUpdate
) -> MatchCompletion:
    """
    Attach a success story, rating or feedback to a confirmed completion.

    Only the fields present in ``fields`` are applied. Any participant of
    the record may annotate it, but only after both parties confirmed.
    """
    changes = fields.model_dump(exclude_unset=True)
    rating = changes.get("rating")
    if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
        raise errors.ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}"
        )
    if "public_story" in changes and changes["public_story"] is None:
        raise errors.ValidationError("public_story must be true or false")

    record = store.get(completion_id)
    if record is None:
        raise errors.NotFoundError("Match completion not found")
    if record.completion_status != CompletionStatus.CONFIRMED:
        raise errors.NotReadyError(
            "Stories can only be added once both parties have confirmed"
        )
    if actor.id not in record.participant_ids():
        raise errors.AuthorizationError("You are not a participant in this match")

    for key, value in changes.items():
        setattr(record, key, value)
    record = store.save(record)
    logger.info(f"Story updated on completion {completion_id} by {actor.id}")
    return record


def list_public_stories(
    store: CompletionStore, limit: int | None = None, offset: int = 0
) -> PublicStoryPage:
    """
    Page through confirmed stories their participants chose to share.

    ``limit`` defaults to ``settings.public_stories_default_limit`` and is
    capped at ``settings.public_stories_max_limit``.
    """
    if limit is None:
        limit = settings.public_stories_default_limit
    if limit < 1 or offset < 0:
        raise errors.ValidationError("limit must be positive and offset non-negative")
    limit = min(limit, settings.public_stories_max_limit)

    records, total = store.public_stories(limit, offset)
    stories = [PublicStory.model_validate(r, from_attributes=True) for r in records]
    return PublicStoryPage(stories=stories, total=total)


def list_for_participant(store: CompletionStore, actor: Actor) -> list[MatchCompletion]:
    return store.for_participant(actor.id)


def get_completion(
    store: CompletionStore, completion_id: UUID, actor: Actor
) -> MatchCompletion:
    record = store.get(completion_id)
    if record is None:
        raise errors.NotFoundError("Match completion not found")
    if actor.id not in record.participant_ids():
        raise errors.AuthorizationError("You are not a participant in this match")
    return record


def completion_summary(store: CompletionStore, actor: Actor) -> CompletionSummary:
    """
    Counters for the participant's dashboard.

    A pending record is awaiting the actor when their role is required for
    it, their flag is still false, and they hold that role's participant
    slot.
    """
    records = store.for_participant(actor.id)
    pending = [r for r in records if r.completion_status == CompletionStatus.PENDING]
    confirmed = [r for r in records if r.completion_status == CompletionStatus.CONFIRMED]

    awaiting = 0
    for record in pending:
        if actor.role not in record.required_confirmers():
            continue
        if record.is_confirmed_by(actor.role):
            continue
        if record.participant_id(actor.role) == actor.id:
            awaiting += 1

    ratings = [r.rating for r in confirmed if r.rating is not None]
    average = sum(ratings) / len(ratings) if ratings else None

    return CompletionSummary(
        pending=len(pending),
        confirmed=len(confirmed),
        awaiting_my_confirmation=awaiting,
        average_rating=average,
    )
