"""Match completion routes for reporting, confirming and annotating placements."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from teamfinder.completions import stories
from teamfinder.completions.coordinator import ConfirmationCoordinator
from teamfinder.completions.lifecycle import ListingLifecycleManager
from teamfinder.completions.listings import SqlListingStore
from teamfinder.completions.store import CompletionStore
from teamfinder.core.auth import get_actor
from teamfinder.core.database import get_session
from teamfinder.models import (
    Actor,
    CompletionCreate,
    CompletionRead,
    CompletionSummary,
    ConfirmResult,
    StoryUpdate,
)

router = APIRouter(prefix="/api/match-completions", tags=["match-completions"])


def get_store(session: Session = Depends(get_session)) -> CompletionStore:
    return CompletionStore(session)


def get_coordinator(session: Session = Depends(get_session)) -> ConfirmationCoordinator:
    """Dependency wiring the coordinator to the request's session."""
    lifecycle = ListingLifecycleManager(SqlListingStore(session))
    return ConfirmationCoordinator(CompletionStore(session), lifecycle)


@router.post("", response_model=CompletionRead, status_code=201)
async def create_completion(
    data: CompletionCreate,
    actor: Actor = Depends(get_actor),
    coordinator: ConfirmationCoordinator = Depends(get_coordinator),
):
    """
    Report a completed placement.

    The caller must be one of the two roles the match type requires
    (coach or player for player_to_team, coach or parent for
    child_to_team). Their confirmation is recorded immediately; the record
    stays pending until the other party confirms. Returns 403 for an
    ineligible role and 400 for invalid fields.
    """
    return coordinator.create_completion(data, actor)


@router.get("", response_model=list[CompletionRead])
async def my_completions(
    actor: Actor = Depends(get_actor),
    store: CompletionStore = Depends(get_store),
):
    """List completions the caller participates in, newest first."""
    return stories.list_for_participant(store, actor)


@router.get("/summary", response_model=CompletionSummary)
async def my_summary(
    actor: Actor = Depends(get_actor),
    store: CompletionStore = Depends(get_store),
):
    """
    Dashboard counters for the caller.

    Includes how many pending records are waiting on the caller's own
    confirmation and the average rating across their confirmed matches.
    """
    return stories.completion_summary(store, actor)


@router.get("/{completion_id}", response_model=CompletionRead)
async def completion_detail(
    completion_id: UUID,
    actor: Actor = Depends(get_actor),
    store: CompletionStore = Depends(get_store),
):
    """Show a single completion to one of its participants."""
    return stories.get_completion(store, completion_id, actor)


@router.put("/{completion_id}/confirm", response_model=ConfirmResult)
async def confirm_completion(
    completion_id: UUID,
    actor: Actor = Depends(get_actor),
    coordinator: ConfirmationCoordinator = Depends(get_coordinator),
):
    """
    Confirm a reported placement as the counterpart.

    Once every required role has confirmed, the record becomes confirmed
    and the linked listing is closed. Returns 409 if the caller's role has
    already confirmed, 403 if the caller is not the record's participant
    for that role.
    """
    return coordinator.confirm_completion(completion_id, actor)


@router.put("/{completion_id}/story", response_model=CompletionRead)
async def update_story(
    completion_id: UUID,
    fields: StoryUpdate,
    actor: Actor = Depends(get_actor),
    store: CompletionStore = Depends(get_store),
):
    """
    Add or edit the success story, rating and feedback.

    Only allowed once the record is confirmed (409 before that). Fields
    left out of the body are not changed.
    """
    return stories.add_story(store, completion_id, actor, fields)
