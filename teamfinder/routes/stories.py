"""Public success story routes."""
from fastapi import APIRouter, Depends

from teamfinder.completions import stories
from teamfinder.completions.store import CompletionStore
from teamfinder.models import PublicStoryPage
from teamfinder.routes.completions import get_store

router = APIRouter(prefix="/api/success-stories", tags=["stories"])


@router.get("", response_model=PublicStoryPage)
async def public_stories(
    limit: int | None = None,
    offset: int = 0,
    store: CompletionStore = Depends(get_store),
):
    """
    Page through publicly shared success stories.

    No authentication required. Stories are ordered by completion date,
    most recent first, and the response includes the total count for
    pagination.
    """
    return stories.list_public_stories(store, limit=limit, offset=offset)
