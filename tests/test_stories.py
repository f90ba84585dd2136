"""Tests for success stories and participant views."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlmodel import Session

from conftest import coach, make_create, parent, player
from teamfinder.completions import stories
from teamfinder.completions.coordinator import ConfirmationCoordinator
from teamfinder.completions.store import CompletionStore
from teamfinder.core import errors
from teamfinder.core.config import settings
from teamfinder.models import (
    CompletionStatus,
    MatchCompletion,
    MatchType,
    StoryUpdate,
)


@pytest.fixture(name="confirmed")
def confirmed_fixture(coordinator: ConfirmationCoordinator) -> MatchCompletion:
    """A child match reported by parent pa1 and confirmed by coach c2."""
    record = coordinator.create_completion(
        make_create(
            MatchType.CHILD_TO_TEAM,
            player_name="Alex Morgan",
            child_availability_id="ca1",
            parent_id="pa1",
        ),
        parent("pa1"),
    )
    coordinator.confirm_completion(record.id, coach("c2"))
    return record


def add_public_story(
    session: Session, story: str | None, completed_at: datetime | None = None, **overrides
):
    fields = {
        "match_type": MatchType.PLAYER_TO_TEAM,
        "player_name": "Sam Carter",
        "team_name": "Riverside U12 Blues",
        "position": "Midfielder",
        "age_group": "U12",
        "league": "Riverside Junior League",
        "coach_id": "c1",
        "player_id": "p1",
        "coach_confirmed": True,
        "player_confirmed": True,
        "completion_status": CompletionStatus.CONFIRMED,
        "completed_at": completed_at,
        "success_story": story,
        "public_story": True,
    }
    fields.update(overrides)
    record = MatchCompletion(**fields)
    session.add(record)
    session.commit()
    return record


class TestAddStory:
    """Tests for stories.add_story."""

    def test_pending_not_ready(self, coordinator, store: CompletionStore):
        """Test a pending record cannot be annotated."""
        record = coordinator.create_completion(make_create(), coach("c1"))
        with pytest.raises(errors.NotReadyError):
            stories.add_story(
                store, record.id, coach("c1"), StoryUpdate(success_story="Too soon")
            )

    def test_rating_out_of_range(self, store: CompletionStore, confirmed):
        """Test a rating of 6 is rejected."""
        with pytest.raises(errors.ValidationError):
            stories.add_story(store, confirmed.id, parent("pa1"), StoryUpdate(rating=6))

    def test_rating_zero_rejected(self, store: CompletionStore, confirmed):
        """Test a rating of 0 is rejected."""
        with pytest.raises(errors.ValidationError):
            stories.add_story(store, confirmed.id, parent("pa1"), StoryUpdate(rating=0))

    def test_rating_and_public(self, store: CompletionStore, confirmed):
        """Test rating 3 with public_story succeeds."""
        record = stories.add_story(
            store,
            confirmed.id,
            coach("c2"),
            StoryUpdate(rating=3, public_story=True),
        )
        assert record.rating == 3
        assert record.public_story is True

    def test_partial_update_keeps_other_fields(self, store: CompletionStore, confirmed):
        """Test fields left out of the update are untouched."""
        stories.add_story(
            store,
            confirmed.id,
            parent("pa1"),
            StoryUpdate(success_story="Great fit!", rating=5, feedback="Thanks"),
        )
        record = stories.add_story(
            store, confirmed.id, parent("pa1"), StoryUpdate(public_story=True)
        )
        assert record.success_story == "Great fit!"
        assert record.rating == 5
        assert record.feedback == "Thanks"
        assert record.public_story is True

    def test_non_participant_rejected(self, store: CompletionStore, confirmed):
        """Test someone outside the match cannot annotate it."""
        with pytest.raises(errors.AuthorizationError):
            stories.add_story(
                store, confirmed.id, coach("c9"), StoryUpdate(success_story="Hi")
            )

    def test_not_found(self, store: CompletionStore):
        """Test annotating an unknown id raises NotFoundError."""
        with pytest.raises(errors.NotFoundError):
            stories.add_story(store, uuid4(), coach(), StoryUpdate(rating=4))

    def test_public_story_null_rejected(self, store: CompletionStore, confirmed):
        """Test public_story cannot be cleared to null."""
        with pytest.raises(errors.ValidationError):
            stories.add_story(
                store, confirmed.id, parent("pa1"), StoryUpdate(public_story=None)
            )

    def test_story_does_not_change_status(self, store: CompletionStore, confirmed):
        """Test annotating leaves the confirmation state alone."""
        before = store.get(confirmed.id).completed_at
        record = stories.add_story(
            store, confirmed.id, parent("pa1"), StoryUpdate(success_story="Lovely club")
        )
        assert record.completion_status == CompletionStatus.CONFIRMED
        assert record.completed_at == before


class TestPublicStories:
    """Tests for stories.list_public_stories."""

    def test_scenario_story_becomes_public(self, store: CompletionStore, confirmed):
        """Test a confirmed parent story appears publicly once shared."""
        stories.add_story(
            store,
            confirmed.id,
            parent("pa1"),
            StoryUpdate(success_story="Great fit!", rating=5, public_story=True),
        )

        page = stories.list_public_stories(store, limit=10, offset=0)

        assert page.total == 1
        assert page.stories[0].success_story == "Great fit!"
        assert page.stories[0].player_name == "Alex Morgan"
        assert page.stories[0].rating == 5

    def test_filters(self, session: Session, store: CompletionStore):
        """Test private, story-less and pending records are excluded."""
        now = datetime.now(UTC)
        add_public_story(session, "Shown", now)
        add_public_story(session, "Private", now, public_story=False)
        add_public_story(session, None, now)
        add_public_story(
            session,
            "Pending",
            completion_status=CompletionStatus.PENDING,
            player_confirmed=False,
            completed_at=None,
        )

        page = stories.list_public_stories(store)

        assert page.total == 1
        assert [s.success_story for s in page.stories] == ["Shown"]

    def test_order_and_pagination(self, session: Session, store: CompletionStore):
        """Test newest completions come first and paging uses the total."""
        base = datetime(2025, 9, 1, tzinfo=UTC)
        for day in range(5):
            add_public_story(session, f"Story {day}", base + timedelta(days=day))

        first = stories.list_public_stories(store, limit=2, offset=0)
        second = stories.list_public_stories(store, limit=2, offset=2)

        assert first.total == 5
        assert [s.success_story for s in first.stories] == ["Story 4", "Story 3"]
        assert [s.success_story for s in second.stories] == ["Story 2", "Story 1"]

    def test_equal_completion_times_page_without_overlap(
        self, session: Session, store: CompletionStore
    ):
        """Test records sharing completed_at are split across pages exactly once."""
        same = datetime(2025, 9, 1, tzinfo=UTC)
        for i in range(6):
            add_public_story(session, f"Story {i}", same)

        seen = []
        for offset in range(0, 6, 2):
            page = stories.list_public_stories(store, limit=2, offset=offset)
            seen.extend(s.success_story for s in page.stories)

        assert sorted(seen) == [f"Story {i}" for i in range(6)]

    def test_limit_capped(self, session: Session, store: CompletionStore):
        """Test limit is capped at the configured maximum."""
        base = datetime(2025, 9, 1, tzinfo=UTC)
        for i in range(settings.public_stories_max_limit + 1):
            add_public_story(session, f"Story {i}", base + timedelta(minutes=i))

        page = stories.list_public_stories(store, limit=1000)

        assert len(page.stories) == settings.public_stories_max_limit
        assert page.total == settings.public_stories_max_limit + 1

    def test_negative_offset(self, store: CompletionStore):
        """Test a negative offset is a validation error."""
        with pytest.raises(errors.ValidationError):
            stories.list_public_stories(store, limit=10, offset=-1)


class TestParticipantViews:
    """Tests for participant listing, detail and summary."""

    def test_list_for_participant(self, coordinator, store: CompletionStore):
        """Test only the actor's records are listed, newest first."""
        first = coordinator.create_completion(make_create(), coach("c1"))
        second = coordinator.create_completion(make_create(), player("p1"))
        coordinator.create_completion(make_create(), coach("c2"))

        records = stories.list_for_participant(store, coach("c1"))
        assert [r.id for r in records] == [first.id]

        coordinator.confirm_completion(second.id, coach("c1"))
        records = stories.list_for_participant(store, coach("c1"))
        assert {r.id for r in records} == {first.id, second.id}
        assert records[0].id == second.id

    def test_get_completion_participant_only(self, coordinator, store):
        """Test non-participants cannot read a record."""
        record = coordinator.create_completion(make_create(), coach("c1"))

        assert stories.get_completion(store, record.id, coach("c1")).id == record.id
        with pytest.raises(errors.AuthorizationError):
            stories.get_completion(store, record.id, player("p7"))
        with pytest.raises(errors.NotFoundError):
            stories.get_completion(store, uuid4(), coach("c1"))

    def test_summary(self, coordinator, store: CompletionStore):
        """Test counters for pending, confirmed, awaiting and rating."""
        awaiting = coordinator.create_completion(
            make_create(coach_id="c1"), player("p1")
        )
        coordinator.create_completion(make_create(), coach("c1"))
        done = coordinator.create_completion(make_create(), coach("c1"))
        coordinator.confirm_completion(done.id, player("p2"))
        stories.add_story(store, done.id, coach("c1"), StoryUpdate(rating=4))

        summary = stories.completion_summary(store, coach("c1"))

        assert summary.pending == 2
        assert summary.confirmed == 1
        assert summary.awaiting_my_confirmation == 1
        assert summary.average_rating == 4.0
        assert awaiting.coach_confirmed is False

    def test_summary_without_ratings(self, store: CompletionStore):
        """Test the average rating is None with no rated matches."""
        summary = stories.completion_summary(store, coach("c1"))
        assert summary.average_rating is None
        assert summary.pending == 0

    def test_summary_ignores_unbound_slots(self, coordinator, store: CompletionStore):
        """Test a record with an open player slot only counts for its coach."""
        coordinator.create_completion(make_create(), coach("c1"))

        summary = stories.completion_summary(store, player("p1"))

        assert summary.pending == 0
        assert summary.awaiting_my_confirmation == 0
