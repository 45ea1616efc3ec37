"""Tests for the guided tour reducer and engine."""

from __future__ import annotations

import asyncio

import pytest

from ninevectors.coaching import CoachContext
from ninevectors.preferences import load_tour_prefs
from ninevectors.store import MemoryStore
from ninevectors.tour.catalog import FIRST_TIME_TOUR, TourAction, TourId, get_tour_steps
from ninevectors.tour.engine import (
    End,
    GoTo,
    Next,
    Prev,
    Reset,
    Start,
    TourEngine,
    TourState,
    reduce_tour,
)


class RecordingCoach:
    def __init__(self) -> None:
        self.contexts: list[CoachContext] = []

    async def notify(self, context: CoachContext) -> None:
        self.contexts.append(context)


class FailingCoach:
    async def notify(self, context: CoachContext) -> None:
        raise RuntimeError("assistant unavailable")


class SlowCoach:
    async def notify(self, context: CoachContext) -> None:
        await asyncio.sleep(10)


class GatedCoach:
    """Blocks in notify until the test opens the gate."""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def notify(self, context: CoachContext) -> None:
        self.entered.set()
        await self.gate.wait()


# ---------------------------------------------------------------------------
# Pure reducer
# ---------------------------------------------------------------------------


class TestReduceTour:
    def test_start_from_any_state(self) -> None:
        midway = TourState(
            tour_id=TourId.DASHBOARD,
            steps=get_tour_steps(TourId.DASHBOARD),
            step_index=3,
            is_active=True,
        )
        for prior in (TourState(), midway):
            state = reduce_tour(prior, Start(TourId.FRAMEWORK))
            assert state.tour_id is TourId.FRAMEWORK
            assert state.step_index == 0
            assert state.is_active is True

    def test_unknown_tour_falls_back_to_welcome(self) -> None:
        state = reduce_tour(TourState(), Start("no-such-tour"))
        assert state.tour_id is TourId.FIRST_TIME
        assert state.steps == FIRST_TIME_TOUR

    def test_inactive_ignores_navigation(self) -> None:
        idle = TourState()
        for event in (Next(), Prev(), GoTo(2), End(True)):
            assert reduce_tour(idle, event) is idle

    def test_next_on_last_step_completes(self) -> None:
        state = reduce_tour(TourState(), Start(TourId.DASHBOARD))
        state = reduce_tour(state, GoTo(state.total_steps - 1))
        state = reduce_tour(state, Next())
        assert state.is_active is False
        assert state.completed is True
        assert state.current_step is None

    def test_reset_clears_everything(self) -> None:
        state = reduce_tour(TourState(), Start(TourId.DASHBOARD))
        state = reduce_tour(reduce_tour(state, End(True)), Reset())
        assert state == TourState()

    def test_progress_counts_current_step(self) -> None:
        state = reduce_tour(TourState(), Start(TourId.FIRST_TIME))
        assert state.progress == pytest.approx(100 / 6)
        assert TourState().progress == 0.0


# ---------------------------------------------------------------------------
# Engine: navigation
# ---------------------------------------------------------------------------


class TestNavigation:
    def test_start_sets_first_step(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.ASSESSMENT)
        engine.go_to_step(3)
        engine.start_tour(TourId.ASSESSMENT)
        assert engine.step_index == 0
        assert engine.is_active is True
        assert engine.current_step.id == "assessment-intro"

    def test_prev_at_first_step_is_noop(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FRAMEWORK)
        before = engine.state
        engine.prev_step()
        assert engine.state == before

    def test_prev_moves_back(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FRAMEWORK)
        engine.go_to_step(2)
        engine.prev_step()
        assert engine.step_index == 1

    @pytest.mark.parametrize("index", [-1, 5, 99])
    def test_go_to_out_of_range_is_ignored(self, store: MemoryStore, index: int) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FRAMEWORK)  # five steps
        engine.go_to_step(1)
        engine.go_to_step(index)
        assert engine.step_index == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tour_id", list(TourId))
    async def test_next_from_any_step_completes(self, tour_id: TourId) -> None:
        length = len(get_tour_steps(tour_id))
        for start in range(length):
            store = MemoryStore()
            engine = TourEngine(store, grace_seconds=0)
            engine.start_tour(tour_id)
            engine.go_to_step(start)
            for _ in range(length - start):
                assert engine.is_active
                await engine.next_step()
            assert engine.is_active is False
            assert tour_id.value in engine.completed_tour_ids

    @pytest.mark.asyncio
    async def test_next_when_inactive_does_nothing(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        await engine.next_step()
        assert engine.state == TourState()


# ---------------------------------------------------------------------------
# Engine: persistence
# ---------------------------------------------------------------------------


class TestPreferences:
    def test_welcome_marked_seen_on_start(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        assert engine.should_auto_start("/") is True
        engine.start_tour(TourId.FIRST_TIME)
        prefs = load_tour_prefs(store)
        assert prefs.has_seen_welcome is True
        assert prefs.completed_tour_ids == []
        assert engine.should_auto_start("/") is False

    def test_other_tours_leave_welcome_unseen(self, store: MemoryStore) -> None:
        TourEngine(store).start_tour(TourId.DASHBOARD)
        assert load_tour_prefs(store).has_seen_welcome is False

    def test_auto_start_only_on_root(self, store: MemoryStore) -> None:
        assert TourEngine(store).should_auto_start("/dashboard") is False

    def test_completing_twice_does_not_duplicate(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        for _ in range(2):
            engine.start_tour(TourId.DASHBOARD)
            engine.end_tour(completed=True)
        assert load_tour_prefs(store).completed_tour_ids == ["dashboard"]

    def test_skip_does_not_record_completion(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.DASHBOARD)
        engine.skip_tour()
        assert engine.is_active is False
        assert engine.completed_tour_ids == []

    def test_completion_survives_new_engine(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.AI_FEATURES)
        engine.end_tour(completed=True)
        assert TourEngine(store).completed_tour_ids == ["ai_features"]

    def test_completion_keeps_welcome_flag_written_elsewhere(self, store: MemoryStore) -> None:
        dashboard = TourEngine(store)
        welcome = TourEngine(store)
        welcome.start_tour(TourId.FIRST_TIME)
        dashboard.start_tour(TourId.DASHBOARD)
        dashboard.end_tour(completed=True)
        prefs = load_tour_prefs(store)
        assert prefs.has_seen_welcome is True
        assert prefs.completed_tour_ids == ["dashboard"]
        assert dashboard.has_seen_welcome is True

    def test_completion_after_external_reset(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FRAMEWORK)
        engine.end_tour(completed=True)
        engine.start_tour(TourId.DASHBOARD)
        TourEngine(store).reset_progress()
        engine.end_tour(completed=True)
        assert load_tour_prefs(store).completed_tour_ids == ["dashboard"]

    def test_completions_from_two_engines_merge(self, store: MemoryStore) -> None:
        first = TourEngine(store)
        second = TourEngine(store)
        first.start_tour(TourId.FRAMEWORK)
        second.start_tour(TourId.AI_FEATURES)
        first.end_tour(completed=True)
        second.end_tour(completed=True)
        assert load_tour_prefs(store).completed_tour_ids == ["framework", "ai_features"]

    def test_last_completed_tracks_outcome(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.DASHBOARD)
        engine.end_tour(completed=True)
        assert engine.last_completed is True
        engine.start_tour(TourId.DASHBOARD)
        assert engine.last_completed is False
        engine.skip_tour()
        assert engine.last_completed is False
        assert engine.completed_tour_ids == ["dashboard"]

    def test_reset_progress(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FIRST_TIME)
        engine.end_tour(completed=True)
        engine.reset_progress()
        prefs = load_tour_prefs(store)
        assert prefs.has_seen_welcome is False
        assert prefs.completed_tour_ids == []


# ---------------------------------------------------------------------------
# Engine: coaching hook
# ---------------------------------------------------------------------------


class TestCoaching:
    @pytest.mark.asyncio
    async def test_coach_notified_for_coaching_step(self, store: MemoryStore) -> None:
        coach = RecordingCoach()
        engine = TourEngine(store, coach=coach)
        engine.start_tour(TourId.FIRST_TIME)
        await engine.next_step()
        assert len(coach.contexts) == 1
        assert coach.contexts[0].message.startswith("Welcome!")
        assert engine.step_index == 1

    @pytest.mark.asyncio
    async def test_coach_not_notified_without_flag(self, store: MemoryStore) -> None:
        coach = RecordingCoach()
        engine = TourEngine(store, coach=coach)
        engine.start_tour(TourId.FIRST_TIME)
        engine.go_to_step(3)  # ai-coach-intro: show_coach is off
        await engine.next_step()
        assert coach.contexts == []
        assert engine.step_index == 4

    @pytest.mark.asyncio
    async def test_failing_coach_does_not_block(self, store: MemoryStore) -> None:
        engine = TourEngine(store, coach=FailingCoach())
        engine.start_tour(TourId.FIRST_TIME)
        await engine.next_step()
        assert engine.step_index == 1

    @pytest.mark.asyncio
    async def test_slow_coach_times_out(self, store: MemoryStore) -> None:
        engine = TourEngine(store, coach=SlowCoach(), coach_timeout=0.01)
        engine.start_tour(TourId.FIRST_TIME)
        await engine.next_step()
        assert engine.step_index == 1

    @pytest.mark.asyncio
    async def test_pending_coach_does_not_advance_replacement_tour(self, store: MemoryStore) -> None:
        coach = GatedCoach()
        engine = TourEngine(store, coach=coach, grace_seconds=0)
        engine.start_tour(TourId.FIRST_TIME)
        advance = asyncio.create_task(engine.next_step())
        await coach.entered.wait()

        engine.skip_tour()
        engine.start_tour(TourId.DASHBOARD)
        coach.gate.set()
        await advance

        assert engine.state.tour_id is TourId.DASHBOARD
        assert engine.is_active is True
        assert engine.step_index == 0

    @pytest.mark.asyncio
    async def test_pending_coach_does_not_advance_after_jump(self, store: MemoryStore) -> None:
        coach = GatedCoach()
        engine = TourEngine(store, coach=coach)
        engine.start_tour(TourId.FIRST_TIME)
        advance = asyncio.create_task(engine.next_step())
        await coach.entered.wait()

        engine.go_to_step(4)
        coach.gate.set()
        await advance

        assert engine.step_index == 4

    @pytest.mark.asyncio
    async def test_failing_coach_on_last_step_still_completes(self, store: MemoryStore) -> None:
        engine = TourEngine(store, coach=FailingCoach(), grace_seconds=0)
        engine.start_tour(TourId.FIRST_TIME)
        engine.go_to_step(len(FIRST_TIME_TOUR) - 1)
        await engine.next_step()
        assert engine.is_active is False
        assert "first_time" in engine.completed_tour_ids


# ---------------------------------------------------------------------------
# Engine: actions
# ---------------------------------------------------------------------------


class TestHandleAction:
    @pytest.mark.asyncio
    async def test_navigate_emits_path_and_completes(self, store: MemoryStore) -> None:
        visited: list[str] = []
        engine = TourEngine(store, navigate=visited.append, grace_seconds=0)
        engine.start_tour(TourId.FIRST_TIME)
        engine.go_to_step(5)
        await engine.handle_action("navigate:/dashboard")
        assert visited == ["/dashboard"]
        assert engine.is_active is False
        assert engine.completed_tour_ids == ["first_time"]

    @pytest.mark.asyncio
    async def test_accepts_tour_action_objects(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.FIRST_TIME)
        start_button = FIRST_TIME_TOUR[0].actions[0]
        assert isinstance(start_button, TourAction)
        await engine.handle_action(start_button)
        assert engine.step_index == 1

    @pytest.mark.asyncio
    async def test_dispatch_table(self, store: MemoryStore) -> None:
        engine = TourEngine(store, grace_seconds=0)
        engine.start_tour(TourId.DASHBOARD)
        await engine.handle_action("next")
        await engine.handle_action("ai-coach-opened")
        assert engine.step_index == 2
        await engine.handle_action("prev")
        assert engine.step_index == 1
        await engine.handle_action("complete")
        assert engine.completed_tour_ids == ["dashboard"]

    @pytest.mark.asyncio
    async def test_skip_action(self, store: MemoryStore) -> None:
        engine = TourEngine(store, grace_seconds=0)
        engine.start_tour(TourId.DASHBOARD)
        await engine.handle_action("skip")
        assert engine.is_active is False
        assert engine.completed_tour_ids == []

    @pytest.mark.asyncio
    async def test_unknown_action_ignored(self, store: MemoryStore) -> None:
        engine = TourEngine(store)
        engine.start_tour(TourId.DASHBOARD)
        before = engine.state
        await engine.handle_action("dance")
        await engine.handle_action("navigate")
        assert engine.state == before


# ---------------------------------------------------------------------------
# Engine: post-tour reset
# ---------------------------------------------------------------------------


class TestGracePeriod:
    def test_reset_is_immediate_without_event_loop(self, store: MemoryStore) -> None:
        engine = TourEngine(store, grace_seconds=5)
        engine.start_tour(TourId.DASHBOARD)
        engine.end_tour(completed=True)
        assert engine.state == TourState()

    @pytest.mark.asyncio
    async def test_steps_kept_until_grace_elapses(self, store: MemoryStore) -> None:
        engine = TourEngine(store, grace_seconds=0.01)
        engine.start_tour(TourId.DASHBOARD)
        engine.end_tour(completed=True)
        assert engine.state.tour_id is TourId.DASHBOARD
        assert engine.current_step is None
        await engine.settle()
        assert engine.state.tour_id is None
        assert engine.total_steps == 0
        assert engine.step_index == 0

    @pytest.mark.asyncio
    async def test_restart_during_grace_is_not_clobbered(self, store: MemoryStore) -> None:
        engine = TourEngine(store, grace_seconds=0.02)
        engine.start_tour(TourId.DASHBOARD)
        engine.end_tour(completed=False)
        engine.start_tour(TourId.FRAMEWORK)
        await asyncio.sleep(0.05)
        assert engine.is_active is True
        assert engine.state.tour_id is TourId.FRAMEWORK
