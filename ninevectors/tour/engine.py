"""Guided tour state machine.

``reduce_tour`` is a pure function over immutable ``TourState``; it knows
nothing about persistence, coaching or navigation.  ``TourEngine`` wraps it
and owns those side effects:

- starting the welcome tour marks it as seen straight away
- finishing a tour records its id in the persisted completed list
- advancing past a coaching step awaits the coaching hook first, but a
  failing or slow hook never blocks the step change
- a finished tour keeps its steps for a short grace period so the closing
  overlay can still render, then resets
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Union

from ninevectors.coaching import CoachContext, CoachingPort, NullCoach
from ninevectors.preferences import (
    TourPreferences,
    load_tour_prefs,
    save_tour_prefs,
    update_tour_prefs,
)
from ninevectors.store import KeyValueStore
from ninevectors.tour.catalog import (
    ActionKind,
    TourAction,
    TourId,
    TourStep,
    get_tour_steps,
    parse_action,
    resolve_tour_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TourState:
    tour_id: TourId | None = None
    steps: tuple[TourStep, ...] = ()
    step_index: int = 0
    is_active: bool = False
    completed: bool = False  # outcome of the last End

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> TourStep | None:
        if not self.is_active:
            return None
        return self.steps[self.step_index]

    @property
    def is_last(self) -> bool:
        return self.step_index == len(self.steps) - 1

    @property
    def progress(self) -> float:
        """Percentage through the tour, counting the current step as seen."""
        if not self.steps:
            return 0.0
        return (self.step_index + 1) / len(self.steps) * 100


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    tour_id: TourId | str = TourId.FIRST_TIME


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Prev:
    pass


@dataclass(frozen=True)
class GoTo:
    index: int


@dataclass(frozen=True)
class End:
    completed: bool = False


@dataclass(frozen=True)
class Reset:
    pass


TourEvent = Union[Start, Next, Prev, GoTo, End, Reset]


def reduce_tour(state: TourState, event: TourEvent) -> TourState:
    """Apply one event.  Invalid transitions return *state* unchanged."""
    if isinstance(event, Start):
        tour_id = resolve_tour_id(event.tour_id)
        return TourState(tour_id=tour_id, steps=get_tour_steps(tour_id), is_active=True)

    if isinstance(event, Reset):
        return TourState()

    if not state.is_active:
        return state

    if isinstance(event, Next):
        if state.is_last:
            return replace(state, is_active=False, completed=True)
        return replace(state, step_index=state.step_index + 1)

    if isinstance(event, Prev):
        if state.step_index == 0:
            return state
        return replace(state, step_index=state.step_index - 1)

    if isinstance(event, GoTo):
        if 0 <= event.index < len(state.steps):
            return replace(state, step_index=event.index)
        logger.debug("Ignoring jump to step %d of %d", event.index, len(state.steps))
        return state

    if isinstance(event, End):
        return replace(state, is_active=False, completed=event.completed)

    return state


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TourEngine:
    """Runs one tour at a time against a preference store.

    Args:
        store: Where ``tour_prefs`` lives.
        coach: Coaching hook awaited before leaving a ``show_coach`` step.
        navigate: Called with the path of a ``navigate:<path>`` action.
        grace_seconds: Delay between ending a tour and clearing its steps.
        coach_timeout: Upper bound on one coaching call.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        coach: CoachingPort | None = None,
        navigate: Callable[[str], None] | None = None,
        grace_seconds: float = 0.3,
        coach_timeout: float = 5.0,
    ) -> None:
        self.store = store
        self.coach: CoachingPort = coach or NullCoach()
        self.navigate = navigate
        self.grace_seconds = grace_seconds
        self.coach_timeout = coach_timeout
        self.state = TourState()
        self._prefs: TourPreferences = load_tour_prefs(store)
        self.last_completed = False  # outcome of the most recent end_tour
        self._reset_task: asyncio.Task[None] | None = None

    # -- derived values ---------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def current_step(self) -> TourStep | None:
        return self.state.current_step

    @property
    def step_index(self) -> int:
        return self.state.step_index

    @property
    def total_steps(self) -> int:
        return self.state.total_steps

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def has_seen_welcome(self) -> bool:
        return self._prefs.has_seen_welcome

    @property
    def completed_tour_ids(self) -> list[str]:
        return list(self._prefs.completed_tour_ids)

    def should_auto_start(self, path: str = "/") -> bool:
        """Whether the welcome tour should open by itself on *path*."""
        return not self._prefs.has_seen_welcome and path == "/"

    # -- transitions ------------------------------------------------------

    def _dispatch(self, event: TourEvent) -> None:
        self.state = reduce_tour(self.state, event)

    def start_tour(self, tour_id: TourId | str = TourId.FIRST_TIME) -> None:
        self._cancel_pending_reset()
        self.last_completed = False
        self._dispatch(Start(tour_id))
        logger.info("Started tour %s (%d steps)", self.state.tour_id.value, self.total_steps)

        if self.state.tour_id is TourId.FIRST_TIME:
            self._prefs = load_tour_prefs(self.store)
            if not self._prefs.has_seen_welcome:
                self._prefs = update_tour_prefs(self.store, has_seen_welcome=True)

    async def next_step(self) -> None:
        step = self.state.current_step
        if step is None:
            return

        if step.show_coach and step.coach_context is not None:
            before = self.state
            await self._notify_coach(step.coach_context)
            # Skipped, moved or replaced while the coach was busy
            if self.state is not before:
                logger.debug("Tour changed during coaching, dropping stale advance")
                return

        if self.state.is_last:
            self.end_tour(completed=True)
        else:
            self._dispatch(Next())

    def prev_step(self) -> None:
        self._dispatch(Prev())

    def go_to_step(self, index: int) -> None:
        self._dispatch(GoTo(index))

    def skip_tour(self) -> None:
        self.end_tour(completed=False)

    def end_tour(self, completed: bool = False) -> None:
        if not self.state.is_active:
            return
        tour_id = self.state.tour_id
        self._dispatch(End(completed))
        logger.info("Ended tour %s (%s)", tour_id.value, "completed" if completed else "skipped")
        self.last_completed = completed

        if completed:
            # Merge into the stored value, not the cached one
            current = load_tour_prefs(self.store)
            updated = current.with_completed(tour_id.value)
            if updated is not current:
                save_tour_prefs(self.store, updated)
            self._prefs = updated

        self._schedule_reset()

    async def handle_action(self, action: str | TourAction) -> None:
        """Single entry point for a step's buttons."""
        raw = action.action if isinstance(action, TourAction) else action
        parsed = parse_action(raw)
        if parsed is None:
            logger.debug("Ignoring unknown tour action %r", raw)
            return
        kind, path = parsed

        if kind is ActionKind.NAVIGATE:
            if self.navigate is not None:
                self.navigate(path or "/")
            self.end_tour(completed=True)
        elif kind in (ActionKind.NEXT, ActionKind.COACH_OPENED):
            await self.next_step()
        elif kind is ActionKind.PREV:
            self.prev_step()
        elif kind is ActionKind.SKIP:
            self.skip_tour()
        elif kind is ActionKind.COMPLETE:
            self.end_tour(completed=True)

    def reset_progress(self) -> None:
        """Forget the welcome flag and every completed tour."""
        self._prefs = update_tour_prefs(self.store, has_seen_welcome=False, completed_tour_ids=[])

    async def settle(self) -> None:
        """Wait for a pending post-tour reset to finish."""
        task = self._reset_task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # -- internals --------------------------------------------------------

    async def _notify_coach(self, context: CoachContext) -> None:
        try:
            await asyncio.wait_for(self.coach.notify(context), timeout=self.coach_timeout)
        except asyncio.TimeoutError:
            logger.warning("Coaching hook timed out after %.1fs", self.coach_timeout)
        except Exception as exc:
            logger.warning("Coaching hook failed: %s", exc)

    def _schedule_reset(self) -> None:
        self._cancel_pending_reset()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is None or self.grace_seconds <= 0:
            self._dispatch(Reset())
            return
        self._reset_task = loop.create_task(self._reset_after_grace())

    async def _reset_after_grace(self) -> None:
        await asyncio.sleep(self.grace_seconds)
        self._reset_task = None
        self._dispatch(Reset())

    def _cancel_pending_reset(self) -> None:
        if self._reset_task is not None:
            self._reset_task.cancel()
            self._reset_task = None
