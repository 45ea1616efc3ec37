"""Coaching hook that surfaces the assistant when a tour step asks for it.

The tour engine awaits ``CoachingPort.notify`` before advancing past a step
flagged ``show_coach``.  The hook is best-effort: the engine bounds it with
a timeout and swallows any failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ninevectors.api_client import ApiClient

logger = logging.getLogger(__name__)

WORKFLOW_LEARNING = "learning"
WORKFLOW_ASSESSMENT = "assessment"
WORKFLOW_DASHBOARD = "dashboard"


@dataclass(frozen=True)
class CoachContext:
    """What the coach is asked when a step is advanced.

    A ``user_question`` is sent as a reactive question; otherwise the
    ``message`` is a proactive nudge.  ``lens`` narrows the coaching to one
    lens by name.
    """

    workflow: str = WORKFLOW_LEARNING
    user_question: str | None = None
    message: str | None = None
    lens: str | None = None

    @property
    def mode(self) -> str:
        return "reactive" if self.user_question else "proactive"

    @property
    def prompt(self) -> str | None:
        return self.user_question or self.message


class CoachingPort(Protocol):
    async def notify(self, context: CoachContext) -> None: ...


class NullCoach:
    """Coach that does nothing (CLI without an API, most tests)."""

    async def notify(self, context: CoachContext) -> None:
        return None


class ApiCoach:
    """Forward coaching requests to the API's assistant endpoint.

    Replies are kept on ``last_reply`` for the caller to display.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.last_reply: dict | None = None

    async def notify(self, context: CoachContext) -> None:
        prompt = context.prompt
        if prompt is None:
            logger.debug("Coach context for %s has nothing to ask", context.workflow)
            return
        history = [
            {
                "role": "system",
                "content": f"workflow={context.workflow} mode={context.mode}"
                + (f" lens={context.lens}" if context.lens else ""),
            }
        ]
        self.last_reply = await self.client.ai.assistant(prompt, history)
