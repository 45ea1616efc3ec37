"""Survey navigation over the lens hierarchy.

The cursor addresses one (lens, sub-lens) page at a time; every theme on
that page is scored 0-9 with an optional comment.  ``reduce_survey`` is the
pure transition function, ``SurveyNavigator`` the stateful wrapper the CLI
drives.

Navigation is clamped at both ends: ``Next`` on the last page and
``Previous`` on the first page leave the state unchanged.  Reaching the
last page is the caller's cue to offer submission.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, NamedTuple, Union

from ninevectors.survey.catalog import (
    DEFAULT_SCORE,
    MAX_SCORE,
    MIN_SCORE,
    NINE_LENSES,
    Lens,
    LensCatalog,
    SubLens,
    score_label,
)

logger = logging.getLogger(__name__)


class UnknownThemeError(KeyError):
    """A response key that does not exist in the catalog."""


class ResponseKey(NamedTuple):
    lens_id: int
    sub_lens_id: str
    theme_index: int

    def __str__(self) -> str:
        return f"{self.lens_id}-{self.sub_lens_id}-{self.theme_index}"


@dataclass(frozen=True)
class Response:
    theme: str
    score: int | None = None  # None until explicitly scored
    comment: str = ""

    @property
    def is_scored(self) -> bool:
        return self.score is not None

    @property
    def display_score(self) -> int:
        return DEFAULT_SCORE if self.score is None else self.score


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, int(score)))


@dataclass(frozen=True)
class SurveyState:
    lens_index: int = 0
    sub_lens_index: int = 0
    responses: Mapping[ResponseKey, Response] = field(
        default_factory=lambda: MappingProxyType({})
    )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetScore:
    key: ResponseKey
    score: int


@dataclass(frozen=True)
class SetComment:
    key: ResponseKey
    comment: str


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class JumpToLens:
    lens_id: int


SurveyEvent = Union[SetScore, SetComment, Next, Previous, JumpToLens]


def _with_response(state: SurveyState, key: ResponseKey, response: Response) -> SurveyState:
    responses = dict(state.responses)
    responses[key] = response
    return replace(state, responses=MappingProxyType(responses))


def reduce_survey(catalog: LensCatalog, state: SurveyState, event: SurveyEvent) -> SurveyState:
    """Apply one event to *state*.

    Raises:
        UnknownThemeError: for a score or comment on a key not in *catalog*.
    """
    if isinstance(event, (SetScore, SetComment)):
        theme = catalog.theme(*event.key)
        if theme is None:
            raise UnknownThemeError(str(event.key))
        existing = state.responses.get(event.key) or Response(theme=theme)
        if isinstance(event, SetScore):
            updated = replace(existing, score=clamp_score(event.score))
        else:
            updated = replace(existing, comment=event.comment)
        return _with_response(state, event.key, updated)

    if isinstance(event, Next):
        lens = catalog[state.lens_index]
        if state.sub_lens_index < len(lens.sub_lenses) - 1:
            return replace(state, sub_lens_index=state.sub_lens_index + 1)
        if state.lens_index < len(catalog) - 1:
            return replace(state, lens_index=state.lens_index + 1, sub_lens_index=0)
        return state

    if isinstance(event, Previous):
        if state.sub_lens_index > 0:
            return replace(state, sub_lens_index=state.sub_lens_index - 1)
        if state.lens_index > 0:
            previous = catalog[state.lens_index - 1]
            return replace(
                state,
                lens_index=state.lens_index - 1,
                sub_lens_index=len(previous.sub_lenses) - 1,
            )
        return state

    if isinstance(event, JumpToLens):
        index = catalog.index_of(event.lens_id)
        if index is None:
            logger.debug("Ignoring jump to unknown lens %r", event.lens_id)
            return state
        return replace(state, lens_index=index, sub_lens_index=0)

    return state


# ---------------------------------------------------------------------------
# Navigator
# ---------------------------------------------------------------------------


class SurveyNavigator:
    """Stateful survey session over a ``LensCatalog``.

    *submitter* receives the string-keyed response payload from
    ``submit()``; whether submission succeeded is the caller's business.
    """

    def __init__(
        self,
        catalog: LensCatalog | None = None,
        submitter: Callable[[dict[str, dict[str, Any]]], Any] | None = None,
    ) -> None:
        self.catalog = catalog or NINE_LENSES
        self.submitter = submitter
        self.state = SurveyState()

    def _dispatch(self, event: SurveyEvent) -> None:
        self.state = reduce_survey(self.catalog, self.state, event)

    # -- cursor -----------------------------------------------------------

    @property
    def position(self) -> tuple[int, int]:
        return self.state.lens_index, self.state.sub_lens_index

    @property
    def current_lens(self) -> Lens:
        return self.catalog[self.state.lens_index]

    @property
    def current_sub_lens(self) -> SubLens:
        return self.current_lens.sub_lenses[self.state.sub_lens_index]

    @property
    def is_first(self) -> bool:
        return self.position == (0, 0)

    @property
    def is_last(self) -> bool:
        last_lens = len(self.catalog) - 1
        return (
            self.state.lens_index == last_lens
            and self.state.sub_lens_index == len(self.catalog[last_lens].sub_lenses) - 1
        )

    def go_next(self) -> None:
        self._dispatch(Next())

    def go_previous(self) -> None:
        self._dispatch(Previous())

    def jump_to_lens(self, lens_id: int) -> None:
        self._dispatch(JumpToLens(lens_id))

    # -- responses --------------------------------------------------------

    def set_score(self, lens_id: int, sub_lens_id: str, theme_index: int, score: int) -> None:
        self._dispatch(SetScore(ResponseKey(lens_id, sub_lens_id, theme_index), score))

    def set_comment(self, lens_id: int, sub_lens_id: str, theme_index: int, comment: str) -> None:
        self._dispatch(SetComment(ResponseKey(lens_id, sub_lens_id, theme_index), comment))

    def response_for(self, lens_id: int, sub_lens_id: str, theme_index: int) -> Response | None:
        return self.state.responses.get(ResponseKey(lens_id, sub_lens_id, theme_index))

    @property
    def responses(self) -> Mapping[ResponseKey, Response]:
        return self.state.responses

    @property
    def completion_count(self) -> int:
        return len(self.state.responses)

    def progress(self) -> float:
        """Fraction of themes with a response, in [0, 1]."""
        return self.completion_count / self.catalog.total_themes

    def score_label(self, lens_id: int, sub_lens_id: str, theme_index: int) -> str | None:
        response = self.response_for(lens_id, sub_lens_id, theme_index)
        if response is None or response.score is None:
            return None
        return score_label(response.score)

    # -- submission -------------------------------------------------------

    def payload(self) -> dict[str, dict[str, Any]]:
        """Snapshot of responses keyed ``"{lens}-{sub_lens}-{theme}"``."""
        return {
            str(key): {"score": r.score, "comment": r.comment, "theme": r.theme}
            for key, r in self.state.responses.items()
        }

    def submit(self) -> Any:
        if self.submitter is None:
            raise RuntimeError("No submitter configured")
        logger.info("Submitting %d responses", self.completion_count)
        return self.submitter(self.payload())

    async def submit_async(self) -> Any:
        """Like ``submit`` but awaits a coroutine submitter."""
        result = self.submit()
        if inspect.isawaitable(result):
            result = await result
        return result
