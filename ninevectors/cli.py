"""Command-line interface for ninevectors."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from ninevectors import __version__
from ninevectors.api_client import ApiClient, ApiError
from ninevectors.autoadvance import AutoAdvance
from ninevectors.coaching import ApiCoach, CoachingPort, NullCoach
from ninevectors.config import NineVectorsSettings, load_settings
from ninevectors.drafts import (
    DEFAULT_ROLE,
    DraftValidationError,
    Participant,
    launch_assessment,
    load_drafts,
)
from ninevectors.logging import setup_logging
from ninevectors.showcase import HOW_IT_WORKS, Slide
from ninevectors.store import KEY_SURVEY_RESPONSES, JsonFileStore, KeyValueStore
from ninevectors.survey.catalog import score_label
from ninevectors.survey.navigator import SurveyNavigator
from ninevectors.tour.catalog import AVAILABLE_TOURS, TourAction, TourId
from ninevectors.tour.engine import TourEngine

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ninevectors",
    help="9Vectors onboarding tours and assessment survey.",
    no_args_is_help=True,
)
console = Console(width=min(80, Console().width))

# Offered on steps that don't declare their own buttons
_DEFAULT_ACTIONS = (
    TourAction("Next", "next"),
    TourAction("Back", "prev", "secondary"),
    TourAction("Skip tour", "skip", "tertiary"),
)

_VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"ninevectors {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """9Vectors onboarding tours and assessment survey."""


def _bootstrap(verbose: bool) -> tuple[NineVectorsSettings, KeyValueStore]:
    settings = load_settings()
    log_path = setup_logging(
        state_dir=settings.state_dir, verbose=verbose, file_level=settings.log_level,
    )
    logger.debug("ninevectors %s, logging to %s", __version__, log_path)
    return settings, JsonFileStore(settings.state_dir)


def _report_api_error(exc: ApiError) -> None:
    status = f" ({exc.status})" if exc.status else ""
    console.print(f"[red]API error{status}:[/red] {exc.message}")


# ---------------------------------------------------------------------------
# Tours
# ---------------------------------------------------------------------------


@app.command()
def tours(verbose: _VerboseOption = False) -> None:
    """List the available guided tours."""
    _, store = _bootstrap(verbose)
    engine = TourEngine(store)
    completed = set(engine.completed_tour_ids)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Tour")
    table.add_column("Steps", justify="right")
    table.add_column("Duration")
    table.add_column("Done", justify="center")
    for info in AVAILABLE_TOURS:
        table.add_row(
            info.id.value,
            f"{info.name}\n[dim]{info.description}[/dim]",
            str(info.step_count),
            info.duration,
            "[green]✓[/green]" if info.id.value in completed else "",
        )
    console.print(table)


def _print_step(engine: TourEngine) -> None:
    step = engine.current_step
    assert step is not None
    subtitle = f"Step {engine.step_index + 1} of {engine.total_steps} · {engine.progress:.0f}%"
    console.print(Panel(Markdown(step.content), title=f"[bold]{step.title}[/bold]", subtitle=subtitle))


async def _walk_tour(engine: TourEngine, tour_id: str, coach: CoachingPort) -> bool:
    """Run *tour_id* to its end and return whether it was completed."""
    engine.start_tour(tour_id)
    while engine.is_active:
        _print_step(engine)
        step = engine.current_step
        actions = step.actions or _DEFAULT_ACTIONS
        for i, action in enumerate(actions, 1):
            console.print(f"  [bold]{i}[/bold]  {action.label}")
        picked = Prompt.ask(
            "Choose", choices=[str(i) for i in range(1, len(actions) + 1)], default="1", console=console,
        )
        await engine.handle_action(actions[int(picked) - 1])

        reply = getattr(coach, "last_reply", None)
        if reply:
            text = reply.get("message", reply) if isinstance(reply, dict) else reply
            console.print(Panel(str(text), title="Coach", style="cyan"))
            coach.last_reply = None
    await engine.settle()
    return engine.last_completed


@app.command()
def tour(
    tour_id: Annotated[
        str,
        typer.Argument(help="Tour to run: " + ", ".join(t.value for t in TourId) + "."),
    ] = TourId.FIRST_TIME.value,
    coach: Annotated[
        bool,
        typer.Option("--coach/--no-coach", help="Ask the API coach on coaching steps."),
    ] = False,
    verbose: _VerboseOption = False,
) -> None:
    """Walk through a guided tour."""
    settings, store = _bootstrap(verbose)

    async def _run() -> bool:
        client: ApiClient | None = None
        port: CoachingPort = NullCoach()
        if coach:
            client = ApiClient(settings, store)
            port = ApiCoach(client)
        engine = TourEngine(
            store,
            coach=port,
            navigate=lambda path: console.print(f"[cyan]→ Opening {path}[/cyan]"),
            grace_seconds=settings.tour_grace_seconds,
            coach_timeout=settings.coach_timeout_seconds,
        )
        try:
            return await _walk_tour(engine, tour_id, port)
        finally:
            if client is not None:
                await client.aclose()

    if asyncio.run(_run()):
        console.print("[green]Tour complete.[/green]")


@app.command(name="reset-tours")
def reset_tours(verbose: _VerboseOption = False) -> None:
    """Forget which tours have been seen and completed."""
    _, store = _bootstrap(verbose)
    TourEngine(store).reset_progress()
    console.print("Tour progress cleared.")


# ---------------------------------------------------------------------------
# Survey
# ---------------------------------------------------------------------------


def _print_page(nav: SurveyNavigator) -> None:
    lens = nav.current_lens
    sub = nav.current_sub_lens
    lens_pos, sub_pos = nav.position
    console.print(
        f"\n[bold]{lens.name}[/bold] [dim]({lens.category} phase · "
        f"lens {lens_pos + 1} of {len(nav.catalog)})[/dim]"
    )
    console.print(
        f"[bold]{sub.name}[/bold] [dim](sub-lens {sub_pos + 1} of {len(lens.sub_lenses)})[/dim]"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Theme")
    table.add_column("Score", justify="right")
    table.add_column("Comment")
    for i, theme in enumerate(sub.themes):
        response = nav.response_for(lens.id, sub.id, i)
        if response is not None and response.score is not None:
            score = f"{response.score} {score_label(response.score)}"
        else:
            score = "[dim]-[/dim]"
        table.add_row(str(i + 1), theme, score, response.comment if response else "")
    console.print(table)
    console.print(
        f"[dim]{nav.completion_count} of {nav.catalog.total_themes} answered "
        f"({nav.progress() * 100:.0f}%)[/dim]"
    )


def _rate_page(nav: SurveyNavigator) -> None:
    lens = nav.current_lens
    sub = nav.current_sub_lens
    for i, theme in enumerate(sub.themes):
        existing = nav.response_for(lens.id, sub.id, i)
        default = existing.display_score if existing else 5
        score = IntPrompt.ask(f"{theme} (0-9)", default=default, console=console)
        nav.set_score(lens.id, sub.id, i, score)
        comment = Prompt.ask(
            "  Comment", default=existing.comment if existing else "", console=console,
        )
        if comment:
            nav.set_comment(lens.id, sub.id, i, comment)


@app.command()
def survey(
    lens: Annotated[
        Optional[int],
        typer.Option("--lens", "-l", help="Lens id (1-9) to start on."),
    ] = None,
    submit_to: Annotated[
        Optional[str],
        typer.Option("--submit", "-s", help="Assessment id to submit responses to via the API."),
    ] = None,
    verbose: _VerboseOption = False,
) -> None:
    """Take the assessment survey page by page."""
    settings, store = _bootstrap(verbose)
    nav = SurveyNavigator()
    if lens is not None:
        nav.jump_to_lens(lens)

    while True:
        _print_page(nav)
        action = Prompt.ask(
            "[r]ate  [n]ext  [p]revious  [j]ump  [s]ubmit  [q]uit",
            choices=["r", "n", "p", "j", "s", "q"],
            default="r",
            console=console,
        )
        if action == "r":
            _rate_page(nav)
        elif action == "n":
            if nav.is_last:
                console.print("[yellow]Last page reached. Use [bold]s[/bold] to submit.[/yellow]")
            nav.go_next()
        elif action == "p":
            nav.go_previous()
        elif action == "j":
            nav.jump_to_lens(IntPrompt.ask("Lens id", console=console))
        elif action == "s":
            _submit_survey(nav, settings, store, submit_to)
            return
        else:
            console.print(f"Stopped with {nav.completion_count} responses (not submitted).")
            return


def _submit_survey(
    nav: SurveyNavigator,
    settings: NineVectorsSettings,
    store: KeyValueStore,
    assessment_id: str | None,
) -> None:
    if assessment_id is None:
        nav.submitter = partial(store.set, KEY_SURVEY_RESPONSES)
        nav.submit()
        console.print(f"Saved {nav.completion_count} responses locally.")
        return

    async def _send() -> None:
        async with ApiClient(settings, store) as client:
            nav.submitter = partial(client.assessments.submit_responses, assessment_id)
            await nav.submit_async()

    try:
        asyncio.run(_send())
    except ApiError as exc:
        _report_api_error(exc)
        raise typer.Exit(1) from exc
    console.print(f"[green]Submitted {nav.completion_count} responses.[/green]")


# ---------------------------------------------------------------------------
# Assessment drafts
# ---------------------------------------------------------------------------


def _parse_participant(value: str) -> Participant:
    """Parse ``name:email[:role]``."""
    parts = value.split(":", 2)
    if len(parts) < 2:
        raise typer.BadParameter(f"expected name:email[:role], got {value!r}")
    role = parts[2] if len(parts) == 3 and parts[2] else DEFAULT_ROLE
    return Participant(name=parts[0], email=parts[1], role=role)


@app.command()
def launch(
    name: Annotated[str, typer.Argument(help="Assessment name, e.g. 'Q1 2025 Review'.")],
    company: Annotated[str, typer.Option("--company", "-c", help="Company being assessed.")] = "",
    participant: Annotated[
        Optional[list[str]],
        typer.Option("--participant", "-p", help="Participant as name:email[:role]. Repeatable."),
    ] = None,
    description: Annotated[str, typer.Option("--description", "-d", help="Optional notes.")] = "",
    verbose: _VerboseOption = False,
) -> None:
    """Create an assessment draft and store it locally."""
    _, store = _bootstrap(verbose)
    participants = [_parse_participant(p) for p in participant or []]
    try:
        draft = launch_assessment(
            store, name=name, company=company, participants=participants, description=description,
        )
    except DraftValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    console.print(f"[green]Assessment launched[/green] {draft.id}: {draft.name} ({draft.company})")


@app.command()
def drafts(verbose: _VerboseOption = False) -> None:
    """List locally stored assessment drafts."""
    _, store = _bootstrap(verbose)
    items = load_drafts(store)
    if not items:
        console.print("No assessments launched yet.")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Company")
    table.add_column("Participants", justify="right")
    table.add_column("Created")
    for d in items:
        table.add_row(d.id, d.name, d.company, str(len(d.participants)), d.created_at[:10])
    console.print(table)


# ---------------------------------------------------------------------------
# How it works
# ---------------------------------------------------------------------------


def _print_slide(slide: Slide) -> None:
    body = f"[bold]{slide.subtitle}[/bold]\n{slide.description}\n\n" + "\n".join(
        f"• {line}" for line in slide.details
    )
    console.print(Panel(body, title=f"{slide.number}. {slide.title}"))


@app.command(name="how-it-works")
def how_it_works(
    interval: Annotated[
        Optional[float],
        typer.Option("--interval", "-i", help="Seconds per slide (default from settings)."),
    ] = None,
    cycles: Annotated[
        int,
        typer.Option("--cycles", min=1, help="Times to play through the slides."),
    ] = 1,
    verbose: _VerboseOption = False,
) -> None:
    """Play the four-step overview as an auto-advancing carousel."""
    settings, _ = _bootstrap(verbose)
    seconds = settings.auto_advance_seconds if interval is None else interval
    total = cycles * len(HOW_IT_WORKS)

    async def _play() -> None:
        finished = asyncio.Event()
        shown = 1

        def on_step(index: int) -> None:
            nonlocal shown
            _print_slide(HOW_IT_WORKS[index])
            shown += 1
            if shown >= total:
                finished.set()

        _print_slide(HOW_IT_WORKS[0])
        async with AutoAdvance(on_step, seconds, steps=len(HOW_IT_WORKS), loop=True):
            await finished.wait()

    asyncio.run(_play())
