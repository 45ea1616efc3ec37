"""Static tour catalogs.

Each tour is an ordered tuple of ``TourStep``.  Steps are frozen and the
catalogs are built once at import time; nothing mutates them afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ninevectors.coaching import (
    WORKFLOW_ASSESSMENT,
    WORKFLOW_DASHBOARD,
    WORKFLOW_LEARNING,
    CoachContext,
)

logger = logging.getLogger(__name__)

# Target for steps that are not anchored to an element
WHOLE_SCREEN = "body"

NAVIGATE_PREFIX = "navigate:"


class TourId(str, Enum):
    FIRST_TIME = "first_time"
    FRAMEWORK = "framework"
    ASSESSMENT = "assessment"
    DASHBOARD = "dashboard"
    AI_FEATURES = "ai_features"


class Placement(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class ActionKind(str, Enum):
    NEXT = "next"
    PREV = "prev"
    SKIP = "skip"
    COMPLETE = "complete"
    COACH_OPENED = "ai-coach-opened"
    NAVIGATE = "navigate"


def parse_action(action: str) -> tuple[ActionKind, str | None] | None:
    """Split an action string into its kind and navigation path.

    ``"navigate:/dashboard"`` → ``(ActionKind.NAVIGATE, "/dashboard")``.
    Returns None for unrecognised actions.
    """
    if action.startswith(NAVIGATE_PREFIX):
        return ActionKind.NAVIGATE, action[len(NAVIGATE_PREFIX):]
    try:
        kind = ActionKind(action)
    except ValueError:
        return None
    if kind is ActionKind.NAVIGATE:
        return None  # bare "navigate" without a path
    return kind, None


@dataclass(frozen=True)
class TourAction:
    label: str
    action: str
    variant: str = "primary"  # "primary", "secondary", "tertiary"


@dataclass(frozen=True)
class TourStep:
    id: str
    title: str
    content: str
    target: str = WHOLE_SCREEN
    placement: Placement = Placement.CENTER
    actions: tuple[TourAction, ...] = ()
    show_coach: bool = False
    coach_context: CoachContext | None = None
    highlight: str | None = None
    pulse: bool = False
    wait_for_action: str | None = None

    @property
    def is_whole_screen(self) -> bool:
        return self.target == WHOLE_SCREEN


@dataclass(frozen=True)
class TourInfo:
    """Menu entry for one tour."""

    id: TourId
    name: str
    description: str
    duration: str
    steps: tuple[TourStep, ...] = field(repr=False, default=())

    @property
    def step_count(self) -> int:
        return len(self.steps)


# ---------------------------------------------------------------------------
# Welcome tour
# ---------------------------------------------------------------------------

FIRST_TIME_TOUR: tuple[TourStep, ...] = (
    TourStep(
        id="welcome",
        title="Welcome to 9Vectors!",
        content=(
            "I'm your AI guide, and I'll help you understand the 9Vectors framework "
            "and how to use this platform to transform your organization.\n\n"
            "This tour will take about 3-5 minutes. Ready to get started?"
        ),
        show_coach=True,
        coach_context=CoachContext(
            workflow=WORKFLOW_LEARNING,
            message="Welcome! I'm excited to guide you through the 9Vectors framework.",
        ),
        actions=(
            TourAction("Start Tour", "next"),
            TourAction("Skip for Now", "skip", "secondary"),
        ),
    ),
    TourStep(
        id="what-is-9vectors",
        title="What is 9Vectors?",
        content=(
            "9Vectors is a comprehensive business assessment framework that evaluates "
            "organizations across **9 interconnected dimensions**.\n\n"
            "Think of it as a complete health check for your business, from your market "
            "position to your financial health, from your people to your operations."
        ),
        show_coach=True,
        coach_context=CoachContext(
            user_question=(
                "Explain what the 9Vectors framework is and why it matters for organizations"
            ),
        ),
        actions=(
            TourAction("Tell Me More", "next"),
            TourAction("Back", "prev", "secondary"),
        ),
    ),
    TourStep(
        id="three-phases",
        title="Three Phases, Nine Lenses",
        content=(
            "The framework is organized into three phases:\n\n"
            "**Assets** (Social Discovery): Market, People, Financial\n\n"
            "**Processes** (Social Design): Strategy, Operations, Execution\n\n"
            "**Structures** (Social Assurance): Expectations, Governance, Entity\n\n"
            "Each phase builds on the previous one to create a complete picture of "
            "your organization."
        ),
        target=".framework-overview",
        placement=Placement.BOTTOM,
        highlight=".framework-overview",
        show_coach=True,
        coach_context=CoachContext(
            user_question=(
                "Explain the three phases of the 9Vectors framework and how they "
                "relate to each other"
            ),
        ),
        actions=(
            TourAction("Continue", "next"),
            TourAction("Back", "prev", "secondary"),
        ),
    ),
    TourStep(
        id="ai-coach-intro",
        title="Your AI Coach",
        content=(
            "Meet your AI-powered coach! Open it anytime to get explanations of any "
            "lens or theme, ask questions about your assessment, receive strategic "
            "recommendations and understand your results.\n\n"
            '**Try it now!** Open the coach and ask: "What should I focus on first?"'
        ),
        target='[data-tour="ai-coach-button"]',
        placement=Placement.LEFT,
        highlight='[data-tour="ai-coach-button"]',
        pulse=True,
        wait_for_action="ai-coach-opened",
        actions=(
            TourAction("I Opened the Coach", "next"),
            TourAction("Skip This", "next", "secondary"),
        ),
    ),
    TourStep(
        id="navigation",
        title="Navigate the Platform",
        content=(
            "Use the navigation menu to explore:\n\n"
            "**About** - Learn about the framework\n"
            "**Resources** - Books and learning materials\n"
            "**Dashboard** - View assessment results\n"
            "**Assessment** - Take or create assessments\n\n"
            "The AI coach is available everywhere to help guide you!"
        ),
        target="nav",
        placement=Placement.BOTTOM,
        highlight="nav",
        actions=(
            TourAction("Next", "next"),
            TourAction("Back", "prev", "secondary"),
        ),
    ),
    TourStep(
        id="get-started",
        title="Ready to Begin?",
        content=(
            "You're all set! Here's what you can do next:\n\n"
            "1. **Take a Quick Tour** - Explore specific features\n"
            "2. **Start an Assessment** - Evaluate your organization\n"
            "3. **View Demo Dashboard** - See sample results\n"
            "4. **Ask the AI Coach** - Get personalized guidance"
        ),
        target='[data-tour="cta-button"]',
        placement=Placement.TOP,
        show_coach=True,
        coach_context=CoachContext(
            user_question="Give me personalized next steps for getting started with 9Vectors",
        ),
        actions=(
            TourAction("Start Assessment", "navigate:/assessment/launch"),
            TourAction("View Demo", "navigate:/dashboard", "secondary"),
            TourAction("Finish Tour", "complete", "tertiary"),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Framework deep dive
# ---------------------------------------------------------------------------

FRAMEWORK_TOUR: tuple[TourStep, ...] = (
    TourStep(
        id="framework-intro",
        title="Understanding 9Vectors",
        content=(
            "Let's take a deeper look at the 9Vectors framework and how each lens "
            "provides unique insights into your organization."
        ),
        show_coach=True,
        coach_context=CoachContext(
            user_question="Give me a comprehensive overview of all 9 lenses and what they assess",
        ),
    ),
    TourStep(
        id="assets-phase",
        title="Phase 1: Assets (Social Discovery)",
        content=(
            "**Assets** represent what you HAVE:\n\n"
            "**Market** - Your competitive landscape and opportunities\n"
            "**People** - Your team, culture, and leadership\n"
            "**Financial** - Your economic health and resources"
        ),
        target='[data-tour="assets-section"]',
        placement=Placement.RIGHT,
        highlight='[data-tour="assets-section"]',
        show_coach=True,
        coach_context=CoachContext(user_question="Explain the Assets phase in detail with examples"),
    ),
    TourStep(
        id="processes-phase",
        title="Phase 2: Processes (Social Design)",
        content=(
            "**Processes** represent what you DO:\n\n"
            "**Strategy** - Your vision and go-to-market approach\n"
            "**Operations** - How you execute day-to-day\n"
            "**Execution** - How you measure and improve"
        ),
        target='[data-tour="processes-section"]',
        placement=Placement.RIGHT,
        highlight='[data-tour="processes-section"]',
        show_coach=True,
        coach_context=CoachContext(
            user_question="Explain the Processes phase with real-world examples",
        ),
    ),
    TourStep(
        id="structures-phase",
        title="Phase 3: Structures (Social Assurance)",
        content=(
            "**Structures** represent how you're ORGANIZED:\n\n"
            "**Expectations** - Stakeholder alignment\n"
            "**Governance** - Principles and oversight\n"
            "**Entity** - Legal structure and risk management"
        ),
        target='[data-tour="structures-section"]',
        placement=Placement.RIGHT,
        highlight='[data-tour="structures-section"]',
        show_coach=True,
        coach_context=CoachContext(
            user_question="Explain the Structures phase and why governance matters",
        ),
    ),
    TourStep(
        id="interconnected",
        title="Everything Connects",
        content=(
            "The power of 9Vectors is in how the lenses interconnect:\n\n"
            "- Weak **People** affects **Operations**\n"
            "- Poor **Strategy** impacts **Financial** results\n"
            "- Strong **Governance** improves **Expectations**"
        ),
        target='[data-tour="lens-diagram"]',
        placement=Placement.BOTTOM,
        show_coach=True,
        coach_context=CoachContext(
            user_question="Give examples of how the 9 lenses interconnect and influence each other",
        ),
    ),
)

# ---------------------------------------------------------------------------
# Assessment guide
# ---------------------------------------------------------------------------

ASSESSMENT_TOUR: tuple[TourStep, ...] = (
    TourStep(
        id="assessment-intro",
        title="Taking Your Assessment",
        content=(
            "I'll guide you through the assessment process. This evaluation will help "
            "you understand your organization's strengths and areas for improvement.\n\n"
            "The assessment covers all 9 lenses, their sub-lenses and every theme."
        ),
        show_coach=True,
        coach_context=CoachContext(
            workflow=WORKFLOW_ASSESSMENT,
            user_question="Help me prepare for taking a 9Vectors assessment. What should I know?",
        ),
    ),
    TourStep(
        id="rating-scale",
        title="Rating Scale (0-9)",
        content=(
            "Rate each theme on a 0-9 scale:\n\n"
            "**0-3: Weak** - Needs immediate attention\n"
            "**4-6: Moderate** - Room for improvement\n"
            "**7-9: Strong** - Performing well"
        ),
        target='[data-tour="rating-slider"]',
        placement=Placement.TOP,
        highlight='[data-tour="rating-slider"]',
        show_coach=True,
        pulse=True,
    ),
    TourStep(
        id="qualitative-input",
        title="Add Context",
        content=(
            "Don't just rate, explain WHY! Add comments with specific examples, recent "
            "changes, data or stakeholder perspectives."
        ),
        target='[data-tour="comment-field"]',
        placement=Placement.TOP,
        highlight='[data-tour="comment-field"]',
    ),
    TourStep(
        id="theme-help",
        title="Get Help Anytime",
        content=(
            "Not sure what a theme means? Use the help icon next to any theme to get "
            "coaching specific to that topic."
        ),
        target='[data-tour="theme-help-button"]',
        placement=Placement.LEFT,
        highlight='[data-tour="theme-help-button"]',
        pulse=True,
        show_coach=True,
        coach_context=CoachContext(workflow=WORKFLOW_ASSESSMENT, lens="Market"),
    ),
    TourStep(
        id="progress-tracking",
        title="Track Your Progress",
        content=(
            "The progress bar shows your completion status. You can save and return "
            "anytime and navigate between lenses freely."
        ),
        target='[data-tour="progress-bar"]',
        placement=Placement.BOTTOM,
        highlight='[data-tour="progress-bar"]',
    ),
)

# ---------------------------------------------------------------------------
# Dashboard walkthrough
# ---------------------------------------------------------------------------

DASHBOARD_TOUR: tuple[TourStep, ...] = (
    TourStep(
        id="dashboard-intro",
        title="Your Assessment Results",
        content=(
            "Welcome to your dashboard! Here you'll find insights from your assessment, "
            "visualizations, and AI-powered recommendations."
        ),
        show_coach=True,
        coach_context=CoachContext(
            workflow=WORKFLOW_DASHBOARD,
            user_question="Help me understand my dashboard and results",
        ),
    ),
    TourStep(
        id="radar-chart",
        title="Radar Chart Overview",
        content=(
            "This radar chart shows your scores across all 9 lenses at a glance. "
            "A balanced shape means a well-rounded organization; an uneven one shows "
            "gaps to address."
        ),
        target='[data-tour="radar-chart"]',
        placement=Placement.RIGHT,
        highlight='[data-tour="radar-chart"]',
        show_coach=True,
    ),
    TourStep(
        id="lens-cards",
        title="Lens Detail Cards",
        content=(
            "Each card shows the overall lens score, its trend, key insights and quick "
            "recommendations."
        ),
        target='[data-tour="lens-card"]',
        placement=Placement.TOP,
        highlight='[data-tour="lens-card"]',
    ),
    TourStep(
        id="ai-insights",
        title="AI-Powered Insights",
        content=(
            "The AI analyzes your results to point out strengths to leverage, "
            "weaknesses to address and connections between lenses."
        ),
        target='[data-tour="ai-insights"]',
        placement=Placement.LEFT,
        highlight='[data-tour="ai-insights"]',
        show_coach=True,
        coach_context=CoachContext(
            workflow=WORKFLOW_DASHBOARD,
            user_question="Analyze my results and give me strategic recommendations",
        ),
    ),
)

# ---------------------------------------------------------------------------
# AI coach tour
# ---------------------------------------------------------------------------

AI_FEATURES_TOUR: tuple[TourStep, ...] = (
    TourStep(
        id="ai-intro",
        title="AI Coach Capabilities",
        content=(
            "Your AI coach understands the entire 9Vectors framework. "
            "Let me show you what it can do!"
        ),
        target='[data-tour="ai-coach-button"]',
        placement=Placement.LEFT,
        highlight='[data-tour="ai-coach-button"]',
        pulse=True,
    ),
    TourStep(
        id="contextual-help",
        title="Context-Aware Coaching",
        content=(
            "The AI coach knows where you are in the app, what you're working on and "
            "your scores, so every answer is personalized to your situation."
        ),
        show_coach=True,
        coach_context=CoachContext(
            user_question="What makes AI coaching context-aware and personalized?",
        ),
    ),
    TourStep(
        id="ask-anything",
        title="Ask Anything",
        content=(
            "Try these questions:\n\n"
            '- "What does Market Timing mean?"\n'
            '- "How can I improve my People score?"\n'
            '- "Give me quick wins for Operations"'
        ),
        show_coach=True,
        coach_context=CoachContext(user_question="Show me examples of questions I can ask"),
    ),
    TourStep(
        id="proactive-coaching",
        title="Proactive Guidance",
        content=(
            "The AI doesn't just answer questions. It explains sections as you navigate "
            "and suggests next steps based on your progress."
        ),
        show_coach=True,
    ),
)


AVAILABLE_TOURS: tuple[TourInfo, ...] = (
    TourInfo(TourId.FIRST_TIME, "Welcome Tour", "First-time visitor introduction", "3-5 min", FIRST_TIME_TOUR),
    TourInfo(TourId.FRAMEWORK, "Framework Deep Dive", "Learn about the 9Vectors in detail", "5-7 min", FRAMEWORK_TOUR),
    TourInfo(TourId.ASSESSMENT, "Assessment Guide", "How to complete an assessment", "3-4 min", ASSESSMENT_TOUR),
    TourInfo(TourId.DASHBOARD, "Dashboard Walkthrough", "Understanding your results", "3-4 min", DASHBOARD_TOUR),
    TourInfo(TourId.AI_FEATURES, "AI Coach Tour", "Explore AI coaching features", "2-3 min", AI_FEATURES_TOUR),
)

_CATALOG: dict[TourId, tuple[TourStep, ...]] = {info.id: info.steps for info in AVAILABLE_TOURS}


def resolve_tour_id(tour_id: TourId | str) -> TourId:
    """Map a tour id (or its string value) to a known ``TourId``.

    Unknown ids fall back to the welcome tour.
    """
    try:
        return TourId(tour_id)
    except ValueError:
        logger.debug("Unknown tour %r, falling back to %s", tour_id, TourId.FIRST_TIME.value)
        return TourId.FIRST_TIME


def get_tour_steps(tour_id: TourId | str) -> tuple[TourStep, ...]:
    return _CATALOG[resolve_tour_id(tour_id)]


def get_tour_info(tour_id: TourId | str) -> TourInfo:
    resolved = resolve_tour_id(tour_id)
    return next(info for info in AVAILABLE_TOURS if info.id is resolved)
