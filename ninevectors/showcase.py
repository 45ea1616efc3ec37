"""Slides for the "How it works" carousel."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Slide:
    number: int
    title: str
    subtitle: str
    description: str
    details: tuple[str, ...]


HOW_IT_WORKS: tuple[Slide, ...] = (
    Slide(
        1,
        "Invite Team",
        "Collaborate Across Your Organization",
        "Invite stakeholders to participate in the comprehensive assessment",
        (
            "Send email invitations to key stakeholders",
            "Each participant receives a unique secure link",
            "Track invitation status and responses in real-time",
            "Customize assessment permissions by role",
        ),
    ),
    Slide(
        2,
        "Assess",
        "Evaluate Your Organization",
        "Rate each theme from 0-9 and provide qualitative feedback",
        (
            "Evaluate every theme across 9 critical lenses",
            "Rate on a 0-9 scale with contextual guidance",
            "Add qualitative comments and insights",
            "Save progress and resume anytime",
        ),
    ),
    Slide(
        3,
        "Analyze",
        "Discover Insights & Patterns",
        "View aggregated scores and identify strengths and gaps",
        (
            "Interactive dashboards with real-time data",
            "Compare perspectives across stakeholders",
            "Identify consensus areas and divergence",
            "Export comprehensive reports and analytics",
        ),
    ),
    Slide(
        4,
        "Transform",
        "Take Action & Grow",
        "Execute strategic initiatives to improve organizational health",
        (
            "AI-powered recommendations for improvement",
            "Prioritized action plans by impact",
            "Track progress with follow-up assessments",
            "Measure ROI and transformation metrics",
        ),
    ),
)
