"""Guided onboarding tours: static catalogs and the step state machine."""

from ninevectors.tour.catalog import (
    AVAILABLE_TOURS,
    ActionKind,
    Placement,
    TourAction,
    TourId,
    TourInfo,
    TourStep,
    get_tour_info,
    get_tour_steps,
)
from ninevectors.tour.engine import TourEngine, TourState, reduce_tour

__all__ = [
    "AVAILABLE_TOURS",
    "ActionKind",
    "Placement",
    "TourAction",
    "TourEngine",
    "TourId",
    "TourInfo",
    "TourState",
    "TourStep",
    "get_tour_info",
    "get_tour_steps",
    "reduce_tour",
]
