"""Onboarding tours and survey navigation for the 9Vectors assessment."""

__version__ = "0.1.0"
