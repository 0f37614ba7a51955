"""Nightly scheduling for the reflection pipeline."""

from src.scheduler.engine import NightlyScheduler

__all__ = ["NightlyScheduler"]
