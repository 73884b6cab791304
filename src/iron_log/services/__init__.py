"""
Services layer for IronLog business logic.
"""

from .export_service import ExportService
from .workout_service import WorkoutService

__all__ = ["ExportService", "WorkoutService"]
