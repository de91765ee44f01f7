"""
madina - adaptive mastery and review scheduling for Arabic vocabulary

Quick start:
    from madina import MasteryEngine
    from madina.storage import InMemoryStore

    engine = MasteryEngine(InMemoryStore())
    engine.record_encounter("w1", "reading")
    engine.record_answer("w1", "recognition", is_correct=True)
    engine.is_due("w1")
"""

from madina.config import Settings, configure_logging, load_settings
from madina.engine import MasteryEngine
from madina.exercise_types import Direction, ExerciseType
from madina.mastery import LegacyMasteryRecord, MasteryRecord


__version__ = "0.1.0"

__all__ = [
    "Direction",
    "ExerciseType",
    "LegacyMasteryRecord",
    "MasteryEngine",
    "MasteryRecord",
    "Settings",
    "configure_logging",
    "load_settings",
    "__version__",
]
