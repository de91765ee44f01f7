"""
Types for calibration and weakness analytics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from madina.arabic import ErrorCategory


CalibrationTendency = Literal[
    "well-calibrated", "overconfident", "underconfident", "insufficient-data"
]
CalibrationTrend = Literal["improving", "stable", "declining", "insufficient-data"]
WeaknessSeverity = Literal["mild", "moderate", "severe"]
WeaknessTrend = Literal["improving", "stable", "worsening"]


@dataclass(frozen=True)
class CalibrationRecord:
    """One confidence rating and whether the answer turned out correct."""
    confidence_level: int
    was_correct: bool
    timestamp: datetime


@dataclass(frozen=True)
class ErrorRecord:
    """One classified mistake on an item."""
    category: ErrorCategory
    timestamp: datetime
    item_id: str
    expected: Optional[str] = None
    actual: Optional[str] = None


@dataclass(frozen=True)
class LevelStats:
    """
    Accuracy at one confidence level.

    difference = actual - expected; negative means overconfident.
    """
    level: int
    count: int
    correct_count: int
    expected_accuracy: float
    actual_accuracy: float
    difference: float


@dataclass(frozen=True)
class CalibrationStats:
    total_ratings: int
    calibration_score: float          # 0-1, 1 = perfectly calibrated
    tendency: CalibrationTendency
    by_level: tuple[LevelStats, ...]
    feedback_message: str


@dataclass(frozen=True)
class ErrorExample:
    expected: str
    actual: str


@dataclass(frozen=True)
class Weakness:
    """Aggregated error pattern for one category."""
    category: ErrorCategory
    count: int
    recent_count: int
    trend: WeaknessTrend
    severity: WeaknessSeverity
    affected_item_ids: tuple[str, ...]
    examples: tuple[ErrorExample, ...]
    description: str
    advice: str


@dataclass(frozen=True)
class WeaknessReport:
    top_weaknesses: tuple[Weakness, ...]
    total_errors: int
    words_with_errors: int
    has_enough_data: bool


@dataclass(frozen=True)
class WeaknessPracticeItem:
    word_id: str
    arabic: str
    english: str
    focus_category: ErrorCategory
    instruction: str
