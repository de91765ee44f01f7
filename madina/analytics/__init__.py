"""
Analytics package exports.
"""

from madina.analytics.calibration import (
    calculate_calibration_stats,
    calibration_trend,
    confidence_level_label,
)
from madina.analytics.types import (
    CalibrationRecord,
    CalibrationStats,
    ErrorRecord,
    LevelStats,
    Weakness,
    WeaknessPracticeItem,
    WeaknessReport,
)
from madina.analytics.weakness import (
    analyze_weaknesses,
    error_category_label,
    generate_weakness_practice,
    has_significant_weaknesses,
    weakness_summary,
)

__all__ = [
    "calculate_calibration_stats",
    "calibration_trend",
    "confidence_level_label",
    "CalibrationRecord",
    "CalibrationStats",
    "ErrorRecord",
    "LevelStats",
    "Weakness",
    "WeaknessPracticeItem",
    "WeaknessReport",
    "analyze_weaknesses",
    "error_category_label",
    "generate_weakness_practice",
    "has_significant_weaknesses",
    "weakness_summary",
]
