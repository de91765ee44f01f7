"""
Confidence Calibration - does the learner's confidence predict correctness?

A well-calibrated learner is right about 33% of the time when "unsure",
66% when "somewhat sure" and 90% when "very sure".

- Score: 1 - count-weighted mean |actual - expected| across levels
- Tendency: count-weighted mean (actual - expected); below -0.15 is
  overconfident, above +0.15 underconfident
- Trend: score of the most recent 20 ratings vs the 20 before them
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd

from madina.analytics.constants import (
    CONFIDENCE_LABELS,
    CONFIDENCE_LEVELS,
    EXCELLENT_CALIBRATION_SCORE,
    EXPECTED_ACCURACY,
    MIN_LEVEL_COUNT_FOR_FEEDBACK,
    MIN_RATINGS_FOR_CALIBRATION,
    TENDENCY_THRESHOLD,
    TREND_THRESHOLD,
    TREND_WINDOW,
)
from madina.analytics.types import (
    CalibrationRecord,
    CalibrationStats,
    CalibrationTendency,
    CalibrationTrend,
    LevelStats,
)


logger = logging.getLogger(__name__)


def coerce_confidence_level(level: int) -> int:
    """Clamp a confidence rating into 1..3."""
    try:
        value = int(level)
    except (TypeError, ValueError):
        logger.warning("Non-numeric confidence level %r, treating as 1", level)
        return CONFIDENCE_LEVELS[0]
    clamped = max(CONFIDENCE_LEVELS[0], min(CONFIDENCE_LEVELS[-1], value))
    if clamped != value:
        logger.debug("Confidence level %d out of range, clamped to %d", value, clamped)
    return clamped


def confidence_level_label(level: int) -> str:
    """Display label for a confidence level."""
    return CONFIDENCE_LABELS[coerce_confidence_level(level)]


def load_calibration_df(records: Iterable[CalibrationRecord]) -> pd.DataFrame:
    """
    Calibration records as a dataframe sorted most recent first.

    Columns: confidence_level, was_correct, timestamp.
    """
    rows = [
        {
            "confidence_level": coerce_confidence_level(r.confidence_level),
            "was_correct": bool(r.was_correct),
            "timestamp": r.timestamp,
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=["confidence_level", "was_correct", "timestamp"])

    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    # Reverse first so equal timestamps keep the latest insertion on top
    return (
        df.iloc[::-1]
        .sort_values("timestamp", ascending=False, kind="stable")
        .reset_index(drop=True)
    )


def compute_level_stats(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-level counts and accuracy, one row for each of levels 1-3.

    Columns: count, correct_count, expected_accuracy, actual_accuracy,
    difference (actual - expected).
    """
    levels = list(CONFIDENCE_LEVELS)
    if df.empty:
        grouped = pd.DataFrame(
            {"count": 0, "correct_count": 0}, index=pd.Index(levels, name="confidence_level")
        )
    else:
        grouped = (
            df.groupby("confidence_level")["was_correct"]
            .agg(count="count", correct_count="sum")
            .reindex(levels, fill_value=0)
        )

    grouped = grouped.astype("int64")
    grouped["expected_accuracy"] = [EXPECTED_ACCURACY[level] for level in levels]
    grouped["actual_accuracy"] = (
        grouped["correct_count"] / grouped["count"].where(grouped["count"] > 0)
    ).fillna(0.0)
    grouped["difference"] = grouped["actual_accuracy"] - grouped["expected_accuracy"]
    return grouped


def _weighted_mean(values: pd.Series, weights: pd.Series) -> Optional[float]:
    total = weights.sum()
    if total <= 0:
        return None
    return float((values * weights).sum() / total)


def determine_tendency(level_stats: pd.DataFrame) -> CalibrationTendency:
    """Overall tendency from the count-weighted mean difference."""
    active = level_stats[level_stats["count"] > 0]
    avg_difference = _weighted_mean(active["difference"], active["count"])
    if avg_difference is None:
        return "insufficient-data"

    # Negative: less accurate than confidence suggests
    if avg_difference < -TENDENCY_THRESHOLD:
        return "overconfident"
    if avg_difference > TENDENCY_THRESHOLD:
        return "underconfident"
    return "well-calibrated"


def _feedback_message(
    tendency: CalibrationTendency,
    level_stats: pd.DataFrame,
    score: float
) -> str:
    eligible = level_stats[level_stats["count"] >= MIN_LEVEL_COUNT_FOR_FEEDBACK]

    if tendency == "overconfident":
        over = eligible[eligible["difference"] < 0]
        if not over.empty and over["difference"].idxmin() == 3:
            return "When you feel 'very sure', pause and double-check. You might be overlooking something."
        return "Your confidence tends to exceed your accuracy. Take a moment to verify before answering."

    if tendency == "underconfident":
        under = eligible[eligible["difference"] > 0]
        if not under.empty and under["difference"].idxmax() == 1:
            return "You know more than you think! Trust your instincts more when answering."
        return "You're more accurate than you believe. Have more confidence in your knowledge!"

    if tendency == "well-calibrated":
        if score >= EXCELLENT_CALIBRATION_SCORE:
            return "Excellent metacognition! Your confidence accurately predicts your performance."
        return "Good calibration. Your confidence levels reasonably match your actual accuracy."

    return "Keep practicing with confidence ratings to unlock your calibration insights."


def _stats_from_df(df: pd.DataFrame) -> CalibrationStats:
    total = len(df)
    if total < MIN_RATINGS_FOR_CALIBRATION:
        return CalibrationStats(
            total_ratings=total,
            calibration_score=0.0,
            tendency="insufficient-data",
            by_level=(),
            feedback_message=(
                f"Need {MIN_RATINGS_FOR_CALIBRATION - total} more ratings "
                f"for calibration analysis."
            ),
        )

    level_stats = compute_level_stats(df)
    active = level_stats[level_stats["count"] > 0]
    mean_error = _weighted_mean(active["difference"].abs(), active["count"]) or 0.0
    score = max(0.0, min(1.0, 1.0 - mean_error))
    tendency = determine_tendency(level_stats)

    by_level = tuple(
        LevelStats(
            level=int(level),
            count=int(row["count"]),
            correct_count=int(row["correct_count"]),
            expected_accuracy=float(row["expected_accuracy"]),
            actual_accuracy=float(row["actual_accuracy"]),
            difference=float(row["difference"]),
        )
        for level, row in level_stats.iterrows()
    )

    return CalibrationStats(
        total_ratings=total,
        calibration_score=score,
        tendency=tendency,
        by_level=by_level,
        feedback_message=_feedback_message(tendency, level_stats, score),
    )


def calculate_calibration_stats(records: Iterable[CalibrationRecord]) -> CalibrationStats:
    """
    Calibration statistics for a set of confidence ratings.

    Args:
        records: Confidence records (any order)

    Returns:
        CalibrationStats; tendency is 'insufficient-data' below
        MIN_RATINGS_FOR_CALIBRATION ratings
    """
    return _stats_from_df(load_calibration_df(records))


def calibration_trend(records: Iterable[CalibrationRecord]) -> CalibrationTrend:
    """
    Compare the most recent 20 ratings with the 20 before them.

    Returns:
        'improving' / 'declining' when the score moved by more than 0.1,
        'stable' otherwise, 'insufficient-data' with fewer than 40 ratings
    """
    df = load_calibration_df(records)
    if len(df) < TREND_WINDOW * 2:
        return "insufficient-data"

    recent = _stats_from_df(df.iloc[:TREND_WINDOW])
    previous = _stats_from_df(df.iloc[TREND_WINDOW:TREND_WINDOW * 2])
    if "insufficient-data" in (recent.tendency, previous.tendency):
        return "insufficient-data"

    improvement = recent.calibration_score - previous.calibration_score
    if improvement > TREND_THRESHOLD:
        return "improving"
    if improvement < -TREND_THRESHOLD:
        return "declining"
    return "stable"
