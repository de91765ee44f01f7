"""
Weakness Analysis - error patterns and targeted practice

Groups error records by category to find what the learner keeps getting
wrong, then builds practice focused on those items.

- Severity: >= 10 errors severe, >= 5 moderate, otherwise mild
- Trend: share of errors in the last 14 days (> 0.6 worsening,
  < 0.3 improving)
- Ranking: severe first, then by error count; top 5 reported
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

import pandas as pd

from madina.analytics.constants import (
    DEFAULT_PRACTICE_ITEMS,
    ERROR_CATEGORY_INFO,
    ERROR_CATEGORY_LABELS,
    IMPROVING_RECENT_RATIO,
    MAX_EXAMPLES_PER_WEAKNESS,
    MAX_TOP_WEAKNESSES,
    MIN_ERRORS_FOR_WEAKNESS,
    MODERATE_ERROR_COUNT,
    PRACTICE_INSTRUCTIONS,
    RECENT_ERROR_DAYS,
    SEVERE_ERROR_COUNT,
    SEVERITY_ORDER,
    WORSENING_RECENT_RATIO,
)
from madina.analytics.types import (
    ErrorExample,
    ErrorRecord,
    Weakness,
    WeaknessPracticeItem,
    WeaknessReport,
    WeaknessSeverity,
    WeaknessTrend,
)
from madina.arabic import ErrorCategory, coerce_error_category
from madina.shuffle import Shuffle, fisher_yates_shuffle
from madina.sm2.review_state import ensure_aware, utc_now


logger = logging.getLogger(__name__)

ERROR_COLUMNS = ["category", "timestamp", "item_id", "expected", "actual"]


def load_errors_df(records: Iterable[ErrorRecord]) -> pd.DataFrame:
    """Error records as a dataframe in chronological order."""
    rows = [
        {
            "category": coerce_error_category(r.category).value,
            "timestamp": r.timestamp,
            "item_id": r.item_id,
            "expected": r.expected,
            "actual": r.actual,
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=ERROR_COLUMNS)

    df = pd.DataFrame(rows, columns=ERROR_COLUMNS)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


def severity_for_count(count: int) -> WeaknessSeverity:
    if count >= SEVERE_ERROR_COUNT:
        return "severe"
    if count >= MODERATE_ERROR_COUNT:
        return "moderate"
    return "mild"


def trend_for_counts(total: int, recent: int) -> WeaknessTrend:
    """Mostly-recent errors mean the weakness is getting worse."""
    ratio = recent / total if total > 0 else 0.0
    if ratio > WORSENING_RECENT_RATIO:
        return "worsening"
    if ratio < IMPROVING_RECENT_RATIO:
        return "improving"
    return "stable"


def _examples(group: pd.DataFrame) -> tuple[ErrorExample, ...]:
    with_text = group.dropna(subset=["expected", "actual"])
    return tuple(
        ErrorExample(expected=str(row.expected), actual=str(row.actual))
        for row in with_text.head(MAX_EXAMPLES_PER_WEAKNESS).itertuples(index=False)
    )


def analyze_weaknesses(
    records: Iterable[ErrorRecord],
    now: Optional[datetime] = None
) -> WeaknessReport:
    """
    Build a weakness report from the error log.

    Args:
        records: Error records (any order)
        now: Reference time for the recent window (defaults to now)

    Returns:
        WeaknessReport with at most MAX_TOP_WEAKNESSES entries; categories
        with fewer than MIN_ERRORS_FOR_WEAKNESS errors are left out
    """
    if now is None:
        now = utc_now()
    df = load_errors_df(records)
    total_errors = len(df)

    if df.empty:
        return WeaknessReport(
            top_weaknesses=(), total_errors=0, words_with_errors=0, has_enough_data=False
        )

    recent_cutoff = pd.Timestamp(ensure_aware(now) - timedelta(days=RECENT_ERROR_DAYS))
    df["is_recent"] = df["timestamp"] >= recent_cutoff

    weaknesses: list[Weakness] = []
    for category_value, group in df.groupby("category", sort=False):
        count = len(group)
        if count < MIN_ERRORS_FOR_WEAKNESS:
            continue

        category = ErrorCategory(category_value)
        recent_count = int(group["is_recent"].sum())
        description, advice = ERROR_CATEGORY_INFO[category]

        weaknesses.append(Weakness(
            category=category,
            count=count,
            recent_count=recent_count,
            trend=trend_for_counts(count, recent_count),
            severity=severity_for_count(count),
            affected_item_ids=tuple(group["item_id"].drop_duplicates()),
            examples=_examples(group),
            description=description,
            advice=advice,
        ))

    weaknesses.sort(key=lambda w: (SEVERITY_ORDER[w.severity], -w.count))
    logger.debug(
        "Weakness analysis: %d errors, %d significant categories",
        total_errors, len(weaknesses),
    )

    return WeaknessReport(
        top_weaknesses=tuple(weaknesses[:MAX_TOP_WEAKNESSES]),
        total_errors=total_errors,
        words_with_errors=int(df["item_id"].nunique()),
        has_enough_data=total_errors >= MIN_ERRORS_FOR_WEAKNESS,
    )


def has_significant_weaknesses(report: WeaknessReport) -> bool:
    return report.has_enough_data and len(report.top_weaknesses) > 0


def weakness_summary(report: WeaknessReport) -> str:
    """One-line summary of the learner's main focus area."""
    if not report.has_enough_data:
        return "Keep practicing to identify areas for improvement"
    if not report.top_weaknesses:
        return "No significant weaknesses detected"
    return f"Focus area: {report.top_weaknesses[0].description}"


def error_category_label(category: ErrorCategory | str) -> str:
    return ERROR_CATEGORY_LABELS[coerce_error_category(category)]


def practice_instruction(category: ErrorCategory | str) -> str:
    return PRACTICE_INSTRUCTIONS.get(coerce_error_category(category), "Practice this word")


def generate_weakness_practice(
    weakness: Weakness,
    words: Mapping[str, Mapping],
    max_items: int = DEFAULT_PRACTICE_ITEMS,
    shuffle: Optional[Shuffle] = None
) -> list[WeaknessPracticeItem]:
    """
    Practice items for the words affected by a weakness.

    Args:
        weakness: The weakness to target
        words: word id -> word data (needs 'arabic' and 'english');
               ids missing from the mapping are skipped
        max_items: Maximum items to return
        shuffle: Shuffler for the affected words (defaults to Fisher-Yates)

    Returns:
        Up to max_items practice items in shuffled order
    """
    shuffle = shuffle or fisher_yates_shuffle
    affected = [word_id for word_id in weakness.affected_item_ids if word_id in words]
    if not affected:
        return []

    instruction = practice_instruction(weakness.category)
    return [
        WeaknessPracticeItem(
            word_id=word_id,
            arabic=str(words[word_id].get("arabic", "")),
            english=str(words[word_id].get("english", "")),
            focus_category=weakness.category,
            instruction=instruction,
        )
        for word_id in shuffle(affected)[:max(0, max_items)]
    ]
