from datetime import timedelta

from madina.analytics import (
    ErrorRecord,
    analyze_weaknesses,
    error_category_label,
    generate_weakness_practice,
    has_significant_weaknesses,
    weakness_summary,
)
from madina.analytics.weakness import practice_instruction, severity_for_count, trend_for_counts
from madina.arabic import ErrorCategory

from conftest import identity_shuffle


def errors(now, category, count, days_ago, item_ids=("w1",), with_text=True):
    return [
        ErrorRecord(
            category=category,
            timestamp=now - timedelta(days=days_ago, minutes=i),
            item_id=item_ids[i % len(item_ids)],
            expected="كتاب" if with_text else None,
            actual="كتب" if with_text else None,
        )
        for i in range(count)
    ]


def mixed_errors(now):
    return (
        errors(now, ErrorCategory.TYPO, 10, days_ago=1, item_ids=("w1", "w2", "w1"))
        + errors(now, ErrorCategory.LETTER_CONFUSION, 5, days_ago=30, item_ids=("w3",), with_text=False)
        + errors(now, ErrorCategory.SPELLING_ERROR, 1, days_ago=2, item_ids=("w4",))
        + errors(now, ErrorCategory.SPELLING_ERROR, 2, days_ago=20, item_ids=("w4",))
        + errors(now, ErrorCategory.WORD_ORDER, 2, days_ago=1, item_ids=("w5",))
    )


def test_no_errors(now):
    report = analyze_weaknesses([], now)
    assert report.total_errors == 0
    assert not report.has_enough_data
    assert weakness_summary(report) == "Keep practicing to identify areas for improvement"


def test_too_few_errors(now):
    report = analyze_weaknesses(errors(now, ErrorCategory.TYPO, 2, days_ago=1), now)
    assert not report.has_enough_data
    assert report.top_weaknesses == ()
    assert not has_significant_weaknesses(report)


def test_weaknesses_ranked_by_severity(now):
    report = analyze_weaknesses(mixed_errors(now), now)

    assert report.total_errors == 20
    assert report.words_with_errors == 5
    assert report.has_enough_data
    assert [w.category for w in report.top_weaknesses] == [
        ErrorCategory.TYPO,
        ErrorCategory.LETTER_CONFUSION,
        ErrorCategory.SPELLING_ERROR,
    ]

    typo, confusion, spelling = report.top_weaknesses
    assert (typo.severity, typo.trend, typo.recent_count) == ("severe", "worsening", 10)
    assert (confusion.severity, confusion.trend, confusion.recent_count) == ("moderate", "improving", 0)
    assert (spelling.severity, spelling.trend, spelling.count) == ("mild", "stable", 3)
    assert set(typo.affected_item_ids) == {"w1", "w2"}
    assert len(typo.affected_item_ids) == 2
    assert len(typo.examples) == 5
    assert confusion.examples == ()
    assert typo.description == "Typing errors"
    assert weakness_summary(report) == "Focus area: Typing errors"


def test_no_significant_weakness(now):
    records = (
        errors(now, ErrorCategory.TYPO, 2, days_ago=1)
        + errors(now, ErrorCategory.WORD_ORDER, 2, days_ago=1)
    )
    report = analyze_weaknesses(records, now)
    assert report.has_enough_data
    assert report.top_weaknesses == ()
    assert weakness_summary(report) == "No significant weaknesses detected"


def test_severity_and_trend_thresholds():
    assert severity_for_count(10) == "severe"
    assert severity_for_count(5) == "moderate"
    assert severity_for_count(4) == "mild"
    assert trend_for_counts(10, 7) == "worsening"
    assert trend_for_counts(10, 6) == "stable"
    assert trend_for_counts(10, 2) == "improving"


def test_practice_items_for_weakness(now):
    report = analyze_weaknesses(mixed_errors(now), now)
    typo = report.top_weaknesses[0]
    words = {
        "w1": {"arabic": "كِتَابٌ", "english": "book"},
        "w2": {"arabic": "قَلَمٌ", "english": "pen"},
    }
    items = generate_weakness_practice(typo, words, shuffle=identity_shuffle)

    assert {item.word_id for item in items} == {"w1", "w2"}
    assert all(item.instruction == "Type slowly and accurately" for item in items)
    assert all(item.focus_category == ErrorCategory.TYPO for item in items)

    assert len(generate_weakness_practice(typo, words, max_items=1, shuffle=identity_shuffle)) == 1
    assert generate_weakness_practice(typo, {}, shuffle=identity_shuffle) == []


def test_labels():
    assert error_category_label("typo") == "Typos"
    assert practice_instruction(ErrorCategory.TASHKEEL_WRONG) == "Pay special attention to the vowel marks"
