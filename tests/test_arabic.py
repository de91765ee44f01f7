import pytest

from madina.arabic import (
    ErrorCategory,
    analyze_arabic_error,
    coerce_error_category,
    compare_answers,
    compare_answers_strict,
    error_explanation,
    extract_tashkeel,
    find_letter_confusions,
    has_tashkeel,
    levenshtein_distance,
    normalize_arabic,
    remove_tashkeel,
    split_words,
)


KITAB = "كتاب"
KITAB_VOWELLED = "كِتَاب"
KITAB_WRONG_VOWELS = "كَتَاب"
MADRASA = "مدرسة"
MADRASA_HA = "مدرسه"


class TestNormalization:
    def test_remove_tashkeel(self):
        assert remove_tashkeel(KITAB_VOWELLED) == KITAB
        assert remove_tashkeel("كتابٌ") == KITAB

    def test_normalize_trims_and_collapses_whitespace(self):
        assert normalize_arabic("  هٰذَا   كِتَابٌ ") == "هذا كتاب"

    def test_compare_answers_ignores_tashkeel(self):
        assert compare_answers(KITAB, KITAB_VOWELLED)
        assert not compare_answers(KITAB, MADRASA)

    def test_strict_comparison_requires_tashkeel(self):
        assert not compare_answers_strict(KITAB, KITAB_VOWELLED)
        assert compare_answers_strict(f" {KITAB_VOWELLED} ", KITAB_VOWELLED)

    def test_tashkeel_helpers(self):
        assert extract_tashkeel(KITAB_VOWELLED) == ["\u0650", "\u064e"]
        assert has_tashkeel(KITAB_VOWELLED)
        assert not has_tashkeel(KITAB)

    def test_split_words(self):
        assert split_words(" فِي  الْبَيْتِ ") == ["في", "البيت"]
        assert split_words("   ") == []


class TestErrorAnalysis:
    def test_empty_answer(self):
        analysis = analyze_arabic_error(KITAB, "  ")
        assert analysis.category == ErrorCategory.VOCABULARY_UNKNOWN
        assert analysis.details == "No answer provided"

    def test_missing_tashkeel(self):
        assert analyze_arabic_error(KITAB_VOWELLED, KITAB).category == ErrorCategory.TASHKEEL_MISSING

    def test_wrong_tashkeel(self):
        assert analyze_arabic_error(KITAB_VOWELLED, KITAB_WRONG_VOWELS).category == ErrorCategory.TASHKEEL_WRONG

    def test_letter_confusion(self):
        analysis = analyze_arabic_error(MADRASA, MADRASA_HA)
        assert analysis.category == ErrorCategory.LETTER_CONFUSION
        assert analysis.details == "Letter confusion: ه → ة"
        assert analysis.letter_confusions[0].expected == "ة"

    @pytest.mark.parametrize("actual,category", [
        ("abcdefghiX", ErrorCategory.TYPO),
        ("abcdefXXXX", ErrorCategory.SPELLING_ERROR),
        ("abcdXXXXXX", ErrorCategory.PARTIAL_MATCH),
        ("XXXXXXXXXX", ErrorCategory.VOCABULARY_UNKNOWN),
    ])
    def test_similarity_bands(self, actual, category):
        assert analyze_arabic_error("abcdefghij", actual).category == category

    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance(KITAB, KITAB) == 0

    def test_confusions_ignore_identical_letters(self):
        assert find_letter_confusions(KITAB, KITAB) == []


def test_error_explanation_names_confused_letters():
    message = error_explanation("letter_confusion", MADRASA, MADRASA_HA)
    assert message == 'You wrote "ه" but the correct letter is "ة". These letters are commonly confused.'


def test_error_explanation_generic():
    assert error_explanation(ErrorCategory.TYPO) == "Almost correct! Check for any typing mistakes."


def test_unknown_error_category_raises():
    with pytest.raises(ValueError):
        coerce_error_category("grammar")
