import pytest

from seo_audit.analyzers.duplicates import (
    ContentHashRegistry,
    NearDuplicateRegistry,
    evaluate_exact_duplicate,
    evaluate_near_duplicate,
    extract_trigrams,
    jaccard_similarity,
)
from seo_audit.types import RuleStatus
from tests.conftest import words

BASE = words("alpha", 100)


def test_jaccard_edge_cases() -> None:
    assert jaccard_similarity(frozenset(), frozenset()) == 1.0
    assert jaccard_similarity(frozenset({"a b c"}), frozenset()) == 0.0
    assert jaccard_similarity(frozenset(), frozenset({"a b c"})) == 0.0
    assert jaccard_similarity(frozenset({"x", "y"}), frozenset({"y", "z"})) == pytest.approx(1 / 3)
    assert jaccard_similarity(frozenset({"x"}), frozenset({"x"})) == 1.0


def test_extract_trigrams_strips_punctuation_and_caps_words() -> None:
    assert extract_trigrams("The quick, brown fox!") == frozenset({"the quick brown", "quick brown fox"})
    assert extract_trigrams("one two") == frozenset()
    assert len(extract_trigrams(words("w", 600))) == 498


def test_short_text_is_skipped_and_not_registered() -> None:
    registry = NearDuplicateRegistry()
    result = evaluate_near_duplicate(registry, "https://a.test/", "too short " * 5)
    assert result.status is RuleStatus.PASS
    assert registry.stats().total_pages == 0


def test_low_trigram_page_is_registered() -> None:
    registry = NearDuplicateRegistry()
    result = evaluate_near_duplicate(registry, "https://a.test/", "lorem " * 25)
    assert result.status is RuleStatus.PASS
    assert "too few" in result.message
    assert registry.stats().total_pages == 1


def test_first_qualifying_page_passes() -> None:
    registry = NearDuplicateRegistry()
    result = evaluate_near_duplicate(registry, "https://a.test/", BASE)
    assert result.status is RuleStatus.PASS
    assert result.details["most_similar_url"] is None
    assert registry.stats().total_pages == 1


@pytest.mark.parametrize(
    ("extra_words", "expected"),
    [
        (10, RuleStatus.FAIL),
        (42, RuleStatus.WARN),
        (100, RuleStatus.PASS),
    ],
)
def test_similarity_bands(extra_words: int, expected: RuleStatus) -> None:
    registry = NearDuplicateRegistry()
    evaluate_near_duplicate(registry, "https://a.test/", BASE)
    text = BASE + " " + words("beta", extra_words)
    result = evaluate_near_duplicate(registry, "https://b.test/", text)
    assert result.status is expected
    assert result.details["most_similar_url"] == "https://a.test/"
    assert registry.stats().total_pages == 2


def test_fail_names_the_most_similar_url() -> None:
    registry = NearDuplicateRegistry()
    evaluate_near_duplicate(registry, "https://a.test/", words("gamma", 100))
    evaluate_near_duplicate(registry, "https://b.test/", BASE)
    result = evaluate_near_duplicate(registry, "https://c.test/", BASE)
    assert result.status is RuleStatus.FAIL
    assert "https://b.test/" in result.message
    assert result.details["highest_similarity"] == 1.0


def test_reset_clears_fingerprints() -> None:
    registry = NearDuplicateRegistry()
    evaluate_near_duplicate(registry, "https://a.test/", BASE)
    registry.reset()
    assert registry.stats().total_pages == 0
    assert evaluate_near_duplicate(registry, "https://b.test/", BASE).status is RuleStatus.PASS


def test_exact_duplicate_detection() -> None:
    registry = ContentHashRegistry()
    text = "Identical body copy that is comfortably longer than fifty characters."
    assert evaluate_exact_duplicate(registry, "https://a.test/", text).status is RuleStatus.PASS
    dup = evaluate_exact_duplicate(registry, "https://b.test/", "  " + text.replace(" ", "   "))
    assert dup.status is RuleStatus.FAIL
    assert dup.message == "Exact duplicate content detected (matches https://a.test/)"
    assert registry.stats().total_hashes == 1
    assert evaluate_exact_duplicate(registry, "https://c.test/", "short").status is RuleStatus.PASS
