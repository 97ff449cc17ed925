from .descriptions import DescriptionRegistry, evaluate_description, normalize_description
from .duplicates import (
    ContentHashRegistry,
    NearDuplicateRegistry,
    evaluate_exact_duplicate,
    evaluate_near_duplicate,
    extract_trigrams,
    jaccard_similarity,
)
from .titles import TitleRegistry, evaluate_title, normalize_title

__all__ = [
    "ContentHashRegistry",
    "DescriptionRegistry",
    "NearDuplicateRegistry",
    "TitleRegistry",
    "evaluate_description",
    "evaluate_exact_duplicate",
    "evaluate_near_duplicate",
    "evaluate_title",
    "extract_trigrams",
    "jaccard_similarity",
    "normalize_description",
    "normalize_title",
]
