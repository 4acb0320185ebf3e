"""Lightweight text heuristics used by the scorers.

These are deliberately simple: keyword runs instead of a tokenizer, Jaccard
overlap instead of semantic similarity, and a loose character-subset match
for element coverage.
"""

import re
from typing import Iterable

# Runs of >= 2 CJK ideographs, or >= 2 ASCII word characters
KEYWORD_PATTERN = re.compile(r"[一-鿿]{2,}|[A-Za-z0-9]{2,}")


def extract_keywords(text: str) -> set[str]:
    """Extract the keyword set of a text.

    Args:
        text: Free text (Chinese, English or mixed)

    Returns:
        Set of keyword runs, ASCII runs lower-cased

    Examples:
        >>> sorted(extract_keywords("合同是否成立？Offer and acceptance"))
        ['acceptance', 'and', 'offer', '合同是否成立']
    """
    return {match.lower() for match in KEYWORD_PATTERN.findall(text)}


def jaccard(left: set[str], right: set[str]) -> float:
    """Jaccard overlap |A∩B| / |A∪B|, 0.0 when both are empty."""
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def fuzzy_match(text: str, keyword: str) -> bool:
    """Loose match: every character of keyword occurs somewhere in text.

    Order and contiguity are ignored, so this registers false positives for
    texts that merely share characters with the keyword.
    """
    chars = [char for char in keyword if not char.isspace()]
    if not chars:
        return False
    return all(char in text for char in chars)


def contains_element(text: str, element: str) -> bool:
    """Check if an element appears in text, exactly or by fuzzy match."""
    if not element.strip():
        return False
    return element in text or fuzzy_match(text, element)


def covered_elements(text: str, elements: Iterable[str]) -> list[str]:
    """Elements found in text, in the given order."""
    return [element for element in elements if contains_element(text, element)]


def missing_elements(text: str, elements: Iterable[str]) -> list[str]:
    """Elements not found in text, in the given order."""
    return [element for element in elements if not contains_element(text, element)]


def interpolate(
    value: float,
    low: float,
    high: float,
    score_low: float,
    score_high: float,
) -> int:
    """Map value in [low, high] linearly onto [score_low, score_high].

    Values outside the range are clamped.

    Examples:
        >>> interpolate(0.55, 0.4, 0.7, 70, 90)
        80
    """
    if high <= low:
        return round(score_high)
    ratio = min(1.0, max(0.0, (value - low) / (high - low)))
    return round(score_low + ratio * (score_high - score_low))


def contains_any(text: str, markers: Iterable[str]) -> bool:
    """Check if any marker occurs in text (case-insensitive for ASCII)."""
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in markers)


def char_ngrams(text: str, n: int = 2) -> set[str]:
    """Character n-grams of text with whitespace and punctuation removed."""
    chars = "".join(char for char in text if char.isalnum()).lower()
    if len(chars) < n:
        return {chars} if chars else set()
    return {chars[i : i + n] for i in range(len(chars) - n + 1)}
