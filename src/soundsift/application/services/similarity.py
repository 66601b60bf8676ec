"""Field similarity scoring.

Hey future me - scores here are in [0, 1], thresholds on MatchingConfig are in
percent! The matcher does the *100, don't mix them up.

Contract (for already-normalized strings):
    both empty        -> 1.0
    exactly one empty -> 0.0
    otherwise         -> 1 - levenshtein(a, b) / max(len(a), len(b))

We use rapidfuzz's Levenshtein (C++ backed, uniform weights) rather than
fuzz.ratio - fuzz.ratio is an InDel ratio and doesn't follow the contract above.

The optional word-order bonus compares the strings again with their tokens
sorted and keeps the better score, so "night at red skies" vs "red skies at
night" still scores high. It is only applied when the config asks for it.
"""

from rapidfuzz.distance import Levenshtein


def edit_similarity(a: str, b: str) -> float:
    """Normalized Levenshtein similarity of two normalized strings.

    Symmetric and bounded in [0, 1]; similarity(x, x) == 1.0.
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return float(Levenshtein.normalized_similarity(a, b))


def _sorted_tokens(text: str) -> str:
    return " ".join(sorted(text.split()))


def field_similarity(a: str, b: str, word_order_insensitive: bool = False) -> float:
    """Score two normalized field values.

    Args:
        a: First normalized value
        b: Second normalized value
        word_order_insensitive: Also score with tokens sorted, keep the max

    Returns:
        Similarity in [0, 1]
    """
    score = edit_similarity(a, b)
    if word_order_insensitive and score < 1.0 and a and b:
        score = max(score, edit_similarity(_sorted_tokens(a), _sorted_tokens(b)))
    return score


__all__ = ["edit_similarity", "field_similarity"]
