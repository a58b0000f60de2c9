"""Rule-based name similarity.

Scoring ladder:
1. Exact normalized match -> 1.0
2. One name contains the other -> 0.8
3. Token overlap ratio (tokens of length <= 2 ignored)
"""

from attendance_recon.matching.normalizer import normalize

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.8
MIN_TOKEN_LENGTH = 3


def _tokens(normalized: str) -> list[str]:
    return [t for t in normalized.split(" ") if len(t) >= MIN_TOKEN_LENGTH]


def similarity(a: str, b: str) -> float:
    """Score how alike two names are.

    The token-overlap ratio counts every matching (token_a, token_b) pair,
    so repeated tokens can push it above 1.0. It is not clamped.

    Args:
        a: First name or variation
        b: Second name or variation

    Returns:
        Similarity score, normally within 0-1
    """
    norm_a = normalize(a)
    norm_b = normalize(b)

    if norm_a == norm_b:
        return EXACT_SCORE

    if norm_b in norm_a or norm_a in norm_b:
        return CONTAINMENT_SCORE

    tokens_a = _tokens(norm_a)
    tokens_b = _tokens(norm_b)
    if not tokens_a or not tokens_b:
        return 0.0

    matching = sum(
        1
        for ta in tokens_a
        for tb in tokens_b
        if ta == tb or tb in ta or ta in tb
    )
    return matching / max(len(tokens_a), len(tokens_b))
