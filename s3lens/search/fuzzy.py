"""Fuzzy ranking for entry names and history locations.

Every candidate that contains the query as an in-order subsequence matches;
candidates containing it verbatim rank above the rest (earlier is better).
"""

from __future__ import annotations

SUBSTRING_BONUS = 10_000


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` as an in-order subsequence match of ``query``.

    Returns ``None`` when some query character cannot be matched. Consecutive
    runs and matches at word boundaries score higher; long candidates are
    penalized slightly.
    """
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def substring_index(query: str, candidate: str) -> int | None:
    if not query:
        return 0
    idx = candidate.casefold().find(query.casefold())
    if idx < 0:
        return None
    return idx


def rank_labels(query: str, labels: list[str]) -> list[int]:
    """Return indices of ``labels`` matching ``query``, best match first.

    An empty query keeps every label in its original order.
    """
    if not query:
        return list(range(len(labels)))

    scored: list[tuple[int, int, int]] = []
    for idx, label in enumerate(labels):
        score = fuzzy_score(query, label)
        if score is None:
            continue
        substr_idx = substring_index(query, label)
        if substr_idx is not None:
            score += SUBSTRING_BONUS - substr_idx * 50
        scored.append((score, len(label), idx))
    scored.sort(key=lambda item: (-item[0], item[1], item[2]))
    return [idx for _, _, idx in scored]
