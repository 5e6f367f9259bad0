"""Subsequence-based fuzzy scoring of a query against a display name."""

from __future__ import annotations

MATCH_SCORE = 10
WORD_START_BONUS = 6
CONSECUTIVE_BONUS = 8
CASE_BONUS = 1
UNMATCHED_PENALTY = 1


def _char_bonus(query: str, name: str, qi: int, ni: int) -> int:
    bonus = MATCH_SCORE
    if ni == 0 or not name[ni - 1].isalnum():
        bonus += WORD_START_BONUS
    if name[ni] == query[qi]:
        bonus += CASE_BONUS
    return bonus


def score(query: str, candidate_name: str) -> int:
    """Return a non-negative similarity score, 0 meaning no match.

    Every query character must appear in `candidate_name` in order
    (case-insensitively). Among all such alignments the best one is scored:
    matched characters earn points, with bonuses for word starts, runs of
    consecutive matches and exact case, minus a small penalty per name
    character left unmatched. A fully matched query never scores below 1.
    """
    q = query.strip()
    if not q or not candidate_name:
        return 0

    q_lower = q.lower()
    n_lower = candidate_name.lower()
    n, m = len(q), len(candidate_name)
    if n > m:
        return 0

    # prev[j]: best score with query[:i] aligned and query[i-1] at name[j]
    prev: list[int | None] = [None] * m
    for i in range(n):
        cur: list[int | None] = [None] * m
        running: int | None = None
        for j in range(i, m):
            k = j - 2
            if k >= 0 and prev[k] is not None:
                running = prev[k] if running is None else max(running, prev[k])
            if n_lower[j] != q_lower[i]:
                continue
            bonus = _char_bonus(q, candidate_name, i, j)
            if i == 0:
                cur[j] = bonus
                continue
            options: list[int] = []
            if prev[j - 1] is not None:
                options.append(prev[j - 1] + CONSECUTIVE_BONUS)
            if running is not None:
                options.append(running)
            if options:
                cur[j] = max(options) + bonus
        prev = cur

    aligned = [value for value in prev if value is not None]
    if not aligned:
        return 0
    return max(max(aligned) - UNMATCHED_PENALTY * (m - n), 1)
