"""Hint-to-candidate matching and selection logic."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from iosctl.core.errors import NoMatchingTargetError
from iosctl.core.fuzzy import score
from iosctl.core.model import Candidate

MIN_DEVICE_MATCH_SCORE = 0

ChoiceFn = Callable[[str, Sequence[Candidate], str], int]


def match_score(hint: str, candidate: Candidate) -> int:
    return score(hint, candidate.name)


def best_candidate(hint: str, candidates: Sequence[Candidate]) -> tuple[Candidate, int]:
    """Return the highest scoring candidate and its score.

    Candidates are scanned in reverse enumeration order and the first maximum
    wins, so on equal scores the candidate enumerated last is picked.
    """
    if not candidates:
        raise ValueError("best_candidate() requires at least one candidate")
    scored = [(c, match_score(hint, c)) for c in reversed(candidates)]
    return max(scored, key=lambda pair: pair[1])


def select_candidate(
    candidates: Sequence[Candidate],
    hint: str | None,
    *,
    label: str,
    choose: ChoiceFn,
) -> Candidate:
    """Pick one candidate out of a non-empty list.

    With a hint, even an empty one, the best fuzzy match must clear
    `MIN_DEVICE_MATCH_SCORE`.
    Without one, a single candidate is taken as is and several are handed to
    `choose` for an interactive pick.
    """
    if hint is not None:
        candidate, best = best_candidate(hint, candidates)
        if best > MIN_DEVICE_MATCH_SCORE:
            return candidate
        raise NoMatchingTargetError(f"Could not find an iOS {label} matching '{hint}'")

    if len(candidates) == 1:
        return candidates[0]
    index = choose(f"Detected iOS {label}s", candidates, label)
    return candidates[index]
