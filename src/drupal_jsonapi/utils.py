"""Utility functions for resource type suggestions."""

from difflib import get_close_matches


def suggest_similar_strings(
    target: str,
    candidates: set[str] | list[str],
    threshold: float = 0.6,
    max_results: int = 3,
) -> list[str]:
    """Suggest candidates close to ``target``, best match first.

    Candidates sharing the target's entity kind (the part before ``--``) are
    ranked ahead of the rest, so ``node--articel`` suggests ``node--article``
    before ``taxonomy_term--article``.

    Args:
        target: String to match against.
        candidates: Candidate strings, e.g. index link names.
        threshold: Minimum similarity ratio (0.0 to 1.0).
        max_results: Maximum number of suggestions to return.
    """
    by_lower = {candidate.lower(): candidate for candidate in candidates}
    matches = get_close_matches(
        target.lower(), list(by_lower), n=len(by_lower) or 1, cutoff=threshold
    )

    kind = target.lower().partition("--")[0]
    same_kind = [m for m in matches if m.partition("--")[0] == kind]
    others = [m for m in matches if m.partition("--")[0] != kind]

    return [by_lower[m] for m in (same_kind + others)[:max_results]]
