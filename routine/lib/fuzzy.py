from collections.abc import Sequence
from difflib import get_close_matches

from routine.core.errors import AmbiguousError
from routine.core.models import Habit

__all__ = ["find_in_pool"]

FUZZY_MATCH_CUTOFF = 0.8


def _match_uuid_prefix(ref: str, pool: Sequence[Habit]) -> Habit | None:
    ref_lower = ref.lower()
    exact = next((h for h in pool if h.id == ref_lower), None)
    if exact:
        return exact
    matches = [h for h in pool if h.id.startswith(ref_lower)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        sample = [h.id[:8] for h in matches[:3]]
        raise AmbiguousError(ref, count=len(matches), sample=sample)
    return None


def _match_name(ref: str, pool: Sequence[Habit]) -> Habit | None:
    ref_lower = ref.lower()
    exact = next((h for h in pool if h.name.lower() == ref_lower), None)
    if exact:
        return exact
    matches = [h for h in pool if ref_lower in h.name.lower()]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise AmbiguousError(ref, count=len(matches), sample=[h.name for h in matches[:3]])
    return None


def _match_fuzzy(ref: str, pool: Sequence[Habit]) -> Habit | None:
    names = {h.name.lower(): h for h in pool}
    matches = get_close_matches(ref.lower(), list(names), n=1, cutoff=FUZZY_MATCH_CUTOFF)
    return names[matches[0]] if matches else None


def find_in_pool(ref: str, pool: Sequence[Habit]) -> Habit | None:
    """Resolve ref by id prefix, then name (exact or substring), then close spelling."""
    if not pool or not ref:
        return None
    return _match_uuid_prefix(ref, pool) or _match_name(ref, pool) or _match_fuzzy(ref, pool)

