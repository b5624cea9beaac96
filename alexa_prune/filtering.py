from __future__ import annotations

from typing import Iterable, List, Optional

from .pipeline_types import CandidateRecord


def matches_filter(value: Optional[str], phrase: str) -> bool:
    """Plain case-insensitive substring test; no word boundaries."""
    needle = (phrase or "").casefold()
    if not needle:
        return True
    if not value:
        return False
    return needle in value.casefold()


def select_candidates(
    records: Iterable[CandidateRecord],
    phrase: str,
    field: str = "description",
) -> List[CandidateRecord]:
    """
    Keep the records whose `field` contains `phrase`, preserving order.

    field is "description" for the entity pass and "manufacturer" for the
    endpoint pass.
    """
    return [r for r in records if matches_filter(getattr(r, field), phrase)]
