from __future__ import annotations

from typing import Iterable, List, Optional


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Trim, lower-case and deduplicate tags. Empty entries are dropped."""

    if not tags:
        return []
    return _dedupe(tag.strip().lower() for tag in tags)


def normalize_compliance_frameworks(frameworks: Optional[Iterable[str]]) -> List[str]:
    """Trim and deduplicate framework names, preserving case."""

    if not frameworks:
        return []
    return _dedupe(framework.strip() for framework in frameworks)
