from __future__ import annotations

import math
from typing import Optional, Tuple

from .config import PaginationConfig
from .models import PaginationMeta


def resolve_page(
    page: Optional[int],
    page_size: Optional[int],
    cfg: Optional[PaginationConfig] = None,
) -> Tuple[int, int]:
    """Clamp a requested page to ``>= 1`` and its size to ``1..max_page_size``."""

    cfg = cfg or PaginationConfig()
    resolved_page = max(1, page or 1)
    size = cfg.default_page_size if page_size is None else page_size
    resolved_size = min(max(1, size), cfg.max_page_size)
    return resolved_page, resolved_size


def build_pagination_meta(page: int, page_size: int, total_items: int) -> PaginationMeta:
    total_pages = math.ceil(total_items / page_size) if page_size else 0
    return PaginationMeta(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
