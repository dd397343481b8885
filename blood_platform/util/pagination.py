from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    page: int
    page_size: int
    total: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total > 0 else 0


def page_window(*, page: int, page_size: int, total: int) -> PageWindow:
    """1-based page window. Pages below 1 are clamped to 1; pages past the end return no rows."""
    if page_size < 1:
        raise ValueError("page_size_must_be_positive")
    return PageWindow(page=max(1, int(page)), page_size=int(page_size), total=max(0, int(total)))
