from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

DEFAULT_PAGE_SIZE = 20


def page_count(item_count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be greater than zero")
    return max(1, math.ceil(item_count / page_size))


def clamp_page(page: int, item_count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return min(max(page, 0), page_count(item_count, page_size) - 1)


def has_next_page(page: int, item_count: int, page_size: int = DEFAULT_PAGE_SIZE) -> bool:
    return (page + 1) * page_size < item_count


def has_previous_page(page: int) -> bool:
    return page > 0


@dataclass(frozen=True)
class PageView:
    items: Sequence
    page: int
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def build(
        cls, items: Sequence, page: int, page_size: int = DEFAULT_PAGE_SIZE
    ) -> "PageView":
        return cls(
            items=items,
            page=clamp_page(page, len(items), page_size),
            page_size=page_size,
        )

    @property
    def page_count(self) -> int:
        return page_count(len(self.items), self.page_size)

    @property
    def start(self) -> int:
        return self.page * self.page_size

    @property
    def end(self) -> int:
        return min(self.start + self.page_size, len(self.items))

    @property
    def visible(self) -> Sequence:
        return self.items[self.start : self.end]

    @property
    def has_next(self) -> bool:
        return has_next_page(self.page, len(self.items), self.page_size)

    @property
    def has_previous(self) -> bool:
        return has_previous_page(self.page)

    def numbered(self) -> Iterator[tuple[int, object]]:
        for offset, item in enumerate(self.visible):
            yield self.start + offset, item

