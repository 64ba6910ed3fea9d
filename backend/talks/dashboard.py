"""Read-only dashboard views over the meeting store.

Three axes are combined here: the status tab, a free-text filter that only
applies inside the active tab, and the explorer page. The featured slider
ignores both filters and always walks the full list of upcoming meetings.
"""

import math
from typing import Callable

from talks.lifecycle import to_view
from talks.models import DashboardPage, FeaturedWindow, Meeting, MeetingStatus

SLIDER_WINDOW = 4
PAGE_SIZE = 10


def matches(meeting: Meeting, query: str) -> bool:
    needle = query.lower()
    return needle in meeting.title.lower() or any(needle in t.lower() for t in meeting.tags)


class DashboardView:
    """
    Per-viewer dashboard state. ``source`` is called on every read so the
    view always reflects the store's current list.
    """

    def __init__(self, source: Callable[[], list[Meeting]]):
        self.source = source
        self.tab = MeetingStatus.UPCOMING
        self.query = ""
        self.slider_index = 0
        self.page = 0

    # ── filters ──────────────────────────────────────────────────────────────
    def set_tab(self, tab: MeetingStatus) -> None:
        self.tab = MeetingStatus(tab)
        self.page = 0

    def set_query(self, query: str) -> None:
        self.query = query
        self.page = 0

    def filtered(self) -> list[Meeting]:
        return [
            m for m in self.source() if m.status == self.tab and matches(m, self.query)
        ]

    # ── featured slider ──────────────────────────────────────────────────────
    def upcoming(self) -> list[Meeting]:
        return [m for m in self.source() if m.status == MeetingStatus.UPCOMING]

    def max_slider_index(self) -> int:
        return max(0, len(self.upcoming()) - SLIDER_WINDOW)

    def featured(self) -> list[Meeting]:
        return self.upcoming()[self.slider_index : self.slider_index + SLIDER_WINDOW]

    def next_slide(self) -> None:
        if self.slider_index + SLIDER_WINDOW < len(self.upcoming()):
            self.slider_index += 1

    def prev_slide(self) -> None:
        if self.slider_index > 0:
            self.slider_index -= 1

    def move_slider_to(self, offset: int) -> None:
        if 0 <= offset <= self.max_slider_index():
            self.slider_index = offset

    # ── explorer pagination ──────────────────────────────────────────────────
    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.filtered()) / PAGE_SIZE)

    def go_to_page(self, page: int) -> None:
        if 0 <= page < self.total_pages:
            self.page = page

    def change_page(self, delta: int) -> None:
        self.go_to_page(self.page + delta)

    def page_items(self) -> list[Meeting]:
        start = self.page * PAGE_SIZE
        return self.filtered()[start : start + PAGE_SIZE]

    def showing(self) -> tuple[int, int, int]:
        """(first, last, total) as shown under the explorer, 1-based."""
        total = len(self.filtered())
        if total == 0:
            return 0, 0, 0
        first = self.page * PAGE_SIZE + 1
        last = min((self.page + 1) * PAGE_SIZE, total)
        return first, last, total

    # ── serialisation ────────────────────────────────────────────────────────
    def explorer_page(self) -> DashboardPage:
        first, last, total = self.showing()
        return DashboardPage(
            tab=self.tab,
            query=self.query,
            page=self.page,
            total_pages=self.total_pages,
            total=total,
            first=first,
            last=last,
            items=[to_view(m) for m in self.page_items()],
        )

    def featured_window(self) -> FeaturedWindow:
        upcoming = self.upcoming()
        return FeaturedWindow(
            offset=self.slider_index,
            window=SLIDER_WINDOW,
            total=len(upcoming),
            has_prev=self.slider_index > 0,
            has_next=self.slider_index + SLIDER_WINDOW < len(upcoming),
            items=[to_view(m) for m in self.featured()],
        )
