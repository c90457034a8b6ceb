"""Filter, selection and scroll state behind the dashboard panels.

Every mutator and every read takes the same lock, and reads hand back copies,
so the refresh loop always sees a coherent view while key presses mutate state.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

DEFAULT_PAGE_SIZE = 30
DEFAULT_SERIES_PAGE_SIZE = 10


class Focus(Enum):
    SIDEBAR = "sidebar"
    SERIES_TABLE = "series"


@dataclass(frozen=True)
class PatternMatcher:
    """Filter text that compiled as a case-insensitive regex."""

    pattern: re.Pattern[str]
    valid: bool = True

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None


@dataclass(frozen=True)
class SubstringMatcher:
    """Fallback for filter text that is not a valid regex."""

    needle: str
    valid: bool = False

    def matches(self, name: str) -> bool:
        return self.needle in name.lower()


FilterMatcher = PatternMatcher | SubstringMatcher


def compile_filter(text: str) -> FilterMatcher:
    try:
        return PatternMatcher(re.compile(text, re.IGNORECASE))
    except re.error:
        return SubstringMatcher(text.lower())


@dataclass(frozen=True)
class NavigationSnapshot:
    filtered: tuple[str, ...]
    total: int
    selected_index: int
    scroll_offset: int
    filter_text: str
    filter_mode: bool
    filter_valid: bool
    focus: Focus
    series_index: int
    series_scroll: int
    page_size: int
    series_page_size: int

    @property
    def selected_name(self) -> str:
        if 0 <= self.selected_index < len(self.filtered):
            return self.filtered[self.selected_index]
        return ""


def _scroll_into_view(selected: int, offset: int, page_size: int) -> int:
    if selected < offset:
        offset = selected
    if selected >= offset + page_size:
        offset = selected - page_size + 1
    return max(offset, 0)


class NavigationState:
    def __init__(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        series_page_size: int = DEFAULT_SERIES_PAGE_SIZE,
    ) -> None:
        self._lock = threading.Lock()
        self.page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
        self.series_page_size = (
            series_page_size if series_page_size > 0 else DEFAULT_SERIES_PAGE_SIZE
        )
        self._all: tuple[str, ...] = ()
        self._filtered: tuple[str, ...] = ()
        self._selected = 0
        self._scroll = 0
        self._filter_text = ""
        self._filter_mode = False
        self._matcher: FilterMatcher | None = None
        self._focus = Focus.SIDEBAR
        self._series_idx = 0
        self._series_scroll = 0
        self._series_count = 0

    # -- key list -------------------------------------------------------

    def set_keys(self, names: Sequence[str]) -> None:
        """Replace the known names; unchanged lists are a no-op."""

        incoming = tuple(names)
        with self._lock:
            if incoming == self._all:
                return
            self._all = incoming
            self._apply_filter()

    def _apply_filter(self) -> None:
        if self._matcher is None:
            self._filtered = self._all
        else:
            matcher = self._matcher
            self._filtered = tuple(name for name in self._all if matcher.matches(name))
        if self._selected >= len(self._filtered):
            self._selected = len(self._filtered) - 1
        if self._selected < 0:
            self._selected = 0
        self._scroll = 0
        self._series_idx = 0
        self._series_scroll = 0
        self._scroll = _scroll_into_view(self._selected, self._scroll, self.page_size)

    def _set_filter_text(self, text: str) -> None:
        self._filter_text = text
        self._matcher = compile_filter(text) if text else None
        self._apply_filter()

    # -- filter editing -------------------------------------------------

    def start_filter(self) -> None:
        with self._lock:
            self._filter_mode = True

    def commit_filter(self) -> None:
        with self._lock:
            self._filter_mode = False

    def add_filter_char(self, char: str) -> None:
        with self._lock:
            self._set_filter_text(self._filter_text + char)

    def backspace_filter(self) -> None:
        with self._lock:
            if self._filter_text:
                self._set_filter_text(self._filter_text[:-1])

    def set_filter(self, text: str) -> None:
        with self._lock:
            self._set_filter_text(text)

    def clear_filter(self) -> None:
        with self._lock:
            self._filter_mode = False
            self._set_filter_text("")

    # -- movement -------------------------------------------------------

    def move_up(self) -> None:
        with self._lock:
            if self._focus is Focus.SIDEBAR:
                if self._selected > 0:
                    self._selected -= 1
                    self._scroll = _scroll_into_view(self._selected, self._scroll, self.page_size)
                    self._series_idx = 0
                    self._series_scroll = 0
            elif self._series_idx > 0:
                self._series_idx -= 1
                self._series_scroll = _scroll_into_view(
                    self._series_idx, self._series_scroll, self.series_page_size
                )

    def move_down(self) -> None:
        with self._lock:
            if self._focus is Focus.SIDEBAR:
                if self._selected < len(self._filtered) - 1:
                    self._selected += 1
                    self._scroll = _scroll_into_view(self._selected, self._scroll, self.page_size)
                    self._series_idx = 0
                    self._series_scroll = 0
            elif self._series_idx < self._series_count - 1:
                self._series_idx += 1
                self._series_scroll = _scroll_into_view(
                    self._series_idx, self._series_scroll, self.series_page_size
                )

    def toggle_focus(self) -> None:
        with self._lock:
            if self._focus is Focus.SIDEBAR:
                self._focus = Focus.SERIES_TABLE
            else:
                self._focus = Focus.SIDEBAR

    def clamp_series_index(self, count: int) -> None:
        """Record the selected family's series count and clamp the table selection."""

        with self._lock:
            self._series_count = max(count, 0)
            if self._series_idx >= self._series_count:
                self._series_idx = self._series_count - 1
            if self._series_idx < 0:
                self._series_idx = 0
            self._series_scroll = _scroll_into_view(
                self._series_idx, self._series_scroll, self.series_page_size
            )

    # -- reads ----------------------------------------------------------

    @property
    def filter_mode(self) -> bool:
        with self._lock:
            return self._filter_mode

    @property
    def filter_text(self) -> str:
        with self._lock:
            return self._filter_text

    def selected_name(self) -> str:
        with self._lock:
            if 0 <= self._selected < len(self._filtered):
                return self._filtered[self._selected]
            return ""

    def snapshot(self) -> NavigationSnapshot:
        with self._lock:
            return NavigationSnapshot(
                filtered=self._filtered,
                total=len(self._all),
                selected_index=self._selected,
                scroll_offset=self._scroll,
                filter_text=self._filter_text,
                filter_mode=self._filter_mode,
                filter_valid=self._matcher.valid if self._matcher is not None else True,
                focus=self._focus,
                series_index=self._series_idx,
                series_scroll=self._series_scroll,
                page_size=self.page_size,
                series_page_size=self.series_page_size,
            )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SERIES_PAGE_SIZE",
    "FilterMatcher",
    "Focus",
    "NavigationSnapshot",
    "NavigationState",
    "PatternMatcher",
    "SubstringMatcher",
    "compile_filter",
]
