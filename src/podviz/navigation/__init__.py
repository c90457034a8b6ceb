"""Navigation and filter state for the dashboard."""

from .state import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SERIES_PAGE_SIZE,
    FilterMatcher,
    Focus,
    NavigationSnapshot,
    NavigationState,
    PatternMatcher,
    SubstringMatcher,
    compile_filter,
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
