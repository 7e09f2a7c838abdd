"""Line filters built from regular expressions in config."""

from __future__ import annotations

import re

from tailwatch.watching.types import LineFilter, accept_all


def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e


def build_filter(
    include: str | None = None,
    exclude: str | None = None,
    ignore_case: bool = False,
) -> LineFilter:
    """Build a predicate that keeps lines matching ``include`` but not ``exclude``.

    Patterns are searched anywhere in the line. With neither pattern the
    filter accepts every line.

    Raises:
        ValueError: If a pattern does not compile.

    Example:
        >>> no_cron = build_filter(exclude=r"\\scron")
        >>> no_cron("Jan 1 host cron[12]: job")
        False
    """
    flags = re.IGNORECASE if ignore_case else 0
    include_re = _compile(include, flags) if include else None
    exclude_re = _compile(exclude, flags) if exclude else None

    if include_re is None and exclude_re is None:
        return accept_all

    def line_filter(line: str) -> bool:
        if include_re is not None and include_re.search(line) is None:
            return False
        return exclude_re is None or exclude_re.search(line) is None

    return line_filter
