from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import Any

_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}
_SLASHED = re.compile(r"^/(?P<body>.*)/(?P<flags>[imsx]*)$", re.DOTALL)


class InvalidPatternError(ValueError):
    pass


def flatten(patterns: Iterable[Any]) -> Iterator[Any]:
    for item in patterns:
        if isinstance(item, (list, tuple)):
            yield from flatten(item)
        else:
            yield item


def compile_pattern(pattern: Any) -> str | re.Pattern[str]:
    """Turn "/regex/flags" strings into compiled patterns; leave the rest alone."""

    if not isinstance(pattern, str):
        return pattern

    match = _SLASHED.match(pattern)
    if match is None:
        return pattern

    flags = 0
    for letter in match.group("flags"):
        flags |= _FLAG_MAP[letter]
    try:
        return re.compile(match.group("body"), flags)
    except re.error as exc:
        raise InvalidPatternError(f"Invalid user agent pattern {pattern!r}: {exc}") from exc


def pattern_matches(pattern: Any, value: str) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(value) is not None
    if callable(pattern):
        return bool(pattern(value))
    return pattern == value


def user_agent_ignored(user_agent: str | None, patterns: Iterable[Any]) -> bool:
    if user_agent is None:
        return False

    for pattern in flatten(patterns):
        if pattern_matches(compile_pattern(pattern), user_agent):
            return True
    return False


def exception_ignored(error: BaseException, ignored_names: Iterable[str]) -> bool:
    names = set(ignored_names)
    if not names:
        return False

    # Walk the MRO so ignoring a base class also ignores its subclasses.
    for cls in type(error).__mro__:
        if cls.__name__ in names or f"{cls.__module__}.{cls.__qualname__}" in names:
            return True
    return False
