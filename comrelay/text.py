"""Small string and list helpers."""

from __future__ import annotations

import random
import string
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits


def shorten_name(s: str, length: int) -> str:
    """Keep ``length`` characters from each end, joined by ``__``."""
    if len(s) <= length * 2:
        return s
    return f"{s[:length]}__{s[len(s) - length:]}"


def remove(items: list[T], index: int) -> list[T]:
    """Return a new list without the element at ``index``."""
    if not 0 <= index < len(items):
        raise IndexError(f"index {index} out of range for length {len(items)}")
    return items[:index] + items[index + 1:]


def filter_items(items: Iterable[T], predicate: Callable[[T], bool]) -> list[T]:
    """Return the items for which ``predicate`` holds."""
    return [item for item in items if predicate(item)]


def string_with_charset(length: int, charset: str) -> str:
    """Return a random string of ``length`` characters drawn from ``charset``."""
    if length < 0:
        raise ValueError("length must not be negative")
    if length and not charset:
        raise ValueError("charset must not be empty")
    rng = random.Random()
    return "".join(rng.choice(charset) for _ in range(length))


def random_string(length: int) -> str:
    """Return a random alphanumeric string."""
    return string_with_charset(length, CHARSET)