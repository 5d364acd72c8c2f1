"""Lenient field readers for documents whose schema drifted over time.

Stored records name the same fact under several keys (``courseCode`` vs
``subjectId``, ``score`` vs ``points``) and keep numbers as numbers, numeric
strings or percentages. The helpers here read such fields without raising:
anything that cannot be interpreted is treated as absent.
"""
from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import Unparseable

_WHITESPACE = re.compile(r"\s+")


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def first_non_blank(*values: str | None) -> str | None:
    for value in values:
        if not is_blank(value):
            return value
    return None


def first_field(document: Mapping[str, Any] | None, keys: Iterable[str]) -> str | None:
    """Return the first non-blank value among ``keys`` in ``document``, as text."""

    if not document:
        return None
    return first_non_blank(*(as_text(document.get(key)) for key in keys))


def normalize_key(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def to_number(value: Any) -> float:
    """Strictly coerce ``value`` to a finite float or raise :class:`Unparseable`."""

    if value is None or isinstance(value, bool):
        raise Unparseable(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise Unparseable("empty string")
        try:
            number = float(text)
        except ValueError as exc:
            raise Unparseable(f"not a number: {value!r}") from exc
    else:
        raise Unparseable(f"unsupported type {type(value).__name__}")
    if math.isnan(number) or math.isinf(number):
        raise Unparseable(f"not a finite number: {value!r}")
    return number


def as_number(value: Any) -> float | None:
    try:
        return to_number(value)
    except Unparseable:
        return None


def first_number(document: Mapping[str, Any] | None, keys: Iterable[str]) -> float | None:
    if not document:
        return None
    for key in keys:
        number = as_number(document.get(key))
        if number is not None:
            return number
    return None


def parse_percent_text(value: Any) -> float | None:
    """Read strings such as ``"85"`` or ``"85 %"``; non-strings are not handled here."""

    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("%"):
        text = text[:-1].strip()
    return as_number(text)


def positive_credits(value: Any) -> float | None:
    number = as_number(value)
    if number is None or number <= 0:
        return None
    return number
