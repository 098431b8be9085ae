"""Selector parsing — ``name=value`` tokens into a selector mapping."""

from __future__ import annotations

from collections.abc import Iterable

SELECTOR_SEPARATOR = "="


class InvalidSelectorFormat(ValueError):
    """A ``--selector`` token did not match the ``name=value`` shape."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"expecting the selector format 'name=value', found '{raw}'")


def _has_inner_space(text: str) -> bool:
    return any(ch.isspace() for ch in text)


def split_selector(raw: str) -> tuple[str, str]:
    """Split a single ``name=value`` token into a trimmed ``(key, value)`` pair.

    Surrounding whitespace is ignored; whitespace inside the key or the
    value is not.

    Examples:
        >>> split_selector(" app=abc ")
        ('app', 'abc')
    """
    parts = raw.strip().split(SELECTOR_SEPARATOR)
    if len(parts) != 2:
        raise InvalidSelectorFormat(raw)
    key, value = parts[0].strip(), parts[1].strip()
    if not key or not value or _has_inner_space(key) or _has_inner_space(value):
        raise InvalidSelectorFormat(raw)
    return key, value


def parse_selectors(tokens: Iterable[str]) -> dict[str, str]:
    """Parse raw tokens into a selector mapping.

    Tokens are applied in order, so a repeated key keeps its last value.
    No tokens yields an empty mapping.
    """
    selector: dict[str, str] = {}
    for raw in tokens:
        key, value = split_selector(raw)
        selector[key] = value
    return selector


def format_selector(selector: dict[str, str]) -> str:
    """Render a selector as ``[k1=v1 k2=v2]`` for status messages."""
    pairs = " ".join(f"{k}{SELECTOR_SEPARATOR}{v}" for k, v in selector.items())
    return f"[{pairs}]"
