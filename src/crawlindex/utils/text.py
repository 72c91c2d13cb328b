"""Text helpers."""

from __future__ import annotations

from typing import Iterable

LINE_SEPARATOR = "\n"


def join_limited(lines: Iterable[str], limit: int, *, separator: str = LINE_SEPARATOR) -> str:
    """Join lines with ``separator``, keeping at most ``limit`` characters.

    Lines are pulled one at a time and nothing more is consumed once the
    joined text reaches ``limit``. The result is cut at exactly ``limit``
    characters, even mid-line.
    """
    if limit <= 0:
        return ""

    parts: list[str] = []
    length = 0
    for line in lines:
        if parts:
            parts.append(separator)
            length += len(separator)
        parts.append(line)
        length += len(line)
        if length >= limit:
            break

    text = "".join(parts)
    return text[:limit]
