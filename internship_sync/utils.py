"""Utility helpers for filename sanitizing and allocation."""

from __future__ import annotations

import re
from typing import Optional, Set

FORBIDDEN_CHARS = re.compile(r'[/\\:*?"<>|]')
WHITESPACE = re.compile(r"\s+")
MAX_NAME_LENGTH = 200


def sanitize_filename(value: str, fallback: str = "untitled") -> str:
    """Replace characters that are unsafe in file names and tidy whitespace."""
    name = FORBIDDEN_CHARS.sub("_", value or "")
    name = WHITESPACE.sub(" ", name).strip()
    name = name[:MAX_NAME_LENGTH]
    return name or fallback


def allocate_name(label: str, seen: Set[str]) -> str:
    """Pick a name for ``label`` that is not yet in ``seen`` and record it."""
    base = sanitize_filename(label)
    name = base
    counter = 1
    while name in seen:
        suffix = f" ({counter})"
        # keep the suffixed name within the length cap too
        name = base[: MAX_NAME_LENGTH - len(suffix)] + suffix
        counter += 1
    seen.add(name)
    return name


class FilenameAllocator:
    """Owns the set of base names handed out during one run."""

    def __init__(self, seen: Optional[Set[str]] = None) -> None:
        self.seen: Set[str] = set() if seen is None else seen

    def allocate(self, label: str) -> str:
        return allocate_name(label, self.seen)

    def __len__(self) -> int:
        return len(self.seen)
