"""Heading anchor slugs, compatible with GitHub's heading anchors."""

import unicodedata
from typing import Dict

# Unicode categories kept in a slug: letters, marks, numbers, connectors
_KEPT_CATEGORIES = ('L', 'M', 'N', 'Pc')


def slugify(value: str) -> str:
    """Lowercase, strip punctuation and replace spaces with hyphens.

    Example:
        >>> slugify("Hello, World!")
        'hello-world'
    """
    kept = []
    for char in value.lower():
        if char in (' ', '-'):
            kept.append(char)
        elif unicodedata.category(char).startswith(_KEPT_CATEGORIES):
            kept.append(char)
    return ''.join(kept).replace(' ', '-')


class Slugger:
    """Generates unique slugs within one document.

    Repeated slugs get a numeric suffix: "intro", "intro-1", "intro-2".
    """

    def __init__(self):
        self._occurrences: Dict[str, int] = {}

    def slug(self, value: str) -> str:
        base = slugify(value)
        result = base

        while result in self._occurrences:
            self._occurrences[base] += 1
            result = f"{base}-{self._occurrences[base]}"

        self._occurrences[result] = 0
        return result

    def reset(self) -> None:
        self._occurrences.clear()
