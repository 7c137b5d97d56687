"""
Fresh identifier generation.

A FreshNameGenerator hands out identifiers that appear nowhere in a given
source text and never repeat. One generator is created per preprocessing
run and shared by everything that introduces names during that run.

Example:
    >>> gensym = FreshNameGenerator.from_source("x := _v0")
    >>> gensym(), gensym()
    ('_v1', '_v2')
"""

import re
from collections.abc import Iterable

DEFAULT_NAME_PREFIX = "_v"

# Anything that could be an identifier; over-approximates Go identifiers
# by also matching inside comments and string literals.
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class FreshNameGenerator:
    """
    Sequential generator of collision-free identifiers.

    Names have the form ``<prefix><n>`` with ``n`` counting up from zero;
    any candidate already present in ``taken`` (or previously issued) is
    skipped.
    """

    def __init__(self, taken: Iterable[str] = (), prefix: str = DEFAULT_NAME_PREFIX) -> None:
        if not IDENTIFIER_PATTERN.fullmatch(prefix):
            raise ValueError(f"Name prefix must be a valid identifier: {prefix!r}")
        self.prefix = prefix
        self._taken: set[str] = set(taken)
        self._counter = 0

    @classmethod
    def from_source(cls, source: str, prefix: str = DEFAULT_NAME_PREFIX) -> "FreshNameGenerator":
        """Create a generator that avoids every identifier-like word in ``source``."""
        return cls(IDENTIFIER_PATTERN.findall(source), prefix)

    def __call__(self) -> str:
        while True:
            candidate = f"{self.prefix}{self._counter}"
            self._counter += 1
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate

    def is_taken(self, name: str) -> bool:
        """Check whether ``name`` occurs in the source or was already issued."""
        return name in self._taken
