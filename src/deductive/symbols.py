"""Fresh-symbol source for one matching run."""

from __future__ import annotations

from collections.abc import Iterator

from deductive.nodes import Node, Symbol, symbols

PREFIX = "new"


class NewSymbolStream:
    """Generates symbols ``new1``, ``new2``, ... that avoid a set of names.

    Every symbol text occurring in a seed tree is avoided, as are plain
    string seeds and anything later passed to ``avoid``. Generated names
    are added to the avoid set so a stream never repeats itself. A stream
    belongs to one run; do not share it across concurrent searches.
    """

    def __init__(self, *seeds: str | Node) -> None:
        self._avoid: set[str] = set()
        self._counter = 0
        self.avoid(*seeds)

    def avoid(self, *items: str | Node) -> None:
        for item in items:
            if isinstance(item, str):
                self._avoid.add(item)
                continue
            for symbol in symbols(item):
                self._avoid.add(symbol.text)
                origin = getattr(symbol, "origin", "")
                if origin:
                    self._avoid.add(origin)

    def avoids(self, name: str) -> bool:
        return name in self._avoid

    def next(self) -> Symbol:
        """Return the next symbol whose text is not avoided."""
        while True:
            self._counter += 1
            name = f"{PREFIX}{self._counter}"
            if name not in self._avoid:
                self._avoid.add(name)
                return Symbol(name)

    def next_n(self, count: int) -> list[Symbol]:
        return [self.next() for _ in range(count)]

    def __iter__(self) -> Iterator[Symbol]:
        return self

    def __next__(self) -> Symbol:
        return self.next()
