"""Constraint sets kept in ascending order of complexity."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from typing import Any, overload

from deductive.matching.constraint import Constraint
from deductive.nodes import Node


class Problem:
    """An ordered, duplicate-free sequence of constraints.

    The sequence is always non-decreasing in complexity, and constraints of
    equal complexity keep their insertion order, so ``self[0]`` is always
    the easiest constraint to work on next. Equality ignores order.
    """

    def __init__(self, *args: Any) -> None:
        self._constraints: list[Constraint] = []
        self.add(*args)

    def add(self, *args: Any) -> Problem:
        """Insert constraints given in any of several forms.

        Accepts Constraints, whole Problems, and consecutive pattern and
        expression nodes, optionally nested in lists or tuples. Returns
        ``self`` for chaining.

        Raises:
            TypeError: For data that is not a constraint, problem or node,
                or for a pattern with no expression after it.

        """
        pending: Node | None = None
        for item in _flatten(args):
            if isinstance(item, Node):
                if pending is None:
                    pending = item
                else:
                    self._insert(Constraint(pending, item))
                    pending = None
                continue
            if pending is not None:
                msg = f"Pattern {pending} is not followed by an expression"
                raise TypeError(msg)
            match item:
                case Constraint():
                    self._insert(item)
                case Problem():
                    for constraint in item:
                        self._insert(constraint)
                case _:
                    msg = f"Cannot add {type(item).__name__} to a Problem"
                    raise TypeError(msg)
        if pending is not None:
            msg = f"Pattern {pending} is not followed by an expression"
            raise TypeError(msg)
        return self

    def _insert(self, constraint: Constraint) -> None:
        if constraint in self._constraints:
            return
        position = bisect_right(
            self._constraints,
            constraint.complexity,
            key=lambda c: c.complexity,
        )
        self._constraints.insert(position, constraint)

    def plus(self, *args: Any) -> Problem:
        return self.copy().add(*args)

    def remove(self, index: int) -> None:
        del self._constraints[index]

    def without(self, index: int) -> Problem:
        result = self.copy()
        result.remove(index)
        return result

    def copy(self) -> Problem:
        result = Problem()
        result._constraints = list(self._constraints)
        return result

    def empty(self) -> bool:
        return not self._constraints

    def first(self) -> Constraint:
        return self._constraints[0]

    def __len__(self) -> int:
        return len(self._constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    @overload
    def __getitem__(self, index: int) -> Constraint: ...
    @overload
    def __getitem__(self, index: slice) -> list[Constraint]: ...
    def __getitem__(self, index: int | slice) -> Constraint | list[Constraint]:
        return self._constraints[index]

    def __contains__(self, constraint: object) -> bool:
        return constraint in self._constraints

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Problem):
            return NotImplemented
        return len(self) == len(other) and all(c in other for c in self)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "{" + ",".join(str(c) for c in self._constraints) + "}"

    def __repr__(self) -> str:
        return f"Problem({', '.join(repr(c) for c in self._constraints)})"


def _flatten(items: Iterable[Any]) -> Iterator[Any]:
    for item in items:
        if isinstance(item, list | tuple):
            yield from _flatten(item)
        else:
            yield item
