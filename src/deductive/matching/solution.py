"""Solutions: consistent, simultaneous metavariable assignments."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from deductive.errors import NotApplicable
from deductive.matching.constraint import (
    Constraint,
    can_restore_bindings,
    restore_bindings,
    substitute,
)
from deductive.matching.debruijn import alpha_equivalent, decode, has_free_indices
from deductive.matching.expression_functions import beta_reduce
from deductive.matching.metavariables import metavariable
from deductive.matching.problem import Problem
from deductive.nodes import Node

DEBRUIJN = "debruijn"
BINDINGS = "bindings"


class Solution(Mapping[str, Node]):
    """A read-only mapping from metavariable names to their values.

    The values never mention a metavariable bound in the same solution:
    each new instantiation is substituted into every existing value before
    it is recorded, so the mapping is one simultaneous substitution.

    Attributes:
        domain: Names of the metavariables the caller asked about. Values of
            these may not contain dangling de Bruijn indices, and only
            these survive ``restored``.
        transforms: The reversible encodings the values are still under,
            in the order they were applied.

    """

    def __init__(
        self,
        mapping: Mapping[str, Node] | None = None,
        domain: Iterable[str] = (),
        transforms: tuple[str, ...] = (),
    ) -> None:
        self._mapping: dict[str, Node] = dict(mapping or {})
        self.domain = frozenset(domain)
        self.transforms = transforms

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Node]) -> Solution:
        return cls(mapping, domain=mapping.keys())

    def __getitem__(self, name: str) -> Node:
        return self._mapping[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def extended(self, name: str, value: Node) -> Solution | None:
        """Return this solution plus ``name -> value``, or None if that conflicts.

        A conflict is a different existing value for ``name``, or a value for
        a domain metavariable that would capture a bound variable.
        """
        if name in self._mapping:
            return self if self._mapping[name] == value else None
        binding = {name: value}
        mapping = {
            key: beta_reduce(substitute(existing, binding))
            for key, existing in self._mapping.items()
        }
        mapping[name] = value
        for key in self.domain.intersection(mapping):
            if has_free_indices(mapping[key]):
                return None
        return Solution(mapping, self.domain, self.transforms)

    def add(self, constraint: Constraint) -> Solution | None:
        """Extend by an instantiation constraint.

        Raises:
            NotApplicable: If ``constraint`` is not an instantiation.

        """
        if not constraint.is_instantiation():
            msg = f"Only instantiations can be added to a solution, not {constraint}"
            raise NotApplicable(msg)
        return self.extended(constraint.name, constraint.expression)

    def restored(self) -> Solution | None:
        """Undo the recorded transforms on the domain's values.

        Returns None if a value cannot be turned back into ordinary
        bindings, which happens when a parameter slot was instantiated with
        something other than a symbol.
        """
        mapping: dict[str, Node] = {}
        for name, value in self._mapping.items():
            if self.domain and name not in self.domain:
                continue
            restored = value
            for transform in reversed(self.transforms):
                if transform == BINDINGS:
                    if not can_restore_bindings(restored):
                        return None
                    restored = restore_bindings(restored)
                elif transform == DEBRUIJN:
                    restored = decode(restored)
            mapping[name] = restored
        return Solution(mapping, self.domain)

    def constraints(self) -> Problem:
        return Problem(
            [Constraint(metavariable(name), value) for name, value in self._mapping.items()]
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        if self._mapping.keys() != other.keys():
            return False
        return all(
            alpha_equivalent(value, other[name]) for name, value in self._mapping.items()
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        pairs = ",".join(
            f"({metavariable(name)},{value})" for name, value in sorted(self._mapping.items())
        )
        return "{" + pairs + "}"

    def __repr__(self) -> str:
        return f"Solution({self._mapping!r})"
