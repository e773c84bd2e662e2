"""Pattern/expression pairs and their complexity ranks.

A ``Constraint`` asks that the pattern, once its metavariables are
instantiated, equal the expression. The expression never contains
metavariables. Constraints are immutable; every transformation returns a
new constraint.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableSequence
from dataclasses import dataclass, replace
from enum import IntEnum
from functools import cached_property

from deductive.errors import InvalidConstraint, NotApplicable, WrongComplexity
from deductive.matching import debruijn
from deductive.matching.expression_functions import beta_reduce, is_efa
from deductive.matching.metavariables import contains_metavariable, is_metavariable
from deductive.matching.reserved import (
    BINDING_HEAD,
    is_binding_application,
    is_function_binding,
)
from deductive.nodes import (
    Application,
    Binding,
    Declaration,
    Environment,
    Node,
    Symbol,
    descendants,
)


class Complexity(IntEnum):
    """Rank of a constraint; lower ranks are solved first."""

    FAILURE = 0
    SUCCESS = 1
    INSTANTIATION = 2
    CHILDREN = 3
    EFA = 4

    @property
    def label(self) -> str:
        return "EFA" if self is Complexity.EFA else self.name.lower()


type Substitution = Constraint | Mapping[str, Node]


def substitute(target: Node, mapping: Mapping[str, Node]) -> Node:
    """Replace every metavariable whose text is a key of ``mapping``."""
    if not mapping:
        return target
    if isinstance(target, Symbol):
        if target.metavariable and target.text in mapping:
            return mapping[target.text]
        return target
    if target.is_atomic():
        return target
    children = target.children
    replaced = tuple(substitute(child, mapping) for child in children)
    return target if replaced == children else target.rebuild(replaced)


def remove_bindings(node: Node) -> Node:
    """Rewrite each ordinary Binding as ``(BINDING_HEAD head p1 ... body)``.

    Expression functions stay Bindings, with their bodies rewritten.
    """
    match node:
        case Binding(head=head, parameters=parameters, body=body):
            if is_function_binding(node):
                return replace(node, body=remove_bindings(body))
            return Application(
                (
                    BINDING_HEAD,
                    remove_bindings(head),
                    *parameters,
                    remove_bindings(body),
                ),
                attributes=node.attributes,
            )
        case _ if node.is_atomic():
            return node
        case _:
            return node.rebuild(remove_bindings(child) for child in node.children)


def can_restore_bindings(node: Node) -> bool:
    """True if every binding application has only symbols as parameters."""
    for d in descendants(node):
        if is_binding_application(d):
            _, _, *parameters, _ = d.children
            if not all(isinstance(p, Symbol) for p in parameters):
                return False
    return True


def restore_bindings(node: Node) -> Node:
    """Invert ``remove_bindings``.

    Raises:
        ValueError: If a binding application has a non-symbol parameter.

    """
    if node.is_atomic():
        return node
    children = tuple(restore_bindings(child) for child in node.children)
    if is_binding_application(node):
        _, head, *parameters, body = children
        return Binding(
            head,
            tuple(parameters),  # type: ignore[arg-type]
            body,
            attributes=node.attributes,
        )
    return node.rebuild(children)


def _same_shape(pattern: Node, expression: Node) -> bool:
    match pattern, expression:
        case Application(), Application():
            return len(pattern.children) == len(expression.children)
        case Binding(), Binding():
            return len(pattern.parameters) == len(expression.parameters)
        case Environment(given=given), Environment(given=other_given):
            return given == other_given and len(pattern.children) == len(
                expression.children
            )
        case Declaration(given=given), Declaration(given=other_given):
            return given == other_given and len(pattern.symbols) == len(
                expression.symbols
            )
        case _:
            return False


@dataclass(frozen=True)
class Constraint:
    """A (pattern, expression) pair.

    Raises:
        InvalidConstraint: If the expression contains a metavariable.

    """

    pattern: Node
    expression: Node

    def __post_init__(self) -> None:
        if contains_metavariable(self.expression):
            msg = f"The expression side of a constraint has a metavariable: {self.expression}"
            raise InvalidConstraint(msg)

    @cached_property
    def complexity(self) -> Complexity:
        if is_metavariable(self.pattern):
            return Complexity.INSTANTIATION
        if is_efa(self.pattern):
            return Complexity.EFA
        if not contains_metavariable(self.pattern):
            if self.pattern == self.expression:
                return Complexity.SUCCESS
            return Complexity.FAILURE
        if _same_shape(self.pattern, self.expression):
            return Complexity.CHILDREN
        return Complexity.FAILURE

    def complexity_name(self) -> str:
        return self.complexity.label

    def children(self) -> list[Constraint]:
        """Pair up the children of pattern and expression.

        Raises:
            WrongComplexity: Unless the constraint has rank CHILDREN.

        """
        if self.complexity is not Complexity.CHILDREN:
            msg = f"Cannot compute children of a constraint of type {self.complexity_name()}"
            raise WrongComplexity(msg)
        return [
            Constraint(p, e)
            for p, e in zip(self.pattern.children, self.expression.children, strict=True)
        ]

    def is_instantiation(self) -> bool:
        return is_metavariable(self.pattern)

    def can_apply(self) -> bool:
        return self.is_instantiation()

    @property
    def name(self) -> str:
        """Text of the metavariable an instantiation binds."""
        if not self.is_instantiation():
            msg = f"Not an instantiation: {self}"
            raise NotApplicable(msg)
        assert isinstance(self.pattern, Symbol)
        return self.pattern.text

    def applied_to(self, target: Node | Constraint) -> Node | Constraint:
        """Substitute this instantiation into a node or a constraint's pattern.

        Expression-function applications made reducible by the substitution
        are beta-reduced.

        Raises:
            NotApplicable: If this constraint is not an instantiation.

        """
        mapping = {self.name: self.expression}
        if isinstance(target, Constraint):
            return target.after_substituting(mapping)
        return beta_reduce(substitute(target, mapping))

    def apply_to(self, targets: MutableSequence[Node]) -> None:
        """Replace each node in ``targets`` with its substituted form."""
        for i, target in enumerate(targets):
            targets[i] = self.applied_to(target)  # type: ignore[assignment]

    def after_substituting(self, *subs: Substitution) -> Constraint:
        """Apply each substitution, in order, to the pattern."""
        pattern = self.pattern
        for sub in subs:
            mapping = {sub.name: sub.expression} if isinstance(sub, Constraint) else sub
            pattern = beta_reduce(substitute(pattern, mapping))
        if pattern == self.pattern:
            return self
        return Constraint(pattern, self.expression)

    def without_bindings(self) -> Constraint:
        return Constraint(remove_bindings(self.pattern), remove_bindings(self.expression))

    def debruijn_encoded(self) -> Constraint:
        return Constraint(debruijn.encode(self.pattern), debruijn.encode(self.expression))

    def debruijn_decoded(self) -> Constraint:
        return Constraint(debruijn.decode(self.pattern), debruijn.decode(self.expression))

    def beta_reduced(self) -> Constraint:
        pattern = beta_reduce(self.pattern)
        return self if pattern == self.pattern else Constraint(pattern, self.expression)

    def __str__(self) -> str:
        return f"({self.pattern},{self.expression})"
