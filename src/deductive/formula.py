"""Formulas: trees whose metavariables stand for arbitrary expressions.

A rule or theorem becomes a formula by turning every symbol it does not
declare into a metavariable. Matching a formula against a step of a proof
yields a Solution, and ``instantiate`` turns the formula plus a solution
back into an ordinary tree.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping

from deductive.errors import NonExpressionInExpressionContext
from deductive.matching.constraint import Constraint
from deductive.matching.debruijn import decode, encode
from deductive.matching.expression_functions import beta_reduce
from deductive.matching.metavariables import as_metavariable, metavariable_names
from deductive.matching.reserved import is_reserved
from deductive.nodes import (
    Application,
    Binding,
    Declaration,
    Environment,
    Node,
    Symbol,
    is_expression,
)
from deductive.symbols import NewSymbolStream

logger = logging.getLogger(__name__)


def domain(node: Node) -> set[str]:
    """Names of the metavariables in ``node``."""
    return metavariable_names(node)


def declared_names(context: Node, path: tuple[int, ...] | list[int]) -> set[str]:
    """Names declared by Declarations visible at ``path`` inside ``context``.

    A Declaration is visible from a node if it is an earlier sibling of the
    node or of one of its ancestors.
    """
    names: set[str] = set()
    node = context
    for index in path:
        for sibling in node.children[:index]:
            if isinstance(sibling, Declaration):
                names.update(s.text for s in sibling.symbols)
        node = node.children[index]
    return names


def from_context(context: Node, path: tuple[int, ...] | list[int] = ()) -> Node:
    """Copy of the node at ``path`` with its undeclared symbols as metavariables.

    Bound parameters, the symbols they bind and reserved marker symbols are
    left alone, as are symbols declared before the node in ``context``.
    """
    target = context.child(*path)
    return _as_formula(target, frozenset(declared_names(context, path)))


def _as_formula(node: Node, fixed: frozenset[str]) -> Node:
    match node:
        case Symbol(text=text):
            if node.metavariable or text in fixed or is_reserved(node):
                return node
            return as_metavariable(node)
        case Binding(head=head, parameters=parameters, body=body):
            inner = fixed | {p.text for p in parameters}
            return node.rebuild((_as_formula(head, fixed), *parameters, _as_formula(body, inner)))
        case Declaration():
            return node
        case Environment(children=children):
            converted: list[Node] = []
            for child in children:
                converted.append(_as_formula(child, fixed))
                if isinstance(child, Declaration):
                    fixed = fixed | {s.text for s in child.symbols}
            return node.rebuild(converted)
        case _:
            return node.rebuild(_as_formula(child, fixed) for child in node.children)


def instantiate(
    formula: Node,
    bindings: Mapping[str, Node] | Constraint,
    preserve_attributes: Collection[str] = (),
) -> Node:
    """Substitute ``bindings`` for the formula's metavariables, all at once.

    ``bindings`` is a mapping from names to values (a Solution works) or a
    single instantiation constraint. Only metavariables are replaced; a
    binding for a name that occurs only as an ordinary symbol has no
    effect. Each value keeps its own attributes plus those of the replaced
    metavariable named in ``preserve_attributes``. Expression-function
    applications are then beta-reduced, and bound parameters are renamed
    where a value would otherwise be captured.

    Raises:
        NonExpressionInExpressionContext: If a value that is not an
            expression would land inside an Application or Binding.
        NotApplicable: If ``bindings`` is a constraint that is not an
            instantiation.

    """
    if isinstance(bindings, Constraint):
        bindings = {bindings.name: bindings.expression}
    encoded_bindings = {name: encode(value) for name, value in bindings.items()}
    encoded = encode(formula)
    replaced = _replace(encoded, encoded_bindings, frozenset(preserve_attributes), False)
    reduced = beta_reduce(replaced)
    stream = NewSymbolStream(formula, *bindings.values())
    result = decode(reduced, stream)
    logger.debug("Instantiated %s as %s", formula, result)
    return result


def _replace(
    node: Node,
    bindings: Mapping[str, Node],
    preserve: frozenset[str],
    in_expression: bool,  # noqa: FBT001
) -> Node:
    if isinstance(node, Symbol):
        if not node.metavariable or node.text not in bindings:
            return node
        value = bindings[node.text]
        if in_expression and not is_expression(value):
            msg = f"Cannot place a non-expression inside an expression: {value}"
            raise NonExpressionInExpressionContext(msg)
        kept = {k: v for k, v in node.attributes if k in preserve}
        if kept:
            value = value.with_attributes({**dict(value.attributes), **kept})
        return value
    if node.is_atomic():
        return node
    inside = in_expression or isinstance(node, Application | Binding)
    return node.rebuild(_replace(child, bindings, preserve, inside) for child in node.children)
