"""Expression functions and their applications.

An expression function (EF) is a Binding headed by ``FUNCTION_HEAD``; its
parameters are the formal arguments. An expression function application
(EFA) is an Application ``(APPLICATION_HEAD operator a1 ... an)`` whose
operator is either an EF or a metavariable that will later stand for one.
In notation, ``(λ v , body)`` is an EF and ``(@ F a)`` is an EFA.
"""

from __future__ import annotations

from dataclasses import replace

from deductive.errors import ArityMismatch, EmptyEFA, NotAFunction
from deductive.matching.debruijn import BoundSlot, scoped_children, shift
from deductive.matching.metavariables import is_metavariable
from deductive.matching.reserved import (
    APPLICATION_HEAD,
    FUNCTION_HEAD,
    is_function_binding,
    is_marker,
)
from deductive.nodes import Application, Binding, Node, Symbol


def new_ef(*args: Node) -> Binding:
    """Build an EF from one or more parameter symbols followed by a body.

    Raises:
        ValueError: If no parameter is given or a parameter is not a Symbol.

    """
    *parameters, body = args
    return Binding(FUNCTION_HEAD, tuple(parameters), body)  # type: ignore[arg-type]


def is_ef(node: Node) -> bool:
    return is_function_binding(node)


def arity(ef: Node) -> int:
    if not isinstance(ef, Binding) or not is_ef(ef):
        msg = f"Not an expression function: {ef}"
        raise NotAFunction(msg)
    return len(ef.parameters)


def _is_reference(node: Node, names: dict[str, Node]) -> bool:
    return (
        isinstance(node, Symbol)
        and not isinstance(node, BoundSlot)
        and not node.metavariable
        and node.text in names
    )


def _replace_parameters(node: Node, values: dict[str, Node], depth: int) -> Node:
    if _is_reference(node, values):
        return shift(values[node.text], depth)  # type: ignore[attr-defined]
    if isinstance(node, Binding):
        shadowed = {
            p.text for p in node.parameters if not isinstance(p, BoundSlot)
        }
        inner = {k: v for k, v in values.items() if k not in shadowed}
        increment = 0 if is_function_binding(node) else 1
        return replace(
            node,
            head=_replace_parameters(node.head, values, depth),
            body=_replace_parameters(node.body, inner, depth + increment)
            if inner
            else node.body,
        )
    if node.is_atomic():
        return node
    return node.rebuild(
        _replace_parameters(child, values, depth + increment)
        for child, increment in scoped_children(node)
    )


def apply_ef(ef: Node, *args: Node) -> Node:
    """Substitute ``args`` for the parameters of ``ef`` in its body.

    Arguments placed under binders have their free de Bruijn indices shifted
    so they keep referring to the same binders. Names are not otherwise
    protected from capture; callers use fresh parameter names.

    Raises:
        NotAFunction: If ``ef`` is not an expression function.
        ArityMismatch: If the number of arguments differs from the arity.

    """
    expected = arity(ef)
    if len(args) != expected:
        msg = "Expression function applied to the wrong number of arguments"
        raise ArityMismatch(msg, expected=expected, actual=len(args))
    assert isinstance(ef, Binding)
    values = {p.text: a for p, a in zip(ef.parameters, args, strict=True)}
    body = ef.body
    if _is_reference(body, values):
        return values[body.text]  # type: ignore[attr-defined]
    return _replace_parameters(body, values, 0)


def new_efa(operator: Node, *operands: Node) -> Application:
    """Build ``(APPLICATION_HEAD operator *operands)``.

    Raises:
        EmptyEFA: If ``operator`` is a metavariable and there are no operands.
        ArityMismatch: If ``operator`` is an EF of a different arity.

    """
    if is_metavariable(operator) and not operands:
        msg = "Expression function applications require at least one argument"
        raise EmptyEFA(msg)
    if is_ef(operator) and len(operands) != arity(operator):
        msg = "Expression function applied to the wrong number of arguments"
        raise ArityMismatch(msg, expected=arity(operator), actual=len(operands))
    return Application((APPLICATION_HEAD, operator, *operands))


def is_efa(node: Node) -> bool:
    return (
        isinstance(node, Application)
        and len(node.children) > 2  # noqa: PLR2004
        and is_marker(node.children[0], APPLICATION_HEAD)
    )


def can_beta_reduce(node: Node) -> bool:
    """An EFA whose operator is an EF taking exactly its operands."""
    if not is_efa(node):
        return False
    assert isinstance(node, Application)
    operator, *operands = node.children[1:]
    return is_ef(operator) and arity(operator) == len(operands)


def beta_reduce(node: Node) -> Node:
    """Reduce every reducible EFA in ``node``, innermost first, to a normal form.

    The result of reducing an application carries that application's
    attributes on top of its own.
    """
    if not node.is_atomic():
        reduced = tuple(beta_reduce(child) for child in node.children)
        if reduced != node.children:
            node = node.rebuild(reduced)
    if can_beta_reduce(node):
        _, operator, *operands = node.children
        result = beta_reduce(apply_ef(operator, *operands))
        if node.attributes:
            result = result.with_attributes({**dict(result.attributes), **dict(node.attributes)})
        return result
    return node
