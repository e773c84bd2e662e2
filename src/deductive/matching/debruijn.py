"""De Bruijn encoding of bound variables.

Encoding replaces every reference to a bound parameter with a
``BoundIndex(depth, index)``: ``depth`` counts the binders between the
reference and its binder (0 for the innermost) and ``index`` is the
parameter's position in that binder. Plain parameters become anonymous
``BoundSlot`` symbols that remember their original name outside of
equality, so alpha-equivalent trees encode to equal trees.

Two kinds of binder are treated specially:

- Metavariable parameters stay in place as metavariables (so a pattern like
  ``(∀ ?x , ...)`` can learn the target's parameter name), but references to
  them inside the body are still indexed.
- Expression functions (bindings headed by the function marker) are opaque:
  their parameters shadow outer names but references to them stay as named
  symbols and the function does not count as a level of depth. Pass
  ``functions=True`` to encode them like any other binder.

Substitution under binders must ``shift`` free indices of the substituted
value by the number of binders crossed.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from deductive.matching.reserved import (
    is_binding_application,
    is_function_binding,
    is_reserved,
)
from deductive.nodes import Binding, Declaration, Node, Symbol
from deductive.symbols import NewSymbolStream

SLOT_TEXT = "⋅"


@dataclass(frozen=True)
class BoundIndex(Node):
    """A reference to parameter ``index`` of the binder ``depth`` levels up."""

    depth: int
    index: int

    @property
    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class BoundSlot(Symbol):
    """An anonymous binder parameter; ``origin`` is ignored by equality."""

    text: str = SLOT_TEXT
    origin: str = field(default="", compare=False)


def slot(origin: str = "") -> BoundSlot:
    return BoundSlot(origin=origin)


@dataclass(frozen=True)
class _Frame:
    keys: tuple[tuple[str, bool], ...]
    counted: bool = True


def _lookup(
    scope: tuple[_Frame, ...],
    key: tuple[str, bool],
) -> tuple[int, int] | None:
    depth = 0
    for frame in scope:
        if key in frame.keys:
            if not frame.counted:
                return None
            return depth, frame.keys.index(key)
        if frame.counted:
            depth += 1
    return None


def _key(symbol: Symbol) -> tuple[str, bool]:
    return symbol.text, symbol.metavariable


def scoped_children(node: Node) -> Iterator[tuple[Node, int]]:
    """Yield each child with the number of binder levels it sits under.

    Ordinary bindings and binding applications put their body one level
    deeper; expression functions are transparent.
    """
    if isinstance(node, Binding) and not is_function_binding(node):
        yield node.head, 0
        for parameter in node.parameters:
            yield parameter, 0
        yield node.body, 1
        return
    if is_binding_application(node):
        *rest, body = node.children
        for child in rest:
            yield child, 0
        yield body, 1
        return
    for child in node.children:
        yield child, 0


def encode(node: Node, *, functions: bool = False) -> Node:
    """Return ``node`` with bound references replaced by indices."""
    return _encode(node, (), functions)


def _encode(node: Node, scope: tuple[_Frame, ...], functions: bool) -> Node:  # noqa: FBT001
    match node:
        case BoundIndex() | BoundSlot() | Declaration():
            return node
        case Symbol():
            if is_reserved(node):
                return node
            found = _lookup(scope, _key(node))
            if found is None:
                return node
            return BoundIndex(*found, attributes=node.attributes)
        case Binding(head=head, parameters=parameters, body=body):
            frame_keys = tuple(_key(p) for p in parameters)
            if is_function_binding(node) and not functions:
                inner = (_Frame(frame_keys, counted=False), *scope)
                return replace(
                    node,
                    head=_encode(head, scope, functions),
                    body=_encode(body, inner, functions),
                )
            new_parameters = tuple(
                p
                if p.metavariable
                else BoundSlot(origin=p.text, attributes=p.attributes)
                for p in parameters
            )
            return replace(
                node,
                head=_encode(head, scope, functions),
                parameters=new_parameters,
                body=_encode(body, (_Frame(frame_keys), *scope), functions),
            )
        case _:
            if node.is_atomic():
                return node
            return node.rebuild(_encode(c, scope, functions) for c in node.children)


def decode(node: Node, stream: NewSymbolStream | None = None) -> Node:
    """Invert ``encode``, choosing names for anonymous parameters.

    A parameter gets its original name back unless that name would capture
    a free symbol of the body or hide an outer parameter the body refers
    to; then it gets a fresh symbol from ``stream``. Indices that point
    outside ``node`` are left as they are.
    """
    if stream is None:
        stream = NewSymbolStream(node)
    return _decode(node, (), stream)


type _Names = tuple[tuple[Symbol, ...], ...]


def _decode(node: Node, scope: _Names, stream: NewSymbolStream) -> Node:
    match node:
        case BoundIndex(depth=depth, index=index):
            if depth < len(scope) and index < len(scope[depth]):
                return replace(scope[depth][index], attributes=node.attributes)
            return node
        case BoundSlot(origin=origin):
            return Symbol(origin or SLOT_TEXT, attributes=node.attributes)
        case Binding(head=head, parameters=parameters, body=body) if (
            not is_function_binding(node)
        ):
            taken = _taken_names(body) | _outer_names_used(body, scope)
            names: list[Symbol] = []
            for parameter in parameters:
                if parameter.metavariable:
                    names.append(parameter)
                    continue
                name = parameter.origin if isinstance(parameter, BoundSlot) else parameter.text
                if not name or name in taken:
                    fresh = stream.next()
                    name = fresh.text
                taken.add(name)
                names.append(Symbol(name, attributes=parameter.attributes))
            frame = tuple(Symbol(n.text, metavariable=n.metavariable) for n in names)
            return replace(
                node,
                head=_decode(head, scope, stream),
                parameters=tuple(names),
                body=_decode(body, (frame, *scope), stream),
            )
        case _:
            if node.is_atomic():
                return node
            return node.rebuild(_decode(c, scope, stream) for c in node.children)


def _taken_names(node: Node) -> set[str]:
    """Plain symbol texts in ``node``, including names bound by functions."""
    match node:
        case BoundSlot():
            return set()
        case Symbol(text=text, metavariable=False):
            return {text}
        case _:
            names: set[str] = set()
            for child in node.children:
                names |= _taken_names(child)
            return names


def _outer_names_used(
    node: Node,
    scope: _Names,
    level: int = 0,
) -> set[str]:
    """Names of the parameters in ``scope`` that ``node`` refers to.

    ``node`` is the body of a binder about to be pushed, so an index at
    ``depth`` under ``level`` local binders refers to
    ``scope[depth - level - 1]`` when that is non-negative.
    """
    match node:
        case BoundIndex(depth=depth, index=index):
            outer = depth - level - 1
            if 0 <= outer < len(scope) and index < len(scope[outer]):
                return {scope[outer][index].text}
            return set()
        case _:
            names: set[str] = set()
            for child, increment in scoped_children(node):
                names |= _outer_names_used(child, scope, level + increment)
            return names


def shift(node: Node, amount: int, cutoff: int = 0) -> Node:
    """Add ``amount`` to every index that points at or above ``cutoff``."""
    if amount == 0:
        return node
    match node:
        case BoundIndex(depth=depth) if depth >= cutoff:
            return replace(node, depth=depth + amount)
        case _:
            if node.is_atomic():
                return node
            return node.rebuild(
                shift(child, amount, cutoff + increment)
                for child, increment in scoped_children(node)
            )


def free_indices(node: Node, level: int = 0) -> Iterator[BoundIndex]:
    """Yield indices in ``node`` that refer to binders outside of it."""
    match node:
        case BoundIndex(depth=depth) if depth >= level:
            yield node
        case _:
            for child, increment in scoped_children(node):
                yield from free_indices(child, level + increment)


def has_free_indices(node: Node) -> bool:
    return next(free_indices(node), None) is not None


def alpha_equivalent(left: Node, right: Node) -> bool:
    """True if the trees differ only in the names of bound parameters."""
    return encode(left, functions=True) == encode(right, functions=True)
