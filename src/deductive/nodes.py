"""Expression tree model.

Nodes are immutable values. Structural equality compares node kind, every
field and every attribute, so two trees are equal exactly when they print
the same and carry the same attributes.

Kinds:
    Symbol       - atomic, identified by its text (and metavariable flag)
    Application  - ordered children, the first conventionally the operator
    Binding      - a head, one or more parameter symbols and one body
    Environment  - ordered container of children, optionally given
    Declaration  - ordered list of declared symbols, optionally given
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Self

type Attributes = tuple[tuple[str, Any], ...]


def _sorted_attributes(pairs: Iterable[tuple[str, Any]]) -> Attributes:
    return tuple(sorted(dict(pairs).items()))


@dataclass(frozen=True)
class Node:
    """Base for all tree nodes.

    Attributes are stored as a sorted tuple of pairs so that nodes stay
    hashable and attribute order never affects equality.
    """

    attributes: Attributes = field(default=(), kw_only=True)

    if TYPE_CHECKING:
        children: tuple[Node, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _sorted_attributes(self.attributes))

    def rebuild(self, children: Iterable[Node]) -> Self:  # noqa: ARG002
        """Return a node of the same kind with the given children."""
        return self

    def is_atomic(self) -> bool:
        return not self.children

    def child(self, *path: int) -> Node:
        """Follow a sequence of child indices downward from this node."""
        node: Node = self
        for index in path:
            node = node.children[index]
        return node

    def attribute(self, key: str, default: Any = None) -> Any:
        return dict(self.attributes).get(key, default)

    def has_attribute(self, key: str) -> bool:
        return any(name == key for name, _ in self.attributes)

    def with_attribute(self, key: str, value: Any) -> Self:
        return self.with_attributes({**dict(self.attributes), key: value})

    def with_attributes(self, attributes: dict[str, Any] | Attributes) -> Self:
        """Return a copy whose attributes are exactly the given ones."""
        pairs = attributes.items() if isinstance(attributes, dict) else attributes
        return replace(self, attributes=_sorted_attributes(pairs))

    def without_attributes(self) -> Self:
        return replace(self, attributes=())

    def __str__(self) -> str:
        from deductive.notation import to_putdown  # noqa: PLC0415

        return to_putdown(self)


@dataclass(frozen=True)
class Symbol(Node):
    """Atomic node. A metavariable is a symbol with ``metavariable=True``."""

    text: str
    metavariable: bool = False

    @property
    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class Application(Node):
    """Ordered list of one or more children."""

    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "children", tuple(self.children))
        if not self.children:
            msg = "An Application needs at least one child"
            raise ValueError(msg)

    def rebuild(self, children: Iterable[Node]) -> Application:
        return replace(self, children=tuple(children))

    @property
    def operator(self) -> Node:
        return self.children[0]

    @property
    def operands(self) -> tuple[Node, ...]:
        return self.children[1:]


@dataclass(frozen=True)
class Binding(Node):
    """A head, one or more bound parameter symbols, and exactly one body."""

    head: Node
    parameters: tuple[Symbol, ...]
    body: Node

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "parameters", tuple(self.parameters))
        if not self.parameters:
            msg = "A Binding needs at least one bound parameter"
            raise ValueError(msg)
        if not all(isinstance(p, Symbol) for p in self.parameters):
            msg = "Bound parameters of a Binding must be Symbols"
            raise ValueError(msg)

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.head, *self.parameters, self.body)

    def rebuild(self, children: Iterable[Node]) -> Binding:
        head, *parameters, body = children
        return replace(
            self,
            head=head,
            parameters=tuple(parameters),  # type: ignore[arg-type]
            body=body,
        )


@dataclass(frozen=True)
class Environment(Node):
    """Ordered container of children; ``given`` marks an assumption."""

    children: tuple[Node, ...] = ()
    given: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "children", tuple(self.children))

    def rebuild(self, children: Iterable[Node]) -> Environment:
        return replace(self, children=tuple(children))


@dataclass(frozen=True)
class Declaration(Node):
    """Declares the listed symbols for everything that follows it."""

    symbols: tuple[Symbol, ...]
    given: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "symbols", tuple(self.symbols))

    @property
    def children(self) -> tuple[Node, ...]:
        return self.symbols

    def rebuild(self, children: Iterable[Node]) -> Declaration:
        return replace(self, symbols=tuple(children))  # type: ignore[arg-type]


def is_expression(node: Node) -> bool:
    """Environments and declarations are not expressions; everything else is."""
    return not isinstance(node, Environment | Declaration)


def descendants(node: Node) -> Iterator[Node]:
    """Yield ``node`` and every node beneath it, in pre-order."""
    yield node
    for child in node.children:
        yield from descendants(child)


def symbols(node: Node) -> Iterator[Symbol]:
    """Yield every Symbol occurring in the tree, bound or free."""
    for d in descendants(node):
        if isinstance(d, Symbol):
            yield d


def free_symbol_names(node: Node, bound: frozenset[str] = frozenset()) -> set[str]:
    """Texts of the symbols in ``node`` not bound by an enclosing Binding."""
    match node:
        case Symbol(text=text):
            return set() if text in bound else {text}
        case Binding(head=head, parameters=parameters, body=body):
            inner = bound | {p.text for p in parameters}
            return free_symbol_names(head, bound) | free_symbol_names(body, inner)
        case _:
            names: set[str] = set()
            for child in node.children:
                names |= free_symbol_names(child, bound)
            return names
